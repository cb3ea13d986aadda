import uuid
from decimal import Decimal

import pytest
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from marketplace.models import CartItem, Order, Product
from marketplace.tests.factories import AdminFactory, CartItemFactory, ProductFactory, UserFactory


@pytest.mark.integration
class OrderApiIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.buyer = UserFactory()
        self.other_buyer = UserFactory()
        self.staff = AdminFactory()
        self.product = ProductFactory(price=Decimal("10.00"), stock_quantity=5)
        self.order_list_url = reverse("marketplace:order-list")

    def checkout(self, user, quantity):
        self.client.force_authenticate(user=user)
        return self.client.post(
            self.order_list_url,
            {"lines": [{"product_id": str(self.product.id), "quantity": quantity}]},
            format="json",
        )

    def stock(self):
        return Product.objects.values_list("stock_quantity", flat=True).get(id=self.product.id)

    def test_checkout_explicit_lines(self):
        response = self.checkout(self.buyer, 3)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "pending")
        self.assertEqual(response.data["total_amount"], "30.00")
        self.assertEqual(response.data["item_count"], 3)
        self.assertEqual(response.data["lines"][0]["unit_price"], "10.00")
        self.assertEqual(self.stock(), 2)

    def test_checkout_from_cart(self):
        CartItemFactory(cart__user=self.buyer, product=self.product, quantity=2)
        self.client.force_authenticate(user=self.buyer)

        response = self.client.post(self.order_list_url, {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(CartItem.objects.filter(cart__user=self.buyer).exists())

    def test_checkout_insufficient_stock(self):
        response = self.checkout(self.buyer, 6)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"], "insufficient_stock")
        self.assertEqual(
            response.data["context"], {"product_id": str(self.product.id), "requested": 6, "available": 5}
        )
        self.assertEqual(Order.objects.count(), 0)

    def test_checkout_validation_errors(self):
        self.client.force_authenticate(user=self.buyer)

        empty = self.client.post(self.order_list_url, {}, format="json")
        bad_quantity = self.checkout(self.buyer, 0)
        missing = self.client.post(
            self.order_list_url, {"lines": [{"product_id": str(uuid.uuid4()), "quantity": 1}]}, format="json"
        )

        self.assertEqual(empty.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(empty.data["error"], "cart_empty")
        self.assertEqual(bad_quantity.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(bad_quantity.data["error"], "validation_error")
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

    def test_checkout_quantity_beyond_column_range(self):
        response = self.checkout(self.buyer, 10**19)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "validation_error")
        self.assertEqual(self.stock(), 5)
        self.assertEqual(Order.objects.count(), 0)

    def test_checkout_requires_authentication(self):
        response = self.client.post(self.order_list_url, {}, format="json")

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_list_and_retrieve_own_orders(self):
        order_id = self.checkout(self.buyer, 1).data["id"]
        self.checkout(self.other_buyer, 1)

        self.client.force_authenticate(user=self.buyer)
        listing = self.client.get(self.order_list_url, {"page_size": 10})
        detail = self.client.get(reverse("marketplace:order-detail", args=[order_id]))

        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual(listing.data["count"], 1)
        self.assertFalse(listing.data["has_next"])
        self.assertEqual(detail.data["id"], order_id)

    def test_foreign_order_looks_missing(self):
        order_id = self.checkout(self.buyer, 1).data["id"]

        self.client.force_authenticate(user=self.other_buyer)
        foreign = self.client.get(reverse("marketplace:order-detail", args=[order_id]))
        missing = self.client.get(reverse("marketplace:order-detail", args=[str(uuid.uuid4())]))
        cancel = self.client.post(reverse("marketplace:order-cancel", args=[order_id]), {}, format="json")

        self.assertEqual(foreign.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(foreign.data, missing.data)
        self.assertEqual(cancel.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.stock(), 4)

    def test_cancel_returns_stock(self):
        order_id = self.checkout(self.buyer, 3).data["id"]

        response = self.client.post(
            reverse("marketplace:order-cancel", args=[order_id]), {"reason": "too slow"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "cancelled")
        self.assertEqual(response.data["cancellation_reason"], "too slow")
        self.assertEqual(self.stock(), 5)

    def test_transition_is_staff_only(self):
        order_id = self.checkout(self.buyer, 1).data["id"]
        url = reverse("marketplace:order-transition", args=[order_id])

        forbidden = self.client.post(url, {"status": "validated"}, format="json")
        self.client.force_authenticate(user=self.staff)
        allowed = self.client.post(url, {"status": "validated"}, format="json")
        repeated = self.client.post(url, {"status": "validated"}, format="json")

        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(allowed.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(allowed.data["validated_at"])
        self.assertEqual(repeated.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(repeated.data["context"]["current_status"], "validated")

    def test_buyer_cannot_cancel_after_validation(self):
        order_id = self.checkout(self.buyer, 2).data["id"]
        self.client.force_authenticate(user=self.staff)
        self.client.post(reverse("marketplace:order-transition", args=[order_id]), {"status": "validated"}, format="json")

        self.client.force_authenticate(user=self.buyer)
        response = self.client.post(reverse("marketplace:order-cancel", args=[order_id]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"], "invalid_transition")
        self.assertEqual(self.stock(), 3)
