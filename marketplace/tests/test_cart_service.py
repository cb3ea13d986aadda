import uuid
from decimal import Decimal

from django.test import TestCase

from marketplace.cart.domain.services import CartService
from marketplace.models import CartItem
from marketplace.services.base import MAX_QUANTITY, ErrorCodes
from marketplace.tests.factories import ProductFactory, UserFactory


class CartServiceTest(TestCase):
    def setUp(self):
        self.service = CartService()
        self.user = UserFactory()
        self.product = ProductFactory(price=Decimal("20.00"), stock_quantity=3)
        self.product_id = str(self.product.id)

    def test_empty_cart(self):
        cart = self.service.get_cart(self.user).value

        self.assertEqual(cart["items"], [])
        self.assertEqual(cart["items_count"], 0)
        self.assertIsNone(cart["total"])

    def test_add_merges_quantities(self):
        self.service.add_to_cart(self.user, self.product_id, 1)
        result = self.service.add_to_cart(self.user, self.product_id, 2)

        self.assertTrue(result.ok)
        self.assertEqual(result.value["items_count"], 1)
        self.assertEqual(result.value["items"][0]["quantity"], 3)
        self.assertEqual(result.value["total"], Decimal("60.00"))

    def test_add_does_not_reserve_stock(self):
        result = self.service.add_to_cart(self.user, self.product_id, 5)

        self.assertTrue(result.value["has_unavailable"])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)

    def test_add_rejects_bad_input(self):
        self.assertEqual(self.service.add_to_cart(self.user, self.product_id, 0).error, ErrorCodes.INVALID_QUANTITY)
        self.assertEqual(
            self.service.add_to_cart(self.user, str(uuid.uuid4()), 1).error, ErrorCodes.PRODUCT_NOT_FOUND
        )

    def test_add_rejects_quantity_beyond_column_range(self):
        self.service.add_to_cart(self.user, self.product_id, 2)

        oversized = self.service.add_to_cart(self.user, self.product_id, 10**19)
        overflow = self.service.add_to_cart(self.user, self.product_id, MAX_QUANTITY - 1)

        self.assertEqual(oversized.error, ErrorCodes.INVALID_QUANTITY)
        self.assertEqual(overflow.error, ErrorCodes.INVALID_QUANTITY)
        self.assertEqual(CartItem.objects.get(cart__user=self.user).quantity, 2)
        self.assertEqual(
            self.service.update_quantity(self.user, self.product_id, MAX_QUANTITY + 1).error,
            ErrorCodes.INVALID_QUANTITY,
        )

    def test_update_quantity(self):
        self.service.add_to_cart(self.user, self.product_id, 1)

        result = self.service.update_quantity(self.user, self.product_id, 2)

        self.assertEqual(result.value["items"][0]["quantity"], 2)
        self.assertEqual(
            self.service.update_quantity(self.user, self.product_id, -1).error, ErrorCodes.INVALID_QUANTITY
        )

    def test_update_to_zero_removes_line(self):
        self.service.add_to_cart(self.user, self.product_id, 1)

        result = self.service.update_quantity(self.user, self.product_id, 0)

        self.assertEqual(result.value["items"], [])

    def test_missing_line(self):
        self.assertEqual(
            self.service.update_quantity(self.user, self.product_id, 1).error, ErrorCodes.ITEM_NOT_IN_CART
        )
        self.assertEqual(self.service.remove_from_cart(self.user, self.product_id).error, ErrorCodes.ITEM_NOT_IN_CART)

    def test_clear_cart(self):
        self.service.add_to_cart(self.user, self.product_id, 1)
        self.service.add_to_cart(self.user, str(ProductFactory(stock_quantity=1).id), 1)

        result = self.service.clear_cart(self.user)

        self.assertEqual(result.value, 2)
        self.assertFalse(CartItem.objects.filter(cart__user=self.user).exists())
