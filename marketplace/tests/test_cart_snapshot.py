import uuid
from decimal import Decimal

from django.test import TestCase

from marketplace.cart.domain.services import CartLine, CartSnapshotService
from marketplace.services.base import MAX_QUANTITY, ErrorCodes
from marketplace.tests.factories import CartItemFactory, ProductFactory, UserFactory


class CartSnapshotTest(TestCase):
    def setUp(self):
        self.service = CartSnapshotService()
        self.mug = ProductFactory(price=Decimal("12.50"), stock_quantity=10)
        self.lamp = ProductFactory(price=Decimal("40.00"), stock_quantity=1)

    def test_snapshot_prices_lines_and_total(self):
        result = self.service.snapshot([CartLine(str(self.mug.id), 2), CartLine(str(self.lamp.id), 1)])

        self.assertTrue(result.ok)
        priced = result.value
        self.assertEqual(len(priced.lines), 2)
        self.assertEqual(priced.total, Decimal("65.00"))
        self.assertFalse(priced.has_unavailable)
        mug_line = next(line for line in priced.lines if line.product_id == str(self.mug.id))
        self.assertEqual(mug_line.unit_price, Decimal("12.50"))
        self.assertEqual(mug_line.line_total, Decimal("25.00"))
        self.assertEqual(mug_line.seller_id, self.mug.boutique.seller_id)

    def test_duplicate_lines_are_merged(self):
        result = self.service.snapshot([CartLine(str(self.mug.id), 2), CartLine(str(self.mug.id), 3)])

        self.assertEqual(len(result.value.lines), 1)
        self.assertEqual(result.value.lines[0].quantity, 5)

    def test_line_beyond_stock_is_flagged_unavailable(self):
        result = self.service.snapshot([CartLine(str(self.lamp.id), 2)])

        self.assertTrue(result.ok)
        self.assertTrue(result.value.has_unavailable)
        self.assertEqual(result.value.unavailable_lines[0].available_stock, 1)

    def test_snapshot_does_not_follow_later_price_changes(self):
        snapshot = self.service.snapshot([CartLine(str(self.mug.id), 1)]).value

        self.mug.price = Decimal("99.00")
        self.mug.save()

        self.assertEqual(snapshot.total, Decimal("12.50"))

    def test_empty_and_invalid_lines(self):
        self.assertEqual(self.service.snapshot([]).error, ErrorCodes.CART_EMPTY)
        self.assertEqual(self.service.snapshot([CartLine(str(self.mug.id), 0)]).error, ErrorCodes.INVALID_QUANTITY)

        missing_id = str(uuid.uuid4())
        result = self.service.snapshot([CartLine(missing_id, 1)])
        self.assertEqual(result.error, ErrorCodes.PRODUCT_NOT_FOUND)
        self.assertEqual(result.error_context["product_id"], missing_id)

    def test_quantity_beyond_column_range_is_rejected(self):
        oversized = self.service.snapshot([CartLine(str(self.mug.id), 10**19)])
        merged = self.service.snapshot([CartLine(str(self.mug.id), MAX_QUANTITY), CartLine(str(self.mug.id), 1)])

        self.assertEqual(oversized.error, ErrorCodes.INVALID_QUANTITY)
        self.assertEqual(merged.error, ErrorCodes.INVALID_QUANTITY)
        self.assertEqual(merged.error_context, {"product_id": str(self.mug.id), "max_quantity": MAX_QUANTITY})

    def test_inactive_product_is_not_found(self):
        self.mug.is_active = False
        self.mug.save()

        result = self.service.snapshot([CartLine(str(self.mug.id), 1)])

        self.assertEqual(result.error, ErrorCodes.PRODUCT_NOT_FOUND)

    def test_snapshot_cart_reads_persisted_cart(self):
        user = UserFactory()
        self.assertEqual(self.service.snapshot_cart(user).error, ErrorCodes.CART_EMPTY)

        CartItemFactory(cart__user=user, product=self.mug, quantity=3)
        result = self.service.snapshot_cart(user)

        self.assertTrue(result.ok)
        self.assertEqual(result.value.total, Decimal("37.50"))
