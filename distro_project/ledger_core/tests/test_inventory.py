from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db.models import Sum
from django.test import TestCase
from ledger_core.exceptions import InsufficientStockError
from ledger_core.models import InventoryTransaction, InventoryValuation
from ledger_core.refs import SourceRef
from ledger_core.services import (add_stock, adjust_stock,
                                  get_inventory_valuation,
                                  get_low_stock_products, get_stock_info,
                                  get_stock_movements, remove_stock)
from ledger_core.services.inventory import weighted_average

from .factories import CLERK, DAY, make_product

""" Success tests """
class WeightedAverageTests(TestCase):

    def setUp(self):
        self.widget = make_product()

    """ Test 10 @ 100 then 10 @ 200 averages to 150 """
    def test_purchases_re_average_cost(self):
        add_stock(self.widget, 10, 100, SourceRef("purchase", 1, "PO-1"), CLERK)
        result = add_stock(self.widget, 10, 200, SourceRef("purchase", 2, "PO-2"), CLERK)

        self.assertEqual(result["new_balance"], Decimal("20"))
        self.assertEqual(result["average_cost"], Decimal("150"))

        valuation = InventoryValuation.objects.get(product=self.widget)
        self.assertEqual(valuation.quantity_on_hand, Decimal("20"))
        self.assertEqual(valuation.average_cost, Decimal("150"))
        self.assertEqual(valuation.total_value, Decimal("3000.00"))

        self.widget.refresh_from_db()
        self.assertEqual(self.widget.current_stock, Decimal("20"))
        # latest purchase price is remembered on the product
        self.assertEqual(self.widget.cost_price, Decimal("200"))


    """ Test nothing left on hand keeps the old average """
    def test_weighted_average_with_nothing_on_hand(self):
        self.assertEqual(
            weighted_average(Decimal("0"), Decimal("150"), Decimal("0"), Decimal("90")),
            Decimal("150"),
        )
        self.assertEqual(
            weighted_average(Decimal("10"), Decimal("100"), Decimal("10"), Decimal("200")),
            Decimal("150"),
        )


    """ Test removal is costed at the average and leaves it unchanged """
    def test_removal_at_average_cost(self):
        add_stock(self.widget, 10, 100)
        add_stock(self.widget, 10, 200)

        result = remove_stock(self.widget, 5, SourceRef("invoice", 3, "INV-3"), CLERK)

        self.assertEqual(result["cost_at_removal"], Decimal("150"))
        self.assertEqual(result["total_cost"], Decimal("750.00"))
        self.assertEqual(result["new_balance"], Decimal("15"))

        valuation = InventoryValuation.objects.get(product=self.widget)
        self.assertEqual(valuation.average_cost, Decimal("150"))
        self.assertEqual(valuation.total_value, Decimal("2250.00"))

        movement = result["transaction"]
        self.assertEqual(movement.transaction_type, "sale")
        self.assertEqual(movement.quantity_out, Decimal("5"))
        self.assertEqual(movement.balance_after, Decimal("15"))
        self.assertEqual(movement.reference_number, "INV-3")
        self.assertEqual(movement.created_by_name, "Dana Clerk")


    """ Test removing everything keeps the average for the next sale """
    def test_remove_all_stock(self):
        add_stock(self.widget, 4, Decimal("12.5"))
        result = remove_stock(self.widget, 4)
        self.assertEqual(result["new_balance"], Decimal("0"))
        self.assertEqual(result["total_cost"], Decimal("50.00"))


    """ Test quantity on hand always equals the sum of the movements """
    def test_movements_replay_to_stock(self):
        add_stock(self.widget, 10, 100)
        remove_stock(self.widget, 3)
        add_stock(self.widget, Decimal("2.5"), 80)
        adjust_stock(self.widget, 8, reason="cycle count")

        sums = InventoryTransaction.objects.filter(product=self.widget).aggregate(
            qty_in=Sum("quantity_in"), qty_out=Sum("quantity_out")
        )
        self.widget.refresh_from_db()
        self.assertEqual(sums["qty_in"] - sums["qty_out"], self.widget.current_stock)
        self.assertEqual(self.widget.current_stock, Decimal("8"))


    """ Test counted stock adjustment """
    def test_adjust_stock(self):
        add_stock(self.widget, 15, 10)

        result = adjust_stock(self.widget, 12, reason="damaged", actor=CLERK)

        self.assertEqual(result["old_quantity"], Decimal("15"))
        self.assertEqual(result["new_quantity"], Decimal("12"))
        self.assertEqual(result["difference"], Decimal("-3"))
        self.assertEqual(result["transaction"].quantity_out, Decimal("3"))
        self.assertEqual(result["transaction"].transaction_type, "adjustment")
        self.assertEqual(result["transaction"].remarks, "damaged")
        # the average does not move on an adjustment
        self.assertEqual(
            InventoryValuation.objects.get(product=self.widget).average_cost, Decimal("10")
        )


""" Failure tests """
class StockFailureTests(TestCase):

    def setUp(self):
        self.widget = make_product()

    """ Test over-removal: refused and nothing is recorded """
    def test_over_removal_leaves_no_trace(self):
        add_stock(self.widget, 5, 100)
        movements_before = InventoryTransaction.objects.count()

        with self.assertRaises(InsufficientStockError) as ctx:
            remove_stock(self.widget, 6)

        self.assertEqual(ctx.exception.available, Decimal("5"))
        self.assertEqual(ctx.exception.requested, Decimal("6"))
        self.assertEqual(InventoryTransaction.objects.count(), movements_before)
        self.assertEqual(
            InventoryValuation.objects.get(product=self.widget).quantity_on_hand,
            Decimal("5"),
        )
        self.widget.refresh_from_db()
        self.assertEqual(self.widget.current_stock, Decimal("5"))


    """ Test removal from a product that was never stocked """
    def test_removal_without_valuation(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            remove_stock(self.widget, 1)
        self.assertEqual(ctx.exception.available, Decimal("0"))


    """ Test non-positive quantities and negative costs """
    def test_invalid_quantities_rejected(self):
        with self.assertRaises(ValidationError):
            add_stock(self.widget, 0, 10)
        with self.assertRaises(ValidationError):
            add_stock(self.widget, 1, -1)
        with self.assertRaises(ValidationError):
            remove_stock(self.widget, -2)
        with self.assertRaises(ValidationError):
            adjust_stock(self.widget, -1)
        self.assertFalse(InventoryTransaction.objects.exists())


    """ Test stock movements are append-only """
    def test_movement_is_append_only(self):
        movement = add_stock(self.widget, 1, 1)["transaction"]
        movement.remarks = "edited"
        with self.assertRaises(ValidationError):
            movement.save()
        with self.assertRaises(ValidationError):
            InventoryTransaction.objects.filter(pk=movement.pk).delete()


""" Read helpers """
class StockReportTests(TestCase):

    def setUp(self):
        self.widget = make_product(name="Widget", sku="W-1", minimum_stock=Decimal("5"))
        self.gadget = make_product(name="Gadget", sku="G-1", minimum_stock=Decimal("2"))
        add_stock(self.widget, 3, 10, transaction_date=DAY)
        add_stock(self.gadget, 10, 50, transaction_date=DAY)

    def test_stock_info(self):
        info = get_stock_info(self.widget)
        self.assertEqual(info["current_stock"], Decimal("3"))
        self.assertEqual(info["average_cost"], Decimal("10"))
        self.assertEqual(info["total_value"], Decimal("30.00"))
        self.assertTrue(info["is_low_stock"])

    def test_low_stock_products(self):
        self.assertEqual(get_low_stock_products(), [self.widget])

    def test_inventory_valuation(self):
        report = get_inventory_valuation()
        self.assertEqual(report["total_items"], 2)
        self.assertEqual(report["total_value"], Decimal("530.00"))
        # most valuable first
        self.assertEqual(report["items"][0]["product_name"], "Gadget")

    def test_stock_movements_newest_first(self):
        remove_stock(self.gadget, 4, transaction_date=DAY)
        movements = get_stock_movements(self.gadget)
        self.assertEqual(len(movements), 2)
        self.assertEqual(movements[0].transaction_type, "sale")
        self.assertEqual(get_stock_movements(self.gadget, limit=1)[0].pk, movements[0].pk)
