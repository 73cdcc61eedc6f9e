from decimal import Decimal
from io import StringIO
from django.core.management import call_command
from django.test import TestCase
from ledger_core.models import Account, Customer, InventoryValuation, Product
from ledger_core.refs import SourceRef
from ledger_core.services import (add_stock, post_sale,
                                  reconcile_account_balances,
                                  reconcile_inventory_valuations,
                                  reconcile_party_balances, remove_stock)
from ledger_core.tasks import rebuild_cash_summaries, reconcile_cached_balances

from .factories import DAY, balance, make_customer, make_product, seed_chart


class ReconcileTests(TestCase):

    def setUp(self):
        seed_chart()
        self.customer = make_customer()
        self.widget = make_product()
        add_stock(self.widget, 10, 100)
        add_stock(self.widget, 10, 200)
        remove_stock(self.widget, 4)
        post_sale(self.customer, SourceRef("invoice", 1, "INV-1"), 1000, 600, DAY)

    """ Test untouched books reconcile cleanly """
    def test_clean_books(self):
        self.assertEqual(reconcile_account_balances(), [])
        self.assertEqual(reconcile_inventory_valuations(), [])
        self.assertEqual(reconcile_party_balances(), [])


    """ Test a drifted account balance is reported, then fixed """
    def test_account_drift(self):
        Account.objects.filter(code="1300").update(current_balance=Decimal("1.00"))

        with self.assertLogs("ledger_core.services.reconcile", level="WARNING"):
            found = reconcile_account_balances()
        self.assertEqual(len(found), 1)
        self.assertEqual(found[0]["code"], "1300")
        self.assertEqual(found[0]["expected"], Decimal("1000.00"))
        # report only: nothing rewritten yet
        self.assertEqual(balance("1300"), Decimal("1.00"))

        reconcile_account_balances(fix=True)
        self.assertEqual(balance("1300"), Decimal("1000.00"))
        self.assertEqual(reconcile_account_balances(), [])


    """ Test a drifted stock valuation is rebuilt from the movements """
    def test_inventory_drift(self):
        InventoryValuation.objects.filter(product=self.widget).update(
            quantity_on_hand=Decimal("99"), average_cost=Decimal("1")
        )

        found = reconcile_inventory_valuations(fix=True)

        self.assertEqual(len(found), 1)
        self.assertEqual(found[0]["expected_quantity"], Decimal("16"))
        self.assertEqual(found[0]["expected_average_cost"], Decimal("150"))
        valuation = InventoryValuation.objects.get(product=self.widget)
        self.assertEqual(valuation.quantity_on_hand, Decimal("16"))
        self.assertEqual(valuation.average_cost, Decimal("150"))
        self.assertEqual(valuation.total_value, Decimal("2400.00"))
        self.assertEqual(Product.objects.get(pk=self.widget.pk).current_stock, Decimal("16"))


    """ Test a drifted customer balance """
    def test_party_drift(self):
        Customer.objects.filter(pk=self.customer.pk).update(current_balance=Decimal("0"))

        found = reconcile_party_balances(fix=True)

        self.assertEqual(len(found), 1)
        self.assertEqual(found[0]["kind"], "customer")
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("1000.00"))


    """ Test the management command and its --fix flag """
    def test_reconcile_command(self):
        Account.objects.filter(code="4100").update(current_balance=Decimal("0"))

        out = StringIO()
        call_command("reconcile_ledger", stdout=out)
        self.assertIn("1 discrepancies found", out.getvalue())

        out = StringIO()
        call_command("reconcile_ledger", "--fix", stdout=out)
        self.assertIn("Fixed 1 cached balances", out.getvalue())
        self.assertEqual(balance("4100"), Decimal("1000.00"))


    """ Test the scheduled tasks run in-process """
    def test_tasks(self):
        Customer.objects.filter(pk=self.customer.pk).update(current_balance=Decimal("5"))

        result = reconcile_cached_balances(fix=True)
        self.assertEqual(result, {"accounts": 0, "inventory": 0, "parties": 1})
        self.assertEqual(reconcile_cached_balances(), {"accounts": 0, "inventory": 0, "parties": 0})

        # no cash has moved yet: every cash/bank account has an empty chain
        rebuilt = rebuild_cash_summaries()
        self.assertEqual(rebuilt["1100"], 0)
        self.assertEqual(rebuilt["1210"], 0)
