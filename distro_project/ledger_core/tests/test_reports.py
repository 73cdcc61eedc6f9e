import datetime
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.test import TestCase
from ledger_core.models import Expense, Invoice, InvoiceLine, Purchase, PurchaseLine
from ledger_core.refs import SourceRef
from ledger_core.services import (approve_expense, credit_line, debit_line,
                                  get_account_ledger, get_balance_sheet,
                                  get_cash_book, get_party_ledger, get_payables,
                                  get_profit_and_loss, get_receivables,
                                  get_trial_balance, issue_invoice,
                                  post_journal_entry, post_receipt, post_return,
                                  receive_purchase)

from .factories import (DAY, account, make_customer, make_product, make_vendor,
                        seed_chart)

""" Books for a small trading day:
      buy 50 widgets @ 20, sell 5 @ 300, take 400 cash, pay 200 rent """
class ReportTestBase(TestCase):

    def setUp(self):
        seed_chart()
        self.customer = make_customer()
        self.vendor = make_vendor()
        self.widget = make_product()

        purchase = Purchase.objects.create(
            purchase_number="PO-1", vendor=self.vendor, purchase_date=DAY
        )
        PurchaseLine.objects.create(
            purchase=purchase, product=self.widget, quantity=50, unit_cost=20
        )
        receive_purchase(purchase)

        invoice = Invoice.objects.create(
            invoice_number="INV-1", customer=self.customer, invoice_date=DAY
        )
        InvoiceLine.objects.create(
            invoice=invoice, product=self.widget, quantity=5, unit_price=300
        )
        issue_invoice(invoice)

        post_receipt(self.customer, SourceRef("receipt", 1, "RCPT-1"), 400, date=DAY)

        expense = Expense.objects.create(
            expense_number="EXP-1",
            category="Rent",
            expense_account=account("6200"),
            expense_date=DAY,
            amount=Decimal("200.00"),
        )
        approve_expense(expense)


class TrialBalanceTests(ReportTestBase):

    """ Test debits equal credits after a full cycle """
    def test_trial_balance_is_balanced(self):
        report = get_trial_balance()

        self.assertTrue(report["is_balanced"])
        self.assertEqual(report["total_debit"], report["total_credit"])
        # Dr: cash 200, AR 1100, inventory 900, COGS 100, rent 200
        self.assertEqual(report["total_debit"], Decimal("2500.00"))

        rows = {row["code"]: row for row in report["accounts"]}
        self.assertEqual(rows["1300"]["debit"], Decimal("1100.00"))
        self.assertEqual(rows["2100"]["credit"], Decimal("1000.00"))
        self.assertEqual(rows["4100"]["credit"], Decimal("1500.00"))
        # zero-balance accounts are left out
        self.assertNotIn("1210", rows)


    """ Test trial balance as of an earlier day replays only that far """
    def test_trial_balance_as_of_date(self):
        later = DAY + datetime.timedelta(days=3)
        post_journal_entry(
            "adjustment",
            later,
            "owner top-up",
            [debit_line(account("1100"), 500), credit_line(account("3100"), 500)],
        )

        before = get_trial_balance(as_of_date=DAY)
        after = get_trial_balance(as_of_date=later)

        self.assertEqual(before["total_debit"], Decimal("2500.00"))
        self.assertEqual(after["total_debit"], Decimal("3000.00"))
        self.assertTrue(before["is_balanced"])
        self.assertTrue(after["is_balanced"])


class ProfitAndLossTests(ReportTestBase):

    """ Test income statement for the day """
    def test_profit_and_loss(self):
        report = get_profit_and_loss(DAY, DAY)

        self.assertEqual(report["revenue"]["gross_sales"], Decimal("1500.00"))
        self.assertEqual(report["revenue"]["net_sales"], Decimal("1500.00"))
        self.assertEqual(report["revenue"]["invoice_count"], 1)
        self.assertEqual(report["cost_of_goods_sold"]["cogs"], Decimal("100.00"))
        self.assertEqual(report["cost_of_goods_sold"]["purchases"], Decimal("1000.00"))
        self.assertEqual(report["gross_profit"]["amount"], Decimal("1400.00"))
        self.assertEqual(report["operating_expenses"]["total"], Decimal("200.00"))
        self.assertEqual(report["operating_expenses"]["items"][0]["category"], "Rent")
        self.assertEqual(report["net_profit"]["amount"], Decimal("1200.00"))
        self.assertEqual(report["net_profit"]["margin"], Decimal("80.00"))
        self.assertTrue(report["net_profit"]["is_profit"])


    """ Test returns reduce net sales and give back their cost """
    def test_returns_in_profit_and_loss(self):
        post_return(
            self.customer, SourceRef("return", 1, "RET-1"), 300, DAY,
            cost_of_goods_returned=Decimal("20.00"),
        )

        report = get_profit_and_loss(DAY, DAY)

        self.assertEqual(report["revenue"]["sales_returns"], Decimal("300.00"))
        self.assertEqual(report["revenue"]["net_sales"], Decimal("1200.00"))
        self.assertEqual(report["cost_of_goods_sold"]["cogs_reversed"], Decimal("20.00"))
        self.assertEqual(report["cost_of_goods_sold"]["cogs"], Decimal("80.00"))
        self.assertEqual(report["net_profit"]["amount"], Decimal("920.00"))


    """ Test an empty period """
    def test_empty_period(self):
        quiet_day = DAY - datetime.timedelta(days=30)
        report = get_profit_and_loss(quiet_day, quiet_day)
        self.assertEqual(report["revenue"]["net_sales"], Decimal("0.00"))
        self.assertEqual(report["net_profit"]["margin"], Decimal("0.00"))


class BalanceSheetTests(ReportTestBase):

    """ Test assets = liabilities + equity """
    def test_balance_sheet_balances(self):
        report = get_balance_sheet()

        self.assertTrue(report["is_balanced"])
        # cash 200, receivable 1100, stock 45 @ 20
        self.assertEqual(report["assets"]["total_assets"], Decimal("2200.00"))
        self.assertEqual(report["liabilities"]["total_liabilities"], Decimal("1000.00"))
        self.assertEqual(report["equity"]["total_equity"], Decimal("1200.00"))
        self.assertEqual(report["total_liabilities_and_equity"], Decimal("2200.00"))

        current = {a["code"]: a["balance"] for a in report["assets"]["current_assets"]["items"]}
        self.assertEqual(current["1300"], Decimal("1100.00"))
        self.assertEqual(current["1400"], Decimal("900.00"))


    """ Test a contra asset reduces fixed assets """
    def test_accumulated_depreciation_is_contra(self):
        post_journal_entry(
            "adjustment",
            DAY,
            "Depreciation",
            [debit_line(account("6700"), 100), credit_line(account("1700"), 100)],
        )

        report = get_balance_sheet()

        fixed = report["assets"]["fixed_assets"]
        self.assertEqual(fixed["total"], Decimal("-100.00"))
        self.assertTrue(report["is_balanced"])


class LedgerReportTests(ReportTestBase):

    """ Test account ledger with an opening balance """
    def test_account_ledger(self):
        later = DAY + datetime.timedelta(days=1)
        post_journal_entry(
            "adjustment", later, "float",
            [debit_line(account("1100"), 50), credit_line(account("3100"), 50)],
        )

        report = get_account_ledger(account("1100"), start_date=later)

        self.assertEqual(report["opening_balance"], Decimal("200.00"))
        self.assertEqual(len(report["entries"]), 1)
        self.assertEqual(report["total_debit"], Decimal("50.00"))
        self.assertEqual(report["closing_balance"], Decimal("250.00"))

        # ISO strings work the same as dates
        from_text = get_account_ledger(account("1100"), start_date=later.isoformat())
        self.assertEqual(from_text["opening_balance"], Decimal("200.00"))
        self.assertEqual(from_text["closing_balance"], Decimal("250.00"))
        self.assertEqual(
            get_cash_book(account("1100"), DAY.isoformat(), DAY.isoformat())["total_in"],
            Decimal("400.00"),
        )
        with self.assertRaises(ValidationError):
            get_account_ledger(account("1100"), start_date="last tuesday")


    """ Test cash book totals and summaries """
    def test_cash_book(self):
        report = get_cash_book(account("1100"), DAY, DAY)

        self.assertEqual(report["total_in"], Decimal("400.00"))
        self.assertEqual(report["total_out"], Decimal("200.00"))
        self.assertEqual(len(report["entries"]), 2)
        self.assertEqual(report["summaries"][0].closing_balance, Decimal("200.00"))

        with self.assertRaises(ValidationError):
            get_cash_book(account("4100"))


    """ Test the party ledger replays to the cached balance """
    def test_party_ledger(self):
        report = get_party_ledger("customer", self.customer.pk)

        self.assertEqual(len(report["entries"]), 2)
        self.assertEqual(report["entries"][0]["party_balance"], Decimal("1500.00"))
        self.assertEqual(report["balance"], Decimal("1100.00"))
        self.assertEqual(report["balance"], report["cached_balance"])


    """ Test open receivables and payables """
    def test_receivables_and_payables(self):
        receivables = get_receivables()
        payables = get_payables()

        self.assertEqual(receivables["count"], 1)
        self.assertEqual(receivables["total"], Decimal("1100.00"))
        self.assertEqual(payables["parties"][0]["name"], "Delta Wholesale")
        self.assertEqual(payables["total"], Decimal("1000.00"))
