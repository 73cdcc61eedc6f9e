from decimal import Decimal
from django.core.exceptions import ValidationError
from django.test import TestCase
from ledger_core.exceptions import InsufficientStockError
from ledger_core.models import (Expense, InventoryTransaction, Invoice,
                                InvoiceLine, JournalEntry, Purchase, PurchaseLine)
from ledger_core.services import (add_stock, approve_expense, cancel_invoice,
                                  get_profit_and_loss,
                                  issue_invoice, receive_purchase, reject_expense,
                                  reverse_journal_entry)

from .factories import (CLERK, DAY, account, balance, make_customer, make_product,
                        make_vendor, seed_chart)

""" Invoice lifecycle """
class InvoiceWorkflowTests(TestCase):

    def setUp(self):
        seed_chart()
        self.customer = make_customer()
        self.widget = make_product()
        add_stock(self.widget, 10, 100)
        add_stock(self.widget, 10, 200)

        self.invoice = Invoice.objects.create(
            invoice_number="INV-0001", customer=self.customer, invoice_date=DAY
        )
        InvoiceLine.objects.create(
            invoice=self.invoice, product=self.widget, quantity=5, unit_price=300
        )

    """ Test lines keep the draft totals in sync """
    def test_draft_totals_follow_lines(self):
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.subtotal, Decimal("1500.00"))
        self.assertEqual(self.invoice.grand_total, Decimal("1500.00"))


    """ Test issuing: stock out at average cost, cost frozen, sale posted """
    def test_issue_invoice(self):
        invoice = issue_invoice(self.invoice, CLERK)

        self.assertEqual(invoice.status, "issued")
        self.assertIsNotNone(invoice.issued_at)
        self.assertEqual(invoice.total_cost, Decimal("750.00"))
        self.assertEqual(invoice.gross_profit, Decimal("750.00"))

        line = invoice.lines.get()
        self.assertEqual(line.unit_cost, Decimal("150"))
        self.assertEqual(line.total_cost, Decimal("750.00"))
        self.assertEqual(line.profit, Decimal("750.00"))

        self.widget.refresh_from_db()
        self.assertEqual(self.widget.current_stock, Decimal("15"))

        entry = invoice.journal_entry
        self.assertEqual(entry.entry_type, "sales")
        self.assertEqual(entry.source_type, "invoice")
        self.assertEqual(entry.source_id, invoice.pk)
        self.assertEqual(entry.source_number, "INV-0001")
        self.assertEqual(balance("1300"), Decimal("1500.00"))
        self.assertEqual(balance("5000"), Decimal("750.00"))

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("1500.00"))

        movement = InventoryTransaction.objects.get(transaction_type="sale")
        self.assertEqual(movement.reference_type, "invoice")
        self.assertEqual(movement.reference_number, "INV-0001")


    """ Test an issued invoice is frozen """
    def test_issued_invoice_is_immutable(self):
        invoice = issue_invoice(self.invoice)

        with self.assertRaises(ValidationError):
            issue_invoice(invoice)

        line = invoice.lines.get()
        line.quantity = Decimal("6")
        with self.assertRaises(ValidationError):
            line.save()

        invoice.refresh_from_db()
        invoice.grand_total = Decimal("1.00")
        with self.assertRaises(ValidationError):
            invoice.save()


    """ Test the sale entry of an issued invoice can't be reversed behind its back """
    def test_issued_invoice_entry_cannot_be_reversed(self):
        invoice = issue_invoice(self.invoice)

        with self.assertRaises(ValidationError):
            reverse_journal_entry(invoice.journal_entry)

        invoice.refresh_from_db()
        self.assertEqual(invoice.status, "issued")
        self.assertEqual(invoice.journal_entry.status, "posted")
        self.assertEqual(JournalEntry.objects.filter(entry_type="reversal").count(), 0)
        self.assertEqual(balance("4100"), Decimal("1500.00"))
        self.assertEqual(
            get_profit_and_loss(DAY, DAY)["revenue"]["net_sales"], balance("4100")
        )


    """ Test not enough stock: invoice stays draft, nothing posted """
    def test_issue_with_insufficient_stock(self):
        InvoiceLine.objects.create(
            invoice=self.invoice, product=self.widget, quantity=20, unit_price=10
        )

        with self.assertRaises(InsufficientStockError):
            issue_invoice(self.invoice)

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, "draft")
        self.assertFalse(JournalEntry.objects.exists())
        self.widget.refresh_from_db()
        self.assertEqual(self.widget.current_stock, Decimal("20"))
        self.assertFalse(InventoryTransaction.objects.filter(transaction_type="sale").exists())


    """ Test cancel only from draft """
    def test_cancel_invoice(self):
        invoice = cancel_invoice(self.invoice)
        self.assertEqual(invoice.status, "cancelled")
        with self.assertRaises(ValidationError):
            issue_invoice(invoice)


""" Purchase lifecycle """
class PurchaseWorkflowTests(TestCase):

    def setUp(self):
        seed_chart()
        self.vendor = make_vendor()
        self.widget = make_product()
        self.purchase = Purchase.objects.create(
            purchase_number="PO-0001", vendor=self.vendor, purchase_date=DAY
        )
        PurchaseLine.objects.create(
            purchase=self.purchase, product=self.widget, quantity=50, unit_cost=20
        )

    """ Test receiving 50 @ 20: stock in, Dr Inventory / Cr AP 1000 """
    def test_receive_purchase(self):
        purchase = receive_purchase(self.purchase, CLERK)

        self.assertEqual(purchase.status, "received")
        self.assertEqual(purchase.grand_total, Decimal("1000.00"))
        self.assertIsNotNone(purchase.journal_entry_id)

        self.widget.refresh_from_db()
        self.assertEqual(self.widget.current_stock, Decimal("50"))
        self.assertEqual(self.widget.valuation.average_cost, Decimal("20"))

        self.assertEqual(balance("1400"), Decimal("1000.00"))
        self.assertEqual(balance("2100"), Decimal("1000.00"))
        self.vendor.refresh_from_db()
        self.assertEqual(self.vendor.current_balance, Decimal("1000.00"))


    """ Test a received purchase can't be received again or edited """
    def test_received_purchase_is_frozen(self):
        receive_purchase(self.purchase)
        with self.assertRaises(ValidationError):
            receive_purchase(self.purchase)
        with self.assertRaises(ValidationError):
            PurchaseLine.objects.create(
                purchase=Purchase.objects.get(pk=self.purchase.pk),
                product=self.widget,
                quantity=1,
                unit_cost=1,
            )


""" Expense approval """
class ExpenseWorkflowTests(TestCase):

    def setUp(self):
        seed_chart()
        self.expense = Expense.objects.create(
            expense_number="EXP-0001",
            category="Rent",
            expense_account=account("6200"),
            expense_date=DAY,
            amount=Decimal("1200.00"),
            payment_method="bank",
        )

    """ Test approval pays from the bank """
    def test_approve_expense(self):
        expense = approve_expense(self.expense, CLERK)

        self.assertEqual(expense.status, "approved")
        self.assertIsNotNone(expense.approved_at)
        self.assertEqual(expense.journal_entry.entry_type, "expense")
        self.assertEqual(balance("6200"), Decimal("1200.00"))
        self.assertEqual(balance("1210"), Decimal("-1200.00"))

        # approved expenses are corrected with a new entry, not a reversal
        with self.assertRaises(ValidationError):
            reverse_journal_entry(expense.journal_entry)
        self.assertEqual(balance("6200"), Decimal("1200.00"))


    """ Test rejection posts nothing and blocks approval """
    def test_reject_expense(self):
        expense = reject_expense(self.expense)
        self.assertEqual(expense.status, "rejected")
        with self.assertRaises(ValidationError):
            approve_expense(expense)
        self.assertFalse(JournalEntry.objects.exists())


    """ Test an expense must be booked on an expense account """
    def test_expense_needs_expense_account(self):
        with self.assertRaises(ValidationError):
            Expense.objects.create(
                expense_number="EXP-0002",
                category="Oops",
                expense_account=account("1100"),
                expense_date=DAY,
                amount=Decimal("5.00"),
            )
