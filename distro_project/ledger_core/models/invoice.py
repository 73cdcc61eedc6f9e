from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..money import to_money
from .journal import JournalEntry
from .party import Customer
from .product import Product

INV_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("issued", "Issued"),
    ("cancelled", "Cancelled"),
]


class Invoice(models.Model):  # Represents a customer sales invoice

    # human-readable (e.g. "INV-2025-001")
    invoice_number = models.CharField(max_length=64, unique=True)
    customer = models.ForeignKey(
        Customer,
        # prevent deleting customer who has an invoice
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    invoice_date = models.DateField()  # issue date

    status = models.CharField(max_length=10, choices=INV_STATUS_CHOICES, default="draft")
    """ Workflow:
        draft = not yet finalized, lines editable.
        issued = stock removed, cost frozen, sale posted.
        cancelled = abandoned before issue. """

    # Sum of all line totals
    subtotal = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    # Header-level discount and flat tax amount
    total_discount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    tax_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    grand_total = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    # Frozen at issue from the weighted average at removal time
    total_cost = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    gross_profit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    journal_entry = models.ForeignKey(
        JournalEntry, null=True, blank=True, on_delete=models.PROTECT, related_name="+"
    )
    issued_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["invoice_date", "id"]
        # Optimize for fast lookups by customer or reporting period
        indexes = [
            models.Index(fields=["status", "invoice_date"], name="inv_status_date_idx"),
            models.Index(fields=["customer"], name="inv_customer_idx"),
        ]

    def __str__(self):
        return f"Inv {self.invoice_number}"

    """ Keep stored totals in sync with the lines """

    def recalc_totals(self):
        if not getattr(self, "pk", None):
            # guard if no pk: there are no lines yet
            self.subtotal = Decimal("0.00")
        else:
            self.subtotal = sum(
                (line.line_total for line in self.lines.all()), Decimal("0.00")
            )
        self.grand_total = to_money(self.subtotal - self.total_discount + self.tax_amount)

    def clean(self):
        """Issued invoices are immutable apart from the workflow itself"""
        if self.total_discount < 0 or self.tax_amount < 0:
            raise ValidationError("Discount and tax cannot be negative.")
        if self.pk:
            orig = Invoice.objects.filter(pk=self.pk).first()
            if orig and orig.status == "issued":
                changed_fields = [
                    field
                    for field in ["invoice_number", "customer_id", "invoice_date", "grand_total"]
                    if getattr(orig, field) != getattr(self, field)
                ]
                if changed_fields or self.status != "issued":
                    raise ValidationError(
                        f"Cannot modify {changed_fields or ['status']} on an issued invoice."
                    )

    def save(self, *args, **kwargs):
        self.full_clean()  # will trigger clean()
        super().save(*args, **kwargs)


class InvoiceLine(models.Model):  # Each line describes a product sold on the invoice

    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="lines")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="+")

    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    unit_price = models.DecimalField(max_digits=18, decimal_places=2)
    discount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    # Calculated: quantity × unit_price − discount
    line_total = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    # Frozen when the invoice is issued
    unit_cost = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal("0"))
    total_cost = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    profit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["invoice_id", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0), name="invoice_line_quantity_positive"
            ),
            models.CheckConstraint(
                condition=models.Q(unit_price__gte=0),
                name="invoice_line_price_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.invoice_id} | {self.product_id} x {self.quantity}"

    def clean(self):
        if self.quantity is not None and self.quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")
        if self.unit_price is not None and self.unit_price < 0:
            raise ValidationError("Unit price cannot be negative")

    def save(self, *args, **kwargs):
        # Lines of an issued invoice only receive their frozen cost
        update_fields = kwargs.get("update_fields")
        freezing_cost = update_fields is not None and set(update_fields) <= {
            "unit_cost",
            "total_cost",
            "profit",
        }
        if not freezing_cost and self.invoice.status != "draft":
            raise ValidationError("Cannot change lines of a non-draft invoice.")
        self.line_total = to_money(self.quantity * self.unit_price - self.discount)
        self.full_clean()
        return super().save(*args, **kwargs)
