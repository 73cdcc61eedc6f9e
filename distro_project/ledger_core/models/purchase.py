from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..money import to_money
from .journal import JournalEntry
from .party import Vendor
from .product import Product

PURCHASE_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("received", "Received"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
]


class Purchase(models.Model):  # Represents goods bought from a vendor

    purchase_number = models.CharField(max_length=64, unique=True)
    vendor = models.ForeignKey(Vendor, on_delete=models.PROTECT, related_name="purchases")
    purchase_date = models.DateField()
    status = models.CharField(
        max_length=10, choices=PURCHASE_STATUS_CHOICES, default="draft"
    )
    """ Workflow:
        draft → received (stock in, payable posted) → completed (settled). """

    subtotal = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_discount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    grand_total = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    journal_entry = models.ForeignKey(
        JournalEntry, null=True, blank=True, on_delete=models.PROTECT, related_name="+"
    )
    received_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["purchase_date", "id"]
        indexes = [models.Index(fields=["status", "purchase_date"], name="po_status_date_idx")]

    def __str__(self):
        return f"PO {self.purchase_number}"

    def recalc_totals(self):
        if not getattr(self, "pk", None):
            self.subtotal = Decimal("0.00")
        else:
            self.subtotal = sum(
                (line.line_total for line in self.lines.all()), Decimal("0.00")
            )
        self.grand_total = to_money(self.subtotal - self.total_discount)

    def transition_to(self, new_status):
        # Current state vs. allowed next states
        allowed = {
            "draft": ["received", "cancelled"],
            "received": ["completed"],
            "completed": [],
            "cancelled": [],
        }
        if new_status not in allowed.get(self.status, []):
            raise ValidationError(f"Cannot go from {self.status} to {new_status}")
        self.status = new_status
        self.save()

    def clean(self):
        if self.total_discount < 0:
            raise ValidationError("Discount cannot be negative.")

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)


class PurchaseLine(models.Model):

    purchase = models.ForeignKey(Purchase, on_delete=models.CASCADE, related_name="lines")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="+")
    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    unit_cost = models.DecimalField(max_digits=14, decimal_places=4)
    line_total = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["purchase_id", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0), name="purchase_line_quantity_positive"
            ),
            models.CheckConstraint(
                condition=models.Q(unit_cost__gte=0),
                name="purchase_line_cost_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.purchase_id} | {self.product_id} x {self.quantity}"

    def clean(self):
        if self.quantity is not None and self.quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")
        if self.unit_cost is not None and self.unit_cost < 0:
            raise ValidationError("Unit cost cannot be negative")

    def save(self, *args, **kwargs):
        if self.purchase.status != "draft":
            raise ValidationError("Cannot change lines of a received purchase.")
        self.line_total = to_money(self.quantity * self.unit_cost)
        self.full_clean()
        return super().save(*args, **kwargs)
