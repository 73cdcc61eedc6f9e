from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from .base import AppendOnlyModel, VersionedModel
from .product import Product

TRANSACTION_TYPES = [
    ("purchase", "Purchase"),
    ("sale", "Sale"),
    ("return_in", "Return in"),
    ("return_out", "Return out"),
    ("adjustment", "Adjustment"),
    ("opening", "Opening"),
    ("edit_in", "Edit in"),
    ("edit_out", "Edit out"),
]

# Inbound movements that bring stock in at their own cost and re-average
COST_BEARING_IN_TYPES = ("purchase", "return_in", "opening", "edit_in")


# ---------- Stock movements ----------
class InventoryTransaction(AppendOnlyModel):
    """
    Append-only stock log. Replaying quantity_in - quantity_out
    in order reproduces the product's quantity on hand.
    """

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="inventory_transactions"
    )
    product_name = models.CharField(max_length=200)
    product_sku = models.CharField(max_length=80, blank=True, default="")

    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPES)
    quantity_in = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal("0"))
    quantity_out = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal("0"))
    # incoming cost for ins, average cost at removal for outs
    unit_cost = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal("0"))
    total_cost = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    balance_after = models.DecimalField(max_digits=14, decimal_places=4)

    # What caused the movement (invoice, purchase, manual adjustment...)
    reference_type = models.CharField(max_length=50, blank=True, default="")
    reference_id = models.BigIntegerField(null=True, blank=True)
    reference_number = models.CharField(max_length=60, blank=True, default="")
    remarks = models.CharField(max_length=400, blank=True, default="")

    transaction_date = models.DateField(default=timezone.localdate)
    created_by_id = models.CharField(max_length=64, blank=True, default="")
    created_by_name = models.CharField(max_length=200, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["product", "transaction_date"], name="it_product_date_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="it_reference_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_in__gte=0) & models.Q(quantity_out__gte=0),
                name="it_non_negative_quantities",
            ),
            models.CheckConstraint(
                condition=models.Q(balance_after__gte=0),
                name="it_balance_after_non_negative",
            ),
        ]

    def __str__(self):
        return (
            f"{self.transaction_type} {self.product_name} "
            f"+{self.quantity_in} -{self.quantity_out} → {self.balance_after}"
        )

    def clean(self):
        if self.quantity_in < 0 or self.quantity_out < 0:
            raise ValidationError("Quantities must be >= 0")
        if self.unit_cost < 0:
            raise ValidationError("Unit cost must be >= 0")


class InventoryValuation(VersionedModel):
    """Weighted-average cost state of one product"""

    product = models.OneToOneField(
        Product, on_delete=models.PROTECT, related_name="valuation"
    )
    quantity_on_hand = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("0")
    )
    average_cost = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal("0"))
    # quantity_on_hand × average_cost, at cents
    total_value = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    last_updated = models.DateTimeField(null=True, blank=True)
    last_transaction = models.ForeignKey(
        InventoryTransaction,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_on_hand__gte=0),
                name="iv_quantity_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.product_id}: {self.quantity_on_hand} @ {self.average_cost}"
