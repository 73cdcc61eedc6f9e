from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import ActiveQuerySet


# ---------- Products (stocked goods) ----------
class Product(models.Model):  # Represents something the business buys & sells

    name = models.CharField(max_length=200)
    # Stock Keeping Unit (optional unique code per product)
    sku = models.CharField(max_length=80, unique=True, null=True, blank=True)

    # Cached quantity on hand; mirrors InventoryValuation.quantity_on_hand
    current_stock = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("0")
    )
    # Reorder level used by the low-stock report
    minimum_stock = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("0")
    )

    # Last purchase cost, informational only.
    # Costing always uses the weighted average on InventoryValuation
    cost_price = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("0")
    )
    selling_price = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_stock__gte=0),
                name="product_stock_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})" if self.sku else self.name

    def clean(self):
        if self.minimum_stock is not None and self.minimum_stock < 0:
            raise ValidationError("Minimum stock cannot be negative.")
        if self.selling_price is not None and self.selling_price < 0:
            raise ValidationError("Selling price cannot be negative.")

    def save(self, *args, **kwargs):
        # Ensure validation before saving
        self.full_clean()
        return super().save(*args, **kwargs)
