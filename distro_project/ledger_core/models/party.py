from decimal import Decimal
from django.db import models
from ..managers import ActiveQuerySet

# Tagged party reference carried on journal lines and ledger rows
PARTY_TYPES = [
    ("customer", "Customer"),
    ("vendor", "Vendor"),
    ("none", "None"),
]


class Party(models.Model):
    """
    Shared shape of customers and vendors.
    current_balance is a cache: the sum of this party's tagged postings
    on the receivable (customer) or payable (vendor) accounts.
    """

    code = models.CharField(max_length=32, unique=True, null=True, blank=True)
    # The party’s legal or trade name
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=40, blank=True, default="")
    current_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        abstract = True
        ordering = ["name"]

    # Display name in admin/UI
    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


# ---------- Customer ----------
# Represents client who receives invoices (AR side)
class Customer(Party):
    party_type = "customer"

    class Meta(Party.Meta):
        indexes = [models.Index(fields=["name"], name="customer_name_idx")]


# ---------- Vendor ----------
# Represents supplier we purchase from (AP side)
class Vendor(Party):
    party_type = "vendor"

    class Meta(Party.Meta):
        indexes = [models.Index(fields=["name"], name="vendor_name_idx")]
