from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from .account import Account
from .cashbook import PAYMENT_METHODS
from .journal import JournalEntry

EXPENSE_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("approved", "Approved"),
    ("rejected", "Rejected"),
]


class Expense(models.Model):
    """
    An operating cost paid out of cash or bank.
    Posted (Dr expense account / Cr cash or bank) when approved.
    """

    expense_number = models.CharField(max_length=64, unique=True)
    # Free-text grouping used by the P&L ("Rent", "Fuel", ...)
    category = models.CharField(max_length=100)
    expense_account = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="expenses"
    )
    expense_date = models.DateField()
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    payment_method = models.CharField(max_length=10, choices=PAYMENT_METHODS, default="cash")
    status = models.CharField(
        max_length=10, choices=EXPENSE_STATUS_CHOICES, default="pending"
    )
    description = models.CharField(max_length=400, blank=True, default="")

    journal_entry = models.ForeignKey(
        JournalEntry, null=True, blank=True, on_delete=models.PROTECT, related_name="+"
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["expense_date", "id"]
        indexes = [models.Index(fields=["status", "expense_date"], name="exp_status_date_idx")]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0), name="expense_amount_positive"
            ),
        ]

    def __str__(self):
        return f"{self.expense_number} {self.category} {self.amount}"

    def clean(self):
        if self.amount is not None and self.amount <= Decimal("0"):
            raise ValidationError("Expense amount must be greater than 0")
        # Only expense accounts can be charged
        if self.expense_account_id and self.expense_account.account_type != "expense":
            raise ValidationError("Expense must be charged to an expense account.")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
