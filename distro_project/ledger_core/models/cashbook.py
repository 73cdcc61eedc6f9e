from decimal import Decimal
from django.db import models
from ..managers import PostingManager
from .account import Account
from .base import AppendOnlyModel
from .journal import JournalEntry
from .ledger import LedgerEntry
from .party import PARTY_TYPES

# How money moved; picks the default cash vs bank account
PAYMENT_METHODS = [
    ("cash", "Cash"),
    ("bank", "Bank transfer"),
    ("cheque", "Cheque"),
    ("card", "Card"),
    ("online", "Online"),
]


# ---------- Cash book ----------
class CashBookEntry(AppendOnlyModel):
    """Mirror of a ledger entry that hit a cash or bank account"""

    ledger_entry = models.OneToOneField(
        LedgerEntry, on_delete=models.PROTECT, related_name="cash_book_entry"
    )
    journal = models.ForeignKey(
        JournalEntry, on_delete=models.PROTECT, related_name="cash_book_entries"
    )
    journal_number = models.CharField(max_length=40)

    account = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="cash_book_entries"
    )
    account_name = models.CharField(max_length=200)
    is_bank = models.BooleanField(default=False)

    entry_date = models.DateField()
    description = models.CharField(max_length=400, blank=True, default="")
    # cash_in = ledger debit, cash_out = ledger credit
    cash_in = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    cash_out = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    running_balance = models.DecimalField(max_digits=18, decimal_places=2)

    party_type = models.CharField(max_length=10, choices=PARTY_TYPES, default="none")
    party_id = models.BigIntegerField(null=True, blank=True)
    party_name = models.CharField(max_length=200, blank=True, default="")

    source_type = models.CharField(max_length=50, blank=True, default="")
    source_id = models.BigIntegerField(null=True, blank=True)
    source_number = models.CharField(max_length=60, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    objects = PostingManager()

    class Meta:
        ordering = ["entry_date", "created_at", "id"]
        indexes = [models.Index(fields=["account", "entry_date"], name="cbe_account_date_idx")]
        verbose_name_plural = "cash book entries"

    def __str__(self):
        return f"{self.entry_date} {self.account_name} +{self.cash_in} -{self.cash_out}"


class DailyCashSummary(models.Model):
    """
    One row per (cash account, day), upserted by the summarizer.
    Chain rule: closing of a day equals opening of the next summarized day.
    """

    cash_account = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="daily_summaries"
    )
    date = models.DateField()
    opening_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    total_in = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_out = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    closing_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    transaction_count = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["cash_account_id", "date"]
        constraints = [
            models.UniqueConstraint(
                fields=["cash_account", "date"], name="uq_daily_cash_summary_day"
            )
        ]
        verbose_name_plural = "daily cash summaries"

    def __str__(self):
        return f"{self.cash_account_id} {self.date}: {self.opening_balance} → {self.closing_balance}"
