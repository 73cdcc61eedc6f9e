from django.core.exceptions import ValidationError
from django.db import models
from ..managers import PostingManager
from .account import Account
from .base import AppendOnlyModel
from .journal import JournalEntry, JournalLine
from .party import PARTY_TYPES


# ---------- General ledger ----------
class LedgerEntry(AppendOnlyModel):
    """
    One row per posted journal line, in posting order.
    running_balance is the account's current_balance right after
    this row was applied, so replaying an account's rows in order
    reproduces its balance.
    """

    journal_line = models.OneToOneField(
        JournalLine, on_delete=models.PROTECT, related_name="ledger_entry"
    )
    journal = models.ForeignKey(
        JournalEntry, on_delete=models.PROTECT, related_name="ledger_entries"
    )
    journal_number = models.CharField(max_length=40)

    account = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="ledger_entries"
    )
    entry_date = models.DateField()
    description = models.CharField(max_length=400, blank=True, default="")
    debit = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    credit = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    running_balance = models.DecimalField(max_digits=18, decimal_places=2)

    party_type = models.CharField(max_length=10, choices=PARTY_TYPES, default="none")
    party_id = models.BigIntegerField(null=True, blank=True)
    party_name = models.CharField(max_length=200, blank=True, default="")

    source_type = models.CharField(max_length=50, blank=True, default="")
    source_id = models.BigIntegerField(null=True, blank=True)
    source_number = models.CharField(max_length=60, blank=True, default="")

    created_by_id = models.CharField(max_length=64, blank=True, default="")
    created_by_name = models.CharField(max_length=200, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    objects = PostingManager()

    class Meta:
        ordering = ["entry_date", "created_at", "id"]
        indexes = [
            models.Index(fields=["account", "entry_date"], name="le_account_date_idx"),
            models.Index(fields=["party_type", "party_id"], name="le_party_idx"),
        ]
        verbose_name_plural = "ledger entries"

    def __str__(self):
        return f"{self.journal_number} | {self.account_id} | bal {self.running_balance}"

    def clean(self):
        if self.debit < 0 or self.credit < 0:
            raise ValidationError("Debit and credit must be >= 0")
