import hashlib
import json
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import PostingManager
from .account import Account
from .party import PARTY_TYPES

ENTRY_TYPES = [
    ("sales", "Sales"),
    ("purchase", "Purchase"),
    ("receipt", "Receipt"),
    ("payment", "Payment"),
    ("expense", "Expense"),
    ("adjustment", "Adjustment"),
    ("return", "Return"),
    ("opening", "Opening"),
    ("closing", "Closing"),
    ("transfer", "Transfer"),
    ("reversal", "Reversal"),
]

JOURNAL_STATUS = [
    ("posted", "Posted"),  # finalized on creation
    ("reversed", "Reversed"),  # a mirror entry cancels it
]


def posting_fingerprint(entry_type, entry_date, lines):
    """Deterministic representation of what matters for posting

    Deterministic = no matter when or how you call it,
    if the data hasn't changed,
    the hash will always be the same.

    `lines` are dicts carrying account_id, debit, credit,
    party_type, party_id and description, in authoring order.
    """
    payload = {
        "type": entry_type,
        "date": entry_date.isoformat(),
        "lines": [
            {
                "acct": line["account_id"],
                "debit": str(Decimal(line["debit"]).quantize(Decimal("0.01"))),
                "credit": str(Decimal(line["credit"]).quantize(Decimal("0.01"))),
                "party": [line.get("party_type") or "none", line.get("party_id")],
                "desc": line.get("description") or "",
            }
            for line in lines
        ],
    }
    # Converts payload dict into a compact JSON string and hash it
    raw = json.dumps(payload, separators=(",", ":"), sort_keys=True)
    return hashlib.sha256(raw.encode()).hexdigest()


# ---------- Journal (Header) & JournalLine ----------
class JournalEntry(models.Model):  # Represents one accounting transaction
    """
    Journal entries are created already posted by the journal service
    (services/journal.py). After that the only permitted change is the
    status flip to "reversed" when a reversal entry is posted.
    """

    # Sequential, e.g. JE-202501-00001
    entry_number = models.CharField(max_length=40, unique=True)
    entry_date = models.DateField()
    entry_type = models.CharField(max_length=20, choices=ENTRY_TYPES)
    narration = models.TextField(blank=True, default="")

    # Stored totals; equal to the sums of the lines
    total_debit = models.DecimalField(max_digits=18, decimal_places=2)
    total_credit = models.DecimalField(max_digits=18, decimal_places=2)

    # optional polymorphic source info
    # (invoice, purchase, payment, expense ...)
    source_type = models.CharField(
        max_length=50, blank=True, default=""
    )  # Helps trace back where the JE originated
    source_id = models.BigIntegerField(null=True, blank=True)
    source_number = models.CharField(max_length=60, blank=True, default="")

    status = models.CharField(max_length=10, choices=JOURNAL_STATUS, default="posted")
    is_posted = models.BooleanField(default=True)
    posted_at = models.DateTimeField(null=True, blank=True)

    # Who posted it (see actors.Actor)
    created_by_id = models.CharField(max_length=64, blank=True, default="")
    created_by_name = models.CharField(max_length=200, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    # Fingerprint-based idempotency (safe to post twice if nothing has changed)
    posting_fingerprint = models.CharField(max_length=64, blank=True, default="")

    # Set on the mirror entry; the original is found via `reversals`
    reversal_of = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="reversals",
    )

    class Meta:
        ordering = ["entry_date", "id"]
        # Speed up listing & filtering
        # (e.g. all return entries this month)
        indexes = [
            models.Index(fields=["entry_date"], name="je_date_idx"),
            models.Index(fields=["entry_type", "entry_date"], name="je_type_date_idx"),
            models.Index(fields=["source_type", "source_id"], name="je_source_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(total_debit__gte=0) & models.Q(total_credit__gte=0)
                ),
                name="je_non_negative_totals",
            ),
            # One entry per source document and entry type
            models.UniqueConstraint(
                fields=["source_type", "source_id", "entry_type"],
                condition=models.Q(source_id__isnull=False) & ~models.Q(source_type=""),
                name="uq_je_source",
            ),
        ]

    def __str__(self):
        return f"{self.entry_number} {self.entry_date} [{self.status}]"

    # Aggregate all debit and credit amounts across entry’s lines
    def compute_totals(self):
        """Return debits, credits sums for lines"""
        aggs = self.lines.aggregate(
            total_debit=models.Sum("debit"),
            total_credit=models.Sum("credit"),
        )
        return (
            aggs["total_debit"] or Decimal("0.00"),
            aggs["total_credit"] or Decimal("0.00"),
        )

    # True if double-entry rule holds: total debits = total credits
    def is_balanced(self, tolerance=Decimal("0.00")):
        debit, credit = self.compute_totals()
        return abs(debit - credit) <= tolerance

    def _posting_payload_lines(self):
        return [
            {
                "account_id": line.account_id,
                "debit": line.debit,
                "credit": line.credit,
                "party_type": line.party_type,
                "party_id": line.party_id,
                "description": line.description,
            }
            # always in the same order
            for line in self.lines.order_by("line_no")
        ]

    def _fingerprint(self):
        # hash of the persisted lines; equals posting_fingerprint
        # unless someone tampered with the rows
        return posting_fingerprint(
            self.entry_type, self.entry_date, self._posting_payload_lines()
        )

    @property
    def is_reversed(self):
        return self.status == "reversed"

    def clean(self):
        if self.total_debit is not None and self.total_credit is not None:
            if self.total_debit < 0 or self.total_credit < 0:
                raise ValidationError("Journal totals must be >= 0")
        if self.reversal_of_id and self.entry_type != "reversal":
            raise ValidationError("Only reversal entries may reference another entry.")

    def save(self, *args, **kwargs):
        if self.pk:  # Does this row already exist in DB?
            update_fields = kwargs.get("update_fields")
            # Only the status flip is allowed once posted
            if not update_fields or set(update_fields) - {"status"}:
                raise ValidationError(
                    "Cannot modify a posted JournalEntry. It is immutable."
                )
            orig = JournalEntry.objects.only("status").get(pk=self.pk)
            if orig.status == "reversed" and self.status != "reversed":
                # disallow toggling back
                raise ValidationError("Cannot un-reverse a journal entry")
            return super().save(*args, **kwargs)

        # source uniqueness is settled by the database (see uq_je_source)
        self.full_clean(validate_constraints=False)
        return super().save(*args, **kwargs)


class JournalLine(models.Model):  # Stores Lines ( credits / debits )
    """
    Each line belongs to a journal entry and to a GL account.
    Account code/name are snapshotted so printed journals survive renames.
    The party is a tagged reference: party_type says which table
    party_id points into, "none" means no party.
    """

    journal = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="lines",
    )
    # Authoring order, also the order balances are applied in
    line_no = models.PositiveIntegerField()

    # Must point to one Account (can’t delete account if lines exist → PROTECT)
    account = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="journal_lines"
    )
    account_code = models.CharField(max_length=32)
    account_name = models.CharField(max_length=200)

    description = models.CharField(max_length=400, blank=True, default="")

    debit = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    credit = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    party_type = models.CharField(max_length=10, choices=PARTY_TYPES, default="none")
    party_id = models.BigIntegerField(null=True, blank=True)
    party_name = models.CharField(max_length=200, blank=True, default="")

    objects = PostingManager()

    class Meta:
        ordering = ["journal_id", "line_no"]
        # For fast queries like “all lines for this account” /
        # “all lines in this JE.”
        indexes = [
            models.Index(fields=["account"], name="jl_account_idx"),
            models.Index(fields=["party_type", "party_id"], name="jl_party_idx"),
        ]

        # Enforce debits and credits must be non-negative,
        # and exactly one side non-zero
        constraints = [
            models.CheckConstraint(
                condition=(models.Q(debit__gte=0) & models.Q(credit__gte=0)),
                name="jl_non_negative_amounts",
            ),
            models.CheckConstraint(
                condition=~(models.Q(debit=0) & models.Q(credit=0)),
                name="jl_debit_or_credit_nonzero",
            ),
            models.CheckConstraint(
                condition=models.Q(debit=0) | models.Q(credit=0),
                name="jl_not_both_debit_and_credit",
            ),
            # Tagged party: "none" carries no id, anything else must
            models.CheckConstraint(
                condition=(
                    models.Q(party_type="none", party_id__isnull=True)
                    | (~models.Q(party_type="none") & models.Q(party_id__isnull=False))
                ),
                name="jl_party_tag_consistent",
            ),
            models.UniqueConstraint(
                fields=["journal", "line_no"], name="uq_jl_journal_line_no"
            ),
        ]

    # Show journal, account, and amounts in debug logs
    def __str__(self):
        return (
            f"{self.journal_id} | {self.account_code} {self.account_name} "
            f"| D:{self.debit or 0} C:{self.credit or 0}"
        )

    @property
    def has_party(self):
        return self.party_type != "none"

    # Business logic validation:
    # - Debit/credit should always be non-negative
    # - exactly one side carries the amount
    # - party tag matches party id
    def clean(self):
        # Ensure no negative values sneak in
        # (redundant with CheckConstraint but useful at app-level)
        if self.debit < 0 or self.credit < 0:
            raise ValidationError("Debit and credit must be >= 0")

        if (self.debit > 0) and (self.credit > 0):
            raise ValidationError(
                "JournalLine should not have both debit and credit > 0"
            )
        if (self.debit == 0) and (self.credit == 0):
            raise ValidationError(
                "JournalLine requires a non-0 amount on either debit or credit"
            )

        if self.party_type == "none" and self.party_id is not None:
            raise ValidationError("A line without a party cannot carry a party id.")
        if self.party_type != "none" and self.party_id is None:
            raise ValidationError(f"A {self.party_type} line requires a party id.")

    def delete(self, *args, **kwargs):
        # Lines are only ever created as part of a posted journal
        raise ValidationError("Cannot delete JournalLine: parent JournalEntry is posted.")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError(
                "Cannot modify JournalLine: parent JournalEntry is posted."
            )
        # Snapshot account identity at posting time
        if self.account_id and not self.account_code:
            self.account_code = self.account.code
            self.account_name = self.account.name

        # clean()+field validation always run whenever
        # you save a JournalLine programmatically
        self.full_clean()
        return super().save(*args, **kwargs)
