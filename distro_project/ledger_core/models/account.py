from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import AccountManager
from .base import VersionedModel

# Choice Lists
ACCOUNT_TYPES = [
    # Used in Account model to classify general ledger accounts
    ("asset", "Asset"),
    ("liability", "Liability"),
    ("equity", "Equity"),
    ("income", "Income"),
    ("expense", "Expense"),
]

# Define whether the account normally increases
# on the debit side or credit side
NORMAL_BALANCE = [
    ("debit", "Debit"),
    ("credit", "Credit"),
]

# Finer classification, used by the posting composers to find
# "the" receivable, payable, inventory... account
ACCOUNT_SUBTYPES = [
    ("cash", "Cash"),
    ("bank", "Bank"),
    ("accounts_receivable", "Accounts Receivable"),
    ("inventory", "Inventory"),
    ("fixed_asset", "Fixed Asset"),
    ("other_asset", "Other Asset"),
    ("accounts_payable", "Accounts Payable"),
    ("short_term_liability", "Short-term Liability"),
    ("long_term_liability", "Long-term Liability"),
    ("capital", "Capital"),
    ("retained_earnings", "Retained Earnings"),
    ("drawings", "Drawings"),
    ("sales_revenue", "Sales Revenue"),
    ("sales_returns", "Sales Returns"),
    ("sales_discounts", "Sales Discounts"),
    ("other_income", "Other Income"),
    ("cost_of_goods_sold", "Cost of Goods Sold"),
    ("operating_expense", "Operating Expense"),
    ("financial_expense", "Financial Expense"),
    ("other_expense", "Other Expense"),
]

# Which account_type each subtype may live under
SUBTYPE_ACCOUNT_TYPE = {
    "cash": "asset",
    "bank": "asset",
    "accounts_receivable": "asset",
    "inventory": "asset",
    "fixed_asset": "asset",
    "other_asset": "asset",
    "accounts_payable": "liability",
    "short_term_liability": "liability",
    "long_term_liability": "liability",
    "capital": "equity",
    "retained_earnings": "equity",
    "drawings": "equity",
    "sales_revenue": "income",
    "sales_returns": "income",
    "sales_discounts": "income",
    "other_income": "income",
    "cost_of_goods_sold": "expense",
    "operating_expense": "expense",
    "financial_expense": "expense",
    "other_expense": "expense",
}


class Account(VersionedModel):
    """
    Actual ledger account entry in Chart of Accounts.
    - code is unique
    - account_type: determines reporting -BS vs P&L
    - normal_balance: the side that increases the balance.
      current_balance is signed relative to it, so a contra account
      (Sales Returns, Accumulated Depreciation) shows a positive balance
      while it holds its usual amount.
    """

    # Every account has a code
    # which lets you sort/group accounts consistently in reports.
    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(
        max_length=200
    )  # Human-readable name → "Cash in Hand", "Accounts Payable".

    # Classify account into one of the 5 basic accounting types
    account_type = models.CharField(max_length=10, choices=ACCOUNT_TYPES)
    account_subtype = models.CharField(max_length=30, choices=ACCOUNT_SUBTYPES)

    # Assets/Expenses → Debit, Liabilities/Equity/Income → Credit.
    normal_balance = models.CharField(
        max_length=6,
        choices=NORMAL_BALANCE,
        default="debit",
    )

    # Cached running balance, only written by the ledger poster
    # and the reconciliation job
    current_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    # Optional hierarchy:
    # (e.g. 1100 Cash, 1110 Petty Cash under 1000 Current Assets)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="children",
        # you can’t delete a parent if children exist
    )
    description = models.TextField(blank=True, default="")

    # “soft deactivate” accounts (stop new postings) without deleting history
    is_active = models.BooleanField(default=True)
    is_cash_account = models.BooleanField(default=False)
    is_bank_account = models.BooleanField(default=False)
    # marker for accounts that must reconcile with subledgers
    is_control_account = models.BooleanField(default=False)
    # seeded by the system; the engine looks these up by subtype
    is_system_account = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AccountManager()

    class Meta:
        ordering = ["code"]
        indexes = [  # Optimize queries
            # For reports grouped by account_type
            models.Index(fields=["account_type"], name="acct_type_idx"),
            # For composer lookups by subtype
            models.Index(fields=["account_subtype", "is_active"], name="acct_subtype_active_idx"),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    # Translate a raw debit/credit pair into a change of current_balance
    def signed_change(self, debit, credit):
        change = Decimal(debit or 0) - Decimal(credit or 0)
        if self.normal_balance == "credit":
            change = -change
        return change

    @property
    def is_cash_or_bank(self):
        return self.is_cash_account or self.is_bank_account

    def clean(self):
        expected = SUBTYPE_ACCOUNT_TYPE.get(self.account_subtype)
        if expected and expected != self.account_type:
            raise ValidationError(
                f"Subtype {self.account_subtype} belongs under {expected}, "
                f"not {self.account_type}."
            )
        # Only asset accounts can hold cash
        if (self.is_cash_account or self.is_bank_account) and (
            self.account_type != "asset"
        ):
            raise ValidationError("Cash and bank accounts must be asset accounts.")

        if self.parent_id and self.parent_id == self.pk:
            raise ValidationError("An account cannot be its own parent.")

    def save(self, *args, **kwargs):
        """Enforce business immutability
        (can’t re-classify accounts used in journal lines)"""
        if self.pk:
            old = Account.objects.filter(pk=self.pk).first()
            reclassified = old and (
                old.normal_balance != self.normal_balance
                or old.account_type != self.account_type
            )
            if reclassified:
                from .journal import JournalLine

                # check usage (referenced in transactions)
                if JournalLine.objects.filter(account_id=self.pk).exists():
                    raise ValidationError(
                        "Cannot change type or normal balance of an account "
                        "that is used in journal lines."
                    )
        self.full_clean()
        return super().save(*args, **kwargs)
