from django.db import models
from django.db.models import Q


# -----------------------------------------
# Chart of Accounts lookups
# -----------------------------------------
class AccountQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def by_subtype(self, subtype):
        # Control accounts first, then lowest code
        # e.g. "1300 Accounts Receivable" wins over "1310 Trade Debtors"
        return self.filter(account_subtype=subtype).order_by(
            "-is_control_account", "code"
        )

    def cash_or_bank(self):
        return self.filter(Q(is_cash_account=True) | Q(is_bank_account=True))

    # Enables query:
    # Account.objects.first_active("accounts_receivable")
    def first_active(self, subtype):
        return self.active().by_subtype(subtype).first()


class AccountManager(models.Manager.from_queryset(AccountQuerySet)):
    pass


# -----------------------------------------
# Append-only logs (ledger, cash book, stock)
# -----------------------------------------
class PostingQuerySet(models.QuerySet):
    def for_account(self, account):
        return self.filter(account=account)

    def between(self, start=None, end=None, field="entry_date"):
        qs = self
        if start:
            qs = qs.filter(**{f"{field}__gte": start})
        if end:
            qs = qs.filter(**{f"{field}__lte": end})
        return qs

    def for_party(self, party_type, party_id):
        return self.filter(party_type=party_type, party_id=party_id)

    # Posting order: the order balances were actually applied in
    def in_posting_order(self):
        return self.order_by("created_at", "id")


class PostingManager(models.Manager.from_queryset(PostingQuerySet)):
    pass


# Active master data (customers, vendors, products)
class ActiveQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)
