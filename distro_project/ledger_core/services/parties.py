import logging
from django.db import transaction
from django.db.models import F

from ..exceptions import NotFoundError
from ..models import Customer, Vendor

logger = logging.getLogger(__name__)

# party kind → (model, the control account subtype its balance lives on)
PARTY_MODELS = {
    "customer": (Customer, "accounts_receivable"),
    "vendor": (Vendor, "accounts_payable"),
}


def get_party(kind, party):
    """Fetch a fresh Customer/Vendor from an instance or a primary key"""
    model, _ = PARTY_MODELS[kind]
    party_id = getattr(party, "pk", party)
    try:
        return model.objects.get(pk=party_id)
    except model.DoesNotExist:
        raise NotFoundError(f"{kind.title()} {party_id} does not exist.")


def party_balance_changes(journal_entry):
    """
    {(kind, party_id): change} for the lines of an entry that hit a party's
    control account. Receivable lines move the customer, payable lines the
    vendor, each signed by the account's normal side.
    """
    changes = {}
    for line in journal_entry.lines.select_related("account").order_by("line_no"):
        if line.party_type not in PARTY_MODELS:
            continue
        _, subtype = PARTY_MODELS[line.party_type]
        if line.account.account_subtype != subtype:
            continue
        key = (line.party_type, line.party_id)
        changes[key] = changes.get(key, 0) + line.account.signed_change(
            line.debit, line.credit
        )
    return changes


def apply_party_balances(journal_entry):
    """Move cached customer/vendor balances for a freshly posted entry"""
    with transaction.atomic():
        for (kind, party_id), change in sorted(party_balance_changes(journal_entry).items()):
            if not change:
                continue
            model, _ = PARTY_MODELS[kind]
            # lock then increment in place
            locked = model.objects.select_for_update().filter(pk=party_id).first()
            if locked is None:
                raise NotFoundError(f"{kind.title()} {party_id} does not exist.")
            model.objects.filter(pk=party_id).update(
                current_balance=F("current_balance") + change
            )
            logger.info(
                "%s %s balance %+.2f (%s)",
                kind.title(),
                locked.name,
                change,
                journal_entry.entry_number,
            )
