import logging
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from ..actors import resolve_actor
from ..conf import ledger_setting
from ..exceptions import (AlreadyPostedDifferentPayload, NotFoundError,
                          UnbalancedEntryError)
from ..models import (Account, Expense, Invoice, JournalEntry, JournalLine,
                      Purchase)
from ..models.journal import posting_fingerprint
from ..money import ZERO, to_money
from ..refs import SourceRef, as_source_ref
from .ledger import post_to_ledgers
from .parties import apply_party_balances
from .sequence import next_journal_number

logger = logging.getLogger(__name__)

PARTY_KINDS = ("customer", "vendor", "none")


# ----------------------------
# Line builders
# ----------------------------
def _party_fields(party):
    """Customer/Vendor instance → tagged (type, id, name); None → no party"""
    if party is None:
        return "none", None, ""
    if isinstance(party, tuple):
        party_type, party_id, party_name = (tuple(party) + ("",))[:3]
        return party_type, party_id, party_name
    return party.party_type, party.pk, party.name


def debit_line(account, amount, description="", party=None):
    party_type, party_id, party_name = _party_fields(party)
    return {
        "account": account,
        "debit": amount,
        "credit": ZERO,
        "description": description,
        "party_type": party_type,
        "party_id": party_id,
        "party_name": party_name,
    }


def credit_line(account, amount, description="", party=None):
    line = debit_line(account, ZERO, description, party)
    line["credit"] = amount
    return line


def _normalize_lines(lines):
    """Validate the shape of every line and round amounts to cents"""
    if not lines or len(lines) < 2:
        raise ValidationError("A journal entry needs at least two lines.")

    normalized = []
    for index, raw in enumerate(lines, start=1):
        account = raw.get("account", raw.get("account_id"))
        account_id = getattr(account, "pk", account)
        if account_id is None:
            raise ValidationError(f"Line {index} has no account.")
        debit = to_money(raw.get("debit"))
        credit = to_money(raw.get("credit"))

        if debit < 0 or credit < 0:
            raise ValidationError(f"Line {index}: debit and credit must be >= 0")
        if (debit > 0) == (credit > 0):
            # both zero or both set
            raise ValidationError(
                f"Line {index}: exactly one of debit or credit must be greater than 0"
            )

        party_type = raw.get("party_type") or "none"
        party_id = raw.get("party_id")
        if party_type not in PARTY_KINDS:
            raise ValidationError(f"Line {index}: unknown party type {party_type!r}")
        if party_type == "none":
            party_id = None
        elif party_id is None:
            raise ValidationError(f"Line {index}: a {party_type} line needs a party id")

        normalized.append(
            {
                "account_id": account_id,
                "debit": debit,
                "credit": credit,
                "description": (raw.get("description") or "")[:400],
                "party_type": party_type,
                "party_id": party_id,
                "party_name": raw.get("party_name") or "",
            }
        )
    return normalized


def _posted_for_source(source, entry_type):
    return (
        JournalEntry.objects.select_for_update()
        .filter(source_type=source.type, source_id=source.id, entry_type=entry_type)
        .first()
    )


def _replayed(existing, source, fingerprint):
    """Same payload → the existing entry; anything else is a conflict"""
    if existing.posting_fingerprint != fingerprint:
        raise AlreadyPostedDifferentPayload(
            f"{source.type} #{source.id} was already posted as "
            f"{existing.entry_number} with a different payload."
        )
    logger.info(
        "Journal %s already posted for %s #%s, skipping",
        existing.entry_number,
        source.type,
        source.id,
    )
    return existing


def _source_document(entry):
    """The issued invoice, received purchase or approved expense behind an entry"""
    for model in (Invoice, Purchase, Expense):
        document = model.objects.filter(journal_entry=entry).first()
        if document is not None:
            return document
    return None


# ----------------------------
# Journal-related workflows
# ----------------------------
def record_journal_entry(
    entry_type,
    entry_date,
    narration,
    lines,
    source_ref=None,
    actor=None,
    reversal_of=None,
):
    """
    Validate, number, persist and post a journal entry.
    Returns (entry, created). created is False when the same source was
    already posted with an identical payload (idempotent replay).
    """
    actor = resolve_actor(actor)
    source = as_source_ref(source_ref)
    entry_date = entry_date or timezone.localdate()
    normalized = _normalize_lines(lines)

    """ Enforce double-entry rule before touching the database """
    total_debit = sum((line["debit"] for line in normalized), Decimal("0.00"))
    total_credit = sum((line["credit"] for line in normalized), Decimal("0.00"))
    if abs(total_debit - total_credit) > ledger_setting("LEDGER_BALANCE_TOLERANCE"):
        raise UnbalancedEntryError(total_debit, total_credit)

    with transaction.atomic():
        accounts = Account.objects.in_bulk({line["account_id"] for line in normalized})
        for line in normalized:
            account = accounts.get(line["account_id"])
            if account is None:
                raise NotFoundError(f"Account {line['account_id']} does not exist.")
            if not account.is_active:
                raise ValidationError(f"Account {account.code} is inactive.")

        fp = posting_fingerprint(entry_type, entry_date, normalized)

        """ Idempotency: one entry per (source, entry type) """
        keyed = bool(source.type) and source.id is not None
        if keyed:
            existing = _posted_for_source(source, entry_type)
            if existing is not None:
                return _replayed(existing, source, fp), False

        try:
            # savepoint: a lost race rolls back the number it drew too
            with transaction.atomic():
                entry = JournalEntry(
                    entry_number=next_journal_number(),
                    entry_date=entry_date,
                    entry_type=entry_type,
                    narration=narration or "",
                    total_debit=total_debit,
                    total_credit=total_credit,
                    source_type=source.type,
                    source_id=source.id,
                    source_number=source.number,
                    status="posted",
                    is_posted=True,
                    posted_at=timezone.now(),
                    created_by_id=actor.id,
                    created_by_name=actor.name,
                    posting_fingerprint=fp,
                    reversal_of=reversal_of,
                )
                entry.save()
        except IntegrityError:
            if not keyed:
                raise
            # a concurrent posting for the same source committed first
            existing = JournalEntry.objects.filter(
                source_type=source.type, source_id=source.id, entry_type=entry_type
            ).first()
            if existing is None:
                raise
            return _replayed(existing, source, fp), False

        for line_no, line in enumerate(normalized, start=1):
            account = accounts[line["account_id"]]
            JournalLine(
                journal=entry,
                line_no=line_no,
                account=account,
                account_code=account.code,
                account_name=account.name,
                description=line["description"],
                debit=line["debit"],
                credit=line["credit"],
                party_type=line["party_type"],
                party_id=line["party_id"],
                party_name=line["party_name"],
            ).save()

        post_to_ledgers(entry)
        apply_party_balances(entry)

    logger.info(
        "Posted journal %s (%s) Dr %s / Cr %s by %s",
        entry.entry_number,
        entry_type,
        total_debit,
        total_credit,
        actor.name,
        extra={"journal_number": entry.entry_number, "source_type": source.type},
    )
    return entry, True


def post_journal_entry(
    entry_type, entry_date, narration, lines, source_ref=None, actor=None
):
    """Post a balanced entry and return it (see record_journal_entry)"""
    entry, _ = record_journal_entry(
        entry_type, entry_date, narration, lines, source_ref, actor
    )
    return entry


def reverse_journal_entry(entry, actor=None, date=None, reason=""):
    """
    Post the mirror image of a journal entry (debits ↔ credits),
    link it through reversal_of and mark the original reversed.
    Party caches follow the mirrored lines.
    """
    entry_id = getattr(entry, "pk", entry)
    with transaction.atomic():
        try:
            original = JournalEntry.objects.select_for_update().get(pk=entry_id)
        except JournalEntry.DoesNotExist:
            raise NotFoundError(f"Journal entry {entry_id} does not exist.")

        if original.status == "reversed" or original.reversals.exists():
            raise ValidationError(f"Journal {original.entry_number} is already reversed.")
        if original.entry_type == "reversal":
            raise ValidationError("A reversal entry cannot itself be reversed.")
        document = _source_document(original)
        if document is not None:
            # the document, its stock and its frozen cost would keep the posting alive
            raise ValidationError(
                f"Journal {original.entry_number} belongs to {document}; "
                "post a return or a correcting entry instead."
            )

        mirrored = [
            {
                "account": line.account_id,
                "debit": line.credit,
                "credit": line.debit,
                "description": f"Reversal: {line.description}"[:400],
                "party_type": line.party_type,
                "party_id": line.party_id,
                "party_name": line.party_name,
            }
            for line in original.lines.order_by("line_no")
        ]
        narration = f"Reversal of {original.entry_number}"
        if reason:
            narration = f"{narration}: {reason}"

        reversal, _ = record_journal_entry(
            "reversal",
            date or timezone.localdate(),
            narration,
            mirrored,
            SourceRef("journal_entry", original.pk, original.entry_number),
            actor,
            reversal_of=original,
        )

        original.status = "reversed"
        original.save(update_fields=["status"])

    logger.info("Reversed journal %s with %s", original.entry_number, reversal.entry_number)
    return reversal
