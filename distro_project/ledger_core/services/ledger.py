import logging
from django.db import transaction
from django.db.models import F

from ..exceptions import ConcurrencyConflictError
from ..models import Account, CashBookEntry, LedgerEntry
from ..money import to_money
from .cashbook import refresh_daily_summary

logger = logging.getLogger(__name__)


def apply_balance_change(account, change):
    """
    Move account.current_balance by `change` with a version-checked UPDATE.
    `account` must be the instance read under select_for_update();
    if its version is stale no row matches and nothing is written.
    """
    new_balance = to_money(account.current_balance + change)
    updated = Account.objects.filter(pk=account.pk, version=account.version).update(
        current_balance=new_balance, version=F("version") + 1
    )
    if updated == 0:
        raise ConcurrencyConflictError(
            f"Account {account.code} changed while posting (version {account.version})."
        )
    # keep the in-memory instance in step for the next line on the same account
    account.current_balance = new_balance
    account.version += 1
    return new_balance


# ------------------------------------
# Ledger posting
# ------------------------------------
def post_to_ledgers(journal_entry):
    """
    Apply every line of a posted journal entry to its account:
      - balance change = debit - credit, negated for credit-normal accounts
      - one LedgerEntry per line carrying the balance after the change
      - cash/bank lines also land in the cash book and refresh that day's summary
    Runs inside the caller's transaction; returns the ledger entries in line order.
    """
    with transaction.atomic():
        lines = list(journal_entry.lines.order_by("line_no"))

        # Lock every touched account once, in pk order to avoid deadlocks
        account_ids = sorted({line.account_id for line in lines})
        accounts = {
            account.pk: account
            for account in Account.objects.select_for_update()
            .filter(pk__in=account_ids)
            .order_by("pk")
        }

        ledger_entries = []
        touched_days = set()
        for line in lines:
            account = accounts[line.account_id]
            change = account.signed_change(line.debit, line.credit)
            new_balance = apply_balance_change(account, change)

            ledger_entry = LedgerEntry(
                journal_line=line,
                journal=journal_entry,
                journal_number=journal_entry.entry_number,
                account=account,
                entry_date=journal_entry.entry_date,
                description=line.description or journal_entry.narration[:400],
                debit=line.debit,
                credit=line.credit,
                running_balance=new_balance,
                party_type=line.party_type,
                party_id=line.party_id,
                party_name=line.party_name,
                source_type=journal_entry.source_type,
                source_id=journal_entry.source_id,
                source_number=journal_entry.source_number,
                created_by_id=journal_entry.created_by_id,
                created_by_name=journal_entry.created_by_name,
            )
            ledger_entry.save()
            ledger_entries.append(ledger_entry)

            if account.is_cash_or_bank:
                CashBookEntry(
                    ledger_entry=ledger_entry,
                    journal=journal_entry,
                    journal_number=journal_entry.entry_number,
                    account=account,
                    account_name=account.name,
                    is_bank=account.is_bank_account,
                    entry_date=journal_entry.entry_date,
                    description=ledger_entry.description,
                    cash_in=line.debit,
                    cash_out=line.credit,
                    running_balance=new_balance,
                    party_type=line.party_type,
                    party_id=line.party_id,
                    party_name=line.party_name,
                    source_type=journal_entry.source_type,
                    source_id=journal_entry.source_id,
                    source_number=journal_entry.source_number,
                ).save()
                touched_days.add(account.pk)

            logger.debug(
                "Ledger %s: %s %s → %s",
                journal_entry.entry_number,
                account.code,
                change,
                new_balance,
            )

        for account_id in sorted(touched_days):
            refresh_daily_summary(accounts[account_id], journal_entry.entry_date)

    return ledger_entries
