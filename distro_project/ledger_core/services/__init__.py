# Public entry points of the posting engine.
# Everything callers need is importable from ledger_core.services
from .cashbook import rebuild_daily_summaries, refresh_daily_summary
from .composers import (post_expense, post_payment, post_purchase,
                        post_receipt, post_return, post_sale,
                        require_account, resolve_cash_account)
from .inventory import (add_stock, adjust_stock, get_inventory_valuation,
                        get_low_stock_products, get_stock_info,
                        get_stock_movements, remove_stock)
from .journal import (credit_line, debit_line, post_journal_entry,
                      record_journal_entry, reverse_journal_entry)
from .ledger import apply_balance_change, post_to_ledgers
from .parties import apply_party_balances
from .reconcile import (reconcile_account_balances,
                        reconcile_inventory_valuations,
                        reconcile_party_balances)
from .reports import (get_account_ledger, get_balance_sheet, get_cash_book,
                      get_party_ledger, get_payables, get_profit_and_loss,
                      get_receivables, get_trial_balance)
from .retry import with_conflict_retry
from .sequence import next_journal_number, next_sequence_value
from .workflows import (approve_expense, cancel_invoice, issue_invoice,
                        receive_purchase, reject_expense)
from ..actors import Actor
from ..refs import SourceRef

__all__ = [
    "Actor",
    "SourceRef",
    "add_stock",
    "adjust_stock",
    "apply_balance_change",
    "apply_party_balances",
    "approve_expense",
    "cancel_invoice",
    "credit_line",
    "debit_line",
    "get_account_ledger",
    "get_balance_sheet",
    "get_cash_book",
    "get_inventory_valuation",
    "get_low_stock_products",
    "get_party_ledger",
    "get_payables",
    "get_profit_and_loss",
    "get_receivables",
    "get_stock_info",
    "get_stock_movements",
    "get_trial_balance",
    "issue_invoice",
    "next_journal_number",
    "next_sequence_value",
    "post_expense",
    "post_journal_entry",
    "post_payment",
    "post_purchase",
    "post_receipt",
    "post_return",
    "post_sale",
    "post_to_ledgers",
    "rebuild_daily_summaries",
    "receive_purchase",
    "reconcile_account_balances",
    "reconcile_inventory_valuations",
    "reconcile_party_balances",
    "record_journal_entry",
    "refresh_daily_summary",
    "reject_expense",
    "remove_stock",
    "require_account",
    "resolve_cash_account",
    "reverse_journal_entry",
    "with_conflict_retry",
]
