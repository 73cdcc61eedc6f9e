import logging
from django.core.exceptions import ValidationError
from django.utils import timezone

from ..conf import ledger_setting
from ..exceptions import MissingAccountError, NotFoundError
from ..models import Account, Expense
from ..models.cashbook import PAYMENT_METHODS
from ..money import ZERO, to_money
from ..refs import as_source_ref
from .journal import credit_line, debit_line, record_journal_entry
from .parties import get_party
from .retry import with_conflict_retry

logger = logging.getLogger(__name__)

_PAYMENT_METHODS = {key for key, _ in PAYMENT_METHODS}


# ----------------------------
# Account resolution
# ----------------------------
def require_account(subtype):
    """First active account of a subtype (control accounts first), or MissingAccountError"""
    account = Account.objects.first_active(subtype)
    if account is None:
        raise MissingAccountError(subtype)
    return account


def resolve_cash_account(method="cash", cash_account=None):
    """
    A nominated account must be active and flagged cash or bank.
    Otherwise "cash" → first cash account, any other method → first bank
    account, falling back to cash.
    """
    if method not in _PAYMENT_METHODS:
        raise ValidationError(f"Unknown payment method {method!r}")

    if cash_account is not None:
        account_id = getattr(cash_account, "pk", cash_account)
        account = Account.objects.filter(pk=account_id).first()
        if account is None:
            raise NotFoundError(f"Account {account_id} does not exist.")
        if not account.is_active or not account.is_cash_or_bank:
            raise ValidationError(
                f"Account {account.code} is not an active cash or bank account."
            )
        return account

    cash_accounts = Account.objects.active().filter(is_cash_account=True).order_by("code")
    if method == "cash":
        account = cash_accounts.first()
    else:
        account = (
            Account.objects.active().filter(is_bank_account=True).order_by("code").first()
            or cash_accounts.first()
        )
    if account is None:
        raise MissingAccountError("cash" if method == "cash" else "bank")
    return account


def _positive_amount(amount):
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    return amount


def _post(entry_type, date, narration, lines, ref, actor):
    # party caches move inside record_journal_entry, only for new entries
    entry, _ = record_journal_entry(
        entry_type, date or timezone.localdate(), narration, lines, ref, actor
    )
    return entry


# ----------------------------
# Transaction composers
# ----------------------------
@with_conflict_retry
def post_sale(customer, invoice_ref, amount, cost_of_goods_sold=ZERO, date=None, actor=None):
    """
    Dr Accounts Receivable / Cr Sales Revenue = amount
    Dr Cost of Goods Sold / Cr Inventory = cost (when > 0)
    """
    amount = _positive_amount(amount)
    cogs = to_money(cost_of_goods_sold or 0)
    if cogs < 0:
        raise ValidationError("Cost of goods sold cannot be negative")
    customer = get_party("customer", customer)
    ref = as_source_ref(invoice_ref, "invoice")

    receivable = require_account("accounts_receivable")
    revenue = require_account("sales_revenue")
    lines = [
        debit_line(receivable, amount, f"Sale to {customer.name}", customer),
        credit_line(revenue, amount, f"Sales {ref.number}".strip(), customer),
    ]
    if cogs > 0:
        cogs_account = require_account("cost_of_goods_sold")
        inventory = require_account("inventory")
        lines += [
            debit_line(cogs_account, cogs, f"Cost of sales {ref.number}".strip()),
            credit_line(inventory, cogs, f"Inventory out {ref.number}".strip()),
        ]

    return _post(
        "sales", date, f"Sales invoice {ref.number} - {customer.name}", lines, ref, actor
    )


@with_conflict_retry
def post_return(customer, order_ref, amount, date=None, actor=None, cost_of_goods_returned=None):
    """
    Dr Sales Returns (or Sales Revenue) / Cr Accounts Receivable = amount
    Dr Inventory / Cr Cost of Goods Sold = cost returned. When the caller
    does not know the cost it is estimated as amount × LEDGER_RETURN_COST_RATIO.
    """
    amount = _positive_amount(amount)
    customer = get_party("customer", customer)
    ref = as_source_ref(order_ref, "return")

    if cost_of_goods_returned is None:
        cost = to_money(amount * ledger_setting("LEDGER_RETURN_COST_RATIO"))
    else:
        cost = to_money(cost_of_goods_returned)
        if cost < 0:
            raise ValidationError("Returned cost cannot be negative")

    returns_account = Account.objects.first_active("sales_returns") or require_account(
        "sales_revenue"
    )
    receivable = require_account("accounts_receivable")
    lines = [
        debit_line(returns_account, amount, f"Return {ref.number}".strip(), customer),
        credit_line(receivable, amount, f"Return credit to {customer.name}", customer),
    ]
    if cost > 0:
        inventory = require_account("inventory")
        cogs_account = require_account("cost_of_goods_sold")
        lines += [
            debit_line(inventory, cost, f"Returned stock {ref.number}".strip()),
            credit_line(cogs_account, cost, f"COGS reversal {ref.number}".strip()),
        ]

    return _post("return", date, f"Sales return {ref.number} - {customer.name}", lines, ref, actor)


@with_conflict_retry
def post_purchase(vendor, purchase_ref, amount, date=None, actor=None):
    """Dr Inventory / Cr Accounts Payable"""
    amount = _positive_amount(amount)
    vendor = get_party("vendor", vendor)
    ref = as_source_ref(purchase_ref, "purchase")

    inventory = require_account("inventory")
    payable = require_account("accounts_payable")
    lines = [
        debit_line(inventory, amount, f"Purchase {ref.number}".strip(), vendor),
        credit_line(payable, amount, f"Purchase from {vendor.name}", vendor),
    ]
    return _post("purchase", date, f"Purchase {ref.number} - {vendor.name}", lines, ref, actor)


@with_conflict_retry
def post_receipt(customer, payment_ref, amount, method="cash", cash_account=None, date=None,
                 actor=None):
    """Dr Cash/Bank / Cr Accounts Receivable"""
    amount = _positive_amount(amount)
    customer = get_party("customer", customer)
    ref = as_source_ref(payment_ref, "receipt")

    cash = resolve_cash_account(method, cash_account)
    receivable = require_account("accounts_receivable")
    lines = [
        debit_line(cash, amount, f"{method} received from {customer.name}", customer),
        credit_line(receivable, amount, f"Payment from {customer.name}", customer),
    ]
    return _post("receipt", date, f"Receipt {ref.number} - {customer.name}", lines, ref, actor)


@with_conflict_retry
def post_payment(vendor, payment_ref, amount, method="cash", cash_account=None, date=None,
                 actor=None):
    """Dr Accounts Payable / Cr Cash/Bank"""
    amount = _positive_amount(amount)
    vendor = get_party("vendor", vendor)
    ref = as_source_ref(payment_ref, "payment")

    payable = require_account("accounts_payable")
    cash = resolve_cash_account(method, cash_account)
    lines = [
        debit_line(payable, amount, f"Payment to {vendor.name}", vendor),
        credit_line(cash, amount, f"{method} paid to {vendor.name}", vendor),
    ]
    return _post("payment", date, f"Payment {ref.number} - {vendor.name}", lines, ref, actor)


@with_conflict_retry
def post_expense(expense, cash_account=None, actor=None):
    """Dr expense account / Cr Cash/Bank by the expense's payment method"""
    expense_id = getattr(expense, "pk", expense)
    expense = Expense.objects.select_related("expense_account").filter(pk=expense_id).first()
    if expense is None:
        raise NotFoundError(f"Expense {expense_id} does not exist.")
    amount = _positive_amount(expense.amount)

    expense_account = expense.expense_account
    if not expense_account.is_active:
        raise ValidationError(f"Account {expense_account.code} is inactive.")
    cash = resolve_cash_account(expense.payment_method, cash_account)
    description = expense.description or expense.category
    lines = [
        debit_line(expense_account, amount, description),
        credit_line(cash, amount, f"{expense.category} paid ({expense.payment_method})"),
    ]
    return _post(
        "expense",
        expense.expense_date,
        f"Expense {expense.expense_number} - {expense.category}",
        lines,
        as_source_ref(expense, "expense"),
        actor,
    )
