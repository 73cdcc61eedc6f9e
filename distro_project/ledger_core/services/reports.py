import datetime
import logging
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db.models import Count, Q, Sum
from django.utils import timezone
from django.utils.dateparse import parse_date

from ..conf import ledger_setting
from ..exceptions import NotFoundError
from ..models import (Account, CashBookEntry, Customer, DailyCashSummary,
                      Expense, InventoryValuation, Invoice, InvoiceLine,
                      JournalLine, LedgerEntry, Purchase, Vendor)
from ..money import ZERO, to_money
from .parties import PARTY_MODELS, get_party

logger = logging.getLogger(__name__)

# Balance sheet grouping
CURRENT_ASSET_SUBTYPES = ("cash", "bank", "accounts_receivable", "inventory")
CURRENT_LIABILITY_SUBTYPES = ("accounts_payable", "short_term_liability")


def _margin(amount, base):
    if base <= 0:
        return Decimal("0.00")
    return to_money(amount / base * 100)


def _as_date(value):
    """Accept a date or an ISO string ("2025-03-10"); None stays None"""
    if value is None or isinstance(value, datetime.date):
        return value
    parsed = parse_date(str(value))
    if parsed is None:
        raise ValidationError(f"Invalid date {value!r}")
    return parsed


def _get_account(account):
    account_id = getattr(account, "pk", account)
    try:
        return Account.objects.get(pk=account_id)
    except Account.DoesNotExist:
        raise NotFoundError(f"Account {account_id} does not exist.")


def _ledger_balances(as_of_date=None, **filters):
    """
    {account_id: balance} replayed from ledger entries (signed by normal side),
    optionally only up to and including as_of_date.
    """
    qs = LedgerEntry.objects.filter(**filters)
    if as_of_date:
        qs = qs.filter(entry_date__lte=as_of_date)
    rows = qs.values("account_id", "account__normal_balance").annotate(
        debit=Sum("debit"), credit=Sum("credit")
    )
    balances = {}
    for row in rows:
        change = (row["debit"] or ZERO) - (row["credit"] or ZERO)
        if row["account__normal_balance"] == "credit":
            change = -change
        balances[row["account_id"]] = change
    return balances


# ------------------------------------
# Trial balance
# ------------------------------------
def get_trial_balance(as_of_date=None):
    """
    Every account with a non-zero balance placed in the debit or credit
    column: its normal side while positive, the other side when negative.
    Without a date the cached balances are used; with one the ledger is
    replayed up to that day.
    """
    as_of_date = _as_date(as_of_date)
    accounts = Account.objects.order_by("code")
    replayed = _ledger_balances(as_of_date) if as_of_date else None

    rows = []
    total_debit = ZERO
    total_credit = ZERO
    for account in accounts:
        if replayed is not None:
            balance = replayed.get(account.pk, ZERO)
        else:
            balance = account.current_balance
        if balance == 0:
            continue

        debit = credit = ZERO
        if account.normal_balance == "debit":
            if balance >= 0:
                debit = balance
            else:
                credit = -balance
        else:
            if balance >= 0:
                credit = balance
            else:
                debit = -balance

        total_debit += debit
        total_credit += credit
        rows.append(
            {
                "account_id": account.pk,
                "code": account.code,
                "name": account.name,
                "account_type": account.account_type,
                "debit": debit,
                "credit": credit,
            }
        )

    is_balanced = abs(total_debit - total_credit) <= ledger_setting("LEDGER_BALANCE_TOLERANCE")
    if not is_balanced:
        logger.warning(
            "Trial balance out by %s (Dr %s / Cr %s)",
            total_debit - total_credit,
            total_debit,
            total_credit,
        )
    return {
        "as_of_date": as_of_date or timezone.localdate(),
        "accounts": rows,
        "total_debit": to_money(total_debit),
        "total_credit": to_money(total_credit),
        "is_balanced": is_balanced,
    }


# ------------------------------------
# Profit & Loss
# ------------------------------------
def get_profit_and_loss(start_date=None, end_date=None):
    """
    Income statement built from the source documents:
    issued invoices for sales and frozen cost, "return" journals for
    returns and their COGS reversal, approved expenses by category,
    received purchases for reference.
    """
    today = timezone.localdate()
    start_date = _as_date(start_date) or datetime.date(today.year, 1, 1)
    end_date = _as_date(end_date) or today

    invoices = Invoice.objects.filter(
        status="issued", invoice_date__gte=start_date, invoice_date__lte=end_date
    )
    sales = invoices.aggregate(
        grand_total=Sum("grand_total"),
        discount=Sum("total_discount"),
        cost=Sum("total_cost"),
        count=Count("id"),
    )
    items_sold = InvoiceLine.objects.filter(invoice__in=invoices).count()

    discounts = sales["discount"] or ZERO
    # gross = before discount; gross - discount is what was posted as revenue
    gross_sales = (sales["grand_total"] or ZERO) + discounts

    # Returns posted through the composer (entry_type "return"), not reversed
    return_lines = JournalLine.objects.filter(
        journal__entry_type="return",
        journal__status="posted",
        journal__entry_date__gte=start_date,
        journal__entry_date__lte=end_date,
    )
    returns = return_lines.aggregate(
        sales_returns=Sum(
            "debit",
            filter=Q(account__account_subtype__in=("sales_returns", "sales_revenue")),
        ),
        cogs_reversed=Sum("credit", filter=Q(account__account_subtype="cost_of_goods_sold")),
    )
    sales_returns = returns["sales_returns"] or ZERO
    cogs_reversed = returns["cogs_reversed"] or ZERO

    net_sales = gross_sales - discounts - sales_returns
    cogs = (sales["cost"] or ZERO) - cogs_reversed
    gross_profit = net_sales - cogs

    expense_rows = (
        Expense.objects.filter(
            status="approved", expense_date__gte=start_date, expense_date__lte=end_date
        )
        .values("category")
        .annotate(amount=Sum("amount"), count=Count("id"))
        .order_by("-amount")
    )
    expense_items = [
        {
            "category": row["category"] or "Uncategorized",
            "amount": row["amount"],
            "count": row["count"],
        }
        for row in expense_rows
    ]
    total_expenses = sum((row["amount"] for row in expense_items), ZERO)

    purchases = Purchase.objects.filter(
        status__in=("received", "completed"),
        purchase_date__gte=start_date,
        purchase_date__lte=end_date,
    ).aggregate(total=Sum("grand_total"), count=Count("id"))

    operating_profit = gross_profit - total_expenses
    net_profit = operating_profit

    return {
        "period": {"start_date": start_date, "end_date": end_date},
        "revenue": {
            "gross_sales": to_money(gross_sales),
            "sales_returns": to_money(sales_returns),
            "discounts": to_money(discounts),
            "net_sales": to_money(net_sales),
            "invoice_count": sales["count"] or 0,
            "items_sold": items_sold,
        },
        "cost_of_goods_sold": {
            "purchases": purchases["total"] or ZERO,
            "purchase_count": purchases["count"] or 0,
            "cogs": to_money(cogs),
            "cogs_reversed": to_money(cogs_reversed),
        },
        "gross_profit": {
            "amount": to_money(gross_profit),
            "margin": _margin(gross_profit, net_sales),
        },
        "operating_expenses": {"items": expense_items, "total": to_money(total_expenses)},
        "operating_profit": {"amount": to_money(operating_profit)},
        "net_profit": {
            "amount": to_money(net_profit),
            "margin": _margin(net_profit, net_sales),
            "is_profit": net_profit >= 0,
        },
        "summary": {
            "total_revenue": to_money(net_sales),
            "total_cogs": to_money(cogs),
            "total_expenses": to_money(total_expenses),
            "gross_profit": to_money(gross_profit),
            "net_profit": to_money(net_profit),
        },
    }


# ------------------------------------
# Balance sheet
# ------------------------------------
def _section(items):
    return {"items": items, "total": to_money(sum((i["balance"] for i in items), ZERO))}


def get_balance_sheet(as_of_date=None):
    """
    Assets = Liabilities + Equity from the cached balances.
    The primary receivable, payable and inventory accounts show the live
    sub-ledger totals (customers owing us, vendors we owe, stock valuation);
    contra accounts reduce their section; the residual is plugged into
    retained earnings.
    """
    live_totals = {
        "accounts_receivable": Customer.objects.filter(current_balance__gt=0).aggregate(
            total=Sum("current_balance")
        )["total"]
        or ZERO,
        "accounts_payable": Vendor.objects.filter(current_balance__gt=0).aggregate(
            total=Sum("current_balance")
        )["total"]
        or ZERO,
        "inventory": InventoryValuation.objects.aggregate(total=Sum("total_value"))["total"]
        or ZERO,
    }
    primary = {
        subtype: getattr(Account.objects.first_active(subtype), "pk", None)
        for subtype in live_totals
    }

    sections = {"asset": [], "liability": [], "equity": []}
    natural_side = {"asset": "debit", "liability": "credit", "equity": "credit"}

    for account in Account.objects.active().filter(
        account_type__in=sections.keys()
    ).order_by("code"):
        subtype = account.account_subtype
        if subtype in live_totals:
            # the live figure replaces the whole subtype, once
            if account.pk != primary[subtype]:
                continue
            balance = live_totals[subtype]
        else:
            balance = account.current_balance
            # contra accounts (accumulated depreciation, drawings) reduce the section
            if account.normal_balance != natural_side[account.account_type]:
                balance = -balance
        if balance == 0:
            continue
        sections[account.account_type].append(
            {
                "account_id": account.pk,
                "code": account.code,
                "name": account.name,
                "subtype": subtype,
                "balance": to_money(balance),
            }
        )

    total_assets = sum((a["balance"] for a in sections["asset"]), ZERO)
    total_liabilities = sum((a["balance"] for a in sections["liability"]), ZERO)
    total_equity = sum((a["balance"] for a in sections["equity"]), ZERO)

    # Residual (unclosed profit) goes to retained earnings
    residual = total_assets - total_liabilities - total_equity
    if residual != 0:
        existing = next(
            (e for e in sections["equity"] if e["subtype"] == "retained_earnings"), None
        )
        if existing:
            existing["balance"] = to_money(existing["balance"] + residual)
        else:
            sections["equity"].append(
                {
                    "account_id": None,
                    "code": "",
                    "name": "Retained Earnings",
                    "subtype": "retained_earnings",
                    "balance": to_money(residual),
                }
            )
        total_equity += residual

    assets = sections["asset"]
    liabilities = sections["liability"]
    total_liabilities_and_equity = total_liabilities + total_equity
    is_balanced = abs(total_assets - total_liabilities_and_equity) <= ledger_setting(
        "LEDGER_REPORT_TOLERANCE"
    )
    return {
        "as_of_date": as_of_date or timezone.localdate(),
        "assets": {
            "current_assets": _section(
                [a for a in assets if a["subtype"] in CURRENT_ASSET_SUBTYPES]
            ),
            "fixed_assets": _section([a for a in assets if a["subtype"] == "fixed_asset"]),
            "other_assets": _section([a for a in assets if a["subtype"] == "other_asset"]),
            "total_assets": to_money(total_assets),
        },
        "liabilities": {
            "current_liabilities": _section(
                [l for l in liabilities if l["subtype"] in CURRENT_LIABILITY_SUBTYPES]
            ),
            "long_term_liabilities": _section(
                [l for l in liabilities if l["subtype"] == "long_term_liability"]
            ),
            "total_liabilities": to_money(total_liabilities),
        },
        "equity": {"items": sections["equity"], "total_equity": to_money(total_equity)},
        "total_liabilities_and_equity": to_money(total_liabilities_and_equity),
        "is_balanced": is_balanced,
    }


# ------------------------------------
# Ledgers
# ------------------------------------
def _entry_row(entry):
    return {
        "date": entry.entry_date,
        "journal_number": entry.journal_number,
        "description": entry.description,
        "debit": entry.debit,
        "credit": entry.credit,
        "running_balance": entry.running_balance,
        "party_type": entry.party_type,
        "party_name": entry.party_name,
        "source_type": entry.source_type,
        "source_number": entry.source_number,
    }


def get_account_ledger(account, start_date=None, end_date=None):
    """Opening balance before start_date, the entries in range and the closing balance"""
    start_date, end_date = _as_date(start_date), _as_date(end_date)
    account = _get_account(account)
    opening = ZERO
    if start_date:
        opening = _ledger_balances(
            start_date - datetime.timedelta(days=1), account=account
        ).get(account.pk, ZERO)

    entries = LedgerEntry.objects.for_account(account).between(start_date, end_date)
    entries = list(entries.order_by("entry_date", "created_at", "id"))
    total_debit = sum((e.debit for e in entries), ZERO)
    total_credit = sum((e.credit for e in entries), ZERO)
    closing = opening + account.signed_change(total_debit, total_credit)
    return {
        "account": account,
        "opening_balance": to_money(opening),
        "entries": [_entry_row(e) for e in entries],
        "total_debit": to_money(total_debit),
        "total_credit": to_money(total_credit),
        "closing_balance": to_money(closing),
    }


def get_cash_book(account=None, start_date=None, end_date=None):
    """Cash book rows and daily summaries, for one cash/bank account or all of them"""
    start_date, end_date = _as_date(start_date), _as_date(end_date)
    entries = CashBookEntry.objects.all()
    summaries = DailyCashSummary.objects.all()
    if account is not None:
        account = _get_account(account)
        if not account.is_cash_or_bank:
            raise ValidationError(f"Account {account.code} is not a cash or bank account.")
        entries = entries.filter(account=account)
        summaries = summaries.filter(cash_account=account)
    entries = entries.between(start_date, end_date)
    if start_date:
        summaries = summaries.filter(date__gte=start_date)
    if end_date:
        summaries = summaries.filter(date__lte=end_date)

    entries = list(entries.order_by("entry_date", "created_at", "id"))
    return {
        "entries": [
            {
                "date": e.entry_date,
                "account_name": e.account_name,
                "is_bank": e.is_bank,
                "journal_number": e.journal_number,
                "description": e.description,
                "cash_in": e.cash_in,
                "cash_out": e.cash_out,
                "running_balance": e.running_balance,
                "party_name": e.party_name,
            }
            for e in entries
        ],
        "total_in": to_money(sum((e.cash_in for e in entries), ZERO)),
        "total_out": to_money(sum((e.cash_out for e in entries), ZERO)),
        "summaries": list(summaries.order_by("cash_account_id", "date")),
    }


def get_party_ledger(kind, party_id):
    """A customer's receivable or vendor's payable history with a running balance"""
    if kind not in PARTY_MODELS:
        raise ValidationError(f"Unknown party kind {kind!r}")
    party = get_party(kind, party_id)
    _, subtype = PARTY_MODELS[kind]

    entries = (
        LedgerEntry.objects.for_party(kind, party.pk)
        .filter(account__account_subtype=subtype)
        .select_related("account")
        .in_posting_order()
    )
    rows = []
    balance = ZERO
    for entry in entries:
        balance += entry.account.signed_change(entry.debit, entry.credit)
        row = _entry_row(entry)
        row["party_balance"] = to_money(balance)
        rows.append(row)
    return {
        "party": party,
        "entries": rows,
        "balance": to_money(balance),
        "cached_balance": party.current_balance,
    }


def _open_balances(model):
    parties = list(model.objects.filter(current_balance__gt=0).order_by("-current_balance"))
    return {
        "parties": [
            {"id": p.pk, "code": p.code, "name": p.name, "balance": p.current_balance}
            for p in parties
        ],
        "count": len(parties),
        "total": to_money(sum((p.current_balance for p in parties), ZERO)),
    }


def get_receivables():
    """Customers that owe us"""
    return _open_balances(Customer)


def get_payables():
    """Vendors we owe"""
    return _open_balances(Vendor)
