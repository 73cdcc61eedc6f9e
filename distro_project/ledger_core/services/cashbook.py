import logging
from django.db import transaction
from django.db.models import Count, Sum

from ..models import CashBookEntry, DailyCashSummary
from ..money import ZERO, to_money

logger = logging.getLogger(__name__)


def _recompute_day(cash_account, day):
    # opening = closing of the latest earlier summarized day
    previous = (
        DailyCashSummary.objects.filter(cash_account=cash_account, date__lt=day)
        .order_by("-date")
        .first()
    )
    opening = previous.closing_balance if previous else ZERO

    aggs = CashBookEntry.objects.filter(account=cash_account, entry_date=day).aggregate(
        total_in=Sum("cash_in"),
        total_out=Sum("cash_out"),
        count=Count("id"),
    )
    total_in = aggs["total_in"] or ZERO
    total_out = aggs["total_out"] or ZERO

    summary, _ = DailyCashSummary.objects.update_or_create(
        cash_account=cash_account,
        date=day,
        defaults={
            "opening_balance": opening,
            "total_in": total_in,
            "total_out": total_out,
            "closing_balance": to_money(opening + total_in - total_out),
            "transaction_count": aggs["count"] or 0,
        },
    )
    return summary


def refresh_daily_summary(cash_account, date):
    """
    Upsert the (account, day) summary from the cash book, then walk every
    later summarized day for that account so a back-dated entry keeps the
    chain closing(day) == opening(next day). Idempotent.
    """
    with transaction.atomic():
        summary = _recompute_day(cash_account, date)
        later_days = list(
            DailyCashSummary.objects.filter(cash_account=cash_account, date__gt=date)
            .order_by("date")
            .values_list("date", flat=True)
        )
        for day in later_days:
            _recompute_day(cash_account, day)
    return summary


def rebuild_daily_summaries(cash_account):
    """Recompute the whole summary chain of one cash/bank account from its cash book"""
    with transaction.atomic():
        days = list(
            CashBookEntry.objects.filter(account=cash_account)
            .order_by("entry_date")
            .values_list("entry_date", flat=True)
            .distinct()
        )
        # days without cash book rows have no business in the chain
        DailyCashSummary.objects.filter(cash_account=cash_account).exclude(
            date__in=days
        ).delete()
        for day in days:
            _recompute_day(cash_account, day)
    logger.info("Rebuilt %d daily cash summaries for %s", len(days), cash_account.code)
    return len(days)
