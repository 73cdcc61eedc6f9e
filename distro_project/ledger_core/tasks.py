import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def reconcile_cached_balances(fix=False):
    """Replay ledger and stock logs against every cached balance"""
    # import services lazily to avoid circular imports at module import time
    from .services import (reconcile_account_balances,
                           reconcile_inventory_valuations,
                           reconcile_party_balances)

    result = {
        "accounts": len(reconcile_account_balances(fix=fix)),
        "inventory": len(reconcile_inventory_valuations(fix=fix)),
        "parties": len(reconcile_party_balances(fix=fix)),
    }
    # result looks like: {"accounts": 0, "inventory": 1, "parties": 0}
    if any(result.values()):
        logger.warning("Reconciliation found discrepancies: %s (fix=%s)", result, fix)
    else:
        logger.info("Reconciliation clean")
    return result


@shared_task
def rebuild_cash_summaries():
    """Recompute the daily summary chain of every cash and bank account"""
    from .models import Account
    from .services import rebuild_daily_summaries

    rebuilt = {}
    for account in Account.objects.cash_or_bank().order_by("code"):
        rebuilt[account.code] = rebuild_daily_summaries(account)
    return rebuilt
