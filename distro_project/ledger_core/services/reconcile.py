"""
Cached balances (Account.current_balance, InventoryValuation, Product.current_stock,
Customer/Vendor.current_balance) are materialized views of the append-only logs.
These functions replay the logs, report every drift, and with fix=True rewrite
the caches from the replay.
"""
import logging
from decimal import Decimal
from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone

from ..models import (Account, InventoryTransaction, InventoryValuation,
                      LedgerEntry, Product)
from ..money import ZERO, to_money
from .inventory import weighted_average
from .parties import PARTY_MODELS

logger = logging.getLogger(__name__)


def reconcile_account_balances(fix=False):
    sums = {
        row["account_id"]: row
        for row in LedgerEntry.objects.values("account_id").annotate(
            debit=Sum("debit"), credit=Sum("credit")
        )
    }
    discrepancies = []
    with transaction.atomic():
        for account in Account.objects.select_for_update().order_by("pk"):
            row = sums.get(account.pk)
            expected = ZERO
            if row:
                expected = to_money(account.signed_change(row["debit"], row["credit"]))
            if expected == account.current_balance:
                continue
            discrepancies.append(
                {
                    "account_id": account.pk,
                    "code": account.code,
                    "name": account.name,
                    "cached": account.current_balance,
                    "expected": expected,
                    "difference": expected - account.current_balance,
                }
            )
            logger.warning(
                "Account %s cached balance %s, ledger says %s",
                account.code,
                account.current_balance,
                expected,
            )
            if fix:
                Account.objects.filter(pk=account.pk).update(
                    current_balance=expected, version=F("version") + 1
                )
    return discrepancies


def _replay_stock(product):
    """Quantity and average cost rebuilt from the product's movements"""
    quantity = Decimal("0")
    average = Decimal("0")
    last = None
    for movement in InventoryTransaction.objects.filter(product=product).order_by(
        "created_at", "id"
    ):
        if movement.quantity_in > 0:
            average = weighted_average(
                quantity, average, movement.quantity_in, movement.unit_cost
            )
            quantity += movement.quantity_in
        quantity -= movement.quantity_out
        last = movement
    return quantity, average, last


def reconcile_inventory_valuations(fix=False):
    discrepancies = []
    with transaction.atomic():
        for product in Product.objects.select_for_update().order_by("pk"):
            quantity, average, last = _replay_stock(product)
            valuation = (
                InventoryValuation.objects.select_for_update().filter(product=product).first()
            )
            cached_quantity = valuation.quantity_on_hand if valuation else Decimal("0")
            cached_average = valuation.average_cost if valuation else Decimal("0")
            if last is None and valuation is None and product.current_stock == 0:
                continue
            if (
                cached_quantity == quantity
                and cached_average == average
                and product.current_stock == quantity
            ):
                continue

            discrepancies.append(
                {
                    "product_id": product.pk,
                    "name": product.name,
                    "cached_quantity": cached_quantity,
                    "expected_quantity": quantity,
                    "cached_average_cost": cached_average,
                    "expected_average_cost": average,
                    "product_stock": product.current_stock,
                }
            )
            logger.warning(
                "Stock of %s cached %s @ %s (product %s), movements say %s @ %s",
                product.name,
                cached_quantity,
                cached_average,
                product.current_stock,
                quantity,
                average,
            )
            if fix:
                if valuation is None:
                    valuation = InventoryValuation.objects.create(product=product)
                InventoryValuation.objects.filter(pk=valuation.pk).update(
                    quantity_on_hand=quantity,
                    average_cost=average,
                    total_value=to_money(quantity * average),
                    last_updated=timezone.now(),
                    last_transaction=last,
                    version=F("version") + 1,
                )
                Product.objects.filter(pk=product.pk).update(current_stock=quantity)
    return discrepancies


def reconcile_party_balances(fix=False):
    discrepancies = []
    with transaction.atomic():
        for kind, (model, subtype) in PARTY_MODELS.items():
            rows = (
                LedgerEntry.objects.filter(party_type=kind, account__account_subtype=subtype)
                .values("party_id", "account__normal_balance")
                .annotate(debit=Sum("debit"), credit=Sum("credit"))
            )
            expected_by_party = {}
            for row in rows:
                change = (row["debit"] or ZERO) - (row["credit"] or ZERO)
                if row["account__normal_balance"] == "credit":
                    change = -change
                expected_by_party[row["party_id"]] = (
                    expected_by_party.get(row["party_id"], ZERO) + change
                )

            for party in model.objects.select_for_update().order_by("pk"):
                expected = to_money(expected_by_party.get(party.pk, ZERO))
                if expected == party.current_balance:
                    continue
                discrepancies.append(
                    {
                        "kind": kind,
                        "party_id": party.pk,
                        "name": party.name,
                        "cached": party.current_balance,
                        "expected": expected,
                        "difference": expected - party.current_balance,
                    }
                )
                logger.warning(
                    "%s %s cached balance %s, ledger says %s",
                    kind.title(),
                    party.name,
                    party.current_balance,
                    expected,
                )
                if fix:
                    model.objects.filter(pk=party.pk).update(current_balance=expected)
    return discrepancies
