import logging
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone

from ..actors import resolve_actor
from ..exceptions import (ConcurrencyConflictError, InsufficientStockError,
                          NotFoundError)
from ..models import InventoryTransaction, InventoryValuation, Product
from ..models.inventory import TRANSACTION_TYPES
from ..money import ZERO, to_money, to_quantity, to_unit_cost
from ..refs import as_source_ref

logger = logging.getLogger(__name__)

_TRANSACTION_TYPES = {key for key, _ in TRANSACTION_TYPES}


def _get_product(product, lock=False):
    product_id = getattr(product, "pk", product)
    qs = Product.objects.select_for_update() if lock else Product.objects
    try:
        return qs.get(pk=product_id)
    except Product.DoesNotExist:
        raise NotFoundError(f"Product {product_id} does not exist.")


def _check_type(transaction_type):
    if transaction_type not in _TRANSACTION_TYPES:
        raise ValidationError(f"Unknown inventory transaction type {transaction_type!r}")


def _record_movement(product, transaction_type, ref, actor, *, quantity_in=ZERO,
                     quantity_out=ZERO, unit_cost=ZERO, balance_after, remarks="",
                     transaction_date=None):
    source = as_source_ref(ref)
    movement = InventoryTransaction(
        product=product,
        product_name=product.name,
        product_sku=product.sku or "",
        transaction_type=transaction_type,
        quantity_in=quantity_in,
        quantity_out=quantity_out,
        unit_cost=unit_cost,
        total_cost=to_money((quantity_in or quantity_out) * unit_cost),
        balance_after=balance_after,
        reference_type=source.type,
        reference_id=source.id,
        reference_number=source.number,
        remarks=remarks[:400],
        transaction_date=transaction_date or timezone.localdate(),
        created_by_id=actor.id,
        created_by_name=actor.name,
    )
    movement.save()
    return movement


def _write_valuation(valuation, product, quantity, average_cost, movement, **product_fields):
    """Version-checked write of the valuation row plus the product's cached stock"""
    updated = InventoryValuation.objects.filter(
        pk=valuation.pk, version=valuation.version
    ).update(
        quantity_on_hand=quantity,
        average_cost=average_cost,
        total_value=to_money(quantity * average_cost),
        last_updated=timezone.now(),
        last_transaction=movement,
        version=F("version") + 1,
    )
    if updated == 0:
        raise ConcurrencyConflictError(
            f"Stock valuation of {product.name} changed during the movement."
        )
    Product.objects.filter(pk=product.pk).update(current_stock=quantity, **product_fields)


def weighted_average(old_quantity, old_average, quantity, unit_cost):
    """Average cost after bringing `quantity` in at `unit_cost`"""
    new_quantity = old_quantity + quantity
    if new_quantity <= 0:
        # nothing on hand to average over: keep the old cost
        return to_unit_cost(old_average)
    return to_unit_cost((old_quantity * old_average + quantity * unit_cost) / new_quantity)


# ------------------------------------
# Stock movements
# ------------------------------------
def add_stock(product, quantity, unit_cost, ref=None, actor=None,
              transaction_type="purchase", remarks="", transaction_date=None):
    """
    Bring stock in and re-average its cost.
    10 @ 100 then 10 @ 200 → 20 on hand @ 150.
    """
    quantity = to_quantity(quantity)
    unit_cost = to_unit_cost(unit_cost)
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than 0")
    if unit_cost < 0:
        raise ValidationError("Unit cost cannot be negative")
    _check_type(transaction_type)
    actor = resolve_actor(actor)

    with transaction.atomic():
        product = _get_product(product, lock=True)
        valuation, _ = InventoryValuation.objects.select_for_update().get_or_create(
            product=product
        )
        new_quantity = valuation.quantity_on_hand + quantity
        average_cost = weighted_average(
            valuation.quantity_on_hand, valuation.average_cost, quantity, unit_cost
        )
        movement = _record_movement(
            product,
            transaction_type,
            ref,
            actor,
            quantity_in=quantity,
            unit_cost=unit_cost,
            balance_after=new_quantity,
            remarks=remarks,
            transaction_date=transaction_date,
        )
        extra = {"cost_price": unit_cost} if transaction_type == "purchase" else {}
        _write_valuation(valuation, product, new_quantity, average_cost, movement, **extra)

    logger.info(
        "Stock in: %s +%s @ %s → %s on hand (avg %s)",
        product.name, quantity, unit_cost, new_quantity, average_cost,
    )
    return {
        "transaction": movement,
        "new_balance": new_quantity,
        "average_cost": average_cost,
    }


def remove_stock(product, quantity, ref=None, actor=None,
                 transaction_type="sale", remarks="", transaction_date=None):
    """
    Take stock out at the current average cost; the average itself
    does not move. The availability check and the write happen under the
    same row lock, and an over-removal leaves no trace.
    """
    quantity = to_quantity(quantity)
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than 0")
    _check_type(transaction_type)
    actor = resolve_actor(actor)

    with transaction.atomic():
        product = _get_product(product, lock=True)
        valuation = (
            InventoryValuation.objects.select_for_update().filter(product=product).first()
        )
        available = valuation.quantity_on_hand if valuation else Decimal("0")
        if valuation is None or quantity > available:
            raise InsufficientStockError(product.name, available, quantity)

        cost_at_removal = valuation.average_cost
        new_quantity = available - quantity
        movement = _record_movement(
            product,
            transaction_type,
            ref,
            actor,
            quantity_out=quantity,
            unit_cost=cost_at_removal,
            balance_after=new_quantity,
            remarks=remarks,
            transaction_date=transaction_date,
        )
        _write_valuation(valuation, product, new_quantity, cost_at_removal, movement)

    total_cost = to_money(quantity * cost_at_removal)
    logger.info(
        "Stock out: %s -%s @ %s → %s on hand",
        product.name, quantity, cost_at_removal, new_quantity,
    )
    return {
        "transaction": movement,
        "new_balance": new_quantity,
        "cost_at_removal": cost_at_removal,
        "total_cost": total_cost,
    }


def adjust_stock(product, new_quantity, reason="", actor=None, ref=None):
    """
    Set the quantity on hand to a counted figure. The difference is logged
    as an adjustment at the current average cost; the average is unchanged.
    """
    new_quantity = to_quantity(new_quantity)
    if new_quantity < 0:
        raise ValidationError("Stock cannot be adjusted below 0")
    actor = resolve_actor(actor)

    with transaction.atomic():
        product = _get_product(product, lock=True)
        valuation, _ = InventoryValuation.objects.select_for_update().get_or_create(
            product=product
        )
        old_quantity = valuation.quantity_on_hand
        difference = new_quantity - old_quantity
        movement = _record_movement(
            product,
            "adjustment",
            ref,
            actor,
            quantity_in=difference if difference > 0 else ZERO,
            quantity_out=-difference if difference < 0 else ZERO,
            unit_cost=valuation.average_cost,
            balance_after=new_quantity,
            remarks=reason or "Stock adjustment",
        )
        _write_valuation(valuation, product, new_quantity, valuation.average_cost, movement)

    logger.info(
        "Stock adjusted: %s %s → %s (%s)", product.name, old_quantity, new_quantity, reason
    )
    return {
        "transaction": movement,
        "old_quantity": old_quantity,
        "new_quantity": new_quantity,
        "difference": difference,
    }


# ------------------------------------
# Read helpers
# ------------------------------------
def get_stock_info(product):
    product = _get_product(product)
    valuation = InventoryValuation.objects.filter(product=product).first()
    return {
        "product": product,
        "current_stock": product.current_stock,
        "minimum_stock": product.minimum_stock,
        "average_cost": valuation.average_cost if valuation else Decimal("0"),
        "total_value": valuation.total_value if valuation else ZERO,
        "is_low_stock": product.current_stock <= product.minimum_stock,
        "last_updated": valuation.last_updated if valuation else None,
    }


def get_stock_movements(product, start_date=None, end_date=None, limit=50):
    """Newest first"""
    product = _get_product(product)
    qs = InventoryTransaction.objects.filter(product=product)
    if start_date:
        qs = qs.filter(transaction_date__gte=start_date)
    if end_date:
        qs = qs.filter(transaction_date__lte=end_date)
    qs = qs.order_by("-created_at", "-id")
    if limit:
        qs = qs[:limit]
    return list(qs)


def get_low_stock_products():
    return list(
        Product.objects.active()
        .filter(current_stock__lte=F("minimum_stock"))
        .order_by("current_stock", "name")
    )


def get_inventory_valuation():
    rows = (
        InventoryValuation.objects.select_related("product")
        .filter(quantity_on_hand__gt=0)
        .order_by("-total_value")
    )
    items = [
        {
            "product_id": row.product_id,
            "product_name": row.product.name,
            "sku": row.product.sku,
            "quantity_on_hand": row.quantity_on_hand,
            "average_cost": row.average_cost,
            "total_value": row.total_value,
        }
        for row in rows
    ]
    total = InventoryValuation.objects.aggregate(total=Sum("total_value"))["total"]
    return {
        "items": items,
        "total_items": len(items),
        "total_value": total or ZERO,
    }
