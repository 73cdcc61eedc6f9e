import logging
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..exceptions import NotFoundError
from ..models import Expense, Invoice, Purchase
from ..money import to_money
from ..refs import as_source_ref
from .composers import post_expense, post_purchase, post_sale
from .inventory import add_stock, remove_stock
from .retry import with_conflict_retry

logger = logging.getLogger(__name__)


def _lock(model, obj):
    obj_id = getattr(obj, "pk", obj)
    try:
        return model.objects.select_for_update().get(pk=obj_id)
    except model.DoesNotExist:
        raise NotFoundError(f"{model.__name__} {obj_id} does not exist.")


# ----------------------------------------------
# Invoice status update workflows
# ----------------------------------------------
"""Move invoice from draft → issued: stock out, cost frozen, sale posted."""


@with_conflict_retry
def issue_invoice(invoice, actor=None):
    with transaction.atomic():
        invoice = _lock(Invoice, invoice)
        if invoice.status != "draft":
            raise ValidationError(f"Cannot issue a {invoice.status} invoice.")
        lines = list(invoice.lines.select_related("product"))
        if not lines:
            raise ValidationError("Cannot issue invoice with no lines")

        ref = as_source_ref(invoice, "invoice")
        total_cost = Decimal("0.00")
        for line in lines:
            removed = remove_stock(
                line.product,
                line.quantity,
                ref,
                actor,
                transaction_type="sale",
                transaction_date=invoice.invoice_date,
            )
            # Freeze cost at the average of the moment of sale
            line.unit_cost = removed["cost_at_removal"]
            line.total_cost = removed["total_cost"]
            line.profit = to_money(line.line_total - line.total_cost)
            line.save(update_fields=["unit_cost", "total_cost", "profit"])
            total_cost += line.total_cost

        invoice.recalc_totals()
        invoice.total_cost = to_money(total_cost)
        invoice.gross_profit = to_money(invoice.grand_total - invoice.total_cost)

        entry = post_sale(
            invoice.customer,
            ref,
            invoice.grand_total,
            invoice.total_cost,
            invoice.invoice_date,
            actor,
        )
        invoice.status = "issued"
        invoice.journal_entry = entry
        invoice.issued_at = timezone.now()
        invoice.save()

    logger.info(
        "Issued invoice %s: total %s, cost %s, profit %s",
        invoice.invoice_number,
        invoice.grand_total,
        invoice.total_cost,
        invoice.gross_profit,
    )
    return invoice


"""Cancel a draft invoice; issued invoices are reversed through a return."""


def cancel_invoice(invoice):
    with transaction.atomic():
        invoice = _lock(Invoice, invoice)
        if invoice.status != "draft":
            raise ValidationError("Only draft invoices can be cancelled.")
        invoice.status = "cancelled"
        invoice.save(update_fields=["status"])
    return invoice


# ------------------------------------
# Purchase status update workflows
# ------------------------------------
"""Move purchase from draft → received: stock in at line cost, payable posted."""


@with_conflict_retry
def receive_purchase(purchase, actor=None):
    with transaction.atomic():
        purchase = _lock(Purchase, purchase)
        if purchase.status != "draft":
            raise ValidationError(f"Cannot receive a {purchase.status} purchase.")
        lines = list(purchase.lines.select_related("product"))
        if not lines:
            raise ValidationError("Cannot receive purchase with no lines")

        ref = as_source_ref(purchase, "purchase")
        for line in lines:
            add_stock(
                line.product,
                line.quantity,
                line.unit_cost,
                ref,
                actor,
                transaction_type="purchase",
                transaction_date=purchase.purchase_date,
            )

        purchase.recalc_totals()
        entry = post_purchase(
            purchase.vendor, ref, purchase.grand_total, purchase.purchase_date, actor
        )
        purchase.journal_entry = entry
        purchase.received_at = timezone.now()
        purchase.transition_to("received")

    logger.info("Received purchase %s: %s", purchase.purchase_number, purchase.grand_total)
    return purchase


# ------------------------------------
# Expense approval workflows
# ------------------------------------
"""Move expense from pending → approved and pay it out of cash/bank."""


def approve_expense(expense, actor=None, cash_account=None):
    with transaction.atomic():
        expense = _lock(Expense, expense)
        if expense.status != "pending":
            raise ValidationError(f"Cannot approve a {expense.status} expense.")
        entry = post_expense(expense, cash_account, actor)
        expense.status = "approved"
        expense.journal_entry = entry
        expense.approved_at = timezone.now()
        expense.save()
    return expense


def reject_expense(expense):
    with transaction.atomic():
        expense = _lock(Expense, expense)
        if expense.status != "pending":
            raise ValidationError(f"Cannot reject a {expense.status} expense.")
        expense.status = "rejected"
        expense.save(update_fields=["status"])
    return expense
