from django.core.exceptions import ValidationError
from django.db.models.signals import post_delete, post_save, pre_delete
from django.dispatch import receiver

from .models import (Account, CashBookEntry, InventoryTransaction, Invoice,
                     InvoiceLine, JournalEntry, JournalLine, LedgerEntry,
                     Purchase, PurchaseLine)

"""Block deletion if account has ever been used in a journal line."""


# pre_delete signal auto-fires just before Django deletes a model instance,
# also for queryset.delete()
@receiver(pre_delete, sender=Account)
def prevent_delete_account_with_journal_lines(sender, instance, **kwargs):
    if JournalLine.objects.filter(account=instance).exists():
        raise ValidationError(
            "Cannot delete account used in journal lines. Deactivate it instead."
        )


"""Posted journals and the logs derived from them are permanent."""


@receiver(pre_delete, sender=JournalEntry)
@receiver(pre_delete, sender=JournalLine)
def prevent_delete_posted_journal(sender, instance, **kwargs):
    raise ValidationError(
        f"Cannot delete {sender.__name__}: posted journals are reversed, not deleted."
    )


@receiver(pre_delete, sender=LedgerEntry)
@receiver(pre_delete, sender=CashBookEntry)
@receiver(pre_delete, sender=InventoryTransaction)
def prevent_delete_append_only(sender, instance, **kwargs):
    raise ValidationError(f"{sender.__name__} is append-only and cannot be deleted.")


"""
    Recalculate document totals when a line is added/updated/removed.
    Use update via model methods to keep validation/consistency.
"""


@receiver((post_save, post_delete), sender=InvoiceLine)
def invoice_line_changed(sender, instance, **kwargs):
    try:
        inv = Invoice.objects.get(pk=instance.invoice_id)
    except Invoice.DoesNotExist:
        return
    # issued invoices carry frozen totals
    if inv.status != "draft":
        return
    inv.recalc_totals()
    inv.save(update_fields=["subtotal", "grand_total"])


@receiver((post_save, post_delete), sender=PurchaseLine)
def purchase_line_changed(sender, instance, **kwargs):
    try:
        purchase = Purchase.objects.get(pk=instance.purchase_id)
    except Purchase.DoesNotExist:
        return
    if purchase.status != "draft":
        return
    purchase.recalc_totals()
    purchase.save(update_fields=["subtotal", "grand_total"])
