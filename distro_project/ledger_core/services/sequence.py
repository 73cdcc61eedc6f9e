from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..conf import ledger_setting
from ..models import SequenceCounter


# ------------------------------------
# Document numbering
# ------------------------------------
def next_sequence_value(key, period=""):
    """
    Atomically issue the next number for (key, period).
    The counter row is locked and bumped with an F() expression,
    two concurrent callers can never receive the same value.
    """
    with transaction.atomic():
        counter, _ = SequenceCounter.objects.select_for_update().get_or_create(
            key=key, period=period
        )
        SequenceCounter.objects.filter(pk=counter.pk).update(
            last_value=F("last_value") + 1, updated_at=timezone.now()
        )
        counter.refresh_from_db(fields=["last_value"])
        return counter.last_value


def next_journal_number(on_date=None):
    """JE-YYYYMM-00001, month taken from the posting day"""
    prefix = ledger_setting("LEDGER_JOURNAL_PREFIX")
    period = (on_date or timezone.localdate()).strftime("%Y%m")
    value = next_sequence_value(prefix, period)
    return f"{prefix}-{period}-{value:05d}"
