from django.core.exceptions import ValidationError
from django.db import models


class AppendOnlyModel(models.Model):
    """
    Log rows (ledger entries, cash book entries, stock movements).
    Written once, never updated; deletes are blocked in signals.py
    so queryset.delete() is covered as well.
    """

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ValidationError(
                f"{self.__class__.__name__} is append-only and cannot be modified."
            )
        # clean()+field validation always run on insert
        self.full_clean()
        return super().save(*args, **kwargs)


class VersionedModel(models.Model):
    """
    Rows holding cached running totals (account balances, stock valuations).
    `version` is bumped by every conditional UPDATE; a writer holding a
    stale version updates 0 rows and gets ConcurrencyConflictError.
    """

    version = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True
