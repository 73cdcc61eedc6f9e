from django.db import models


class SequenceCounter(models.Model):
    """
    Last number issued per (key, period), e.g. ("JE", "202501") → 42.
    Incremented in place under a row lock, never derived by counting rows.
    """

    key = models.CharField(max_length=40)
    period = models.CharField(max_length=20, blank=True, default="")
    last_value = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["key", "period"], name="uq_sequence_key_period")
        ]

    def __str__(self):
        return f"{self.key}/{self.period}: {self.last_value}"
