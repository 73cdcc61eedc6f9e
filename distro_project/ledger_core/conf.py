from decimal import Decimal
from django.conf import settings

# Engine knobs; each can be overridden in settings.py / the environment
DEFAULTS = {
    "LEDGER_BALANCE_TOLERANCE": Decimal("0.00"),
    "LEDGER_REPORT_TOLERANCE": Decimal("0.01"),
    "LEDGER_RETURN_COST_RATIO": Decimal("0.70"),
    "LEDGER_CONFLICT_RETRIES": 3,
    "LEDGER_JOURNAL_PREFIX": "JE",
}


def ledger_setting(name):
    value = getattr(settings, name, DEFAULTS[name])
    if isinstance(DEFAULTS[name], Decimal):
        return Decimal(str(value))
    return value
