import functools
import logging

from ..conf import ledger_setting
from ..exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)


def with_conflict_retry(func):
    """
    Re-run a composed posting when a versioned row moved underneath it.
    The wrapped function must open its own transaction.atomic() block
    so a failed attempt leaves nothing behind.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        retries = max(0, int(ledger_setting("LEDGER_CONFLICT_RETRIES")))
        attempt = 0
        while True:
            try:
                return func(*args, **kwargs)
            except ConcurrencyConflictError as exc:
                if attempt >= retries:
                    logger.error(
                        "%s gave up after %d retries: %s", func.__name__, retries, exc
                    )
                    raise
                attempt += 1
                logger.warning(
                    "%s hit a concurrency conflict, retry %d/%d: %s",
                    func.__name__,
                    attempt,
                    retries,
                    exc,
                )

    return wrapper
