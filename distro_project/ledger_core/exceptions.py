class LedgerError(Exception):
    """Base class for every error raised by the posting engine."""
    pass


class UnbalancedEntryError(LedgerError):
    """Raised when a JournalEntry fails double-entry balance check."""

    def __init__(self, total_debit, total_credit):
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"Journal not balanced: debits={total_debit}, credits={total_credit}"
        )


class AlreadyPostedDifferentPayload(LedgerError):
    """Raised when a source document was already posted with a different payload"""
    pass


class MissingAccountError(LedgerError):
    """Raised when a required Chart of Accounts entry is not configured."""

    def __init__(self, subtype):
        self.subtype = subtype
        super().__init__(f"Required account not found in Chart of Accounts: {subtype}")


class InsufficientStockError(LedgerError):
    """Raised when a removal asks for more than the quantity on hand."""

    def __init__(self, product_name, available, requested):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )


class NotFoundError(LedgerError):
    """Raised when a referenced product, account or journal entry does not exist."""
    pass


class ConcurrencyConflictError(LedgerError):
    """Raised when a versioned row changed between read and write.
    Safe to retry the whole composed operation."""
    pass
