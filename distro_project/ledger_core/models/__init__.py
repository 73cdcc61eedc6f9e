from .account import ACCOUNT_SUBTYPES, ACCOUNT_TYPES, NORMAL_BALANCE, Account
from .cashbook import PAYMENT_METHODS, CashBookEntry, DailyCashSummary
from .expense import Expense
from .inventory import TRANSACTION_TYPES, InventoryTransaction, InventoryValuation
from .invoice import Invoice, InvoiceLine
from .journal import ENTRY_TYPES, JournalEntry, JournalLine
from .ledger import LedgerEntry
from .party import PARTY_TYPES, Customer, Vendor
from .product import Product
from .purchase import Purchase, PurchaseLine
from .sequence import SequenceCounter

__all__ = [
    "ACCOUNT_SUBTYPES",
    "ACCOUNT_TYPES",
    "ENTRY_TYPES",
    "NORMAL_BALANCE",
    "PARTY_TYPES",
    "PAYMENT_METHODS",
    "TRANSACTION_TYPES",
    "Account",
    "CashBookEntry",
    "Customer",
    "DailyCashSummary",
    "Expense",
    "InventoryTransaction",
    "InventoryValuation",
    "Invoice",
    "InvoiceLine",
    "JournalEntry",
    "JournalLine",
    "LedgerEntry",
    "Product",
    "Purchase",
    "PurchaseLine",
    "SequenceCounter",
    "Vendor",
]
