from django.core.management.base import BaseCommand
from django.db import transaction

from ledger_core.models import Account

# code, name, type, subtype, normal balance, flags, parent code
CHART_OF_ACCOUNTS = [
    ("1000", "Current Assets", "asset", "other_asset", "debit", {}, None),
    ("1100", "Cash in Hand", "asset", "cash", "debit", {"is_cash_account": True}, "1000"),
    ("1110", "Petty Cash", "asset", "cash", "debit", {"is_cash_account": True}, "1000"),
    ("1200", "Bank Accounts", "asset", "bank", "debit", {}, "1000"),
    ("1210", "Main Bank Account", "asset", "bank", "debit", {"is_bank_account": True}, "1200"),
    ("1300", "Accounts Receivable", "asset", "accounts_receivable", "debit",
     {"is_control_account": True}, "1000"),
    ("1310", "Trade Debtors", "asset", "accounts_receivable", "debit", {}, "1300"),
    ("1400", "Inventory", "asset", "inventory", "debit", {"is_control_account": True}, "1000"),
    ("1410", "Finished Goods", "asset", "inventory", "debit", {}, "1400"),
    ("1500", "Prepaid Expenses", "asset", "other_asset", "debit", {}, "1000"),
    ("1600", "Fixed Assets", "asset", "fixed_asset", "debit", {}, None),
    ("1610", "Furniture & Fixtures", "asset", "fixed_asset", "debit", {}, "1600"),
    ("1620", "Vehicles", "asset", "fixed_asset", "debit", {}, "1600"),
    ("1630", "Equipment", "asset", "fixed_asset", "debit", {}, "1600"),
    ("1700", "Accumulated Depreciation", "asset", "fixed_asset", "credit", {}, "1600"),
    ("2000", "Current Liabilities", "liability", "short_term_liability", "credit", {}, None),
    ("2100", "Accounts Payable", "liability", "accounts_payable", "credit",
     {"is_control_account": True}, "2000"),
    ("2110", "Trade Creditors", "liability", "accounts_payable", "credit", {}, "2100"),
    ("2200", "Accrued Expenses", "liability", "short_term_liability", "credit", {}, "2000"),
    ("2300", "Tax Payable", "liability", "short_term_liability", "credit", {}, "2000"),
    ("2400", "Short-term Loans", "liability", "short_term_liability", "credit", {}, "2000"),
    ("2500", "Long-term Loans", "liability", "long_term_liability", "credit", {}, None),
    ("3000", "Equity", "equity", "capital", "credit", {}, None),
    ("3100", "Owner's Capital", "equity", "capital", "credit", {}, "3000"),
    ("3200", "Owner's Drawings", "equity", "drawings", "debit", {}, "3000"),
    ("3300", "Retained Earnings", "equity", "retained_earnings", "credit", {}, "3000"),
    ("4000", "Revenue", "income", "sales_revenue", "credit", {}, None),
    ("4100", "Sales Revenue", "income", "sales_revenue", "credit",
     {"is_control_account": True}, "4000"),
    ("4110", "Product Sales", "income", "sales_revenue", "credit", {}, "4100"),
    ("4200", "Sales Returns", "income", "sales_returns", "debit", {}, "4000"),
    ("4300", "Sales Discounts", "income", "sales_discounts", "debit", {}, "4000"),
    ("4500", "Other Income", "income", "other_income", "credit", {}, "4000"),
    ("5000", "Cost of Goods Sold", "expense", "cost_of_goods_sold", "debit", {}, None),
    ("5100", "Purchase Expenses", "expense", "cost_of_goods_sold", "debit", {}, "5000"),
    ("5200", "Freight Inward", "expense", "cost_of_goods_sold", "debit", {}, "5000"),
    ("5300", "Purchase Returns", "expense", "cost_of_goods_sold", "credit", {}, "5000"),
    ("5400", "Inventory Adjustments", "expense", "cost_of_goods_sold", "debit", {}, "5000"),
    ("6000", "Operating Expenses", "expense", "operating_expense", "debit", {}, None),
    ("6100", "Salaries & Wages", "expense", "operating_expense", "debit", {}, "6000"),
    ("6200", "Rent Expense", "expense", "operating_expense", "debit", {}, "6000"),
    ("6300", "Utilities", "expense", "operating_expense", "debit", {}, "6000"),
    ("6400", "Transport & Delivery", "expense", "operating_expense", "debit", {}, "6000"),
    ("6500", "Office Supplies", "expense", "operating_expense", "debit", {}, "6000"),
    ("6600", "Repairs & Maintenance", "expense", "operating_expense", "debit", {}, "6000"),
    ("6700", "Depreciation Expense", "expense", "operating_expense", "debit", {}, "6000"),
    ("6800", "Bank Charges", "expense", "financial_expense", "debit", {}, "6000"),
    ("6900", "Miscellaneous Expenses", "expense", "other_expense", "debit", {}, "6000"),
]


class Command(BaseCommand):
    help = "Seeds the standard distribution chart of accounts (idempotent)."

    # Define command-line argument
    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List the accounts that would be created without writing them",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        created = 0
        for code, name, ac_type, subtype, normal, flags, parent_code in CHART_OF_ACCOUNTS:
            if Account.objects.filter(code=code).exists():
                continue
            if dry_run:
                self.stdout.write(f"would create {code} {name}")
                created += 1
                continue
            account = Account(
                code=code,
                name=name,
                account_type=ac_type,
                account_subtype=subtype,
                normal_balance=normal,
                is_system_account=True,
                parent=Account.objects.filter(code=parent_code).first() if parent_code else None,
                **flags,
            )
            account.save()
            created += 1

        verb = "Would create" if dry_run else "Created"
        self.stdout.write(self.style.SUCCESS(f"{verb} {created} accounts."))
