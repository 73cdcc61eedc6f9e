from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


ID = ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID"))

PARTY_TYPES = [("customer", "Customer"), ("vendor", "Vendor"), ("none", "None")]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ID,
                ("version", models.PositiveIntegerField(default=0)),
                ("code", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(max_length=200)),
                (
                    "account_type",
                    models.CharField(
                        choices=[
                            ("asset", "Asset"),
                            ("liability", "Liability"),
                            ("equity", "Equity"),
                            ("income", "Income"),
                            ("expense", "Expense"),
                        ],
                        max_length=10,
                    ),
                ),
                (
                    "account_subtype",
                    models.CharField(
                        choices=[
                            ("cash", "Cash"),
                            ("bank", "Bank"),
                            ("accounts_receivable", "Accounts Receivable"),
                            ("inventory", "Inventory"),
                            ("fixed_asset", "Fixed Asset"),
                            ("other_asset", "Other Asset"),
                            ("accounts_payable", "Accounts Payable"),
                            ("short_term_liability", "Short-term Liability"),
                            ("long_term_liability", "Long-term Liability"),
                            ("capital", "Capital"),
                            ("retained_earnings", "Retained Earnings"),
                            ("drawings", "Drawings"),
                            ("sales_revenue", "Sales Revenue"),
                            ("sales_returns", "Sales Returns"),
                            ("sales_discounts", "Sales Discounts"),
                            ("other_income", "Other Income"),
                            ("cost_of_goods_sold", "Cost of Goods Sold"),
                            ("operating_expense", "Operating Expense"),
                            ("financial_expense", "Financial Expense"),
                            ("other_expense", "Other Expense"),
                        ],
                        max_length=30,
                    ),
                ),
                (
                    "normal_balance",
                    models.CharField(
                        choices=[("debit", "Debit"), ("credit", "Credit")],
                        default="debit",
                        max_length=6,
                    ),
                ),
                ("current_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("description", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("is_cash_account", models.BooleanField(default=False)),
                ("is_bank_account", models.BooleanField(default=False)),
                ("is_control_account", models.BooleanField(default=False)),
                ("is_system_account", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="ledger_core.account",
                    ),
                ),
            ],
            options={
                "ordering": ["code"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["account_type"], name="acct_type_idx"),
                    models.Index(fields=["account_subtype", "is_active"], name="acct_subtype_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                ID,
                ("code", models.CharField(blank=True, max_length=32, null=True, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("phone", models.CharField(blank=True, default="", max_length=40)),
                ("current_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
                "abstract": False,
                "indexes": [models.Index(fields=["name"], name="customer_name_idx")],
            },
        ),
        migrations.CreateModel(
            name="Vendor",
            fields=[
                ID,
                ("code", models.CharField(blank=True, max_length=32, null=True, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("phone", models.CharField(blank=True, default="", max_length=40)),
                ("current_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
                "abstract": False,
                "indexes": [models.Index(fields=["name"], name="vendor_name_idx")],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ID,
                ("name", models.CharField(max_length=200)),
                ("sku", models.CharField(blank=True, max_length=80, null=True, unique=True)),
                ("current_stock", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("minimum_stock", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("cost_price", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("selling_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(current_stock__gte=0),
                        name="product_stock_non_negative",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="SequenceCounter",
            fields=[
                ID,
                ("key", models.CharField(max_length=40)),
                ("period", models.CharField(blank=True, default="", max_length=20)),
                ("last_value", models.PositiveBigIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("key", "period"), name="uq_sequence_key_period")
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ID,
                ("entry_number", models.CharField(max_length=40, unique=True)),
                ("entry_date", models.DateField()),
                (
                    "entry_type",
                    models.CharField(
                        choices=[
                            ("sales", "Sales"),
                            ("purchase", "Purchase"),
                            ("receipt", "Receipt"),
                            ("payment", "Payment"),
                            ("expense", "Expense"),
                            ("adjustment", "Adjustment"),
                            ("return", "Return"),
                            ("opening", "Opening"),
                            ("closing", "Closing"),
                            ("transfer", "Transfer"),
                            ("reversal", "Reversal"),
                        ],
                        max_length=20,
                    ),
                ),
                ("narration", models.TextField(blank=True, default="")),
                ("total_debit", models.DecimalField(decimal_places=2, max_digits=18)),
                ("total_credit", models.DecimalField(decimal_places=2, max_digits=18)),
                ("source_type", models.CharField(blank=True, default="", max_length=50)),
                ("source_id", models.BigIntegerField(blank=True, null=True)),
                ("source_number", models.CharField(blank=True, default="", max_length=60)),
                (
                    "status",
                    models.CharField(
                        choices=[("posted", "Posted"), ("reversed", "Reversed")],
                        default="posted",
                        max_length=10,
                    ),
                ),
                ("is_posted", models.BooleanField(default=True)),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("created_by_id", models.CharField(blank=True, default="", max_length=64)),
                ("created_by_name", models.CharField(blank=True, default="", max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("posting_fingerprint", models.CharField(blank=True, default="", max_length=64)),
                (
                    "reversal_of",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reversals",
                        to="ledger_core.journalentry",
                    ),
                ),
            ],
            options={
                "ordering": ["entry_date", "id"],
                "indexes": [
                    models.Index(fields=["entry_date"], name="je_date_idx"),
                    models.Index(fields=["entry_type", "entry_date"], name="je_type_date_idx"),
                    models.Index(fields=["source_type", "source_id"], name="je_source_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("total_debit__gte", 0), ("total_credit__gte", 0)),
                        name="je_non_negative_totals",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ID,
                ("line_no", models.PositiveIntegerField()),
                ("account_code", models.CharField(max_length=32)),
                ("account_name", models.CharField(max_length=200)),
                ("description", models.CharField(blank=True, default="", max_length=400)),
                ("debit", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("credit", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("party_type", models.CharField(choices=PARTY_TYPES, default="none", max_length=10)),
                ("party_id", models.BigIntegerField(blank=True, null=True)),
                ("party_name", models.CharField(blank=True, default="", max_length=200)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_lines",
                        to="ledger_core.account",
                    ),
                ),
                (
                    "journal",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lines",
                        to="ledger_core.journalentry",
                    ),
                ),
            ],
            options={
                "ordering": ["journal_id", "line_no"],
                "indexes": [
                    models.Index(fields=["account"], name="jl_account_idx"),
                    models.Index(fields=["party_type", "party_id"], name="jl_party_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("debit__gte", 0), ("credit__gte", 0)),
                        name="jl_non_negative_amounts",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(models.Q(("credit", 0), ("debit", 0)), _negated=True),
                        name="jl_debit_or_credit_nonzero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("debit", 0), ("credit", 0), _connector="OR"),
                        name="jl_not_both_debit_and_credit",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("party_type", "none"), ("party_id__isnull", True)),
                            models.Q(
                                models.Q(("party_type", "none"), _negated=True),
                                ("party_id__isnull", False),
                            ),
                            _connector="OR",
                        ),
                        name="jl_party_tag_consistent",
                    ),
                    models.UniqueConstraint(fields=("journal", "line_no"), name="uq_jl_journal_line_no"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ID,
                ("journal_number", models.CharField(max_length=40)),
                ("entry_date", models.DateField()),
                ("description", models.CharField(blank=True, default="", max_length=400)),
                ("debit", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("credit", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("running_balance", models.DecimalField(decimal_places=2, max_digits=18)),
                ("party_type", models.CharField(choices=PARTY_TYPES, default="none", max_length=10)),
                ("party_id", models.BigIntegerField(blank=True, null=True)),
                ("party_name", models.CharField(blank=True, default="", max_length=200)),
                ("source_type", models.CharField(blank=True, default="", max_length=50)),
                ("source_id", models.BigIntegerField(blank=True, null=True)),
                ("source_number", models.CharField(blank=True, default="", max_length=60)),
                ("created_by_id", models.CharField(blank=True, default="", max_length=64)),
                ("created_by_name", models.CharField(blank=True, default="", max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="ledger_core.account",
                    ),
                ),
                (
                    "journal",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="ledger_core.journalentry",
                    ),
                ),
                (
                    "journal_line",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entry",
                        to="ledger_core.journalline",
                    ),
                ),
            ],
            options={
                "ordering": ["entry_date", "created_at", "id"],
                "verbose_name_plural": "ledger entries",
                "abstract": False,
                "indexes": [
                    models.Index(fields=["account", "entry_date"], name="le_account_date_idx"),
                    models.Index(fields=["party_type", "party_id"], name="le_party_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CashBookEntry",
            fields=[
                ID,
                ("journal_number", models.CharField(max_length=40)),
                ("account_name", models.CharField(max_length=200)),
                ("is_bank", models.BooleanField(default=False)),
                ("entry_date", models.DateField()),
                ("description", models.CharField(blank=True, default="", max_length=400)),
                ("cash_in", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("cash_out", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("running_balance", models.DecimalField(decimal_places=2, max_digits=18)),
                ("party_type", models.CharField(choices=PARTY_TYPES, default="none", max_length=10)),
                ("party_id", models.BigIntegerField(blank=True, null=True)),
                ("party_name", models.CharField(blank=True, default="", max_length=200)),
                ("source_type", models.CharField(blank=True, default="", max_length=50)),
                ("source_id", models.BigIntegerField(blank=True, null=True)),
                ("source_number", models.CharField(blank=True, default="", max_length=60)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cash_book_entries",
                        to="ledger_core.account",
                    ),
                ),
                (
                    "journal",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cash_book_entries",
                        to="ledger_core.journalentry",
                    ),
                ),
                (
                    "ledger_entry",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cash_book_entry",
                        to="ledger_core.ledgerentry",
                    ),
                ),
            ],
            options={
                "ordering": ["entry_date", "created_at", "id"],
                "verbose_name_plural": "cash book entries",
                "abstract": False,
                "indexes": [models.Index(fields=["account", "entry_date"], name="cbe_account_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="DailyCashSummary",
            fields=[
                ID,
                ("date", models.DateField()),
                ("opening_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("total_in", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("total_out", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("closing_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("transaction_count", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "cash_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="daily_summaries",
                        to="ledger_core.account",
                    ),
                ),
            ],
            options={
                "ordering": ["cash_account_id", "date"],
                "verbose_name_plural": "daily cash summaries",
                "constraints": [
                    models.UniqueConstraint(fields=("cash_account", "date"), name="uq_daily_cash_summary_day")
                ],
            },
        ),
        migrations.CreateModel(
            name="InventoryTransaction",
            fields=[
                ID,
                ("product_name", models.CharField(max_length=200)),
                ("product_sku", models.CharField(blank=True, default="", max_length=80)),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[
                            ("purchase", "Purchase"),
                            ("sale", "Sale"),
                            ("return_in", "Return in"),
                            ("return_out", "Return out"),
                            ("adjustment", "Adjustment"),
                            ("opening", "Opening"),
                            ("edit_in", "Edit in"),
                            ("edit_out", "Edit out"),
                        ],
                        max_length=20,
                    ),
                ),
                ("quantity_in", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("quantity_out", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("unit_cost", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("total_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("balance_after", models.DecimalField(decimal_places=4, max_digits=14)),
                ("reference_type", models.CharField(blank=True, default="", max_length=50)),
                ("reference_id", models.BigIntegerField(blank=True, null=True)),
                ("reference_number", models.CharField(blank=True, default="", max_length=60)),
                ("remarks", models.CharField(blank=True, default="", max_length=400)),
                ("transaction_date", models.DateField(default=django.utils.timezone.localdate)),
                ("created_by_id", models.CharField(blank=True, default="", max_length=64)),
                ("created_by_name", models.CharField(blank=True, default="", max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventory_transactions",
                        to="ledger_core.product",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["product", "transaction_date"], name="it_product_date_idx"),
                    models.Index(fields=["reference_type", "reference_id"], name="it_reference_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity_in__gte", 0), ("quantity_out__gte", 0)),
                        name="it_non_negative_quantities",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("balance_after__gte", 0)),
                        name="it_balance_after_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InventoryValuation",
            fields=[
                ID,
                ("version", models.PositiveIntegerField(default=0)),
                ("quantity_on_hand", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("average_cost", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("total_value", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("last_updated", models.DateTimeField(blank=True, null=True)),
                (
                    "last_transaction",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="ledger_core.inventorytransaction",
                    ),
                ),
                (
                    "product",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="valuation",
                        to="ledger_core.product",
                    ),
                ),
            ],
            options={
                "abstract": False,
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity_on_hand__gte", 0)),
                        name="iv_quantity_non_negative",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ID,
                ("invoice_number", models.CharField(max_length=64, unique=True)),
                ("invoice_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("issued", "Issued"), ("cancelled", "Cancelled")],
                        default="draft",
                        max_length=10,
                    ),
                ),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("total_discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("grand_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("total_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("gross_profit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("issued_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="ledger_core.customer",
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="ledger_core.journalentry",
                    ),
                ),
            ],
            options={
                "ordering": ["invoice_date", "id"],
                "indexes": [
                    models.Index(fields=["status", "invoice_date"], name="inv_status_date_idx"),
                    models.Index(fields=["customer"], name="inv_customer_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceLine",
            fields=[
                ID,
                ("quantity", models.DecimalField(decimal_places=4, max_digits=14)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=18)),
                ("discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("line_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("unit_cost", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("total_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("profit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="ledger_core.invoice",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="ledger_core.product",
                    ),
                ),
            ],
            options={
                "ordering": ["invoice_id", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="invoice_line_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("unit_price__gte", 0)),
                        name="invoice_line_price_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Purchase",
            fields=[
                ID,
                ("purchase_number", models.CharField(max_length=64, unique=True)),
                ("purchase_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("received", "Received"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="draft",
                        max_length=10,
                    ),
                ),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("total_discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("grand_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("received_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "journal_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="ledger_core.journalentry",
                    ),
                ),
                (
                    "vendor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to="ledger_core.vendor",
                    ),
                ),
            ],
            options={
                "ordering": ["purchase_date", "id"],
                "indexes": [models.Index(fields=["status", "purchase_date"], name="po_status_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="PurchaseLine",
            fields=[
                ID,
                ("quantity", models.DecimalField(decimal_places=4, max_digits=14)),
                ("unit_cost", models.DecimalField(decimal_places=4, max_digits=14)),
                ("line_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="ledger_core.product",
                    ),
                ),
                (
                    "purchase",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="ledger_core.purchase",
                    ),
                ),
            ],
            options={
                "ordering": ["purchase_id", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="purchase_line_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("unit_cost__gte", 0)),
                        name="purchase_line_cost_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Expense",
            fields=[
                ID,
                ("expense_number", models.CharField(max_length=64, unique=True)),
                ("category", models.CharField(max_length=100)),
                ("expense_date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("cash", "Cash"),
                            ("bank", "Bank transfer"),
                            ("cheque", "Cheque"),
                            ("card", "Card"),
                            ("online", "Online"),
                        ],
                        default="cash",
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=400)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "expense_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="expenses",
                        to="ledger_core.account",
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="ledger_core.journalentry",
                    ),
                ),
            ],
            options={
                "ordering": ["expense_date", "id"],
                "indexes": [models.Index(fields=["status", "expense_date"], name="exp_status_date_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="expense_amount_positive",
                    )
                ],
            },
        ),
    ]
