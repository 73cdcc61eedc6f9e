from decimal import Decimal
from unittest import mock
from django.core.exceptions import ValidationError
from django.test import TestCase
from ledger_core.exceptions import (AlreadyPostedDifferentPayload, NotFoundError,
                                    UnbalancedEntryError)
from ledger_core.models import JournalEntry, LedgerEntry
from ledger_core.refs import SourceRef
from ledger_core.services import journal as journal_service
from ledger_core.services import (credit_line, debit_line, post_journal_entry,
                                  post_sale, reconcile_party_balances,
                                  record_journal_entry,
                                  reverse_journal_entry)

from .factories import CLERK, DAY, account, balance, make_customer, seed_chart

""" Success tests """
class JournalEntrySuccessTests(TestCase):

    def setUp(self):
        seed_chart()
        self.cash = account("1100")
        self.revenue = account("4100")

    def _cash_sale_lines(self, amount):
        return [
            debit_line(self.cash, amount, "Counter sale"),
            credit_line(self.revenue, amount, "Counter sale"),
        ]

    """ Test Balanced Entry """
    def test_balanced_entry_posts_successfully(self):

        entry = post_journal_entry(
            "sales", DAY, "Counter sale", self._cash_sale_lines(100), actor=CLERK
        )

        entry.refresh_from_db()  # get up-to-date values
        self.assertEqual(entry.status, "posted")
        self.assertTrue(entry.is_posted)
        self.assertEqual(entry.total_debit, Decimal("100.00"))
        self.assertEqual(entry.total_credit, Decimal("100.00"))
        self.assertTrue(entry.is_balanced())
        self.assertEqual(entry.created_by_name, "Dana Clerk")

        # one ledger row per journal line
        self.assertEqual(entry.lines.count(), 2)
        self.assertEqual(LedgerEntry.objects.filter(journal=entry).count(), 2)

        # both accounts move by 100 on their normal side
        self.assertEqual(balance("1100"), Decimal("100.00"))
        self.assertEqual(balance("4100"), Decimal("100.00"))


    """ Test journal numbering: PREFIX-YYYYMM-NNNNN, consecutive """
    def test_entry_numbers_are_sequential(self):
        first = post_journal_entry("sales", DAY, "one", self._cash_sale_lines(10))
        second = post_journal_entry("sales", DAY, "two", self._cash_sale_lines(20))

        self.assertRegex(first.entry_number, r"^JE-\d{6}-00001$")
        self.assertRegex(second.entry_number, r"^JE-\d{6}-00002$")
        self.assertEqual(first.entry_number[:9], second.entry_number[:9])


    """ Test account code/name are snapshotted on the lines """
    def test_lines_snapshot_account_identity(self):
        entry = post_journal_entry("sales", DAY, "x", self._cash_sale_lines(10))
        line = entry.lines.get(line_no=1)
        self.assertEqual(line.account_code, "1100")
        self.assertEqual(line.account_name, "Cash in Hand")


    """ Test for Idempotency
          1. Post an entry for a source document.
          2. Post the same payload for the same source again.
          3. Nothing new should happen (no second entry, balances unchanged). """
    def test_same_source_same_payload_is_idempotent(self):
        ref = SourceRef("invoice", 41, "INV-0041")
        first, created = record_journal_entry(
            "sales", DAY, "Invoice 41", self._cash_sale_lines(250), ref
        )
        again, created_again = record_journal_entry(
            "sales", DAY, "Invoice 41", self._cash_sale_lines(250), ref
        )

        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(first.pk, again.pk)
        self.assertEqual(JournalEntry.objects.count(), 1)
        self.assertEqual(balance("1100"), Decimal("250.00"))


    """ Test reversal brings the balances back and marks the original """
    def test_reverse_entry(self):
        entry = post_journal_entry("sales", DAY, "x", self._cash_sale_lines(75))

        reversal = reverse_journal_entry(entry, actor=CLERK, reason="keyed twice")

        entry.refresh_from_db()
        self.assertEqual(entry.status, "reversed")
        self.assertEqual(reversal.entry_type, "reversal")
        self.assertEqual(reversal.reversal_of_id, entry.pk)
        self.assertIn("keyed twice", reversal.narration)
        self.assertEqual(reversal.source_type, "journal_entry")
        self.assertEqual(reversal.source_number, entry.entry_number)
        self.assertEqual(balance("1100"), Decimal("0.00"))
        self.assertEqual(balance("4100"), Decimal("0.00"))

        # debits and credits swapped line by line
        mirrored = reversal.lines.get(line_no=1)
        self.assertEqual(mirrored.account_id, self.cash.pk)
        self.assertEqual(mirrored.credit, Decimal("75.00"))


    """ Test reversing a sale moves the customer balance back """
    def test_reverse_sale_restores_customer_balance(self):
        customer = make_customer()
        entry = post_sale(customer, SourceRef("invoice", 1, "INV-1"), 500, date=DAY)
        customer.refresh_from_db()
        self.assertEqual(customer.current_balance, Decimal("500.00"))

        reverse_journal_entry(entry)

        customer.refresh_from_db()
        self.assertEqual(customer.current_balance, Decimal("0.00"))
        self.assertEqual(balance("1300"), Decimal("0.00"))


""" Failure tests """
class JournalEntryFailureTests(TestCase):

    def setUp(self):
        seed_chart()
        self.cash = account("1100")
        self.revenue = account("4100")

    """ Test Unbalanced Entry: rejected before anything is written """
    def test_unbalanced_entry_raises(self):
        lines = [
            debit_line(self.cash, 100),
            credit_line(self.revenue, 90),
        ]
        with self.assertRaises(UnbalancedEntryError) as ctx:
            post_journal_entry("sales", DAY, "bad", lines)

        self.assertEqual(ctx.exception.total_debit, Decimal("100.00"))
        self.assertEqual(ctx.exception.total_credit, Decimal("90.00"))
        self.assertEqual(JournalEntry.objects.count(), 0)
        self.assertEqual(balance("1100"), Decimal("0.00"))


    """ Test a single line can't make an entry """
    def test_single_line_rejected(self):
        with self.assertRaises(ValidationError):
            post_journal_entry("sales", DAY, "bad", [debit_line(self.cash, 100)])


    """ Test a line with both debit and credit """
    def test_line_with_both_sides_rejected(self):
        line = debit_line(self.cash, 100)
        line["credit"] = Decimal("100")
        with self.assertRaises(ValidationError):
            post_journal_entry("sales", DAY, "bad", [line, credit_line(self.revenue, 0)])


    """ Test posting to an inactive account """
    def test_inactive_account_rejected(self):
        self.revenue.is_active = False
        self.revenue.save()
        with self.assertRaises(ValidationError):
            post_journal_entry(
                "sales", DAY, "bad", [debit_line(self.cash, 5), credit_line(self.revenue, 5)]
            )
        self.assertEqual(JournalEntry.objects.count(), 0)


    """ Test posting to an account id that doesn't exist """
    def test_unknown_account_rejected(self):
        with self.assertRaises(NotFoundError):
            post_journal_entry(
                "sales", DAY, "bad", [debit_line(self.cash, 5), credit_line(999999, 5)]
            )


    """ Test a party-tagged line without a party id """
    def test_party_line_without_id_rejected(self):
        line = debit_line(self.cash, 5)
        line["party_type"] = "customer"
        with self.assertRaises(ValidationError):
            post_journal_entry("sales", DAY, "bad", [line, credit_line(self.revenue, 5)])


    """ Test the same source posted again with a different payload """
    def test_same_source_different_payload_raises(self):
        ref = SourceRef("invoice", 8, "INV-0008")
        post_journal_entry(
            "sales", DAY, "x", [debit_line(self.cash, 10), credit_line(self.revenue, 10)], ref
        )
        with self.assertRaises(AlreadyPostedDifferentPayload):
            post_journal_entry(
                "sales", DAY, "x",
                [debit_line(self.cash, 12), credit_line(self.revenue, 12)], ref,
            )
        self.assertEqual(balance("1100"), Decimal("10.00"))


    """ Test posted entries and lines are immutable """
    def test_posted_entry_cannot_be_edited(self):
        entry = post_journal_entry(
            "sales", DAY, "x", [debit_line(self.cash, 10), credit_line(self.revenue, 10)]
        )
        entry.narration = "edited"
        with self.assertRaises(ValidationError):
            entry.save()

        line = entry.lines.get(line_no=1)
        line.debit = Decimal("11.00")
        with self.assertRaises(ValidationError):
            line.save()
        with self.assertRaises(ValidationError):
            line.delete()


    """ Test a reversed entry cannot be reversed again, nor un-reversed """
    def test_double_reversal_rejected(self):
        entry = post_journal_entry(
            "sales", DAY, "x", [debit_line(self.cash, 10), credit_line(self.revenue, 10)]
        )
        reversal = reverse_journal_entry(entry)

        with self.assertRaises(ValidationError):
            reverse_journal_entry(entry)
        with self.assertRaises(ValidationError):
            reverse_journal_entry(reversal)

        entry.refresh_from_db()
        entry.status = "posted"
        with self.assertRaises(ValidationError):
            entry.save(update_fields=["status"])


""" Party balances and concurrent postings """
class JournalPartyAndSourceTests(TestCase):

    def setUp(self):
        seed_chart()
        self.customer = make_customer()
        self.receivable = account("1300")
        self.capital = account("3100")

    def _opening_receivable(self, amount):
        return [
            debit_line(self.receivable, amount, "Opening balance", self.customer),
            credit_line(self.capital, amount, "Opening balance"),
        ]

    """ Test a hand-written entry on a control account moves the party too """
    def test_manual_entry_moves_party_balance(self):
        post_journal_entry("adjustment", DAY, "Opening balance", self._opening_receivable(250))

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("250.00"))
        self.assertEqual(reconcile_party_balances(), [])


    """ Test posting the same source twice only moves the party once """
    def test_replay_moves_party_once(self):
        ref = SourceRef("opening", self.customer.pk, "OB-1")
        record_journal_entry("opening", DAY, "Opening", self._opening_receivable(80), ref)
        record_journal_entry("opening", DAY, "Opening", self._opening_receivable(80), ref)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("80.00"))


    """ Test a writer that loses the insert race gets the committed entry back """
    def test_lost_insert_race_returns_existing_entry(self):
        ref = SourceRef("opening", self.customer.pk, "OB-1")
        first, _ = record_journal_entry(
            "opening", DAY, "Opening", self._opening_receivable(120), ref
        )

        # the lookup misses, as it would for a writer that read before the commit
        with mock.patch.object(journal_service, "_posted_for_source", return_value=None):
            again, created = record_journal_entry(
                "opening", DAY, "Opening", self._opening_receivable(120), ref
            )
            with self.assertRaises(AlreadyPostedDifferentPayload):
                record_journal_entry(
                    "opening", DAY, "Opening", self._opening_receivable(99), ref
                )

        self.assertFalse(created)
        self.assertEqual(again.pk, first.pk)
        self.assertEqual(JournalEntry.objects.count(), 1)
        self.assertEqual(balance("1300"), Decimal("120.00"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("120.00"))

        # the losing attempts gave their journal numbers back
        following = post_journal_entry("adjustment", DAY, "next", self._opening_receivable(1))
        self.assertRegex(following.entry_number, r"^JE-\d{6}-00002$")
