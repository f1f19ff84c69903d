import unittest
from datetime import date

from rentflow.core.exceptions import ValidationError
from rentflow.domain.booking_state import (
    BookingStatus,
    assert_booking_transition,
    can_transition,
    effective_status,
)
from rentflow.domain.payment_state import assert_payment_transition


class BookingTransitionTests(unittest.TestCase):
    def test_forward_lifecycle(self):
        self.assertTrue(can_transition("pending", "confirmed"))
        self.assertTrue(can_transition("confirmed", "picked-up"))
        self.assertTrue(can_transition("picked-up", "returned"))

    def test_cancel_from_every_open_state(self):
        for status in ("pending", "confirmed", "picked-up"):
            with self.subTest(status=status):
                self.assertTrue(can_transition(status, BookingStatus.CANCELLED))

    def test_terminal_states_have_no_exits(self):
        for status in ("returned", "cancelled"):
            for target in BookingStatus:
                with self.subTest(status=status, target=target):
                    self.assertFalse(can_transition(status, target))

    def test_skipping_steps_is_not_allowed(self):
        self.assertFalse(can_transition("pending", "picked-up"))
        self.assertFalse(can_transition("pending", "returned"))
        self.assertFalse(can_transition("confirmed", "returned"))

    def test_overdue_and_unknown_values_are_never_targets(self):
        self.assertFalse(can_transition("picked-up", "overdue"))
        self.assertFalse(can_transition("pending", "shipped"))
        self.assertFalse(can_transition("bogus", "confirmed"))

    def test_assert_rejects_returned_to_confirmed(self):
        with self.assertRaises(ValidationError) as ctx:
            assert_booking_transition("returned", "confirmed")
        self.assertEqual(ctx.exception.status_code, 422)


class EffectiveStatusTests(unittest.TestCase):
    today = date(2025, 6, 10)

    def test_open_booking_past_end_date_reads_overdue(self):
        for status in ("pending", "confirmed", "picked-up"):
            with self.subTest(status=status):
                self.assertEqual(
                    effective_status(status, date(2025, 6, 9), today=self.today), "overdue"
                )

    def test_booking_ending_today_is_not_overdue(self):
        self.assertEqual(effective_status("picked-up", self.today, today=self.today), "picked-up")

    def test_closed_bookings_are_never_overdue(self):
        for status in ("returned", "cancelled"):
            with self.subTest(status=status):
                self.assertEqual(effective_status(status, date(2025, 1, 1), today=self.today), status)


class PaymentTransitionTests(unittest.TestCase):
    def test_allowed_moves(self):
        assert_payment_transition("pending", "partial")
        assert_payment_transition("partial", "paid")
        assert_payment_transition("paid", "refunded")

    def test_refunded_is_final(self):
        for target in ("pending", "partial", "paid"):
            with self.subTest(target=target):
                with self.assertRaises(ValidationError):
                    assert_payment_transition("refunded", target)

    def test_paid_cannot_go_back_to_pending(self):
        with self.assertRaises(ValidationError):
            assert_payment_transition("paid", "pending")


if __name__ == "__main__":
    unittest.main()
