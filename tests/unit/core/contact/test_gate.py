#!/usr/bin/env python3
"""
Unit tests for the contact gate state machine and anonymised views.
"""

import unittest

from core.contact import ContactGateState, ContactEvent, next_state, anonymized_descriptor, gated_contact
from core.contact.gate import experience_level
from core.exceptions import InvalidContactTransition


class TestTransitions(unittest.TestCase):

    def test_happy_path(self):
        state = next_state(ContactGateState.LOCKED, ContactEvent.INITIATE)
        self.assertEqual(state, ContactGateState.PAYMENT_PENDING)
        self.assertEqual(next_state(state, ContactEvent.CONFIRM), ContactGateState.UNLOCKED)

    def test_fail_and_expire_relock(self):
        self.assertEqual(next_state('payment_pending', 'fail_payment'), ContactGateState.LOCKED)
        self.assertEqual(next_state('payment_pending', 'expire'), ContactGateState.LOCKED)

    def test_unlocked_is_terminal(self):
        for event in ContactEvent:
            with self.assertRaises(InvalidContactTransition):
                next_state(ContactGateState.UNLOCKED, event)

    def test_confirm_from_locked_is_rejected(self):
        with self.assertRaises(InvalidContactTransition) as cm:
            next_state(ContactGateState.LOCKED, ContactEvent.CONFIRM)
        self.assertEqual(cm.exception.state, 'locked')
        self.assertEqual(cm.exception.event, 'confirm_payment')


class TestAnonymisedView(unittest.TestCase):

    def test_experience_levels(self):
        self.assertEqual(experience_level(0), 'Entry-level')
        self.assertEqual(experience_level(1.9), 'Entry-level')
        self.assertEqual(experience_level(2), 'Mid-level')
        self.assertEqual(experience_level(5), 'Senior')
        self.assertIsNone(experience_level(None))

    def test_descriptor(self):
        self.assertEqual(
            anonymized_descriptor(6, 'Information Technology'),
            'Senior Information Technology Professional'
        )
        self.assertEqual(anonymized_descriptor(None, None), 'Professional')
        self.assertEqual(anonymized_descriptor(3, None), 'Mid-level Professional')

    def test_contact_hidden_until_unlocked(self):
        for state in ('locked', 'payment_pending'):
            name, email, phone = gated_contact(state, 'Thandi Nkosi', 't@example.co.za', '082', 1, 'Finance')
            self.assertEqual(name, 'Entry-level Finance Professional')
            self.assertIsNone(email)
            self.assertIsNone(phone)

    def test_contact_visible_when_unlocked(self):
        self.assertEqual(
            gated_contact('unlocked', 'Thandi Nkosi', 't@example.co.za', '082', 1, 'Finance'),
            ('Thandi Nkosi', 't@example.co.za', '082')
        )


if __name__ == "__main__":
    unittest.main()
