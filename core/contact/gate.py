#!/usr/bin/env python3
"""
Contact Gate - per-match state machine controlling contact disclosure.

    locked --initiate--> payment_pending --confirm--> unlocked (terminal)
                                |
                                +--fail / expire--> locked

Candidate name, email and phone are visible only in the unlocked state;
every other state reads an anonymised descriptor instead.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from core.exceptions import InvalidContactTransition


class ContactGateState(str, Enum):
    LOCKED = 'locked'
    PAYMENT_PENDING = 'payment_pending'
    UNLOCKED = 'unlocked'


class ContactEvent(str, Enum):
    INITIATE = 'initiate_purchase'
    CONFIRM = 'confirm_payment'
    FAIL = 'fail_payment'
    EXPIRE = 'expire'


TRANSITIONS: Dict[Tuple[ContactGateState, ContactEvent], ContactGateState] = {
    (ContactGateState.LOCKED, ContactEvent.INITIATE): ContactGateState.PAYMENT_PENDING,
    (ContactGateState.PAYMENT_PENDING, ContactEvent.CONFIRM): ContactGateState.UNLOCKED,
    (ContactGateState.PAYMENT_PENDING, ContactEvent.FAIL): ContactGateState.LOCKED,
    (ContactGateState.PAYMENT_PENDING, ContactEvent.EXPIRE): ContactGateState.LOCKED,
}


def next_state(state: ContactGateState, event: ContactEvent) -> ContactGateState:
    try:
        return TRANSITIONS[(ContactGateState(state), ContactEvent(event))]
    except KeyError:
        raise InvalidContactTransition(ContactGateState(state).value, ContactEvent(event).value)


def experience_level(years: Optional[float]) -> Optional[str]:
    if years is None or years < 0:
        return None
    if years < 2:
        return 'Entry-level'
    if years < 5:
        return 'Mid-level'
    return 'Senior'


def anonymized_descriptor(experience_years: Optional[float], industry_label: Optional[str]) -> str:
    """e.g. "Senior Information Technology Professional"."""
    parts = [experience_level(experience_years), industry_label, 'Professional']
    return ' '.join(p for p in parts if p)


def gated_contact(
    state: str,
    full_name: Optional[str],
    email: Optional[str],
    phone: Optional[str],
    experience_years: Optional[float],
    industry_label: Optional[str]
) -> Tuple[str, Optional[str], Optional[str]]:
    """(name, email, phone) as a reader of a match in ``state`` may see them."""
    if ContactGateState(state) == ContactGateState.UNLOCKED:
        return full_name, email, phone
    return anonymized_descriptor(experience_years, industry_label), None, None
