"""Contact disclosure gate."""
from core.contact.gate import (
    ContactGateState,
    ContactEvent,
    next_state,
    anonymized_descriptor,
    gated_contact,
)
from core.contact.service import ContactGateService

__all__ = [
    'ContactGateState',
    'ContactEvent',
    'next_state',
    'anonymized_descriptor',
    'gated_contact',
    'ContactGateService',
]
