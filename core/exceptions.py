#!/usr/bin/env python3
"""
Exception hierarchy for the matching core.

Scoring itself never raises for incomplete input; these cover configuration
errors and collaborator misuse of the match and contact operations.
"""


class MatchingException(Exception):
    """Base exception for matching core errors."""
    pass


class InvalidWeightConfiguration(MatchingException):
    """Raised at start-up when configured weights do not sum to 1."""
    pass


class InvalidPolicyException(MatchingException):
    """Raised when the missing-skill priority table is malformed."""
    pass


class MatchNotFoundException(MatchingException):
    """Raised when a match is not found."""
    pass


class CandidateNotFoundException(MatchingException):
    """Raised when a candidate profile is not found."""
    pass


class JobNotFoundException(MatchingException):
    """Raised when a job requirement is not found."""
    pass


class InvalidContactTransition(MatchingException):
    """Raised when a contact gate event is not allowed in the current state."""

    def __init__(self, state, event):
        self.state = state
        self.event = event
        super().__init__(f"Event '{event}' not allowed in contact state '{state}'")


class PaymentConfirmationMismatch(MatchingException):
    """Raised when a payment signal does not correspond to a pending purchase."""
    pass
