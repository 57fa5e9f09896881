#!/usr/bin/env python3
"""
Contact Gate Service - purchase-driven transitions of a match's contact gate.

Every transition is a conditional UPDATE on the match's current state, so
two workers racing on the same match cannot both move it. Confirmations
carry an idempotency key stored uniquely on the ContactUnlock row, so a
retried confirmation never produces a second charge record.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from sqlalchemy.orm import sessionmaker

from core.config_loader import ContactConfig
from core.contact.gate import ContactGateState, ContactEvent, next_state
from core.dto import PurchaseDTO
from core.exceptions import MatchNotFoundException, PaymentConfirmationMismatch, InvalidContactTransition
from database.models import ContactUnlock
from database.models.contact_unlock import UNLOCK_CONFIRMED
from database.uow import match_uow

logger = logging.getLogger(__name__)

PENDING = ContactGateState.PAYMENT_PENDING.value
LOCKED = ContactGateState.LOCKED.value
UNLOCKED = ContactGateState.UNLOCKED.value


def _to_dto(unlock: ContactUnlock) -> PurchaseDTO:
    return PurchaseDTO(
        purchase_id=unlock.purchase_id,
        match_id=str(unlock.match_id),
        status=unlock.status,
        amount=unlock.amount,
        currency=unlock.currency,
        idempotency_key=unlock.idempotency_key,
        created_at=unlock.created_at,
    )


class ContactGateService:
    def __init__(self, session_factory: sessionmaker, config: Optional[ContactConfig] = None):
        self.session_factory = session_factory
        self.config = config or ContactConfig()

    def initiate_purchase(self, match_id) -> PurchaseDTO:
        """Locked -> PaymentPending. Returns the existing purchase if one is already pending."""
        with match_uow(self.session_factory) as repo:
            match = repo.matches.get_by_id(match_id)
            if match is None:
                raise MatchNotFoundException(f"Match {match_id} not found")

            if match.contact_gate_state == PENDING:
                pending = repo.unlocks.get_pending(match.id)
                if pending is not None:
                    logger.info(f"Purchase {pending.purchase_id} already pending for match {match.id}")
                    return _to_dto(pending)
                # pending state without a purchase row: issue one
                unlock = repo.unlocks.create_pending(match.id, self.config.unlock_amount, self.config.currency)
                return _to_dto(unlock)

            target = next_state(match.contact_gate_state, ContactEvent.INITIATE)
            if not repo.matches.compare_and_set_contact_state(match.id, LOCKED, target.value):
                current = repo.matches.get_by_id(match.id)
                pending = repo.unlocks.get_pending(match.id) if current.contact_gate_state == PENDING else None
                if pending is None:
                    raise InvalidContactTransition(current.contact_gate_state, ContactEvent.INITIATE.value)
                return _to_dto(pending)

            unlock = repo.unlocks.create_pending(match.id, self.config.unlock_amount, self.config.currency)
            logger.info(
                f"Match {match.id}: {LOCKED} -> {target.value} "
                f"(purchase {unlock.purchase_id}, {unlock.amount:.2f} {unlock.currency})"
            )
            return _to_dto(unlock)

    def confirm_payment(self, match_id, idempotency_key: str) -> PurchaseDTO:
        """
        PaymentPending -> Unlocked.

        Retried confirmations (same key, or any confirmation once unlocked)
        are no-op successes returning the confirmed purchase.
        """
        with match_uow(self.session_factory) as repo:
            match = repo.matches.get_by_id(match_id)
            if match is None:
                logger.warning(f"Payment confirmation for unknown match {match_id}")
                raise PaymentConfirmationMismatch(f"No match {match_id} awaiting payment")

            seen = repo.unlocks.get_by_idempotency_key(idempotency_key)
            if seen is not None:
                if seen.match_id != match.id:
                    logger.warning(f"Idempotency key {idempotency_key} already used for match {seen.match_id}")
                    raise PaymentConfirmationMismatch(
                        f"Idempotency key {idempotency_key} belongs to another match"
                    )
                logger.info(f"Duplicate confirmation {idempotency_key} for match {match.id} ignored")
                return _to_dto(seen)

            if match.contact_gate_state == UNLOCKED:
                return self._already_unlocked(repo, match.id)

            if match.contact_gate_state != PENDING:
                logger.warning(f"Payment confirmation for match {match.id} in state {match.contact_gate_state}")
                raise PaymentConfirmationMismatch(f"Match {match.id} is not awaiting payment")

            pending = repo.unlocks.get_pending(match.id)
            if pending is None:
                logger.warning(f"Match {match.id} is pending but has no pending purchase")
                raise PaymentConfirmationMismatch(f"No pending purchase for match {match.id}")

            target = next_state(PENDING, ContactEvent.CONFIRM)
            if not repo.matches.compare_and_set_contact_state(match.id, PENDING, target.value, is_paid=True):
                current = repo.matches.get_by_id(match.id)
                if current.contact_gate_state == UNLOCKED:
                    return self._already_unlocked(repo, match.id)
                raise PaymentConfirmationMismatch(f"Match {match.id} left the pending state")

            repo.unlocks.mark_confirmed(pending, idempotency_key)
            logger.info(f"Match {match.id}: {PENDING} -> {target.value} (purchase {pending.purchase_id})")
            return _to_dto(pending)

    @staticmethod
    def _already_unlocked(repo, match_id) -> PurchaseDTO:
        confirmed = repo.unlocks.get_latest(match_id, UNLOCK_CONFIRMED)
        logger.info(f"Match {match_id} already unlocked; confirmation is a no-op")
        if confirmed is None:
            raise PaymentConfirmationMismatch(f"Match {match_id} is unlocked without a confirmed purchase")
        return _to_dto(confirmed)

    def fail_payment(self, match_id, reason: str = 'payment_failed') -> PurchaseDTO:
        """PaymentPending -> Locked."""
        with match_uow(self.session_factory) as repo:
            match = repo.matches.get_by_id(match_id)
            if match is None or match.contact_gate_state != PENDING:
                state = match.contact_gate_state if match is not None else None
                logger.warning(f"Payment failure for match {match_id} in state {state}")
                raise PaymentConfirmationMismatch(f"Match {match_id} is not awaiting payment")

            pending = repo.unlocks.get_pending(match.id)
            target = next_state(PENDING, ContactEvent.FAIL)
            if pending is None or not repo.matches.compare_and_set_contact_state(match.id, PENDING, target.value):
                raise PaymentConfirmationMismatch(f"Match {match.id} left the pending state")

            repo.unlocks.mark_failed(pending, reason)
            logger.info(f"Match {match.id}: {PENDING} -> {target.value} ({reason})")
            return _to_dto(pending)

    def expire_pending_purchases(self, now: Optional[datetime] = None) -> int:
        """Time out purchases pending longer than payment_timeout_minutes."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(minutes=self.config.payment_timeout_minutes)
        target = next_state(PENDING, ContactEvent.EXPIRE)

        expired = 0
        with match_uow(self.session_factory) as repo:
            for unlock in repo.unlocks.list_pending_before(cutoff):
                # a confirmation may have landed since the read; leave that purchase alone
                if not repo.matches.compare_and_set_contact_state(unlock.match_id, PENDING, target.value):
                    logger.info(f"Purchase {unlock.purchase_id}: match {unlock.match_id} no longer pending, not expired")
                    continue
                if not repo.unlocks.fail_if_pending(unlock.id, 'timeout'):
                    repo.matches.compare_and_set_contact_state(unlock.match_id, target.value, PENDING)
                    logger.warning(f"Purchase {unlock.purchase_id} settled during expiry; match {unlock.match_id} left pending")
                    continue
                expired += 1

        if expired:
            logger.info(f"Expired {expired} pending purchases older than {cutoff.isoformat()}")
        return expired
