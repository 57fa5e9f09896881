import logging
import uuid
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import select, func, update

from database.models import ContactUnlock
from database.models.contact_unlock import UNLOCK_PENDING, UNLOCK_CONFIRMED, UNLOCK_FAILED
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ContactUnlockRepository(BaseRepository):
    def create_pending(self, match_id: uuid.UUID, amount: float, currency: str) -> ContactUnlock:
        unlock = ContactUnlock(
            match_id=match_id,
            purchase_id=uuid.uuid4().hex,
            status=UNLOCK_PENDING,
            amount=amount,
            currency=currency,
        )
        self.db.add(unlock)
        self.db.flush()
        return unlock

    def get_pending(self, match_id: uuid.UUID) -> Optional[ContactUnlock]:
        return self.get_latest(match_id, UNLOCK_PENDING)

    def get_latest(self, match_id: uuid.UUID, status: str) -> Optional[ContactUnlock]:
        stmt = (
            select(ContactUnlock)
            .where(ContactUnlock.match_id == match_id, ContactUnlock.status == status)
            .order_by(ContactUnlock.created_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_idempotency_key(self, idempotency_key: str) -> Optional[ContactUnlock]:
        stmt = select(ContactUnlock).where(ContactUnlock.idempotency_key == idempotency_key)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_purchase_id(self, purchase_id: str) -> Optional[ContactUnlock]:
        stmt = select(ContactUnlock).where(ContactUnlock.purchase_id == purchase_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def mark_confirmed(self, unlock: ContactUnlock, idempotency_key: str) -> ContactUnlock:
        unlock.status = UNLOCK_CONFIRMED
        unlock.idempotency_key = idempotency_key
        self.db.flush()
        return unlock

    def mark_failed(self, unlock: ContactUnlock, reason: str) -> ContactUnlock:
        unlock.status = UNLOCK_FAILED
        unlock.failure_reason = reason
        self.db.flush()
        return unlock

    def fail_if_pending(self, unlock_id: uuid.UUID, reason: str) -> bool:
        """Mark a purchase failed only while it is still pending; False if it has moved on."""
        result = self.db.execute(
            update(ContactUnlock)
            .where(ContactUnlock.id == unlock_id, ContactUnlock.status == UNLOCK_PENDING)
            .values(status=UNLOCK_FAILED, failure_reason=reason)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def list_pending_before(self, cutoff: datetime) -> List[ContactUnlock]:
        stmt = (
            select(ContactUnlock)
            .where(ContactUnlock.status == UNLOCK_PENDING, ContactUnlock.created_at < cutoff)
            .order_by(ContactUnlock.created_at)
        )
        return self.db.execute(stmt).scalars().all()

    def count_confirmed(self, match_id: Any) -> int:
        stmt = select(func.count(ContactUnlock.id)).where(
            ContactUnlock.match_id == match_id,
            ContactUnlock.status == UNLOCK_CONFIRMED
        )
        return self.db.execute(stmt).scalar_one()
