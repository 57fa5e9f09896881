import uuid

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Float, Uuid, Index
from sqlalchemy.orm import relationship

from .base import Base, utcnow

UNLOCK_PENDING = 'pending'
UNLOCK_CONFIRMED = 'confirmed'
UNLOCK_FAILED = 'failed'


class ContactUnlock(Base):
    """
    One purchase attempt for a match's contact details.

    ``idempotency_key`` is unique, so a retried confirmation can never
    produce a second confirmed charge record.
    """
    __tablename__ = 'contact_unlock'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    match_id = Column(Uuid, ForeignKey('match_record.id', ondelete='CASCADE'), nullable=False)
    purchase_id = Column(Text, nullable=False, unique=True)
    status = Column(Text, nullable=False, default=UNLOCK_PENDING)  # pending|confirmed|failed
    idempotency_key = Column(Text, nullable=True, unique=True)

    amount = Column(Float, nullable=False)
    currency = Column(Text, nullable=False)
    failure_reason = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    match = relationship("MatchRecord", back_populates="unlocks")

    __table_args__ = (
        Index('idx_unlock_match', 'match_id'),
        Index('idx_unlock_status', 'status'),
    )
