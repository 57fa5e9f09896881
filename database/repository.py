import logging

from sqlalchemy.orm import Session

from database.repositories import MatchRepository, ProfileRepository, ContactUnlockRepository

logger = logging.getLogger(__name__)


class MatchingRepository:
    """Facade over the per-aggregate repositories sharing one Session."""

    def __init__(self, db: Session):
        self.db = db
        self.matches = MatchRepository(db)
        self.profiles = ProfileRepository(db)
        self.unlocks = ContactUnlockRepository(db)
