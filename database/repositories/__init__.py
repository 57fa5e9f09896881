from database.repositories.base import BaseRepository
from database.repositories.match import MatchRepository
from database.repositories.profile import ProfileRepository
from database.repositories.contact_unlock import ContactUnlockRepository

__all__ = [
    'BaseRepository',
    'MatchRepository',
    'ProfileRepository',
    'ContactUnlockRepository',
]
