from .base import Base
from .candidate import CandidateRecord
from .job import JobRecord
from .match import MatchRecord
from .contact_unlock import ContactUnlock

__all__ = [
    'Base',
    'CandidateRecord',
    'JobRecord',
    'MatchRecord',
    'ContactUnlock',
]
