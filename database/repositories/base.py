from sqlalchemy.orm import Session


class BaseRepository:
    """Repositories share the unit of work's Session; they flush but never commit."""

    def __init__(self, db: Session):
        self.db = db
