from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def _configure_sqlite(engine: Engine) -> None:
    """Foreign keys on, and let SQLAlchemy drive BEGIN so SAVEPOINTs work on pysqlite."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_db_engine(url: str, echo: bool = False) -> Engine:
    kwargs = {}
    if url.startswith("sqlite") and (url in ("sqlite://", "sqlite:///:memory:")):
        # one shared in-memory database for every session
        kwargs = {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    elif url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}

    engine = create_engine(url, echo=echo, **kwargs)
    if engine.dialect.name == "sqlite":
        _configure_sqlite(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False: records stay readable after their unit of work closes
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

