import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.core.config import settings
from app.core.errors import PersistenceError

logger = logging.getLogger(__name__)

DATABASE_URL = settings.sqlalchemy_url


def serialize_sqlite_writers(engine: Engine) -> Engine:
    """
    Make every SQLite transaction start with BEGIN IMMEDIATE.

    pysqlite defers BEGIN until the first write, so a read-then-write unit
    (lock user, read active streak, update counters) would not hold the
    database write lock while it reads. SELECT ... FOR UPDATE is a no-op on
    SQLite; taking the write lock up front is its equivalent.
    """
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_conn, connection_record):
        dbapi_conn.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # Sessions cross threads under FastAPI; writers wait `timeout` s for the lock
    connect_args = {
        "check_same_thread": False,
        "timeout": settings.SQLITE_BUSY_TIMEOUT,
    }

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
if engine.url.get_backend_name() == "sqlite":
    serialize_sqlite_writers(engine)

logger.info(
    "Using database backend=%s url=%s",
    engine.url.get_backend_name(),
    engine.url.render_as_string(hide_password=True),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session, operation: str):
    """
    Run a unit of work and commit once at the end.

    Any failure rolls back everything flushed inside the block. Driver /
    constraint errors surface as PersistenceError; application errors are
    re-raised unchanged.
    """
    try:
        yield
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("%s failed, rolled back: %s", operation, exc)
        raise PersistenceError(
            message=f"{operation} failed; no changes were saved.",
            operation=operation,
        ) from exc
    except Exception:
        db.rollback()
        raise
