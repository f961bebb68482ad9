import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.base.config import settings
from app.base.errors import StorageFailure

logger = logging.getLogger("interview_scheduler.database")

Base = declarative_base()


def _use_immediate_transactions(engine: Engine) -> None:
    # pysqlite defers BEGIN until the first write, which lets two writers
    # deadlock on lock promotion. Take the write lock when the transaction opens.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        _use_immediate_transactions(engine)
        return engine
    return create_engine(url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = build_session_factory(engine)


def init_db(bind: Engine = engine) -> None:
    # Register tables on Base.metadata
    import app.models.booking_model  # noqa: F401
    import app.models.slot_model  # noqa: F401
    import app.models.user_model  # noqa: F401

    Base.metadata.create_all(bind=bind)
    logger.info("[DB] Schema ready")


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a unit of work: commit on success, roll back on any error.

    Driver and database errors surface as StorageFailure so callers only ever
    see domain errors.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"[DB] Transaction rolled back: {exc}")
        raise StorageFailure("Storage operation failed") from exc
    except Exception:
        db.rollback()
        raise
