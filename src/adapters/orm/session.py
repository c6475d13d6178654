import logging
import os
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session, sessionmaker

from src.adapters.orm.tables import Base

logger = logging.getLogger(__name__)


def default_database_url() -> str:
    """DATABASE_URL, or a SQLite file under NEWSLETTER_DATA_DIR."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    data_dir = Path(os.getenv("NEWSLETTER_DATA_DIR", "./data"))
    data_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{data_dir / 'newsletter.db'}"


def _on_sqlite_connect(dbapi_connection, connection_record) -> None:
    # Let SQLAlchemy emit BEGIN itself (see _begin_immediate).
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON;")
    cursor.close()


def _begin_immediate(conn: Connection) -> None:
    # Take the write lock up front so concurrent writers queue on the busy
    # timeout instead of failing a SHARED -> RESERVED upgrade.
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_engine(database_url: str | None = None) -> Engine:
    url = database_url or default_database_url()
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        event.listen(engine, "connect", _on_sqlite_connect)
        event.listen(engine, "begin", _begin_immediate)
    else:
        engine = create_engine(
            url,
            pool_size=10,
            max_overflow=20,
            pool_timeout=30,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready (%s)", engine.url.render_as_string(hide_password=True))
