"""Database engine construction and session management."""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from catalog_sync.config import settings
from catalog_sync.exceptions import ConfigurationError
from catalog_sync.utils.logger import logger

# Create base class for models
Base = declarative_base()


def create_db_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Build the engine for the catalog store.

    Args:
        database_url: SQLAlchemy URL, defaults to settings.database_url
        echo: Echo SQL statements, defaults to settings.debug

    Returns:
        Configured engine

    Raises:
        ConfigurationError: If the URL cannot be parsed or has no driver
    """
    url_text = database_url or settings.database_url
    try:
        url = make_url(url_text)
    except ArgumentError as e:
        raise ConfigurationError(f"Invalid DATABASE_URL {url_text!r}: {e}") from e

    try:
        engine = create_engine(url, echo=settings.debug if echo is None else echo)
    except Exception as e:
        raise ConfigurationError(f"Cannot create engine for {url.render_as_string(hide_password=True)}: {e}") from e

    if url.get_backend_name() == "sqlite":
        _configure_sqlite(engine)

    return engine


def _configure_sqlite(engine: Engine) -> None:
    """Enable foreign keys and make SAVEPOINTs behave under pysqlite."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        # Writers queue on the busy timeout instead of failing on lock upgrade
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory bound to an engine."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """Open a session and always close it."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine) -> None:
    """Create all catalog tables."""
    import catalog_sync.models  # noqa: F401 register all models with Base.metadata

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise


def drop_db(engine: Engine) -> None:
    """Drop all catalog tables."""
    import catalog_sync.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    logger.info("Database tables dropped")
