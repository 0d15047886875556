"""Database configuration and session management."""

import logging
from pathlib import Path

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from vox_engine.config.models import DatabaseConfig

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()

SQLITE_BUSY_TIMEOUT_SECONDS = 30


class Database:
    """
    Owns one SQLAlchemy engine and its session factory.

    Built once at startup from DatabaseConfig and handed to whatever needs
    sessions; nothing here is module-global.
    """

    def __init__(self, config: DatabaseConfig):
        self.url = config.url
        self.is_sqlite = self.url.startswith("sqlite")
        self.engine = self._create_engine(config)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def _create_engine(self, config: DatabaseConfig) -> Engine:
        if not self.is_sqlite:
            return create_engine(self.url, echo=config.echo, pool_pre_ping=True)

        connect_args = {
            "check_same_thread": False,  # Sessions are used from worker threads
            "timeout": SQLITE_BUSY_TIMEOUT_SECONDS,
        }
        if self._is_memory_url():
            # One shared connection, otherwise every session sees an empty database
            return create_engine(
                self.url,
                connect_args=connect_args,
                poolclass=StaticPool,
                echo=config.echo,
            )

        self._ensure_sqlite_dir()
        engine = create_engine(self.url, connect_args=connect_args, echo=config.echo)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

        return engine

    def _is_memory_url(self) -> bool:
        return self.url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in self.url

    def _ensure_sqlite_dir(self) -> None:
        db_path = self.url.split("///", 1)[-1]
        if db_path:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    def init_db(self) -> None:
        """
        Create all tables if they don't exist.

        Should be called on application startup.
        """
        # Import all models so they're registered with Base
        from vox_engine.models import conversation  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        logger.info(f"Database initialized at: {self.url}")

    def dispose(self) -> None:
        self.engine.dispose()
