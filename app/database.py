import logging

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


class Database:
    """
    Handle on the relational datastore: one engine (with its connection pool)
    and the session factory bound to it.

    The application factory creates one instance, opens it on startup and
    disposes it on shutdown.
    """

    def __init__(self, url: str, pool_size: int = 10, max_overflow: int = 20, echo: bool = False):
        self.url = make_url(url)

        if self.url.get_backend_name() == "sqlite":
            # SQLite connections are shared across the TestClient thread;
            # in-memory databases must stay on a single connection.
            engine_kwargs = {"connect_args": {"check_same_thread": False}}
            if self.url.database in (None, "", ":memory:"):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs = {
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "pool_pre_ping": True,
            }

        self.engine = create_engine(self.url, echo=echo, **engine_kwargs)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            echo=settings.DB_ECHO,
        )

    def connect(self) -> None:
        """Check connectivity and create missing tables."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Connection to %s established", self.url.render_as_string(hide_password=True))

        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")


def get_db(request: Request):
    """
    Dependency to get database session.
    Yields a database session and closes it after use.
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
