from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

Base = declarative_base()


class Database:
    """
    Explicit data-access handle: owns the engine and the session factory.

    Constructed by the process bootstrap (create_app) and handed to request
    handlers through get_db, so nothing is lazily initialised at first use.
    """

    def __init__(self, url: str, **engine_kwargs):
        self.url = url
        if url.startswith("sqlite"):
            # SQLite configuration for local development/testing
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        else:
            engine_kwargs.setdefault("pool_pre_ping", True)
        self.engine: Engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def create_all(self):
        """
        Registers all domain models and initializes the database schema.
        """
        # Import all models to ensure they are registered with Base.metadata before create_all
        from hrleave.models import user, leave_quota, leave_balance, audit_log  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self):
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """
    Session Provider: Provides a database session per request.
    Transaction management is handled explicitly in the Service Layer.
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
