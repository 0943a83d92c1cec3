import uuid
from datetime import datetime, timezone

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Database:
    """Owns the engine and session factory for one running application.

    Created when the app starts and disposed when it shuts down; requests get
    their sessions through ``get_db``.
    """

    def __init__(self, url: str, echo: bool = False):
        connect_args = {}
        engine_kwargs = {}

        # For SQLite we must add connect_args
        if url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # one shared connection, otherwise every session sees an empty db
                engine_kwargs["poolclass"] = StaticPool

        self.url = url
        self.engine = create_engine(
            url,
            connect_args=connect_args,
            echo=echo,
            **engine_kwargs,
        )

        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

    def create_all(self) -> None:
        # importing the models registers every table on Base.metadata
        from selfanypay.models import (  # noqa: F401
            biodata,
            connection,
            contributor,
            follow,
            gallery,
            milestone,
            project,
            task,
            user,
        )

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_db(request: Request):
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
