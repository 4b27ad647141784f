# botanica/db.py
from __future__ import annotations

from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, future=True)

    # SQLite: one file shared across request threads
    connect_args = {"check_same_thread": False}
    if database_url in {"sqlite://", "sqlite:///:memory:"}:
        # in-memory databases live inside a single connection
        return create_engine(database_url, future=True, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(database_url, future=True, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    # rows stay readable after commit
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


def get_db(request: Request) -> Iterator[Session]:
    """Yield a SQLAlchemy session bound to this app's engine."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
