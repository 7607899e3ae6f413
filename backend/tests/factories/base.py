# backend/tests/factories/base.py

from typing import Optional

from factory.alchemy import SQLAlchemyModelFactory
from sqlalchemy.orm import Session

_session: Optional[Session] = None


def bind_session(session: Optional[Session]) -> None:
    """Point every factory at the current test's session"""
    global _session
    _session = session


def get_session() -> Session:
    if _session is None:
        raise RuntimeError("No test session bound; request the db fixture")
    return _session


class BaseFactory(SQLAlchemyModelFactory):
    """Base factory with session management for all test factories."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = get_session
        sqlalchemy_session_persistence = "commit"
