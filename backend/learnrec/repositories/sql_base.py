"""Shared plumbing for the SQLAlchemy-backed read repositories."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..db.session import session_scope
from ..errors import DataSourceUnavailable

logger = logging.getLogger(__name__)


class SqlRepository:
    """Opens one short-lived, read-only session per query.

    Each call gets its own session so that recommenders running in separate
    worker threads never share a connection or identity map.
    """

    source_name = "database"

    def __init__(self, session_factory: Optional[sessionmaker[Session]] = None) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _read(self) -> Generator[Session, None, None]:
        try:
            with session_scope(commit=False, factory=self._session_factory) as session:
                yield session
        except SQLAlchemyError as exc:
            logger.warning("%s query failed: %s", self.source_name, exc)
            raise DataSourceUnavailable(self.source_name, str(exc)) from exc


__all__ = ["SqlRepository"]
