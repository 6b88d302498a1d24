from __future__ import annotations

import os
from typing import Any, Protocol

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


class SessionProvider(Protocol):
    def sde_session(self) -> Any: ...


class SdeDatabase:
    """Engine + session factory for the static data export database."""

    def __init__(self, db_uri: str, language: str = "en", **engine_kwargs: Any):
        self.db_uri = db_uri
        self.language = language

        kwargs: dict[str, Any] = dict(echo=False, future=True)
        kwargs.update(engine_kwargs)

        self.engine = create_engine(self.db_uri, **kwargs)
        self.Session = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

    def get_db_name(self) -> str:
        """Return the database filename from the URI ('sqlite:///database/eve_sde.db' -> 'eve_sde.db')."""
        path = self.db_uri
        if path.startswith("sqlite:///"):
            path = path[10:]
        return os.path.basename(path)

    def sde_session(self) -> Any:
        return self.Session()

    def dispose(self) -> None:
        self.engine.dispose()
