"""
Unit of Work: manages repositories and transaction boundaries.
"""

from typing import Optional
from sqlmodel import Session
from .inputs import InputBag


class UnitOfWork:
    """Shares one session between repositories; commits on clean exit, rolls back on error."""

    def __init__(self, session: Optional[Session] = None, inputs: Optional[InputBag] = None):
        """Initialize UnitOfWork; session must be provided."""
        if session is None:
            raise ValueError("Session must be provided. Pass the request-scoped session explicitly.")

        self.session = session
        self.inputs = inputs
        self._repositories = {}

    def get_repository(self, repo_class):
        """Get or create a repository instance (cached per class)."""
        cache_key = repo_class.__name__
        if cache_key not in self._repositories:
            self._repositories[cache_key] = repo_class(self.session, inputs=self.inputs)
        return self._repositories[cache_key]

    def commit(self) -> None:
        """Commit all changes."""
        self.session.commit()

    def rollback(self) -> None:
        """Rollback all changes."""
        self.session.rollback()

    def flush(self) -> None:
        """Flush session (e.g. to get auto-increment IDs)."""
        self.session.flush()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
