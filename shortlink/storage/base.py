"""
Base storage interface for the short link service.

Purpose:
    Define a small, stable contract that multiple storage backends
    (in-memory, PostgreSQL) can implement without requiring changes to
    the manager or the routes.

Contract:
    - Uniqueness of `slug` is enforced by the backend itself. Callers never
      pre-check; a taken slug raises `DuplicateSlugError` from `create`.
    - There is no update or delete operation.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import Link


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    def open(self) -> None:
        """Acquire the connection handle. No-op for backends without one."""

    def close(self) -> None:
        """Release the connection handle. Must be safe to call twice."""

    @abstractmethod  # pragma: no cover
    def find_by_slug(self, slug: str) -> Optional[Link]:
        """
        Retrieve a link by its slug.

        Returns:
            Optional[Link]: The stored link, or None if not found.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def create(self, slug: str, url: str) -> Link:
        """
        Insert a new link.

        Returns:
            Link: The stored record, including its store-assigned id.

        Raises:
            DuplicateSlugError: If the slug is already taken.
        """
        raise NotImplementedError

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
