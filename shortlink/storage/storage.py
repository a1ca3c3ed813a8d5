"""
Storage module for the short link service (in-memory implementation).

Responsibilities:
    - Save links keyed by slug
    - Provide retrieval by slug
    - Enforce slug uniqueness atomically

Design:
    - This is an in-memory reference implementation that satisfies the BaseStorage contract.
    - It keeps unit/integration tests fast and deterministic.
    - Request handlers run in a threadpool, so check-and-insert happens under a lock;
      this plays the role the UNIQUE index plays in PostgreSQL.
"""

import threading
import uuid
from typing import Dict, Optional

from ..errors import DuplicateSlugError
from ..models import Link
from .base import BaseStorage


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage dictionary.

        Internal schema:
            self.links = { slug: Link(id, slug, url) }
        """
        self.links: Dict[str, Link] = {}
        self._lock = threading.Lock()

    def find_by_slug(self, slug: str) -> Optional[Link]:
        return self.links.get(slug)

    def create(self, slug: str, url: str) -> Link:
        """
        Insert a link, rejecting a slug that is already present.

        Raises:
            DuplicateSlugError: If another record holds this slug. The existing
                record is left untouched.
        """
        with self._lock:
            if slug in self.links:
                raise DuplicateSlugError(slug)
            link = Link(id=uuid.uuid4().hex, slug=slug, url=url)
            self.links[slug] = link
            return link

    def __len__(self) -> int:
        return len(self.links)
