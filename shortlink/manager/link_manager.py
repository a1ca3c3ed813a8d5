"""
LinkManager module for the short link service.

Responsibilities:
    - Resolve a slug to its stored link (redirect operation)
    - Create links: assign a random slug when none is given, validate,
      persist, and map storage conflicts to a "Slug is taken" error

Design notes:
    - Storage is an injected dependency; the manager holds no cached copies.
    - Slug uniqueness is never pre-checked here. The store's unique constraint
      decides, and `DuplicateSlugError` is rewritten to `ConflictError`.
    - The slug strategy is injectable so tests can force collisions.
"""

import logging
from typing import Any, Mapping, Optional

from ..errors import ConflictError, DuplicateSlugError, NotFoundError
from ..models import Link
from ..storage.base import BaseStorage
from ..validation import validate_link_input
from .slugs import RandomSlugStrategy

log = logging.getLogger(__name__)


class LinkManager:
    """Coordinates lookup and creation rules for links."""

    def __init__(
        self,
        storage: BaseStorage,
        slug_strategy: Optional[RandomSlugStrategy] = None,
    ):
        """
        Args:
            storage (BaseStorage): Backend storage instance.
            slug_strategy (Optional[RandomSlugStrategy]): Generator for
                slugs when the caller does not supply one.
        """
        self.storage = storage
        self.slug_strategy = slug_strategy or RandomSlugStrategy()

    def resolve(self, slug: str) -> Link:
        """
        Look up the link for a slug.

        The slug is normalized the same way as on creation (trimmed,
        lowercased), so `/AbC` and `/abc` resolve to the same record.

        Raises:
            NotFoundError: If no link has this slug.
        """
        key = (slug or "").strip().lower()
        link = self.storage.find_by_slug(key) if key else None
        if link is None:
            log.debug("Slug miss: %r", slug)
            raise NotFoundError()
        return link

    def create_link(self, data: Mapping[str, Any]) -> Link:
        """
        Create a link from a request payload.

        Steps:
            1. Generate a slug when `slug` is missing, None, or "".
            2. Validate slug/url; unknown fields are dropped.
            3. Insert through storage.

        Raises:
            ValidationError: On a bad slug or url.
            ConflictError: If the slug is already taken.
        """
        payload = dict(data)
        if not payload.get("slug"):
            payload["slug"] = self.slug_strategy.generate()

        clean = validate_link_input(payload)

        try:
            link = self.storage.create(clean.slug, clean.url)
        except DuplicateSlugError as exc:
            log.info("Slug conflict for %r: %s", clean.slug, exc)
            raise ConflictError() from exc

        log.info("Created link slug=%s url=%s", link.slug, link.url)
        return link
