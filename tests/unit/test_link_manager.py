"""
Unit tests for LinkManager.

Covers:
    - resolve: hit, miss (NotFoundError, no record access), case-normalized lookup
    - create_link: explicit slug, generated slug, validation failures
    - conflicts: duplicate explicit slug, forced auto-slug collision
    - extra fields never persisted
"""

from unittest.mock import MagicMock

import pytest

from shortlink.errors import ConflictError, NotFoundError, ValidationError
from shortlink.manager.link_manager import LinkManager
from shortlink.manager.slugs import SLUG_ALPHABET, RandomSlugStrategy
from shortlink.storage.base import BaseStorage
from shortlink.storage.storage import Storage


class FixedSlugStrategy(RandomSlugStrategy):
    """Always returns the same slug, to force collisions."""

    def generate(self) -> str:
        return "fixed"


# -------------------------
# resolve
# -------------------------

def test_resolve_returns_stored_link(manager, storage):
    created = storage.create("abc", "https://example.com")
    assert manager.resolve("abc") == created


def test_resolve_normalizes_case_and_whitespace(manager, storage):
    storage.create("abc", "https://example.com")
    assert manager.resolve(" ABC ").url == "https://example.com"


def test_resolve_missing_raises_not_found(manager):
    with pytest.raises(NotFoundError) as excinfo:
        manager.resolve("nope")
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Link not found"


def test_resolve_empty_slug_is_not_found_without_lookup():
    storage = MagicMock(spec=BaseStorage)
    manager = LinkManager(storage=storage)
    with pytest.raises(NotFoundError):
        manager.resolve("   ")
    storage.find_by_slug.assert_not_called()


# -------------------------
# create_link
# -------------------------

def test_create_with_explicit_slug(manager, storage):
    link = manager.create_link({"slug": "MyLink", "url": "https://example.com/a"})
    assert link.slug == "mylink"
    assert link.url == "https://example.com/a"
    assert storage.find_by_slug("mylink") == link


@pytest.mark.parametrize("payload", [{"url": "https://a.com"}, {"slug": None, "url": "https://a.com"}, {"slug": "", "url": "https://a.com"}])
def test_create_generates_slug_when_absent(manager, payload):
    link = manager.create_link(payload)
    assert len(link.slug) == 5
    assert set(link.slug) <= set(SLUG_ALPHABET)


def test_create_then_resolve_roundtrip(manager):
    for i in range(50):
        url = f"https://example.com/item/{i}"
        link = manager.create_link({"url": url})
        assert manager.resolve(link.slug).url == url


def test_create_invalid_url_persists_nothing(manager, storage):
    with pytest.raises(ValidationError, match="url must be a valid URL"):
        manager.create_link({"slug": "x", "url": "not-a-url"})
    assert len(storage) == 0


def test_create_missing_url(manager):
    with pytest.raises(ValidationError, match="url is a required field"):
        manager.create_link({"slug": "x"})


def test_create_invalid_slug(manager, storage):
    with pytest.raises(ValidationError):
        manager.create_link({"slug": "no spaces", "url": "https://a.com"})
    assert len(storage) == 0


def test_create_strips_unknown_fields():
    storage = MagicMock(spec=BaseStorage)
    manager = LinkManager(storage=storage)
    manager.create_link({"slug": "x", "url": "https://a.com", "foo": "bar", "_id": "forged"})
    storage.create.assert_called_once_with("x", "https://a.com")


def test_create_does_not_mutate_input(manager):
    payload = {"url": "https://a.com"}
    manager.create_link(payload)
    assert payload == {"url": "https://a.com"}


# -------------------------
# conflicts
# -------------------------

def test_duplicate_explicit_slug_conflicts_and_first_survives(manager, storage):
    manager.create_link({"slug": "taken", "url": "https://first.com"})
    with pytest.raises(ConflictError) as excinfo:
        manager.create_link({"slug": "taken", "url": "https://second.com"})
    assert excinfo.value.status_code == 409
    assert excinfo.value.message == "Slug is taken"
    assert manager.resolve("taken").url == "https://first.com"


def test_duplicate_slug_differing_only_by_case_conflicts(manager):
    manager.create_link({"slug": "abc", "url": "https://first.com"})
    with pytest.raises(ConflictError):
        manager.create_link({"slug": "ABC", "url": "https://second.com"})


def test_auto_slug_collision_surfaces_as_conflict():
    storage = Storage()
    manager = LinkManager(storage=storage, slug_strategy=FixedSlugStrategy())
    manager.create_link({"url": "https://first.com"})
    with pytest.raises(ConflictError, match="Slug is taken"):
        manager.create_link({"url": "https://second.com"})
    # no silent overwrite
    assert storage.find_by_slug("fixed").url == "https://first.com"
    assert len(storage) == 1


def test_conflict_message_ignores_storage_text():
    storage = MagicMock(spec=BaseStorage)
    from shortlink.errors import DuplicateSlugError
    storage.create.side_effect = DuplicateSlugError("x", "E11000 duplicate key error collection: links")
    manager = LinkManager(storage=storage)
    with pytest.raises(ConflictError) as excinfo:
        manager.create_link({"slug": "x", "url": "https://a.com"})
    assert str(excinfo.value) == "Slug is taken"


def test_unexpected_storage_errors_propagate():
    storage = MagicMock(spec=BaseStorage)
    storage.create.side_effect = RuntimeError("store unreachable")
    manager = LinkManager(storage=storage)
    with pytest.raises(RuntimeError, match="store unreachable"):
        manager.create_link({"slug": "x", "url": "https://a.com"})
