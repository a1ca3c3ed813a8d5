"""
Field-level validation for link creation.

Each validator returns a `ValidationResult`: either a cleaned value or one
member of `ValidationFailure`. Only `validate_link_input` raises, so callers
that just need to check a single field never deal with exceptions.

Rules:
    - slug: optional; trimmed, lowercased, one or more of [a-z0-9_-].
    - url:  required; absolute http/https/ftp URL with a host.
            Reachability is never checked.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

from .errors import ValidationError

SLUG_PATTERN = re.compile(r"^[a-z0-9_-]+$")
ALLOWED_SCHEMES = frozenset({"http", "https", "ftp"})
LINK_FIELDS = ("slug", "url")


class ValidationFailure(Enum):
    SLUG_NOT_STRING = "slug must be a string"
    SLUG_INVALID_CHARS = "slug may only contain letters, numbers, '-' and '_'"
    URL_REQUIRED = "url is a required field"
    URL_NOT_STRING = "url must be a string"
    URL_INVALID = "url must be a valid URL"

    @property
    def message(self) -> str:
        return self.value


@dataclass(frozen=True)
class ValidationResult:
    value: Any = None
    failure: Optional[ValidationFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: Any) -> "ValidationResult":
        return cls(value=value)

    @classmethod
    def fail(cls, failure: ValidationFailure) -> "ValidationResult":
        return cls(failure=failure)


@dataclass(frozen=True)
class CleanLink:
    """Validated input, restricted to the persisted fields."""
    slug: Optional[str]
    url: str


def validate_slug(raw: Any) -> ValidationResult:
    if raw is None:
        return ValidationResult.success(None)
    if not isinstance(raw, str):
        return ValidationResult.fail(ValidationFailure.SLUG_NOT_STRING)
    slug = raw.strip().lower()
    if not SLUG_PATTERN.match(slug):
        return ValidationResult.fail(ValidationFailure.SLUG_INVALID_CHARS)
    return ValidationResult.success(slug)


def validate_url(raw: Any) -> ValidationResult:
    if raw is None or raw == "":
        return ValidationResult.fail(ValidationFailure.URL_REQUIRED)
    if not isinstance(raw, str):
        return ValidationResult.fail(ValidationFailure.URL_NOT_STRING)
    url = raw.strip()
    if not url:
        return ValidationResult.fail(ValidationFailure.URL_REQUIRED)
    if any(ch.isspace() for ch in url):
        return ValidationResult.fail(ValidationFailure.URL_INVALID)
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError:
        # malformed IPv6 literal
        return ValidationResult.fail(ValidationFailure.URL_INVALID)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not host:
        return ValidationResult.fail(ValidationFailure.URL_INVALID)
    return ValidationResult.success(url)


def strip_unknown(data: Mapping[str, Any]) -> dict:
    """Keep only the fields a Link persists."""
    return {key: data[key] for key in LINK_FIELDS if key in data}


def validate_link_input(data: Mapping[str, Any]) -> CleanLink:
    """
    Validate a creation payload.

    Raises:
        ValidationError: with the message of the first failing field
            (slug is checked before url).
    """
    fields = strip_unknown(data)
    slug = validate_slug(fields.get("slug"))
    if not slug.ok:
        raise ValidationError(slug.failure.message)
    url = validate_url(fields.get("url"))
    if not url.ok:
        raise ValidationError(url.failure.message)
    return CleanLink(slug=slug.value, url=url.value)
