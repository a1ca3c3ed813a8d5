"""
Data model and wire schemas.

`Link` is the record owned by the storage layer; the pydantic models describe
the HTTP payloads. The response never carries a version field.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class Link:
    """A stored slug → URL mapping."""
    id: str
    slug: str
    url: str


class LinkIn(BaseModel):
    """Request payload for creating a new short link. Unknown fields are dropped."""
    model_config = ConfigDict(extra="ignore")

    slug: Optional[Any] = None
    url: Optional[Any] = None


class LinkOut(BaseModel):
    """Response payload for a created link."""
    slug: str
    url: str
    id: str = Field(serialization_alias="_id")

    @classmethod
    def from_link(cls, link: Link) -> "LinkOut":
        return cls(id=link.id, slug=link.slug, url=link.url)


class ErrorOut(BaseModel):
    message: str
    stack: Optional[str] = None
