from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

SLUG_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"

# Paths served by the app itself; a slug with one of these names never redirects.
RESERVED_SLUGS = frozenset({"health", "docs", "redoc"})


class ShortLink(BaseModel):
    slug: str
    original_url: str
    requester_ip: str
    hit_count: int
    created_at: datetime


class ShortenRequest(BaseModel):
    url: str
    slug: Optional[str] = Field(default=None, pattern=SLUG_PATTERN)

    @field_validator("slug")
    @classmethod
    def slug_not_reserved(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value in RESERVED_SLUGS:
            raise ValueError(f"'{value}' is a reserved path")
        return value
