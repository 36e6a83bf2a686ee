"""Data models for the link shortener."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class User:
    """Represents a registered account."""

    id: str
    email: str
    password: str
    created_at: datetime

    def to_dict(self) -> dict:
        """Convert to dictionary (the password hash is never included)."""
        return {
            "id": self.id,
            "email": self.email,
            "created_at": _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        """Create from a database row."""
        return cls(
            id=str(data["id"]),
            email=data["email"],
            password=data["password"],
            created_at=data["created_at"],
        )


@dataclass
class VisitEvent:
    """One recorded redirection through a link."""

    id: str
    link_id: str
    visited_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "link_id": self.link_id,
            "visited_at": _iso(self.visited_at),
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VisitEvent":
        """Create from a database row."""
        return cls(
            id=str(data["id"]),
            link_id=str(data["link_id"]),
            visited_at=data["visited_at"],
            ip_address=data.get("ip_address"),
            user_agent=data.get("user_agent"),
        )


@dataclass
class Link:
    """Represents a short link in the database."""

    id: str
    original_url: str
    short_slug: str
    created_at: datetime
    updated_at: datetime
    custom_slug: Optional[str] = None
    user_id: Optional[str] = None
    visit_count: int = 0
    visits: List[VisitEvent] = field(default_factory=list)

    @property
    def slug(self) -> str:
        """Slug used in the public short URL."""
        return self.custom_slug or self.short_slug

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "original_url": self.original_url,
            "short_slug": self.short_slug,
            "custom_slug": self.custom_slug,
            "user_id": self.user_id,
            "visit_count": self.visit_count,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Link":
        """Create from a database row."""
        return cls(
            id=str(data["id"]),
            original_url=data["original_url"],
            short_slug=data["short_slug"],
            custom_slug=data.get("custom_slug"),
            user_id=str(data["user_id"]) if data.get("user_id") else None,
            visit_count=data.get("visit_count", 0),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )
