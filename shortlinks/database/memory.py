"""In-memory store for tests and local development (DATABASE_URL=memory://)."""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..errors import DuplicateKeyError
from .base import Database, LinkRepository, UserRepository, VisitRepository
from .models import Link, User, VisitEvent


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class _MemoryState:
    users: Dict[str, User] = field(default_factory=dict)
    links: Dict[str, Link] = field(default_factory=dict)
    visits: List[VisitEvent] = field(default_factory=list)


class MemoryUserRepository(UserRepository):
    def __init__(self, state: _MemoryState):
        self._state = state

    async def get_by_email(self, email: str) -> Optional[User]:
        for user in self._state.users.values():
            if user.email == email:
                return replace(user)
        return None

    async def create(self, email: str, password_hash: str) -> User:
        if any(u.email == email for u in self._state.users.values()):
            raise DuplicateKeyError("email")
        user = User(id=_new_id(), email=email, password=password_hash, created_at=_now())
        self._state.users[user.id] = user
        return replace(user)


class MemoryLinkRepository(LinkRepository):
    def __init__(self, state: _MemoryState):
        self._state = state

    def _check_unique(self, link_id: Optional[str], short_slug: Optional[str], custom_slug: Optional[str]) -> None:
        # Mirrors the per-column unique constraints of the SQL schema
        for other in self._state.links.values():
            if other.id == link_id:
                continue
            if short_slug is not None and other.short_slug == short_slug:
                raise DuplicateKeyError("short_slug")
            if custom_slug is not None and other.custom_slug == custom_slug:
                raise DuplicateKeyError("custom_slug")

    async def find_by_slug(self, slug: str, exclude_id: Optional[str] = None) -> Optional[Link]:
        for link in self._state.links.values():
            if link.id == exclude_id:
                continue
            if link.short_slug == slug or link.custom_slug == slug:
                return replace(link, visits=[])
        return None

    async def create(
        self,
        original_url: str,
        short_slug: str,
        custom_slug: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Link:
        self._check_unique(None, short_slug, custom_slug)
        now = _now()
        link = Link(
            id=_new_id(),
            original_url=original_url,
            short_slug=short_slug,
            custom_slug=custom_slug,
            user_id=user_id,
            visit_count=0,
            created_at=now,
            updated_at=now,
        )
        self._state.links[link.id] = link
        return replace(link, visits=[])

    async def increment_visit_count(self, link_id: str) -> Optional[Link]:
        link = self._state.links.get(link_id)
        if link is None:
            return None
        link.visit_count += 1
        return replace(link, visits=[])

    async def update_custom_slug(self, link_id: str, owner_id: str, custom_slug: str) -> Optional[Link]:
        link = self._state.links.get(link_id)
        if link is None or link.user_id is None or link.user_id != owner_id:
            return None
        self._check_unique(link_id, None, custom_slug)
        link.custom_slug = custom_slug
        link.updated_at = _now()
        return replace(link, visits=[])

    async def delete(self, link_id: str, owner_id: str) -> bool:
        link = self._state.links.get(link_id)
        if link is None or link.user_id is None or link.user_id != owner_id:
            return False
        self._state.visits = [v for v in self._state.visits if v.link_id != link_id]
        del self._state.links[link_id]
        return True

    async def list_for_owner(self, owner_id: str) -> List[Link]:
        # Insertion order breaks ties between equal timestamps
        owned = [
            (position, link)
            for position, link in enumerate(self._state.links.values())
            if link.user_id == owner_id
        ]
        owned.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        return [replace(link, visits=[]) for _, link in owned]


class MemoryVisitRepository(VisitRepository):
    def __init__(self, state: _MemoryState):
        self._state = state

    async def create(
        self,
        link_id: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> VisitEvent:
        if link_id not in self._state.links:
            # Same outcome as the foreign key on visit_events.link_id
            raise KeyError(f"Unknown link id: {link_id}")
        event = VisitEvent(
            id=_new_id(),
            link_id=link_id,
            visited_at=_now(),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._state.visits.append(event)
        return replace(event)

    async def list_for_links(self, link_ids: List[str]) -> Dict[str, List[VisitEvent]]:
        wanted = set(link_ids)
        grouped: Dict[str, List[VisitEvent]] = {link_id: [] for link_id in link_ids}
        for event in self._state.visits:
            if event.link_id in wanted:
                grouped[event.link_id].append(replace(event))
        return grouped

    async def count_for_link(self, link_id: str) -> int:
        return sum(1 for event in self._state.visits if event.link_id == link_id)


class MemoryDatabase(Database):
    """Process-local store with the same contract as the SQL backend."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._state = _MemoryState()
        self.users = MemoryUserRepository(self._state)
        self.links = MemoryLinkRepository(self._state)
        self.visits = MemoryVisitRepository(self._state)

    async def connect(self) -> None:
        self.logger.info("Using in-memory store (data is lost on restart)")

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass
