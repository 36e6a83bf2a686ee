"""Abstract repositories for the link shortener store.

Each entity gets a narrow repository exposing only the operations the
services need. A Database bundles the three repositories of one backend.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .models import Link, User, VisitEvent


class UserRepository(ABC):
    """Persistence of user accounts."""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email, or None."""
        pass

    @abstractmethod
    async def create(self, email: str, password_hash: str) -> User:
        """Create a user.

        Raises:
            DuplicateKeyError: If the email is already registered
        """
        pass


class LinkRepository(ABC):
    """Persistence of short links."""

    @abstractmethod
    async def find_by_slug(self, slug: str, exclude_id: Optional[str] = None) -> Optional[Link]:
        """Find the link whose short slug or custom slug equals `slug`.

        If two links ever answer to the same slug, the oldest one wins.

        Args:
            slug: Slug to look up
            exclude_id: Optional link id to ignore (used when re-checking on update)

        Returns:
            The matching link or None
        """
        pass

    @abstractmethod
    async def create(
        self,
        original_url: str,
        short_slug: str,
        custom_slug: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Link:
        """Insert a new link with a zero visit count.

        Raises:
            DuplicateKeyError: If a unique slug constraint rejects the row
        """
        pass

    @abstractmethod
    async def increment_visit_count(self, link_id: str) -> Optional[Link]:
        """Add one to the visit counter.

        Returns:
            The updated link, or None if it no longer exists
        """
        pass

    @abstractmethod
    async def update_custom_slug(self, link_id: str, owner_id: str, custom_slug: str) -> Optional[Link]:
        """Set the custom slug of a link owned by `owner_id`.

        Returns:
            The updated link, or None if no link matches both id and owner

        Raises:
            DuplicateKeyError: If a unique slug constraint rejects the write
        """
        pass

    @abstractmethod
    async def delete(self, link_id: str, owner_id: str) -> bool:
        """Delete a link owned by `owner_id` together with its visit events.

        Returns:
            True if deleted, False if no link matches both id and owner
        """
        pass

    @abstractmethod
    async def list_for_owner(self, owner_id: str) -> List[Link]:
        """List links owned by a user, newest first."""
        pass


class VisitRepository(ABC):
    """Persistence of visit events."""

    @abstractmethod
    async def create(
        self,
        link_id: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> VisitEvent:
        """Append a visit event for a link."""
        pass

    @abstractmethod
    async def list_for_links(self, link_ids: List[str]) -> Dict[str, List[VisitEvent]]:
        """Visit events grouped by link id, oldest first within a link."""
        pass

    @abstractmethod
    async def count_for_link(self, link_id: str) -> int:
        """Number of visit events recorded for a link.

        Not used by the service; the test suite checks `visit_count` against it.
        """
        pass


class Database(ABC):
    """A store backend: three repositories plus lifecycle."""

    users: UserRepository
    links: LinkRepository
    visits: VisitRepository

    async def connect(self) -> None:
        """Prepare the backend (create tables, open pools)."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connections."""
        pass
