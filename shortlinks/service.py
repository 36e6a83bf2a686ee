"""Business logic service for short links."""

import logging
from typing import Dict, List, Optional

from .shortcode import SlugGenerator
from .database.base import Database
from .database.models import Link, VisitEvent
from .errors import ConflictError, DuplicateKeyError, NotFoundError, ServerError, ValidationError
from .common.validators import is_valid_url, is_valid_short_code


SLUG_TAKEN_MESSAGE = "Custom slug is already taken"
NOT_FOUND_MESSAGE = "URL not found"


class LinkService:
    """Service layer for link allocation, resolution and management."""

    def __init__(
        self,
        db: Database,
        slug_generator: Optional[SlugGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 5,
    ):
        """Initialize link service.

        Args:
            db: Database instance
            slug_generator: Optional slug generator
            logger: Optional logger
            max_collision_retries: Extra attempts when a generated slug is rejected as a duplicate
        """
        self.db = db
        self.generator = slug_generator or SlugGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_retries = max_collision_retries

    async def create_short_link(
        self,
        original_url: str,
        custom_slug: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> Link:
        """Create a new short link.

        Args:
            original_url: The destination URL
            custom_slug: Optional user-chosen slug
            owner_id: Optional owning user (None for anonymous links)

        Returns:
            The persisted link

        Raises:
            ValidationError: If the URL or custom slug is malformed
            ConflictError: If the custom slug is already taken
            ServerError: If no free generated slug was found
        """
        is_valid, error = is_valid_url(original_url)
        if not is_valid:
            raise ValidationError(f"Invalid URL provided: {error}")

        if custom_slug:
            is_valid, error = is_valid_short_code(custom_slug)
            if not is_valid:
                raise ValidationError(error)

            if await self.db.links.find_by_slug(custom_slug):
                raise ConflictError(SLUG_TAKEN_MESSAGE)

            try:
                link = await self.db.links.create(
                    original_url=original_url,
                    short_slug=custom_slug,
                    custom_slug=custom_slug,
                    user_id=owner_id,
                )
            except DuplicateKeyError:
                # Another request took the slug between the check and the insert
                raise ConflictError(SLUG_TAKEN_MESSAGE)
        else:
            link = await self._create_with_generated_slug(original_url, owner_id)

        self.logger.info(f"Created short link: {link.slug} -> {original_url}")
        return link

    async def _create_with_generated_slug(self, original_url: str, owner_id: Optional[str]) -> Link:
        """Insert with a random slug, retrying when it is already in use.

        The unique constraints cover each slug column on its own, so a
        candidate is also looked up across both columns before the insert.
        """
        for attempt in range(self.max_collision_retries + 1):
            slug = self.generator.generate()
            if await self.db.links.find_by_slug(slug):
                self.logger.warning(f"Generated slug already in use on attempt {attempt + 1}: {slug}")
                continue
            try:
                return await self.db.links.create(
                    original_url=original_url,
                    short_slug=slug,
                    user_id=owner_id,
                )
            except DuplicateKeyError:
                self.logger.warning(f"Generated slug collision on attempt {attempt + 1}: {slug}")

        raise ServerError("Failed to create short URL")

    async def update_link(self, link_id: str, owner_id: str, custom_slug: Optional[str]) -> Link:
        """Change the custom slug of an owned link.

        Raises:
            ValidationError: If the slug is missing or malformed
            ConflictError: If another link already uses the slug
            NotFoundError: If the link does not exist or is not owned by `owner_id`
        """
        if not custom_slug:
            raise ValidationError("Custom slug is required")

        is_valid, error = is_valid_short_code(custom_slug)
        if not is_valid:
            raise ValidationError(error)

        if await self.db.links.find_by_slug(custom_slug, exclude_id=link_id):
            raise ConflictError(SLUG_TAKEN_MESSAGE)

        try:
            link = await self.db.links.update_custom_slug(link_id, owner_id, custom_slug)
        except DuplicateKeyError:
            raise ConflictError(SLUG_TAKEN_MESSAGE)

        if link is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)

        self.logger.info(f"Updated link {link_id}: custom slug -> {custom_slug}")
        return link

    async def delete_link(self, link_id: str, owner_id: str) -> None:
        """Delete an owned link and its visit events.

        Raises:
            NotFoundError: If the link does not exist or is not owned by `owner_id`
        """
        if not await self.db.links.delete(link_id, owner_id):
            raise NotFoundError(NOT_FOUND_MESSAGE)

        self.logger.info(f"Deleted link {link_id}")

    async def resolve(self, slug: str) -> Link:
        """Look up a link by slug and count the visit.

        Args:
            slug: Generated or custom slug

        Returns:
            The link with its incremented visit count

        Raises:
            NotFoundError: If no link uses the slug
        """
        if not self.generator.is_valid_format(slug):
            # No stored slug can contain other characters
            raise NotFoundError(NOT_FOUND_MESSAGE)

        link = await self.db.links.find_by_slug(slug)
        if link is None:
            self.logger.warning(f"Slug not found: {slug}")
            raise NotFoundError(NOT_FOUND_MESSAGE)

        updated = await self.db.links.increment_visit_count(link.id)
        if updated is None:
            # Deleted between the lookup and the increment
            raise NotFoundError(NOT_FOUND_MESSAGE)

        self.logger.debug(f"Resolved {slug} -> {updated.original_url}")
        return updated

    async def record_visit(
        self,
        link_id: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> VisitEvent:
        """Append a visit event for a link."""
        return await self.db.visits.create(link_id, ip_address=ip_address, user_agent=user_agent)

    async def list_for_owner(self, owner_id: str) -> List[Link]:
        """List a user's links, newest first, each with its visit events."""
        links = await self.db.links.list_for_owner(owner_id)
        visits: Dict[str, List[VisitEvent]] = await self.db.visits.list_for_links([link.id for link in links])
        for link in links:
            link.visits = visits.get(link.id, [])
        return links

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.db.health_check()
        return {
            "database": db_healthy,
            "overall": db_healthy,
        }

    async def close(self) -> None:
        """Close service connections."""
        await self.db.close()
