"""Tests for the link service."""

import pytest

from shortlinks.errors import ConflictError, NotFoundError, ServerError, ValidationError
from shortlinks.service import LinkService
from shortlinks.shortcode import SlugGenerator


class FixedSlugGenerator(SlugGenerator):
    """Hands out a fixed sequence of slugs."""

    def __init__(self, slugs):
        super().__init__(default_length=6)
        self.slugs = list(slugs)

    def generate(self, length=None):
        return self.slugs.pop(0)


@pytest.mark.asyncio
class TestCreateShortLink:
    """Test link allocation."""

    async def test_create_generated_slug(self, link_service, sample_urls):
        link = await link_service.create_short_link(sample_urls[0])

        assert link.original_url == sample_urls[0]
        assert len(link.short_slug) == 6
        assert SlugGenerator.is_valid_format(link.short_slug)
        assert link.custom_slug is None
        assert link.user_id is None
        assert link.visit_count == 0

    async def test_create_with_custom_slug(self, link_service, sample_urls):
        link = await link_service.create_short_link(sample_urls[0], custom_slug="my-link")

        assert link.custom_slug == "my-link"
        assert link.short_slug == "my-link"
        assert link.slug == "my-link"

    async def test_create_with_owner(self, link_service, sample_urls):
        link = await link_service.create_short_link(sample_urls[0], owner_id="user-1")
        assert link.user_id == "user-1"

    async def test_duplicate_custom_slug(self, link_service, db, sample_urls):
        await link_service.create_short_link(sample_urls[0], custom_slug="taken")

        with pytest.raises(ConflictError, match="already taken"):
            await link_service.create_short_link(sample_urls[1], custom_slug="taken")

        links = [link for link in db.links._state.links.values() if link.original_url == sample_urls[1]]
        assert links == []

    async def test_custom_slug_clashes_with_generated(self, db, sample_urls):
        service = LinkService(db=db, slug_generator=FixedSlugGenerator(["abc123"]))
        await service.create_short_link(sample_urls[0])

        with pytest.raises(ConflictError):
            await service.create_short_link(sample_urls[1], custom_slug="abc123")

    async def test_invalid_url(self, link_service):
        with pytest.raises(ValidationError, match="Invalid URL provided"):
            await link_service.create_short_link("not-a-url")

    async def test_invalid_custom_slug(self, link_service, sample_urls):
        with pytest.raises(ValidationError):
            await link_service.create_short_link(sample_urls[0], custom_slug="a b")

        with pytest.raises(ValidationError, match="reserved"):
            await link_service.create_short_link(sample_urls[0], custom_slug="api")

    async def test_generated_collision_retries(self, db, sample_urls):
        service = LinkService(db=db, slug_generator=FixedSlugGenerator(["aaaaaa", "aaaaaa", "bbbbbb"]))

        first = await service.create_short_link(sample_urls[0])
        second = await service.create_short_link(sample_urls[1])

        assert first.short_slug == "aaaaaa"
        assert second.short_slug == "bbbbbb"

    async def test_generated_slug_skips_renamed_custom_slug(self, db, sample_urls):
        service = LinkService(db=db, slug_generator=FixedSlugGenerator(["aaaaaa", "abcdef", "bbbbbb"]))

        first = await service.create_short_link(sample_urls[0], owner_id="owner")
        await service.update_link(first.id, "owner", "abcdef")
        second = await service.create_short_link(sample_urls[1])

        assert second.short_slug == "bbbbbb"
        answering = [
            link for link in db.links._state.links.values()
            if "abcdef" in (link.short_slug, link.custom_slug)
        ]
        assert [link.id for link in answering] == [first.id]
        assert (await service.resolve("abcdef")).id == first.id

    async def test_generated_collision_gives_up(self, db, sample_urls):
        service = LinkService(
            db=db,
            slug_generator=FixedSlugGenerator(["aaaaaa"] * 4),
            max_collision_retries=2,
        )
        await service.create_short_link(sample_urls[0])

        with pytest.raises(ServerError, match="Failed to create short URL"):
            await service.create_short_link(sample_urls[1])


@pytest.mark.asyncio
class TestResolve:
    """Test redirect resolution."""

    async def test_resolve_increments_once(self, link_service, sample_urls):
        link = await link_service.create_short_link(sample_urls[0])

        resolved = await link_service.resolve(link.short_slug)
        assert resolved.original_url == sample_urls[0]
        assert resolved.visit_count == 1

        resolved = await link_service.resolve(link.short_slug)
        assert resolved.visit_count == 2

    async def test_resolve_custom_slug(self, link_service, sample_urls):
        await link_service.create_short_link(sample_urls[0], custom_slug="custom")

        resolved = await link_service.resolve("custom")
        assert resolved.original_url == sample_urls[0]

    async def test_resolve_unknown(self, link_service):
        with pytest.raises(NotFoundError):
            await link_service.resolve("nothere")

    async def test_resolve_malformed_slug(self, link_service, db, monkeypatch):
        async def fail(slug, exclude_id=None):
            raise AssertionError("store should not be queried")

        monkeypatch.setattr(db.links, "find_by_slug", fail)

        with pytest.raises(NotFoundError):
            await link_service.resolve("bad slug!")

    async def test_record_visit(self, link_service, db, sample_urls):
        link = await link_service.create_short_link(sample_urls[0])

        visit = await link_service.record_visit(link.id, ip_address="203.0.113.7", user_agent="pytest")
        assert visit.link_id == link.id
        assert visit.ip_address == "203.0.113.7"
        assert await db.visits.count_for_link(link.id) == 1


@pytest.mark.asyncio
class TestOwnedLinks:
    """Test owner-scoped update, delete and listing."""

    async def test_update_custom_slug(self, link_service, sample_urls):
        link = await link_service.create_short_link(sample_urls[0], owner_id="owner")

        updated = await link_service.update_link(link.id, "owner", "renamed")
        assert updated.custom_slug == "renamed"
        assert updated.short_slug == link.short_slug

        resolved = await link_service.resolve("renamed")
        assert resolved.id == link.id

    async def test_update_to_own_slug(self, link_service, sample_urls):
        link = await link_service.create_short_link(sample_urls[0], custom_slug="mine", owner_id="owner")

        updated = await link_service.update_link(link.id, "owner", "mine")
        assert updated.custom_slug == "mine"

    async def test_update_conflict_leaves_link_unchanged(self, link_service, sample_urls):
        await link_service.create_short_link(sample_urls[0], custom_slug="taken", owner_id="owner")
        link = await link_service.create_short_link(sample_urls[1], owner_id="owner")

        with pytest.raises(ConflictError):
            await link_service.update_link(link.id, "owner", "taken")

        resolved = await link_service.resolve(link.short_slug)
        assert resolved.custom_slug is None

    async def test_update_requires_slug(self, link_service, sample_urls):
        link = await link_service.create_short_link(sample_urls[0], owner_id="owner")

        with pytest.raises(ValidationError, match="required"):
            await link_service.update_link(link.id, "owner", None)

    async def test_update_not_owner(self, link_service, sample_urls):
        link = await link_service.create_short_link(sample_urls[0], owner_id="owner")

        with pytest.raises(NotFoundError):
            await link_service.update_link(link.id, "someone-else", "renamed")

    async def test_update_anonymous_link(self, link_service, sample_urls):
        link = await link_service.create_short_link(sample_urls[0])

        with pytest.raises(NotFoundError):
            await link_service.update_link(link.id, "owner", "renamed")

    async def test_delete_removes_visits(self, link_service, db, sample_urls):
        link = await link_service.create_short_link(sample_urls[0], owner_id="owner")
        await link_service.resolve(link.short_slug)
        await link_service.record_visit(link.id)

        await link_service.delete_link(link.id, "owner")

        assert await db.visits.count_for_link(link.id) == 0
        with pytest.raises(NotFoundError):
            await link_service.resolve(link.short_slug)

    async def test_delete_not_owner(self, link_service, sample_urls):
        link = await link_service.create_short_link(sample_urls[0], owner_id="owner")

        with pytest.raises(NotFoundError):
            await link_service.delete_link(link.id, "someone-else")

        resolved = await link_service.resolve(link.short_slug)
        assert resolved.id == link.id

    async def test_delete_unknown(self, link_service):
        with pytest.raises(NotFoundError):
            await link_service.delete_link("missing", "owner")

    async def test_list_newest_first_with_visits(self, link_service, sample_urls):
        first = await link_service.create_short_link(sample_urls[0], owner_id="owner")
        second = await link_service.create_short_link(sample_urls[1], owner_id="owner")
        await link_service.create_short_link(sample_urls[2], owner_id="other")
        await link_service.record_visit(first.id, user_agent="pytest")

        links = await link_service.list_for_owner("owner")

        assert [link.id for link in links] == [second.id, first.id]
        assert links[0].visits == []
        assert len(links[1].visits) == 1
        assert links[1].visits[0].user_agent == "pytest"

    async def test_list_empty(self, link_service):
        assert await link_service.list_for_owner("nobody") == []


@pytest.mark.asyncio
class TestHealth:
    """Test health reporting."""

    async def test_health_check(self, link_service):
        health = await link_service.health_check()
        assert health == {"database": True, "overall": True}


async def _no_match(slug, exclude_id=None):
    return None


@pytest.mark.asyncio
class TestUniqueConstraintRace:
    """A slug taken between the lookup and the write is still a conflict."""

    async def test_create_custom_slug_race(self, link_service, db, sample_urls, monkeypatch):
        await link_service.create_short_link(sample_urls[0], custom_slug="raced")
        monkeypatch.setattr(db.links, "find_by_slug", _no_match)

        with pytest.raises(ConflictError, match="already taken"):
            await link_service.create_short_link(sample_urls[1], custom_slug="raced")

    async def test_update_custom_slug_race(self, link_service, db, sample_urls, monkeypatch):
        await link_service.create_short_link(sample_urls[0], custom_slug="raced", owner_id="owner")
        link = await link_service.create_short_link(sample_urls[1], owner_id="owner")
        monkeypatch.setattr(db.links, "find_by_slug", _no_match)

        with pytest.raises(ConflictError, match="already taken"):
            await link_service.update_link(link.id, "owner", "raced")

        stored = db.links._state.links[link.id]
        assert stored.custom_slug is None
