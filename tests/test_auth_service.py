"""Tests for registration, login and token authentication."""

import pytest

from shortlinks.auth import AuthContext
from shortlinks.errors import AuthError, ConflictError, ValidationError
from shortlinks.passwords import verify_password


@pytest.mark.asyncio
class TestRegister:
    """Test account registration."""

    async def test_register(self, auth_service, db, tokens):
        user, token = await auth_service.register("User@Example.com ", "Password123")

        assert user.email == "user@example.com"
        assert tokens.verify(token) == user.id

        stored = await db.users.get_by_email("user@example.com")
        assert stored.password != "Password123"
        assert verify_password("Password123", stored.password)

    async def test_register_duplicate(self, auth_service):
        await auth_service.register("user@example.com", "Password123")

        with pytest.raises(ConflictError, match="User already exists"):
            await auth_service.register("USER@example.com", "Password456")

    async def test_register_missing_fields(self, auth_service):
        with pytest.raises(ValidationError, match="required"):
            await auth_service.register("", "Password123")

        with pytest.raises(ValidationError, match="required"):
            await auth_service.register("user@example.com", None)

    async def test_register_bad_email(self, auth_service):
        with pytest.raises(ValidationError, match="Invalid email format"):
            await auth_service.register("not-an-email", "Password123")

    async def test_register_weak_password(self, auth_service):
        with pytest.raises(ValidationError, match="Password must be"):
            await auth_service.register("user@example.com", "password")


@pytest.mark.asyncio
class TestLogin:
    """Test credential checks."""

    async def test_login(self, auth_service, tokens):
        registered, _ = await auth_service.register("user@example.com", "Password123")

        user, token = await auth_service.login("user@example.com", "Password123")
        assert user.id == registered.id
        assert tokens.verify(token) == registered.id

    async def test_wrong_password_and_unknown_email_look_the_same(self, auth_service):
        await auth_service.register("user@example.com", "Password123")

        with pytest.raises(AuthError) as wrong_password:
            await auth_service.login("user@example.com", "Password124")
        with pytest.raises(AuthError) as unknown_email:
            await auth_service.login("nobody@example.com", "Password123")

        assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"

    async def test_login_missing_fields(self, auth_service):
        with pytest.raises(ValidationError):
            await auth_service.login(None, None)


@pytest.mark.asyncio
class TestAuthenticate:
    """Test Authorization header handling."""

    async def test_bearer_token(self, auth_service):
        user, token = await auth_service.register("user@example.com", "Password123")

        context = auth_service.authenticate(f"Bearer {token}")
        assert context == AuthContext(user_id=user.id)

    async def test_missing_header(self, auth_service):
        for header in [None, "", "Bearer ", "Basic abc", "eyJhbGciOiJIUzI1NiJ9.e30.sig"]:
            with pytest.raises(AuthError, match="Authentication required"):
                auth_service.authenticate(header)

    async def test_invalid_token(self, auth_service):
        with pytest.raises(AuthError, match="Invalid or expired token"):
            auth_service.authenticate("Bearer abc.def.ghi")
