"""Validation utilities for the link shortener."""

import re
from urllib.parse import urlparse
from typing import Tuple

from pydantic import EmailStr, TypeAdapter, ValidationError


RESERVED_WORDS = {
    "api", "health", "admin", "static", "assets", "favicon",
    "robots", "sitemap", "docs", "redoc", "openapi", "auth", "urls",
}

_EMAIL_ADAPTER = TypeAdapter(EmailStr)


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > 2048:
        return False, "URL is too long (max 2048 characters)"

    try:
        result = urlparse(url)

        # Check if scheme is http or https
        if result.scheme not in ["http", "https"]:
            return False, "URL must use http or https protocol"

        # Check if host exists
        if not result.hostname:
            return False, "URL must have a valid domain"

        return True, ""

    except ValueError as e:
        return False, f"Invalid URL format: {str(e)}"


def is_valid_short_code(short_code: str, min_length: int = 3, max_length: int = 32) -> Tuple[bool, str]:
    """Validate a user-chosen slug.

    Args:
        short_code: The slug to validate
        min_length: Minimum length for the slug
        max_length: Maximum length for the slug

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not short_code or not isinstance(short_code, str):
        return False, "Custom slug is required"

    if len(short_code) < min_length:
        return False, f"Custom slug must be at least {min_length} characters"

    if len(short_code) > max_length:
        return False, f"Custom slug must be at most {max_length} characters"

    # Only allow alphanumeric characters, hyphens, and underscores
    if not re.match(r'^[a-zA-Z0-9_-]+$', short_code):
        return False, "Custom slug can only contain letters, numbers, hyphens, and underscores"

    # Slugs share the root path with the API and docs
    if short_code.lower() in RESERVED_WORDS:
        return False, f"'{short_code}' is a reserved word and cannot be used"

    return True, ""


def is_valid_email(email: str) -> bool:
    """Check an email address with email-validator (no DNS lookups)."""
    if not email or not isinstance(email, str):
        return False
    try:
        _EMAIL_ADAPTER.validate_python(email)
    except ValidationError:
        return False
    return True


def is_valid_password(password: str) -> bool:
    """At least 8 characters with an uppercase letter, a lowercase letter and a digit."""
    if not password or not isinstance(password, str) or len(password) < 8:
        return False
    return (
        any(c.isupper() for c in password)
        and any(c.islower() for c in password)
        and any(c.isdigit() for c in password)
    )
