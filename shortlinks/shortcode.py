"""Slug generation utilities."""

import secrets
import string
from typing import Optional


class SlugGenerator:
    """Generate random slugs for links."""

    # URL-safe characters (alphanumeric, case-sensitive, plus '_' and '-')
    ALPHABET = string.ascii_letters + string.digits + "_-"

    def __init__(self, default_length: int = 6):
        """Initialize slug generator.

        Args:
            default_length: Default length for generated slugs
        """
        if default_length < 1:
            raise ValueError("Slug length must be positive")
        self.default_length = default_length

    def generate(self, length: Optional[int] = None) -> str:
        """Generate a random slug.

        Args:
            length: Length of the slug (uses default if not specified)

        Returns:
            Random slug drawn from ALPHABET
        """
        length = length or self.default_length
        return ''.join(secrets.choice(self.ALPHABET) for _ in range(length))

    @staticmethod
    def is_valid_format(slug: str) -> bool:
        """Check if slug only uses characters from ALPHABET."""
        return bool(slug) and all(c in SlugGenerator.ALPHABET for c in slug)
