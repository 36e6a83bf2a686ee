"""Core business logic for the link shortener."""

from .shortcode import SlugGenerator
from .service import LinkService
from .auth import AuthService, AuthContext
from .tokens import TokenService

__all__ = ["SlugGenerator", "LinkService", "AuthService", "AuthContext", "TokenService"]
