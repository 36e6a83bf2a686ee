"""Common utilities for the link shortener."""

from .validators import is_valid_url, is_valid_short_code, is_valid_email, is_valid_password
from .headers import extract_forwarded_headers, get_client_ip, get_user_agent
from .url_builder import build_short_url
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "is_valid_short_code",
    "is_valid_email",
    "is_valid_password",
    "extract_forwarded_headers",
    "get_client_ip",
    "get_user_agent",
    "build_short_url",
    "setup_logging",
    "get_logger",
]
