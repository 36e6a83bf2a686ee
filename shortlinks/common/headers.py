"""Header parsing utilities for the link shortener."""

from typing import Dict, Mapping, Optional


def extract_forwarded_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """Extract X-Forwarded-* headers from request.

    Args:
        headers: Request headers mapping

    Returns:
        Dictionary with forwarded_proto, forwarded_host, forwarded_for
    """
    # Convert headers to lowercase for case-insensitive lookup
    headers_lower = {k.lower(): v for k, v in headers.items()}

    return {
        "forwarded_proto": headers_lower.get("x-forwarded-proto"),
        "forwarded_host": headers_lower.get("x-forwarded-host"),
        "forwarded_for": headers_lower.get("x-forwarded-for"),
    }


def get_client_ip(
    headers: Mapping[str, str],
    peer_host: Optional[str] = None,
    trust_forwarded: bool = False,
) -> Optional[str]:
    """Work out the requester address.

    Priority:
    1. First hop of X-Forwarded-For (only when the proxy is trusted)
    2. Socket peer address

    Args:
        headers: Request headers
        peer_host: Address of the connected peer, if known
        trust_forwarded: Whether X-Forwarded-For may be believed

    Returns:
        Client address or None when nothing is known
    """
    if trust_forwarded:
        forwarded_for = extract_forwarded_headers(headers)["forwarded_for"]
        if forwarded_for:
            first_hop = forwarded_for.split(",")[0].strip()
            if first_hop:
                return first_hop

    return peer_host or None


def get_user_agent(headers: Mapping[str, str]) -> Optional[str]:
    """User-Agent header, or None when absent or blank."""
    for k, v in headers.items():
        if k.lower() == "user-agent":
            return v.strip() or None
    return None
