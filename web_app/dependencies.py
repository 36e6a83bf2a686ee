"""Request dependencies shared by the routers."""

from typing import Optional

from fastapi import Header, Request

from shortlinks.auth import AuthContext
from shortlinks.common.headers import get_client_ip


def request_client_ip(request: Request, trust_forwarded: bool = False) -> Optional[str]:
    """Client address of a request (see get_client_ip)."""
    peer = request.client.host if request.client else None
    return get_client_ip(request.headers, peer_host=peer, trust_forwarded=trust_forwarded)


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> AuthContext:
    """Authenticated caller; any failure is a 401."""
    return request.app.state.auth_service.authenticate(authorization)
