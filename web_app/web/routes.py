"""Redirect route for short links."""

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

from shortlinks.common.headers import get_user_agent
from ..dependencies import request_client_ip
from ..errors import unexpected_errors

router = APIRouter()


@router.get("/{slug}", include_in_schema=False)
async def redirect_to_url(request: Request, slug: str):
    """Redirect to the original URL and record the visit."""
    service = request.app.state.link_service
    config = request.app.state.config

    with unexpected_errors("Failed to redirect"):
        link = await service.resolve(slug)
        await service.record_visit(
            link.id,
            ip_address=request_client_ip(request, trust_forwarded=config.trust_forwarded_headers),
            user_agent=get_user_agent(request.headers),
        )

    # 302 so that every visit reaches the server and is counted
    return RedirectResponse(url=link.original_url, status_code=status.HTTP_302_FOUND)
