"""API routes implementation."""

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from datetime import datetime, timezone

from .schemas import (
    AuthData,
    CredentialsRequest,
    ErrorResponse,
    HealthResponse,
    LinkResponse,
    ShortenRequest,
    SuccessResponse,
    UpdateLinkRequest,
    UserResponse,
    VisitResponse,
)
from shortlinks.auth import AuthContext
from shortlinks.common.url_builder import build_short_url
from shortlinks.database.models import Link, User
from ..dependencies import get_current_user
from ..errors import unexpected_errors
from ..web.routes import redirect_to_url

router = APIRouter()
auth_router = APIRouter()
urls_router = APIRouter()


def _auth_data(user: User, token: str) -> SuccessResponse[AuthData]:
    return SuccessResponse[AuthData](
        data=AuthData(user=UserResponse(**user.to_dict()), token=token)
    )


def _link_response(request: Request, link: Link, with_analytics: bool = False) -> LinkResponse:
    config = request.app.state.config
    data = link.to_dict()
    data["short_url"] = build_short_url(
        short_code=link.slug,
        base_url=config.base_url,
        path_prefix=config.path_prefix,
    )
    if with_analytics:
        data["analytics"] = [VisitResponse(**visit.to_dict()) for visit in link.visits]
    return LinkResponse(**data)


async def _create_link(request: Request, body: ShortenRequest, owner_id=None) -> SuccessResponse[LinkResponse]:
    service = request.app.state.link_service

    with unexpected_errors("Failed to create short URL"):
        link = await service.create_short_link(
            original_url=body.url,
            custom_slug=body.custom_slug,
            owner_id=owner_id,
        )

    return SuccessResponse[LinkResponse](data=_link_response(request, link))


@auth_router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[AuthData],
    responses={400: {"model": ErrorResponse, "description": "Invalid input or user exists"}},
    summary="Register",
)
async def register(request: Request, body: CredentialsRequest):
    """Create an account and return it with a bearer token."""
    auth = request.app.state.auth_service

    with unexpected_errors("Failed to register user"):
        user, token = await auth.register(body.email, body.password)

    return _auth_data(user, token)


@auth_router.post(
    "/login",
    response_model=SuccessResponse[AuthData],
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
    summary="Log in",
)
async def login(request: Request, body: CredentialsRequest):
    """Check credentials and return a bearer token."""
    auth = request.app.state.auth_service

    with unexpected_errors("Failed to login"):
        user, token = await auth.login(body.email, body.password)

    return _auth_data(user, token)


@urls_router.post(
    "/public",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[LinkResponse],
    responses={400: {"model": ErrorResponse, "description": "Invalid URL or slug taken"}},
    summary="Create anonymous short URL",
)
async def create_public_link(request: Request, body: ShortenRequest):
    """Create a short URL without an owner."""
    return await _create_link(request, body)


@urls_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[LinkResponse],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL or slug taken"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
    },
    summary="Create owned short URL",
)
async def create_link(
    request: Request,
    body: ShortenRequest,
    user: AuthContext = Depends(get_current_user),
):
    """Create a short URL owned by the caller."""
    return await _create_link(request, body, owner_id=user.user_id)


@urls_router.get(
    "",
    response_model=SuccessResponse[List[LinkResponse]],
    responses={401: {"model": ErrorResponse, "description": "Authentication required"}},
    summary="List my short URLs",
)
async def list_links(request: Request, user: AuthContext = Depends(get_current_user)):
    """List the caller's links, newest first, with visit events."""
    service = request.app.state.link_service

    with unexpected_errors("Failed to fetch URLs"):
        links = await service.list_for_owner(user.user_id)

    return SuccessResponse[List[LinkResponse]](
        data=[_link_response(request, link, with_analytics=True) for link in links]
    )


@urls_router.patch(
    "/{link_id}",
    response_model=SuccessResponse[LinkResponse],
    responses={
        400: {"model": ErrorResponse, "description": "Missing, invalid or taken slug"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
        404: {"model": ErrorResponse, "description": "Not found or not yours"},
    },
    summary="Change custom slug",
)
async def update_link(
    request: Request,
    link_id: str,
    body: UpdateLinkRequest,
    user: AuthContext = Depends(get_current_user),
):
    """Set a new custom slug on one of the caller's links."""
    service = request.app.state.link_service

    with unexpected_errors("Failed to update URL"):
        link = await service.update_link(link_id, user.user_id, body.custom_slug)

    return SuccessResponse[LinkResponse](data=_link_response(request, link))


@urls_router.delete(
    "/{link_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        404: {"model": ErrorResponse, "description": "Not found or not yours"},
    },
    summary="Delete short URL",
)
async def delete_link(
    request: Request,
    link_id: str,
    user: AuthContext = Depends(get_current_user),
):
    """Delete one of the caller's links and its visit events."""
    service = request.app.state.link_service

    with unexpected_errors("Failed to delete URL"):
        await service.delete_link(link_id, user.user_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Same redirect as the root route, kept for clients that link through the API
urls_router.add_api_route("/{slug}", redirect_to_url, methods=["GET"], include_in_schema=False)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.link_service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
