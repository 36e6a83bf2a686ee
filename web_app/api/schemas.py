"""Pydantic schemas for API requests and responses.

JSON keys are camelCase; Python attributes stay snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Generic, List, Literal, Optional, TypeVar
from datetime import datetime


T = TypeVar("T")


class APIModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CredentialsRequest(APIModel):
    """Request to register or log in."""

    email: Optional[str] = Field(None, description="Account email")
    password: Optional[str] = Field(None, description="Account password")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"email": "user@example.com", "password": "Password123"}
            ]
        },
    )


class ShortenRequest(APIModel):
    """Request to shorten a URL."""

    url: Optional[str] = Field(None, description="The URL to shorten")
    custom_slug: Optional[str] = Field(None, description="Optional custom slug")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "url": "https://example.com/very/long/path/to/resource",
                    "customSlug": None
                },
                {
                    "url": "https://github.com/user/repo",
                    "customSlug": "myrepo"
                }
            ]
        },
    )


class UpdateLinkRequest(APIModel):
    """Request to change a link's custom slug."""

    custom_slug: Optional[str] = Field(None, description="New custom slug")


class UserResponse(APIModel):
    """Public view of an account."""

    id: str
    email: str
    created_at: datetime


class AuthData(APIModel):
    """Account plus bearer token."""

    user: UserResponse
    token: str


class VisitResponse(APIModel):
    """Projection of one visit event."""

    visited_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class LinkResponse(APIModel):
    """A short link."""

    id: str
    original_url: str
    short_slug: str
    custom_slug: Optional[str] = None
    user_id: Optional[str] = None
    visit_count: int
    created_at: datetime
    updated_at: datetime
    short_url: str = Field(..., description="The complete short URL")
    analytics: Optional[List[VisitResponse]] = Field(None, description="Visit events (listings only)")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "id": "5f0c6f8e-3b9b-4c36-9b0e-2a9f3c1d7e11",
                    "originalUrl": "https://example.com/very/long/path",
                    "shortSlug": "abc123",
                    "customSlug": None,
                    "userId": None,
                    "visitCount": 0,
                    "createdAt": "2024-01-01T12:00:00Z",
                    "updatedAt": "2024-01-01T12:00:00Z",
                    "shortUrl": "https://short.link/abc123"
                }
            ]
        },
    )


class SuccessResponse(APIModel, Generic[T]):
    """Success envelope."""

    status: Literal["success"] = "success"
    data: T


class ErrorResponse(APIModel):
    """Error envelope."""

    status: Literal["error"] = "error"
    message: str = Field(..., description="Error message")


class HealthResponse(APIModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    timestamp: datetime = Field(..., description="Check timestamp")
