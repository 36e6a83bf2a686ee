"""JSON API routers."""

from fastapi import APIRouter

from .routes import router, auth_router, urls_router

api_router = APIRouter()
api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(urls_router, prefix="/urls", tags=["URLs"])
api_router.include_router(router, tags=["Health"])

__all__ = ["api_router"]
