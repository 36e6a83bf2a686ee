"""Per-client fixed-window rate limiting."""

import logging
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from shortlinks.common.headers import get_client_ip
from shortlinks.database.counters import WindowCounter
from ..errors import error_response


RATE_LIMITED_MESSAGE = "Too many requests, please try again later."


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject clients that exceed `limit` requests in the current window with a 429."""

    def __init__(
        self,
        app,
        counter: WindowCounter,
        limit: int,
        trust_forwarded: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize rate limiter.

        Args:
            app: ASGI app
            counter: Window counter shared by all requests
            limit: Requests allowed per client per window
            trust_forwarded: Key clients by X-Forwarded-For instead of the peer address
            logger: Optional logger
        """
        super().__init__(app)
        self.counter = counter
        self.limit = limit
        self.trust_forwarded = trust_forwarded
        self.logger = logger or logging.getLogger("shortlinks.web")

    async def dispatch(self, request: Request, call_next: Callable):
        peer = request.client.host if request.client else None
        client = get_client_ip(request.headers, peer_host=peer, trust_forwarded=self.trust_forwarded) or "unknown"

        count, reset_in = await self.counter.hit(client)
        if count is None:
            # Counter unavailable
            return await call_next(request)

        headers = {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(max(self.limit - count, 0)),
            "RateLimit-Reset": str(reset_in),
        }

        if count > self.limit:
            self.logger.warning(f"Rate limit exceeded for {client}")
            headers["Retry-After"] = str(reset_in)
            return error_response(429, RATE_LIMITED_MESSAGE, headers=headers)

        response = await call_next(request)
        for name, value in headers.items():
            response.headers[name] = value
        return response
