"""
Auth gate for protected routes.

  1. Read `Authorization: Bearer <token>`; absent or malformed → 401
  2. Verify the token locally; any failure → 401 (reason is never disclosed)
  3. Attach the verified user id to request.state and hand it to the handler

Declare the dependency before any body dependency so unauthenticated
requests are rejected before the body is read.
"""
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blog_api.errors import Unauthenticated
from blog_api.security import InvalidToken, verify_token
from blog_api.telemetry import AUTH_FAILURES_TOTAL

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None:
        AUTH_FAILURES_TOTAL.labels(reason="missing").inc()
        raise Unauthenticated()

    try:
        claims = verify_token(credentials.credentials)
    except InvalidToken as exc:
        logger.debug("Rejected token on %s: %s", request.url.path, exc)
        AUTH_FAILURES_TOTAL.labels(reason="invalid").inc()
        raise Unauthenticated()

    request.state.user_id = claims.subject
    return claims.subject
