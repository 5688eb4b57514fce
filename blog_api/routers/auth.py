"""
Account endpoints:
  POST /signup — create an account, returns a token
  POST /signin — exchange email + password for a token
"""
import logging

from fastapi import APIRouter, Depends
from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db
from blog_api.errors import BadRequest, Unauthenticated, store_errors
from blog_api.models import User
from blog_api.schemas import SigninRequest, SignupRequest, TokenResponse
from blog_api.security import hash_password, issue_token, verify_password
from blog_api.telemetry import AUTH_FAILURES_TOTAL, SIGNUPS_TOTAL
from blog_api.validation import json_body

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post("/signup", response_model=TokenResponse)
async def signup(
    body: SignupRequest = Depends(json_body(SignupRequest)),
    db: AsyncSession = Depends(get_db),
):
    with tracer.start_as_current_span("signup"):
        with store_errors("Internal server error"):
            existing = await db.execute(select(User.id).where(User.email == body.email))
            if existing.scalar_one_or_none():
                raise BadRequest("Email is already taken")

            user = User(
                email=body.email,
                password=hash_password(body.password),
                name=body.name,
            )
            db.add(user)
            try:
                await db.flush()  # get user.id and surface the unique constraint now
            except IntegrityError:
                # Lost a race with a concurrent signup for the same email
                await db.rollback()
                raise BadRequest("Email is already taken")

        SIGNUPS_TOTAL.inc()
        logger.info("Created user %s", user.id)
        return TokenResponse(token=issue_token(user.id))


@router.post("/signin", response_model=TokenResponse)
async def signin(
    body: SigninRequest = Depends(json_body(SigninRequest)),
    db: AsyncSession = Depends(get_db),
):
    with tracer.start_as_current_span("signin"):
        with store_errors("Internal server error"):
            result = await db.execute(select(User).where(User.email == body.email))
            user = result.scalar_one_or_none()

            # Distinct messages mirror the existing client contract; both are 401.
            if user is None:
                AUTH_FAILURES_TOTAL.labels(reason="bad_credentials").inc()
                raise Unauthenticated("Invalid email")

            valid, new_hash = verify_password(body.password, user.password)
            if not valid:
                AUTH_FAILURES_TOTAL.labels(reason="bad_credentials").inc()
                raise Unauthenticated("Invalid password")

            if new_hash:
                user.password = new_hash
                logger.info("Upgraded password hash for user %s", user.id)

        return TokenResponse(token=issue_token(user.id))
