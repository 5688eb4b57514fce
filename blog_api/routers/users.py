"""
Profile endpoints (all require auth and act on the caller's own account):
  GET /user/profile         — account details + the caller's posts
  PUT /user/update          — change name and email
  PUT /user/change-password — change password after checking the current one
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.auth import get_current_user_id
from blog_api.database import get_db
from blog_api.errors import BadRequest, NotFound, store_errors
from blog_api.models import Post, User
from blog_api.schemas import (
    PasswordChange,
    ProfilePost,
    ProfileResponse,
    SuccessResponse,
    UserResponse,
    UserUpdate,
)
from blog_api.security import hash_password, verify_password
from blog_api.validation import json_body

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/user/profile", response_model=ProfileResponse)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    with store_errors("Error fetching user profile"):
        user = await db.get(User, user_id)
        if not user:
            raise NotFound("User not found")
        rows = await db.execute(
            select(Post.id, Post.title, Post.published)
            .where(Post.author_id == user_id)
            .order_by(Post.created_at.desc())
        )
        posts = [ProfilePost(id=r.id, title=r.title, published=r.published) for r in rows.all()]

    return ProfileResponse(id=user.id, email=user.email, name=user.name, posts=posts)


@router.put("/user/update", response_model=UserResponse)
async def update_profile(
    user_id: str = Depends(get_current_user_id),
    body: UserUpdate = Depends(json_body(UserUpdate)),
    db: AsyncSession = Depends(get_db),
):
    with store_errors("Error updating profile"):
        taken = await db.execute(
            select(User.id).where(User.email == body.email, User.id != user_id)
        )
        if taken.scalar_one_or_none():
            raise BadRequest("Email is already taken")

        user = await db.get(User, user_id)
        if not user:
            raise NotFound("User not found")

        user.name = body.name
        user.email = body.email
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise BadRequest("Email is already taken")

    logger.info("Profile updated for user %s", user_id)
    return UserResponse.model_validate(user)


@router.put("/user/change-password", response_model=SuccessResponse)
async def change_password(
    user_id: str = Depends(get_current_user_id),
    body: PasswordChange = Depends(json_body(PasswordChange)),
    db: AsyncSession = Depends(get_db),
):
    with store_errors("Error changing password"):
        user = await db.get(User, user_id)
        if not user:
            raise NotFound("User not found")

        valid, _ = verify_password(body.current_password, user.password)
        if not valid:
            raise BadRequest("Current password is incorrect")

        user.password = hash_password(body.new_password)
        await db.flush()

    logger.info("Password changed for user %s", user_id)
    return SuccessResponse()
