"""
Comment and like endpoints:
  POST /blog/{id}/comment  — comment on a post (auth, any user)
  GET  /blog/{id}/comments — list a post's comments, newest first
  POST /blog/{id}/like     — like a post (auth, idempotent)
  POST /blog/{id}/unlike   — remove a like (auth, idempotent)
  GET  /blog/{id}/like     — whether the caller likes the post + like count
"""
import logging

from fastapi import APIRouter, Depends
from opentelemetry import trace
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.auth import get_current_user_id
from blog_api.database import get_db
from blog_api.errors import NotFound, store_errors
from blog_api.models import Comment, Like, Post
from blog_api.schemas import (
    AuthorSummary,
    CommentCreate,
    CommentResponse,
    LikeStatus,
    SuccessResponse,
)
from blog_api.validation import json_body

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


def _build_comment_response(comment: Comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        content=comment.content,
        post_id=comment.post_id,
        author_id=comment.author_id,
        created_at=comment.created_at,
        author=AuthorSummary.model_validate(comment.author) if comment.author else None,
    )


async def _require_post(db: AsyncSession, post_id: str) -> None:
    exists = await db.execute(select(Post.id).where(Post.id == post_id))
    if exists.scalar_one_or_none() is None:
        raise NotFound("Post not found")


# ─────────────────────────── Comments ─────────────────────────────────────

@router.post("/blog/{post_id}/comment", response_model=CommentResponse)
async def add_comment(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    body: CommentCreate = Depends(json_body(CommentCreate)),
    db: AsyncSession = Depends(get_db),
):
    with tracer.start_as_current_span("add_comment"):
        with store_errors("Error adding comment"):
            await _require_post(db, post_id)

            comment = Comment(content=body.content, post_id=post_id, author_id=user_id)
            db.add(comment)
            await db.flush()
            await db.refresh(comment, attribute_names=["author"])

        logger.info("Comment %s added to post %s by %s", comment.id, post_id, user_id)
        return _build_comment_response(comment)


@router.get("/blog/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(post_id: str, db: AsyncSession = Depends(get_db)):
    with store_errors("Error fetching comments"):
        await _require_post(db, post_id)
        rows = await db.execute(
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        comments = rows.unique().scalars().all()
    return [_build_comment_response(c) for c in comments]


# ─────────────────────────── Likes ────────────────────────────────────────
# Likes are set membership keyed by (user_id, post_id); liking twice or
# unliking something never liked is a no-op, not an error.

@router.post("/blog/{post_id}/like", response_model=SuccessResponse)
async def like_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    with store_errors("Error liking post"):
        await _require_post(db, post_id)

        existing = await db.execute(
            select(Like).where(Like.user_id == user_id, Like.post_id == post_id)
        )
        if existing.scalar_one_or_none():
            return SuccessResponse()  # already liked

        db.add(Like(user_id=user_id, post_id=post_id))
        try:
            await db.flush()
        except IntegrityError:
            # A concurrent like for the same pair won; the edge exists either way
            await db.rollback()
            return SuccessResponse()

    logger.debug("%s liked %s", user_id, post_id)
    return SuccessResponse()


@router.post("/blog/{post_id}/unlike", response_model=SuccessResponse)
async def unlike_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    with store_errors("Error unliking post"):
        await _require_post(db, post_id)
        await db.execute(
            delete(Like).where(Like.user_id == user_id, Like.post_id == post_id)
        )
    return SuccessResponse()


@router.get("/blog/{post_id}/like", response_model=LikeStatus)
async def like_status(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    with store_errors("Error fetching like status"):
        await _require_post(db, post_id)
        liked = await db.execute(
            select(Like.user_id).where(Like.user_id == user_id, Like.post_id == post_id)
        )
        count = await db.execute(
            select(func.count()).select_from(Like).where(Like.post_id == post_id)
        )
        return LikeStatus(liked=liked.scalar_one_or_none() is not None, like_count=count.scalar_one())
