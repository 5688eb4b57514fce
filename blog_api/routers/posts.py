"""
Blog post endpoints:
  POST   /blog          — create a post (auth)
  PUT    /blog/{id}     — update own post (auth, owner only)
  DELETE /blog/{id}     — delete own post and its comments (auth, owner only)
  GET    /blog/{id}     — fetch a single post, any publish state
  GET    /blogs         — published posts, newest first
  GET    /blogs/recent  — the few newest published posts
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from opentelemetry import trace
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.auth import get_current_user_id
from blog_api.config import settings
from blog_api.database import get_db
from blog_api.errors import NotFound, store_errors
from blog_api.models import Comment, Like, Post
from blog_api.schemas import AuthorSummary, PostCreate, PostResponse, PostUpdate, SuccessResponse
from blog_api.telemetry import POSTS_CREATED_TOTAL
from blog_api.validation import json_body

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


def _build_post_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        published=post.published,
        author_id=post.author_id,
        image_url=post.image_url,
        created_at=post.created_at,
        like_count=len(post.likes),
        author=AuthorSummary.model_validate(post.author) if post.author else None,
    )


async def load_post(
    db: AsyncSession,
    post_id: str,
    author_id: Optional[str] = None,
) -> Optional[Post]:
    """
    Fetch a post with author and likes loaded.

    When `author_id` is given the lookup is scoped to that owner, so a post
    owned by someone else is indistinguishable from a missing one.
    """
    stmt = select(Post).where(Post.id == post_id)
    if author_id is not None:
        stmt = stmt.where(Post.author_id == author_id)
    result = await db.execute(stmt.execution_options(populate_existing=True))
    return result.unique().scalar_one_or_none()


@router.post("/blog", response_model=PostResponse)
async def create_post(
    user_id: str = Depends(get_current_user_id),
    body: PostCreate = Depends(json_body(PostCreate)),
    db: AsyncSession = Depends(get_db),
):
    with tracer.start_as_current_span("create_post") as span:
        with store_errors("Error creating post"):
            post = Post(
                title=body.title,
                content=body.content,
                published=body.published,
                author_id=user_id,
                image_url=body.image_url,
            )
            db.add(post)
            await db.flush()  # materialise post.id
            post = await load_post(db, post.id)

        span.set_attribute("post.id", post.id)
        POSTS_CREATED_TOTAL.inc()
        logger.info("Post created: %s by user %s", post.id, user_id)
        return _build_post_response(post)


@router.put("/blog/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    body: PostUpdate = Depends(json_body(PostUpdate)),
    db: AsyncSession = Depends(get_db),
):
    with store_errors("Error updating post"):
        post = await load_post(db, post_id, author_id=user_id)
        if post is None:
            raise NotFound("Post not found or you don't have permission")

        for field, value in body.model_dump(exclude_unset=True).items():
            if value is None and field != "image_url":
                continue  # title/content/published are not nullable
            setattr(post, field, value)
        await db.flush()

    logger.info("Post updated: %s", post_id)
    return _build_post_response(post)


@router.delete("/blog/{post_id}", response_model=SuccessResponse)
async def delete_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a post the caller owns.

    Comments and like edges reference the post, so they go first. These are
    sequential statements in one session, committed together at the end of
    the request.
    """
    with tracer.start_as_current_span("delete_post"):
        with store_errors("Error deleting post"):
            post = await load_post(db, post_id, author_id=user_id)
            if post is None:
                raise NotFound("Post not found or you don't have permission")

            await db.execute(delete(Comment).where(Comment.post_id == post_id))
            await db.execute(delete(Like).where(Like.post_id == post_id))
            await db.execute(delete(Post).where(Post.id == post_id))
            await db.flush()

    logger.info("Post deleted: %s by user %s", post_id, user_id)
    return SuccessResponse()


@router.get("/blog/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, db: AsyncSession = Depends(get_db)):
    with store_errors("Error fetching post"):
        post = await load_post(db, post_id)
    if post is None:
        raise NotFound("Post not found")
    return _build_post_response(post)


@router.get("/blogs", response_model=list[PostResponse])
async def list_posts(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    with store_errors("Error fetching posts"):
        rows = await db.execute(
            select(Post)
            .where(Post.published.is_(True))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(limit)
            .offset(offset)
        )
        posts = rows.unique().scalars().all()
    return [_build_post_response(p) for p in posts]


@router.get("/blogs/recent", response_model=list[PostResponse])
async def recent_posts(db: AsyncSession = Depends(get_db)):
    with store_errors("Error fetching recent posts"):
        rows = await db.execute(
            select(Post)
            .where(Post.published.is_(True))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(settings.recent_posts_limit)
        )
        posts = rows.unique().scalars().all()
    return [_build_post_response(p) for p in posts]
