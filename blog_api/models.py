"""
SQLAlchemy ORM models.

Tables:
  users    — credentials + profile (password column holds a salted hash)
  posts    — blog posts, each owned by exactly one author
  comments — comments on a post
  likes    — user × post edges (set membership, composite primary key)
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blog_api.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False
    )
    # Public URL returned by the image relay, stored verbatim
    image_url: Mapped[Optional[str]] = mapped_column(String(500))
    # Set client-side so newest-first ordering is stable within one second
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now, nullable=False)

    author = relationship("User", lazy="joined")
    likes = relationship("Like", lazy="selectin")

    __table_args__ = (
        Index("idx_posts_author", "author_id"),
        Index("idx_posts_created", "created_at"),
    )


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("posts.id"), nullable=False
    )
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now, nullable=False)

    author = relationship("User", lazy="joined")

    __table_args__ = (
        Index("idx_comments_post", "post_id"),
    )


class Like(Base):
    __tablename__ = "likes"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), primary_key=True
    )
    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("posts.id"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
