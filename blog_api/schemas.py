"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.

Wire names are camelCase (authorId, imageUrl, ...); request bodies accept
either camelCase or the snake_case field names.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class SuccessResponse(CamelModel):
    success: bool = True


# ──────────────────────────── Auth ────────────────────────────────────────

class SignupRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)


class SigninRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(CamelModel):
    token: str


# ──────────────────────────── Users ───────────────────────────────────────

class UserResponse(CamelModel):
    id: str
    email: str
    name: str


class ProfilePost(CamelModel):
    id: str
    title: str
    published: bool


class ProfileResponse(UserResponse):
    posts: list[ProfilePost] = []


class UserUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)


class PasswordChange(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


# ──────────────────────────── Posts ───────────────────────────────────────

class AuthorSummary(CamelModel):
    name: str
    email: str


class PostCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    published: bool = False
    image_url: Optional[str] = Field(None, max_length=500)


class PostUpdate(CamelModel):
    """Partial update — only fields present in the request body are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    published: Optional[bool] = None
    image_url: Optional[str] = Field(None, max_length=500)


class PostResponse(CamelModel):
    id: str
    title: str
    content: str
    published: bool
    author_id: str
    image_url: Optional[str]
    created_at: datetime
    like_count: int = 0
    author: Optional[AuthorSummary] = None


# ──────────────────────────── Comments & likes ────────────────────────────

class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1)


class CommentResponse(CamelModel):
    id: str
    content: str
    post_id: str
    author_id: str
    created_at: datetime
    author: Optional[AuthorSummary] = None


class LikeStatus(CamelModel):
    liked: bool
    like_count: int


# ──────────────────────────── Uploads ─────────────────────────────────────

class ImageUploadResponse(CamelModel):
    success: bool = True
    image_url: str
