from datetime import datetime
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field

T = TypeVar("T")


# --- Role ---

class RoleResponse(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


class UpdateUserRole(BaseModel):
    role_id: int = Field(ge=1)


# --- User ---

class UserResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    image: str | None = None
    role: RoleResponse | None = None
    registration_date: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class UserRegister(BaseModel):
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=6, max_length=128)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


# --- Auth ---

class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class MessageResponse(BaseModel):
    message: str


# --- Category ---

class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = ""


class CategoryResponse(CategoryCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


# --- Post ---

class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    content: str = Field(min_length=1)
    category_id: int = Field(ge=1)


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    views: int
    posted_date: datetime | None = None
    count_likes: int = 0
    count_comments: int = 0
    category_id: int
    category_name: str | None = None
    user: UserResponse | None = None


class PostDetail(PostResponse):
    user_reaction: Literal["Like", "Dislike", "None"] = "None"


# --- Comment ---

class CommentCreate(BaseModel):
    content: str = Field(min_length=1)
    post_id: int = Field(ge=1)
    parent_comment_id: int | None = None


class CommentUpdate(BaseModel):
    content: str = Field(min_length=1)


class CommentWithUser(BaseModel):
    id: int
    content: str
    comment_date: datetime | None = None
    post_id: int
    parent_comment_id: int | None = None
    user: UserResponse | None = None
    count_likes: int = 0
    replies: list["CommentWithUser"] = []


# --- Likes ---

class PostLikeCreate(BaseModel):
    post_id: int = Field(ge=1)
    is_like: bool = True


class PostLikeResponse(BaseModel):
    post_id: int
    user_id: int
    is_like: bool
    model_config = ConfigDict(from_attributes=True)


class CommentLikeCreate(BaseModel):
    comment_id: int = Field(ge=1)


class CommentLikeResponse(BaseModel):
    comment_id: int
    user_id: int
    model_config = ConfigDict(from_attributes=True)


# --- Pagination ---

class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    per_page: int
    total_pages: int
    search_term: str | None = None


CommentWithUser.model_rebuild()
