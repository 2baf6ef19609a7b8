"""
Mapping between ORM entities and transport models.

Plain columns are copied by Pydantic (``from_attributes=True``); the
functions below add the computed fields: like balances, comment counts,
category names, the caller's reaction, absolute image URLs, and reply trees.

Relationships that were not eager-loaded read as empty (``lazy="noload"``),
so each mapper only relies on what the matching repository query loads.
"""
from collections import defaultdict
from typing import Callable, Iterable, TypeVar

from forum.config import settings
from forum.models import Comment, Post, User
from forum.pagination import Page
from forum.schemas import (
    CommentWithUser,
    PaginatedResponse,
    PostDetail,
    PostResponse,
    UserResponse,
)

S = TypeVar("S")
D = TypeVar("D")


def resolve_image_url(image: str | None, base_url: str | None = None) -> str | None:
    """
    Turn a stored image path into a URL.

    Without *base_url* the media-relative path is returned
    (``/media/userProfileImages/x.jpg``); with it, an absolute URL.
    """
    if not image:
        return None
    path = f"{settings.MEDIA_URL.rstrip('/')}/{image.lstrip('/')}"
    if base_url is None:
        return path
    return f"{base_url.rstrip('/')}{path}"


def user_to_model(user: User | None, base_url: str | None = None) -> UserResponse | None:
    if user is None:
        return None
    model = UserResponse.model_validate(user)
    model.image = resolve_image_url(user.image, base_url)
    return model


def post_to_model(post: Post, base_url: str | None = None) -> PostResponse:
    likes = sum(1 for like in post.likes if like.is_like)
    dislikes = len(post.likes) - likes
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        views=post.views,
        posted_date=post.posted_date,
        count_likes=likes - dislikes,
        count_comments=len(post.comments),
        category_id=post.category_id,
        category_name=post.category.name if post.category else None,
        user=user_to_model(post.user, base_url),
    )


def post_to_detail(post: Post, current_user_id: int | None, base_url: str | None) -> PostDetail:
    reaction = "None"
    if current_user_id is not None:
        own = next((like for like in post.likes if like.user_id == current_user_id), None)
        if own is not None:
            reaction = "Like" if own.is_like else "Dislike"
    return PostDetail(
        **post_to_model(post, base_url).model_dump(exclude={"user"}),
        user=user_to_model(post.user, base_url),
        user_reaction=reaction,
    )


def comment_to_model_with_user(comment: Comment, base_url: str | None = None) -> CommentWithUser:
    return CommentWithUser(
        id=comment.id,
        content=comment.content,
        comment_date=comment.comment_date,
        post_id=comment.post_id,
        parent_comment_id=comment.parent_comment_id,
        user=user_to_model(comment.user, base_url),
        count_likes=len(comment.likes),
    )


def comments_to_tree(comments: Iterable[Comment], base_url: str | None = None) -> list[CommentWithUser]:
    """
    Assemble a flat, ordered list of a post's comments into reply trees.

    Returns the top-level comments; every comment's replies keep the
    order of the input list.
    """
    models = [comment_to_model_with_user(c, base_url) for c in comments]
    children: dict[int, list[CommentWithUser]] = defaultdict(list)
    for model in models:
        if model.parent_comment_id is not None:
            children[model.parent_comment_id].append(model)
    for model in models:
        model.replies = children.get(model.id, [])
    known_ids = {m.id for m in models}
    return [m for m in models if m.parent_comment_id is None or m.parent_comment_id not in known_ids]


def page_to_response(page: Page[S], transform: Callable[[S], D]) -> PaginatedResponse[D]:
    return PaginatedResponse(
        items=[transform(item) for item in page.items],
        total=page.total_items,
        page=page.current_page,
        per_page=page.page_size,
        total_pages=page.total_pages,
        search_term=page.search_term,
    )
