"""
User service — registration, authentication and account management.

Passwords are hashed with a per-user salt stored next to the hash; login
re-hashes the submitted password with that salt and asks the repository
whether the (email, hash) pair exists.

Access tokens are short-lived JWTs; refresh tokens are opaque random
strings stored on the user row and rotated on every refresh.
"""
import logging

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from forum import files
from forum.cache import cache
from forum.exceptions import AuthenticationError, ConflictError, NotFoundError, RoleNotFoundError
from forum.mapping import page_to_response, user_to_model
from forum.models import User
from forum.pagination import QueryOptions
from forum.repositories import RoleRepository, UserRepository
from forum.schemas import PaginatedResponse, TokenResponse, UserLogin, UserRegister, UserResponse
from forum.security import (
    create_access_token,
    generate_refresh_token,
    generate_salt,
    hash_password,
    refresh_token_expiry,
)

logger = logging.getLogger(__name__)

_NOT_FOUND = "User not found."


async def _issue_tokens(repo: UserRepository, user: User) -> TokenResponse:
    access_token = create_access_token(user.id, user.email, user.role.name if user.role else "")
    refresh_token = generate_refresh_token()
    await repo.store_refresh_token(user.id, refresh_token, refresh_token_expiry())
    return TokenResponse(access_token=access_token, refresh_token=refresh_token)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def register(db: AsyncSession, data: UserRegister, role_name: str = "User") -> bool:
    """
    Create an account with the given role.

    Returns False when the email is already registered.
    """
    repo = UserRepository(db)
    if await repo.email_exists(data.email):
        return False

    role = await RoleRepository(db).find_by_name(role_name)
    if role is None:
        raise RoleNotFoundError(role_name)

    salt = generate_salt()
    await repo.add(
        User(
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            salt=salt,
            hashed_password=hash_password(data.password, salt),
            role_id=role.id,
        )
    )
    logger.info("Registered %s as %s", data.email, role_name)
    return True


async def login(db: AsyncSession, data: UserLogin) -> TokenResponse:
    repo = UserRepository(db)
    salt = await repo.get_salt(data.email)
    if salt is None:
        raise AuthenticationError("User does not exist.")
    if not await repo.verify(data.email, hash_password(data.password, salt)):
        raise AuthenticationError("Invalid email or password.")

    user = await repo.get_by_email(data.email)
    return await _issue_tokens(repo, user)


async def refresh(db: AsyncSession, refresh_token: str) -> TokenResponse:
    """Exchange a valid refresh token for a new token pair."""
    repo = UserRepository(db)
    owner = await repo.get_by_refresh_token(refresh_token)
    if owner is None or not await repo.is_refresh_token_valid(owner.id, refresh_token):
        raise AuthenticationError("Invalid or expired refresh token.")

    user = await repo.get_by_id(owner.id)
    return await _issue_tokens(repo, user)


async def logout(db: AsyncSession, user_id: int) -> None:
    await UserRepository(db).delete_refresh_token(user_id)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_by_id(db: AsyncSession, user_id: int, base_url: str | None = None) -> UserResponse | None:
    user = await UserRepository(db).get_by_id(user_id)
    return user_to_model(user, base_url)


async def get_all(db: AsyncSession) -> list[UserResponse]:
    users = await UserRepository(db).get_all()
    return [user_to_model(u) for u in users]


async def get_paged(db: AsyncSession, options: QueryOptions) -> PaginatedResponse[UserResponse]:
    page = await UserRepository(db).get_paged(options)
    return page_to_response(page, user_to_model)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def update(
    db: AsyncSession,
    user_id: int,
    first_name: str,
    last_name: str,
    file: UploadFile | None = None,
) -> UserResponse:
    """
    Update the caller's names and, when *file* is given, replace the
    profile image.  The previous image is removed unless it is the default.
    """
    repo = UserRepository(db)
    user = await repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError(_NOT_FOUND)

    changes = {"first_name": first_name, "last_name": last_name}
    if file is not None and file.filename:
        new_image = files.build_image_path(file.filename)
        await files.save_upload(file, new_image)
        changes["image"] = new_image

    old_image = user.image
    await repo.update(user, changes)
    if "image" in changes:
        files.delete_image(old_image)
    # Listings embed the author
    await cache.invalidate_posts()
    return user_to_model(user)


async def update_role(db: AsyncSession, user_id: int, role_id: int) -> None:
    repo = UserRepository(db)
    user = await repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError(_NOT_FOUND)
    if await RoleRepository(db).get_by_id(role_id) is None:
        raise NotFoundError("Role not found.")
    await repo.update(user, {"role_id": role_id})
    await cache.invalidate_posts()
    logger.info("User %d moved to role %d", user_id, role_id)


async def delete(db: AsyncSession, user_id: int) -> None:
    """
    Delete a user and their posts.

    Comments and likes left on other users' posts block the deletion
    (``RESTRICT``), which surfaces as a 409.
    """
    repo = UserRepository(db)
    user = await repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError(_NOT_FOUND)
    image = user.image
    try:
        await repo.delete(user)
    except IntegrityError as e:
        raise ConflictError("User still has comments or likes.") from e
    await cache.invalidate_posts()
    files.delete_image(image)
    logger.info("User %d deleted", user_id)
