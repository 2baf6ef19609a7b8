# Repositories package.
#
# One class per entity wrapping an AsyncSession.  Repositories issue
# queries and flush; they never commit, so the ``get_db`` dependency owns
# the transaction boundary exactly as it does for the services.
from forum.repositories.base import BaseRepository
from forum.repositories.category import CategoryRepository
from forum.repositories.comment import CommentRepository
from forum.repositories.likes import CommentLikeRepository, PostLikeRepository
from forum.repositories.post import PostRepository
from forum.repositories.role import RoleRepository
from forum.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "CategoryRepository",
    "CommentLikeRepository",
    "CommentRepository",
    "PostLikeRepository",
    "PostRepository",
    "RoleRepository",
    "UserRepository",
]
