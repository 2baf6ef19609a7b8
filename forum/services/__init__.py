# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic for a single aggregate:
#
#   category_service      — CRUD + cached listings for Category
#   post_service          — CRUD + cached listings + view counter for Post
#   comment_service       — threaded comments on posts
#   post_like_service     — like/dislike reactions on posts
#   comment_like_service  — likes on comments
#   role_service          — read-only role lookups
#   user_service          — registration, tokens and account management
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.
