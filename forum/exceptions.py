"""Domain exceptions raised by the service layer.

Every exception is an ``HTTPException`` with its status code fixed, so the
services can raise them directly and FastAPI renders ``{"detail": ...}``
without any translation in the routers.
"""

from fastapi import HTTPException, status


class ForumError(HTTPException):
    """Base class for all forum domain errors."""


class NotFoundError(ForumError):
    def __init__(self, detail: str = "Resource not found."):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BadRequestError(ForumError):
    def __init__(self, detail: str = "Bad request."):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidSearchFieldError(BadRequestError):
    """A search/filter field name that the entity does not expose.

    Raised both when a ``SearchFields`` registry is misconfigured (at import
    time) and when a caller asks to search an unknown field.
    """

    def __init__(self, detail: str = "Unknown search property."):
        super().__init__(detail)


class RoleNotFoundError(BadRequestError):
    def __init__(self, role_name: str):
        super().__init__(f"Role '{role_name}' not found.")
        self.role_name = role_name


class ConflictError(ForumError):
    def __init__(self, detail: str = "Conflict."):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class AuthenticationError(ForumError):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDeniedError(ForumError):
    def __init__(self, detail: str = "Not enough permissions."):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
