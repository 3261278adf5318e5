from fastapi import status

from .base import AppError, InputValidationError


class PostNotFoundError(AppError):
    """Raised both for missing posts and for posts the viewer may not see."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, post_id: str):
        detail = f"Post with id {post_id} not found."
        super().__init__(detail)


class NotPostAuthorError(AppError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, post_id: str):
        detail = f"Only the author of post {post_id} can do this."
        super().__init__(detail)


class EmptyPostError(InputValidationError):
    def __init__(self):
        super().__init__("A post needs text content or an image.")


class EmptyCommentError(InputValidationError):
    def __init__(self):
        super().__init__("A comment cannot be empty.")
