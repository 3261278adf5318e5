from fastapi import status

from .base import AppError, InputValidationError


class UserNotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, user_id: str):
        detail = f"User with id {user_id} not found."
        super().__init__(detail)


class UsernameNotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, username: str):
        detail = f"User with username {username} not found."
        super().__init__(detail)


class EmailAlreadyExists(AppError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, email: str):
        detail = f"User with email {email} already exists."
        super().__init__(detail)


class UsernameAlreadyExists(AppError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, username: str):
        detail = f"User with username {username} already exists."
        super().__init__(detail)


class EmptyUsernameError(InputValidationError):
    def __init__(self):
        super().__init__("Username cannot be empty.")


class OneOrMoreUsersNotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, user_ids: list[str]):
        detail = f"One or more users not found: {', '.join(str(user_id) for user_id in user_ids)}."
        super().__init__(detail)


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self):
        super().__init__("Incorrect email or password.")


class InvalidTokenError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self):
        super().__init__("Could not validate credentials.")
