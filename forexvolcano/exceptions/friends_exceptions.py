from fastapi import status

from .base import InputValidationError, PreconditionFailedError


class CannotBefriendSelfError(InputValidationError):
    def __init__(self, user_id: str):
        detail = f"User with id {user_id} cannot send a friend request to themselves."
        super().__init__(detail)


class FriendRequestNotFoundError(PreconditionFailedError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, sender_id: str, receiver_id: str):
        detail = f"Friend request not found. User with id {sender_id} has not requested friendship with user {receiver_id}."
        super().__init__(detail)


class FriendshipNotFoundError(PreconditionFailedError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, user_id: str, friend_id: str):
        detail = f"Friendship not found. User with id {user_id} is not friends with user with id {friend_id}."
        super().__init__(detail)


class FriendshipAlreadyExistsError(PreconditionFailedError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, user_id: str, friend_id: str):
        detail = f"Friendship already exists. User with id {user_id} is already friends with user with id {friend_id}."
        super().__init__(detail)


class FriendRequestAlreadyExistsError(PreconditionFailedError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, sender_id: str, receiver_id: str):
        detail = f"Friend request already exists. User with id {sender_id} has already requested friendship with user {receiver_id}."
        super().__init__(detail)
