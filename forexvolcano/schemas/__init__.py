from .post import CommentPublic, PostPublic
from .user import UserMe, UserPublic, UserWithFriendStatus

__all__ = [
    "CommentPublic",
    "PostPublic",
    "UserMe",
    "UserPublic",
    "UserWithFriendStatus",
]
