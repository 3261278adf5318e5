from datetime import datetime

from pydantic import EmailStr

from forexvolcano.core.enums import UserRole
from forexvolcano.models.user import UserBase

__all__ = [
    "UserPublic",
    "UserWithFriendStatus",
    "UserMe",
]


class UserPublic(UserBase):
    uid: str
    role: UserRole
    created_at: datetime
    friends_count: int


class UserWithFriendStatus(UserPublic):
    is_friend: bool
    sent_request: bool
    received_request: bool


class UserMe(UserPublic):
    email: EmailStr
    sent_requests_count: int
    received_requests_count: int
