from pydantic import EmailStr
from sqlmodel import Field, SQLModel

from forexvolcano.core.enums import UserRole
from forexvolcano.utils import now_timestamp

__all__ = [
    "FriendRequests",
    "UserBase",
    "UserProfile",
    "UserRegister",
    "UserUpdateMe",
    "AvatarUpdate",
]


class FriendRequests(SQLModel):
    # Requests I initiated that are not resolved yet
    sent: list[str] = Field(default_factory=list)
    # Requests awaiting my decision
    received: list[str] = Field(default_factory=list)


# Shared properties
class UserBase(SQLModel):
    username: str = Field(min_length=1, max_length=255)
    bio: str | None = Field(default=None, max_length=1000)
    avatar_url: str | None = Field(default=None)


# Stored in the "users" collection, keyed by uid
class UserProfile(UserBase):
    uid: str
    email: EmailStr = Field(max_length=255)
    role: UserRole = Field(default=UserRole.USER)
    created_at: float = Field(default_factory=now_timestamp)
    friends: list[str] = Field(default_factory=list)
    friend_requests: FriendRequests = Field(default_factory=FriendRequests)


# Properties to receive via API on registration
class UserRegister(SQLModel):
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=8, max_length=255)
    username: str = Field(min_length=1, max_length=255)


# Properties to receive via API on update, all are optional
class UserUpdateMe(SQLModel):
    username: str | None = Field(default=None, max_length=255)
    bio: str | None = Field(default=None, max_length=1000)


class AvatarUpdate(SQLModel):
    image: str = Field(description="Image as a data URL or a base64 string")
