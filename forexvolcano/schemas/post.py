from datetime import datetime

from sqlmodel import SQLModel

from forexvolcano.core.enums import PostPrivacy

__all__ = [
    "PostPublic",
    "CommentPublic",
]


class PostPublic(SQLModel):
    id: str
    author_uid: str
    author_username: str
    author_avatar_url: str | None
    content: str
    image_url: str | None
    privacy: PostPrivacy
    created_at: datetime
    likes_count: int
    liked_by_me: bool
    comment_count: int


class CommentPublic(SQLModel):
    id: str
    post_id: str
    author_uid: str
    username: str
    content: str
    created_at: datetime
