from sqlmodel import Field, SQLModel

from forexvolcano.core.enums import PostPrivacy

__all__ = [
    "PostBase",
    "PostCreate",
    "PostPrivacyUpdate",
    "Post",
    "CommentCreate",
    "Comment",
]


class PostBase(SQLModel):
    content: str = Field(default="", max_length=5000)
    privacy: PostPrivacy = Field(default=PostPrivacy.PUBLIC)


class PostCreate(PostBase):
    image: str | None = Field(
        default=None, description="Image as a data URL or a base64 string"
    )


class PostPrivacyUpdate(SQLModel):
    privacy: PostPrivacy


# Stored in the "posts" collection, keyed by id
class Post(PostBase):
    id: str
    author_uid: str
    image_url: str | None = Field(default=None)
    created_at: float
    likes: list[str] = Field(default_factory=list)
    comment_count: int = Field(default=0, ge=0)


class CommentCreate(SQLModel):
    content: str = Field(max_length=2000)


# Stored in the "posts/{post_id}/comments" collection, keyed by id
class Comment(SQLModel):
    id: str
    post_id: str
    author_uid: str
    username: str
    content: str
    created_at: float
