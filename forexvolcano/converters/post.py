from forexvolcano.models.post import Comment, Post
from forexvolcano.models.user import UserProfile
from forexvolcano.schemas.post import CommentPublic, PostPublic
from forexvolcano.utils import timestamp_to_datetime

UNKNOWN_AUTHOR = "Unknown User"


def to_public(
    post: Post,
    *,
    viewer_uid: str | None,
    author: UserProfile | None,
) -> PostPublic:
    """
    Converts a Post to a PostPublic, adding author details and the viewer's like state.

    Parameters:
        post (Post): The post to convert.
        viewer_uid (str | None): The uid of the viewer, None when anonymous.
        author (UserProfile | None): The author, None if the profile is missing.
    Returns:
        PostPublic: The converted post.
    """
    return PostPublic(
        id=post.id,
        author_uid=post.author_uid,
        author_username=author.username if author else UNKNOWN_AUTHOR,
        author_avatar_url=author.avatar_url if author else None,
        content=post.content,
        image_url=post.image_url,
        privacy=post.privacy,
        created_at=timestamp_to_datetime(post.created_at),
        likes_count=len(post.likes),
        liked_by_me=viewer_uid is not None and viewer_uid in post.likes,
        comment_count=post.comment_count,
    )


def comment_to_public(comment: Comment) -> CommentPublic:
    return CommentPublic(
        id=comment.id,
        post_id=comment.post_id,
        author_uid=comment.author_uid,
        username=comment.username,
        content=comment.content,
        created_at=timestamp_to_datetime(comment.created_at),
    )
