import uuid
from collections.abc import Iterable, Iterator
from logging import getLogger

from forexvolcano.converters import post as post_converters
from forexvolcano.core.blobs import BlobHost, decode_image
from forexvolcano.core.enums import PostPrivacy
from forexvolcano.crud import comment as comments_crud
from forexvolcano.crud import friendship as friendship_crud
from forexvolcano.crud import post as posts_crud
from forexvolcano.crud import user as users_crud
from forexvolcano.exceptions.base import PartialWriteFailure
from forexvolcano.exceptions.post_exceptions import (
    EmptyCommentError,
    EmptyPostError,
    NotPostAuthorError,
    PostNotFoundError,
)
from forexvolcano.exceptions.store_exceptions import DocumentAlreadyExistsError
from forexvolcano.models.auth_schemas import Message
from forexvolcano.models.post import Comment, Post, PostCreate
from forexvolcano.models.user import UserProfile
from forexvolcano.schemas.post import CommentPublic, PostPublic
from forexvolcano.services.visibility import is_visible
from forexvolcano.store import DocumentStore
from forexvolcano.utils import now_timestamp

logger = getLogger(__name__)

# Gap used to keep created_at strictly increasing per author
MONOTONIC_STEP = 0.001


def to_public_posts(
    *,
    store: DocumentStore,
    viewer_uid: str | None,
    posts: Iterable[Post],
) -> list[PostPublic]:
    posts = list(posts)
    authors = {
        user.uid: user
        for user in users_crud.get_users_by_ids(
            store=store, user_ids=(post.author_uid for post in posts)
        )
    }
    return [
        post_converters.to_public(
            post, viewer_uid=viewer_uid, author=authors.get(post.author_uid)
        )
        for post in posts
    ]


def get_visible_post(
    *,
    store: DocumentStore,
    viewer_uid: str | None,
    post_id: str,
) -> Post:
    """
    Fetch a post through the visibility filter.

    Raises:
        PostNotFoundError: If the post does not exist or the viewer may not see it.
    """
    post = posts_crud.get_post_by_id(store=store, post_id=post_id)
    if post is None:
        raise PostNotFoundError(post_id)
    are_friends = friendship_crud.get_friendship_lookup(
        store=store, author_ids=[post.author_uid]
    )
    if not is_visible(viewer_uid, post, are_friends):
        raise PostNotFoundError(post_id)
    return post


def _get_own_post(*, store: DocumentStore, current_user_id: str, post_id: str) -> Post:
    post = get_visible_post(store=store, viewer_uid=current_user_id, post_id=post_id)
    if post.author_uid != current_user_id:
        raise NotPostAuthorError(post_id)
    return post


def _next_created_at(*, store: DocumentStore, author_uid: str) -> float:
    """
    Pick a creation time after the author's newest post and claim it.

    Two posts created at once by the same author read the same newest post;
    the claim makes the slower one step past the faster one.
    """
    created_at = now_timestamp()
    latest = posts_crud.get_latest_post_by_author(store=store, author_uid=author_uid)
    if latest is not None and created_at <= latest.created_at:
        created_at = latest.created_at + MONOTONIC_STEP
    while True:
        try:
            posts_crud.reserve_created_at(
                store=store, author_uid=author_uid, created_at=created_at
            )
        except DocumentAlreadyExistsError:
            created_at += MONOTONIC_STEP
            continue
        return created_at


def create_post(
    *,
    store: DocumentStore,
    blob_host: BlobHost,
    current_user: UserProfile,
    post_in: PostCreate,
) -> PostPublic:
    """
    Create a post for the current user.

    Parameters:
        store (DocumentStore): The document store.
        blob_host (BlobHost): Where the post image is uploaded, if any.
        current_user (UserProfile): The author.
        post_in (PostCreate): Content, privacy and optional image.
    Returns:
        PostPublic: The created post.
    Raises:
        EmptyPostError: If there is neither content nor an image.
        InvalidImageError: If the image cannot be decoded.
    """
    content = post_in.content.strip()
    if not content and not post_in.image:
        raise EmptyPostError()

    post_id = uuid.uuid4().hex
    image_url = None
    if post_in.image:
        payload, extension = decode_image(post_in.image)
        image_url = blob_host.upload(f"posts/{post_id}{extension}", payload)

    post = Post(
        id=post_id,
        author_uid=current_user.uid,
        content=content,
        privacy=post_in.privacy,
        image_url=image_url,
        created_at=_next_created_at(store=store, author_uid=current_user.uid),
    )
    post = posts_crud.create_post(store=store, post=post)
    logger.info("Post %s created by %s (%s)", post.id, post.author_uid, post.privacy.value)
    return post_converters.to_public(post, viewer_uid=current_user.uid, author=current_user)


def get_post(
    *,
    store: DocumentStore,
    viewer_uid: str | None,
    post_id: str,
) -> PostPublic:
    post = get_visible_post(store=store, viewer_uid=viewer_uid, post_id=post_id)
    return to_public_posts(store=store, viewer_uid=viewer_uid, posts=[post])[0]


def delete_post(
    *,
    store: DocumentStore,
    current_user_id: str,
    post_id: str,
) -> Message:
    """
    Delete a post and its comments.

    Raises:
        PostNotFoundError: If the post does not exist or is not visible.
        NotPostAuthorError: If the current user is not the author.
    """
    post = _get_own_post(store=store, current_user_id=current_user_id, post_id=post_id)
    comments_crud.delete_comments(store=store, post_id=post_id)
    posts_crud.delete_post(store=store, post_id=post_id)
    posts_crud.release_created_at(
        store=store, author_uid=post.author_uid, created_at=post.created_at
    )
    logger.info("Post %s deleted by %s", post_id, current_user_id)
    return Message(message="Post deleted successfully.")


def update_post_privacy(
    *,
    store: DocumentStore,
    current_user_id: str,
    post_id: str,
    privacy: PostPrivacy,
) -> PostPublic:
    """
    Change who can see a post.

    Raises:
        PostNotFoundError: If the post does not exist or is not visible.
        NotPostAuthorError: If the current user is not the author.
    """
    _get_own_post(store=store, current_user_id=current_user_id, post_id=post_id)
    post = posts_crud.update_post(
        store=store, post_id=post_id, changes={"privacy": privacy.value}
    )
    return to_public_posts(store=store, viewer_uid=current_user_id, posts=[post])[0]


def like_post(*, store: DocumentStore, current_user_id: str, post_id: str) -> PostPublic:
    get_visible_post(store=store, viewer_uid=current_user_id, post_id=post_id)
    post = posts_crud.add_like(store=store, post_id=post_id, user_id=current_user_id)
    return to_public_posts(store=store, viewer_uid=current_user_id, posts=[post])[0]


def unlike_post(*, store: DocumentStore, current_user_id: str, post_id: str) -> PostPublic:
    get_visible_post(store=store, viewer_uid=current_user_id, post_id=post_id)
    post = posts_crud.remove_like(store=store, post_id=post_id, user_id=current_user_id)
    return to_public_posts(store=store, viewer_uid=current_user_id, posts=[post])[0]


def add_comment(
    *,
    store: DocumentStore,
    current_user: UserProfile,
    post_id: str,
    content: str,
) -> CommentPublic:
    """
    Comment on a post the current user can see, then bump its comment count.

    If the count cannot be bumped the comment is removed again and the error
    is re-raised.

    Raises:
        EmptyCommentError: If the comment is blank.
        PostNotFoundError: If the post does not exist or is not visible.
        PartialWriteFailure: If neither the count nor the comment removal landed.
    """
    content = content.strip()
    if not content:
        raise EmptyCommentError()

    get_visible_post(store=store, viewer_uid=current_user.uid, post_id=post_id)
    comment = comments_crud.create_comment(
        store=store,
        post_id=post_id,
        author_uid=current_user.uid,
        username=current_user.username,
        content=content,
    )
    try:
        posts_crud.increment_comment_count(store=store, post_id=post_id)
    except Exception as e:
        logger.warning(
            "Comment count of post %s not incremented, removing comment %s",
            post_id,
            comment.id,
        )
        try:
            comments_crud.delete_comment(
                store=store, post_id=post_id, comment_id=comment.id
            )
        except Exception:
            raise PartialWriteFailure("add_comment") from e
        raise
    return post_converters.comment_to_public(comment)


def get_comments(
    *,
    store: DocumentStore,
    viewer_uid: str | None,
    post_id: str,
) -> list[CommentPublic]:
    get_visible_post(store=store, viewer_uid=viewer_uid, post_id=post_id)
    return [
        post_converters.comment_to_public(comment)
        for comment in comments_crud.get_comments(store=store, post_id=post_id)
    ]


def watch_comments(
    *,
    store: DocumentStore,
    viewer_uid: str | None,
    post_id: str,
) -> Iterator[list[Comment]]:
    """
    Yield the comments of a visible post, oldest first, each time they change.

    Visibility is checked when the subscription is created and again before
    every batch. The stream ends once the post is deleted or the viewer may
    no longer see it.

    Raises:
        PostNotFoundError: If the post does not exist or is not visible.
    """
    get_visible_post(store=store, viewer_uid=viewer_uid, post_id=post_id)
    return _visible_comments(store=store, viewer_uid=viewer_uid, post_id=post_id)


def _visible_comments(
    *,
    store: DocumentStore,
    viewer_uid: str | None,
    post_id: str,
) -> Iterator[list[Comment]]:
    stream = comments_crud.watch_comments(store=store, post_id=post_id)
    try:
        for comments in stream:
            try:
                get_visible_post(store=store, viewer_uid=viewer_uid, post_id=post_id)
            except PostNotFoundError:
                logger.info(
                    "Post %s is no longer visible to %s, closing comment stream",
                    post_id,
                    viewer_uid,
                )
                return
            yield comments
    finally:
        stream.close()
