from collections.abc import Iterable, Iterator

from forexvolcano.core.enums import PostPrivacy
from forexvolcano.crud import friendship as friendship_crud
from forexvolcano.crud import post as posts_crud
from forexvolcano.crud.friendship import FriendshipLookup
from forexvolcano.models.post import Post
from forexvolcano.schemas.post import PostPublic
from forexvolcano.services.posts import to_public_posts
from forexvolcano.services.visibility import is_visible
from forexvolcano.store import DocumentStore


def compose_feed(
    viewer_uid: str | None,
    posts: Iterable[Post],
    are_friends: FriendshipLookup,
) -> list[Post]:
    """
    Filter posts down to what the viewer may see, newest first.

    Posts with the same ``created_at`` are ordered by id ascending, so the
    result does not depend on the order of ``posts``. The input is not modified.
    """
    visible = [post for post in posts if is_visible(viewer_uid, post, are_friends)]
    visible.sort(key=lambda post: post.id)
    visible.sort(key=lambda post: post.created_at, reverse=True)
    return visible


def _lookup_for(*, store: DocumentStore, posts: list[Post]) -> FriendshipLookup:
    return friendship_crud.get_friendship_lookup(
        store=store,
        author_ids=(post.author_uid for post in posts if post.privacy == PostPrivacy.FRIENDS),
    )


def get_feed(
    *,
    store: DocumentStore,
    viewer_uid: str | None,
    limit: int,
    offset: int,
) -> list[PostPublic]:
    """
    Get one page of the viewer's feed.

    Parameters:
        store (DocumentStore): The document store.
        viewer_uid (str | None): The viewer, None when anonymous.
        limit (int): Maximum number of posts to return.
        offset (int): Offset for pagination.
    Returns:
        list[PostPublic]: Visible posts, newest first.
    """
    posts = posts_crud.get_posts(store=store)
    feed = compose_feed(viewer_uid, posts, _lookup_for(store=store, posts=posts))
    return to_public_posts(
        store=store, viewer_uid=viewer_uid, posts=feed[offset : offset + limit]
    )


def get_user_posts(
    *,
    store: DocumentStore,
    viewer_uid: str | None,
    author_uid: str,
    limit: int,
    offset: int,
) -> list[PostPublic]:
    """
    Get the posts of one author that the viewer may see, newest first.
    """
    posts = posts_crud.get_posts_by_author(store=store, author_uid=author_uid)
    feed = compose_feed(viewer_uid, posts, _lookup_for(store=store, posts=posts))
    return to_public_posts(
        store=store, viewer_uid=viewer_uid, posts=feed[offset : offset + limit]
    )


def watch_feed(*, store: DocumentStore, viewer_uid: str | None) -> Iterator[list[Post]]:
    """
    Yield the viewer's full feed every time the posts collection changes.

    The feed is recomputed from scratch for every batch, with friend lists
    re-read, so it never drifts from what ``compose_feed`` would return.
    """
    for posts in posts_crud.watch_posts(store=store):
        yield compose_feed(viewer_uid, posts, _lookup_for(store=store, posts=posts))
