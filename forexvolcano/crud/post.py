from collections.abc import Iterator
from typing import Any

from forexvolcano.models.post import Post
from forexvolcano.store import (
    ArrayRemove,
    ArrayUnion,
    DocumentSnapshot,
    DocumentStore,
    Increment,
)

POSTS = "posts"
POST_CLOCKS = "post_clocks"


def _to_posts(snapshots: list[DocumentSnapshot]) -> list[Post]:
    return [Post.model_validate(snapshot.data) for snapshot in snapshots]


def create_post(*, store: DocumentStore, post: Post) -> Post:
    """
    Store a new post keyed by its id.

    Parameters:
        store (DocumentStore): The document store.
        post (Post): The post to store.
    Returns:
        Post: The stored post.
    Raises:
        DocumentAlreadyExistsError: If a post with the same id already exists.
    """
    snapshot = store.create(POSTS, post.model_dump(mode="json"), doc_id=post.id)
    return Post.model_validate(snapshot.data)


def get_post_by_id(*, store: DocumentStore, post_id: str) -> Post | None:
    snapshot = store.get(POSTS, post_id)
    if snapshot is None:
        return None
    return Post.model_validate(snapshot.data)


def get_posts(*, store: DocumentStore) -> list[Post]:
    """
    Get every post, newest first.
    """
    return _to_posts(store.query(POSTS, order_by="created_at", descending=True))


def get_posts_by_author(*, store: DocumentStore, author_uid: str) -> list[Post]:
    """
    Get the posts of one author, newest first.
    """
    return _to_posts(
        store.query(
            POSTS,
            where={"author_uid": author_uid},
            order_by="created_at",
            descending=True,
        )
    )


def get_latest_post_by_author(*, store: DocumentStore, author_uid: str) -> Post | None:
    posts = _to_posts(
        store.query(
            POSTS,
            where={"author_uid": author_uid},
            order_by="created_at",
            descending=True,
            limit=1,
        )
    )
    return posts[0] if posts else None


def _clock_id(author_uid: str, created_at: float) -> str:
    return f"{author_uid}@{created_at:.6f}"


def reserve_created_at(*, store: DocumentStore, author_uid: str, created_at: float) -> None:
    """
    Claim a creation timestamp for one author, so no two of their posts share it.

    Raises:
        DocumentAlreadyExistsError: If the author already holds this timestamp.
    """
    store.create(
        POST_CLOCKS,
        {"author_uid": author_uid, "created_at": created_at},
        doc_id=_clock_id(author_uid, created_at),
    )


def release_created_at(*, store: DocumentStore, author_uid: str, created_at: float) -> None:
    store.delete(POST_CLOCKS, _clock_id(author_uid, created_at))


def update_post(*, store: DocumentStore, post_id: str, changes: dict[str, Any]) -> Post:
    """
    Merge the given fields into a post.

    Raises:
        DocumentNotFoundError: If the post does not exist.
    """
    snapshot = store.update(POSTS, post_id, changes)
    return Post.model_validate(snapshot.data)


def add_like(*, store: DocumentStore, post_id: str, user_id: str) -> Post:
    return update_post(store=store, post_id=post_id, changes={"likes": ArrayUnion(user_id)})


def remove_like(*, store: DocumentStore, post_id: str, user_id: str) -> Post:
    return update_post(store=store, post_id=post_id, changes={"likes": ArrayRemove(user_id)})


def increment_comment_count(*, store: DocumentStore, post_id: str, amount: int = 1) -> Post:
    return update_post(
        store=store, post_id=post_id, changes={"comment_count": Increment(amount)}
    )


def delete_post(*, store: DocumentStore, post_id: str) -> None:
    store.delete(POSTS, post_id)


def watch_posts(*, store: DocumentStore) -> Iterator[list[Post]]:
    """
    Yield the full list of posts, newest first, every time it changes.
    """
    for batch in store.watch(POSTS, order_by="created_at", descending=True):
        yield _to_posts(batch.documents)
