import uuid
from collections.abc import Iterator

from forexvolcano.crud.post import POSTS
from forexvolcano.models.post import Comment
from forexvolcano.store import DocumentStore
from forexvolcano.utils import now_timestamp


def comments_collection(post_id: str) -> str:
    return f"{POSTS}/{post_id}/comments"


def create_comment(
    *,
    store: DocumentStore,
    post_id: str,
    author_uid: str,
    username: str,
    content: str,
) -> Comment:
    """
    Store a new comment under a post.

    Parameters:
        store (DocumentStore): The document store.
        post_id (str): The id of the parent post.
        author_uid (str): The uid of the comment author.
        username (str): The author's username at the time of writing.
        content (str): The comment text.
    Returns:
        Comment: The stored comment.
    """
    comment = Comment(
        id=uuid.uuid4().hex,
        post_id=post_id,
        author_uid=author_uid,
        username=username,
        content=content,
        created_at=now_timestamp(),
    )
    snapshot = store.create(
        comments_collection(post_id), comment.model_dump(mode="json"), doc_id=comment.id
    )
    return Comment.model_validate(snapshot.data)


def get_comments(*, store: DocumentStore, post_id: str) -> list[Comment]:
    """
    Get the comments of a post, oldest first.
    """
    snapshots = store.query(comments_collection(post_id), order_by="created_at")
    return [Comment.model_validate(snapshot.data) for snapshot in snapshots]


def delete_comment(*, store: DocumentStore, post_id: str, comment_id: str) -> None:
    store.delete(comments_collection(post_id), comment_id)


def delete_comments(*, store: DocumentStore, post_id: str) -> None:
    collection = comments_collection(post_id)
    for snapshot in store.query(collection):
        store.delete(collection, snapshot.id)


def watch_comments(*, store: DocumentStore, post_id: str) -> Iterator[list[Comment]]:
    for batch in store.watch(comments_collection(post_id), order_by="created_at"):
        yield [Comment.model_validate(snapshot.data) for snapshot in batch.documents]
