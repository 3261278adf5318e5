"""
Single-document steps of the friendship relation.

Every function here writes exactly one user document with set-add / set-remove
transforms, so each step can be re-applied safely. Pairing the steps across
two users is the job of ``services.friends``.
"""

from collections.abc import Callable, Iterable
from typing import Literal

from forexvolcano.crud import user as users_crud
from forexvolcano.crud.user import USERS
from forexvolcano.store import ArrayRemove, ArrayUnion, DocumentStore

RequestDirection = Literal["sent", "received"]
FriendshipLookup = Callable[[str, str], bool]


def add_pending_request(
    *,
    store: DocumentStore,
    user_id: str,
    other_id: str,
    direction: RequestDirection,
) -> None:
    """
    Add ``other_id`` to the sent or received requests of ``user_id``.

    Raises:
        DocumentNotFoundError: If the user does not exist.
    """
    store.update(USERS, user_id, {f"friend_requests.{direction}": ArrayUnion(other_id)})


def remove_pending_request(
    *,
    store: DocumentStore,
    user_id: str,
    other_id: str,
    direction: RequestDirection,
) -> None:
    """
    Remove ``other_id`` from the sent or received requests of ``user_id``.

    Raises:
        DocumentNotFoundError: If the user does not exist.
    """
    store.update(USERS, user_id, {f"friend_requests.{direction}": ArrayRemove(other_id)})


def add_friend(
    *,
    store: DocumentStore,
    user_id: str,
    friend_id: str,
) -> None:
    """
    Add ``friend_id`` to the friends of ``user_id`` and drop any pending
    request between them from this user's side.

    Raises:
        DocumentNotFoundError: If the user does not exist.
    """
    store.update(
        USERS,
        user_id,
        {
            "friends": ArrayUnion(friend_id),
            "friend_requests.sent": ArrayRemove(friend_id),
            "friend_requests.received": ArrayRemove(friend_id),
        },
    )


def remove_friend(
    *,
    store: DocumentStore,
    user_id: str,
    friend_id: str,
) -> None:
    """
    Remove ``friend_id`` from the friends of ``user_id``.

    Raises:
        DocumentNotFoundError: If the user does not exist.
    """
    store.update(USERS, user_id, {"friends": ArrayRemove(friend_id)})


def get_friendship_lookup(
    *,
    store: DocumentStore,
    author_ids: Iterable[str],
) -> FriendshipLookup:
    """
    Load the friend lists of the given authors once and answer
    ``lookup(viewer_id, author_id)`` from memory.

    Parameters:
        store (DocumentStore): The document store.
        author_ids (Iterable[str]): The authors whose friend lists are needed.
    Returns:
        FriendshipLookup: True iff the viewer is in the author's friend list.
    """
    friends_of = {
        user.uid: set(user.friends)
        for user in users_crud.get_users_by_ids(store=store, user_ids=author_ids)
    }

    def are_friends(viewer_id: str, author_id: str) -> bool:
        return viewer_id in friends_of.get(author_id, set())

    return are_friends
