from collections.abc import Iterable
from typing import Any

from forexvolcano.models.user import UserProfile
from forexvolcano.store import DocumentStore

USERS = "users"
USERNAMES = "usernames"

# Closes a prefix range on string fields
PREFIX_END = "\uf8ff"


def get_user_by_id(*, store: DocumentStore, user_id: str) -> UserProfile | None:
    """
    Get a user by their uid.

    Parameters:
        store (DocumentStore): The document store.
        user_id (str): The uid of the user to retrieve.
    Returns:
        UserProfile | None: The user if found, otherwise None.
    """
    snapshot = store.get(USERS, user_id)
    if snapshot is None:
        return None
    return UserProfile.model_validate(snapshot.data)


def get_user_by_username(*, store: DocumentStore, username: str) -> UserProfile | None:
    """
    Get a user by their username.

    Parameters:
        store (DocumentStore): The document store.
        username (str): The exact username to look up.
    Returns:
        UserProfile | None: The first matching user, otherwise None.
    """
    snapshots = store.find(USERS, "username", username, limit=1)
    if not snapshots:
        return None
    return UserProfile.model_validate(snapshots[0].data)


def get_users_by_ids(*, store: DocumentStore, user_ids: Iterable[str]) -> list[UserProfile]:
    """
    Get several users by uid. Unknown uids are skipped.

    Parameters:
        store (DocumentStore): The document store.
        user_ids (Iterable[str]): The uids to fetch.
    Returns:
        list[UserProfile]: The users found, in the order of ``user_ids``.
    """
    users = []
    for user_id in dict.fromkeys(user_ids):
        user = get_user_by_id(store=store, user_id=user_id)
        if user is not None:
            users.append(user)
    return users


def create_user(*, store: DocumentStore, user: UserProfile) -> UserProfile:
    """
    Store a new user document keyed by uid.

    Parameters:
        store (DocumentStore): The document store.
        user (UserProfile): The user to store.
    Returns:
        UserProfile: The stored user.
    Raises:
        DocumentAlreadyExistsError: If a user with the same uid already exists.
    """
    snapshot = store.create(USERS, user.model_dump(mode="json"), doc_id=user.uid)
    return UserProfile.model_validate(snapshot.data)


def update_user(
    *,
    store: DocumentStore,
    user_id: str,
    changes: dict[str, Any],
) -> UserProfile:
    """
    Merge the given fields into a user document.

    Parameters:
        store (DocumentStore): The document store.
        user_id (str): The uid of the user to update.
        changes (dict): Field path to new value.
    Returns:
        UserProfile: The updated user.
    Raises:
        DocumentNotFoundError: If the user does not exist.
    """
    snapshot = store.update(USERS, user_id, changes)
    return UserProfile.model_validate(snapshot.data)


def get_users(
    *,
    store: DocumentStore,
    query: str,
    limit: int,
    offset: int,
    current_user_id: str,
) -> list[UserProfile]:
    """
    Get users whose username starts with ``query``, excluding the current user.

    Parameters:
        store (DocumentStore): The document store.
        query (str): The username prefix to search for.
        limit (int): The maximum number of users to return.
        offset (int): The offset for pagination.
        current_user_id (str): The uid of the current user to exclude from results.
    Returns:
        list[UserProfile]: Matching users ordered by username.
    """
    snapshots = store.query(
        USERS,
        order_by="username",
        start_at=query,
        end_at=query + PREFIX_END,
    )
    users = [
        UserProfile.model_validate(snapshot.data)
        for snapshot in snapshots
        if snapshot.id != current_user_id
    ]
    return users[offset : offset + limit]


def get_users_batch(*, store: DocumentStore, limit: int) -> list[UserProfile]:
    """
    Get an arbitrary fixed-size batch of users.

    Parameters:
        store (DocumentStore): The document store.
        limit (int): The size of the batch.
    Returns:
        list[UserProfile]: Up to ``limit`` users.
    """
    snapshots = store.query(USERS, limit=limit)
    return [UserProfile.model_validate(snapshot.data) for snapshot in snapshots]


def reserve_username(*, store: DocumentStore, username: str, user_id: str) -> None:
    """
    Claim a username for a user. Only one user can hold a username at a time.

    Parameters:
        store (DocumentStore): The document store.
        username (str): The username to claim.
        user_id (str): The uid of the user claiming it.
    Raises:
        DocumentAlreadyExistsError: If the username is already claimed.
    """
    store.create(USERNAMES, {"uid": user_id}, doc_id=username)


def release_username(*, store: DocumentStore, username: str, user_id: str) -> None:
    """
    Give up a username claim, if ``user_id`` holds it.
    """
    snapshot = store.get(USERNAMES, username)
    if snapshot is not None and snapshot.data.get("uid") == user_id:
        store.delete(USERNAMES, username)
