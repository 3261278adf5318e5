from logging import getLogger

from forexvolcano.converters import user as user_converters
from forexvolcano.core.blobs import BlobHost, decode_image
from forexvolcano.core.config import settings
from forexvolcano.crud import user as users_crud
from forexvolcano.exceptions.store_exceptions import DocumentAlreadyExistsError
from forexvolcano.exceptions.user_exceptions import (
    EmptyUsernameError,
    UsernameAlreadyExists,
    UsernameNotFound,
    UserNotFound,
)
from forexvolcano.models.user import UserProfile, UserUpdateMe
from forexvolcano.schemas.user import UserMe, UserPublic, UserWithFriendStatus
from forexvolcano.store import DocumentStore

logger = getLogger(__name__)


def get_user(
    *,
    store: DocumentStore,
    user_id: str,
) -> UserPublic:
    """
    Get a user by their uid.

    Parameters:
        store (DocumentStore): The document store.
        user_id (str): uid of the user to retrieve.
    Returns:
        UserPublic: The public representation of the user.
    Raises:
        UserNotFound: If the user with the given uid does not exist.
    """
    user = users_crud.get_user_by_id(store=store, user_id=user_id)
    if not user:
        raise UserNotFound(user_id)
    return user_converters.to_public(user)


def get_user_by_username(
    *,
    store: DocumentStore,
    username: str,
) -> UserPublic:
    """
    Get the public profile behind a username.

    Raises:
        UsernameNotFound: If no user has this username.
    """
    user = users_crud.get_user_by_username(store=store, username=username)
    if not user:
        raise UsernameNotFound(username)
    return user_converters.to_public(user)


def get_users(
    *,
    store: DocumentStore,
    query: str,
    limit: int,
    offset: int,
    current_user: UserProfile,
) -> list[UserWithFriendStatus]:
    """
    Search users by username prefix, with their friend status for the current user.

    Parameters:
        store (DocumentStore): The document store.
        query (str): Username prefix.
        limit (int): Maximum number of users to return.
        offset (int): Offset for pagination.
        current_user (UserProfile): The user searching.
    Returns:
        list[UserWithFriendStatus]: Matching users.
    """
    users = users_crud.get_users(
        store=store,
        query=query,
        limit=limit,
        offset=offset,
        current_user_id=current_user.uid,
    )
    return [
        user_converters.to_with_friend_status(user, current_user=current_user)
        for user in users
    ]


def _with_friend_status(
    *,
    store: DocumentStore,
    current_user: UserProfile,
    user_ids: list[str],
) -> list[UserWithFriendStatus]:
    return [
        user_converters.to_with_friend_status(user, current_user=current_user)
        for user in users_crud.get_users_by_ids(store=store, user_ids=user_ids)
    ]


def get_friends(
    *,
    store: DocumentStore,
    current_user: UserProfile,
) -> list[UserWithFriendStatus]:
    return _with_friend_status(
        store=store, current_user=current_user, user_ids=current_user.friends
    )


def get_sent_friend_requests(
    *,
    store: DocumentStore,
    current_user: UserProfile,
) -> list[UserWithFriendStatus]:
    return _with_friend_status(
        store=store,
        current_user=current_user,
        user_ids=current_user.friend_requests.sent,
    )


def get_received_friend_requests(
    *,
    store: DocumentStore,
    current_user: UserProfile,
) -> list[UserWithFriendStatus]:
    return _with_friend_status(
        store=store,
        current_user=current_user,
        user_ids=current_user.friend_requests.received,
    )


def get_suggestions(
    *,
    store: DocumentStore,
    current_user: UserProfile,
) -> list[UserWithFriendStatus]:
    """
    Suggest people to befriend.

    Reads a fixed-size batch of users and drops the current user, friends and
    anyone with a pending request either way. Users outside the batch are
    never suggested, so the result is neither fair nor complete.
    """
    excluded = {
        current_user.uid,
        *current_user.friends,
        *current_user.friend_requests.sent,
        *current_user.friend_requests.received,
    }
    batch = users_crud.get_users_batch(store=store, limit=settings.SUGGESTION_BATCH_SIZE)
    suggestions = [user for user in batch if user.uid not in excluded]
    return [
        user_converters.to_with_friend_status(user, current_user=current_user)
        for user in suggestions[: settings.SUGGESTION_LIMIT]
    ]


def update_me(
    *,
    store: DocumentStore,
    current_user: UserProfile,
    user_in: UserUpdateMe,
) -> UserMe:
    """
    Update the current user's username and bio.

    Raises:
        EmptyUsernameError: If the new username is blank.
        UsernameAlreadyExists: If another user already has the username.
    """
    changes = user_in.model_dump(exclude_unset=True)
    renamed_to = None
    if "username" in changes:
        username = (changes["username"] or "").strip()
        if not username:
            raise EmptyUsernameError()
        if username != current_user.username:
            existing = users_crud.get_user_by_username(store=store, username=username)
            if existing is not None and existing.uid != current_user.uid:
                raise UsernameAlreadyExists(username)
            try:
                users_crud.reserve_username(
                    store=store, username=username, user_id=current_user.uid
                )
            except DocumentAlreadyExistsError as e:
                raise UsernameAlreadyExists(username) from e
            renamed_to = username
        changes["username"] = username

    if not changes:
        return user_converters.to_me(current_user)
    try:
        user = users_crud.update_user(
            store=store, user_id=current_user.uid, changes=changes
        )
    except Exception:
        if renamed_to is not None:
            users_crud.release_username(
                store=store, username=renamed_to, user_id=current_user.uid
            )
        raise
    if renamed_to is not None:
        users_crud.release_username(
            store=store, username=current_user.username, user_id=current_user.uid
        )
        logger.info(
            "User %s renamed from %s to %s",
            current_user.uid,
            current_user.username,
            renamed_to,
        )
    return user_converters.to_me(user)


def update_avatar(
    *,
    store: DocumentStore,
    blob_host: BlobHost,
    current_user: UserProfile,
    image: str,
) -> UserMe:
    """
    Upload a new avatar and point the profile at it.

    Raises:
        InvalidImageError: If the image cannot be decoded.
    """
    payload, extension = decode_image(image)
    avatar_url = blob_host.upload(f"avatars/{current_user.uid}{extension}", payload)
    user = users_crud.update_user(
        store=store, user_id=current_user.uid, changes={"avatar_url": avatar_url}
    )
    logger.info("Avatar updated for %s", current_user.uid)
    return user_converters.to_me(user)
