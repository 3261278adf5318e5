"""
Friendship ledger.

Each operation touches two user documents with no transaction spanning both.
The counterpart's document is always written first and the caller's own
document last, and preconditions are read from the caller's document. If the
second write fails, the precondition still holds, so running the same
operation again re-applies both idempotent steps and converges.
"""

from collections.abc import Callable
from logging import getLogger

from forexvolcano.crud import friendship as friendship_crud
from forexvolcano.crud import user as users_crud
from forexvolcano.exceptions.base import PartialWriteFailure
from forexvolcano.exceptions.friends_exceptions import (
    CannotBefriendSelfError,
    FriendRequestAlreadyExistsError,
    FriendRequestNotFoundError,
    FriendshipAlreadyExistsError,
    FriendshipNotFoundError,
)
from forexvolcano.exceptions.user_exceptions import OneOrMoreUsersNotFound
from forexvolcano.models.auth_schemas import Message
from forexvolcano.models.user import UserProfile
from forexvolcano.store import DocumentStore

logger = getLogger(__name__)


def _get_users(
    *,
    store: DocumentStore,
    current_user_id: str,
    other_id: str,
) -> tuple[UserProfile, UserProfile]:
    current_user = users_crud.get_user_by_id(store=store, user_id=current_user_id)
    other = users_crud.get_user_by_id(store=store, user_id=other_id)
    if current_user is None or other is None:
        raise OneOrMoreUsersNotFound(
            [
                user_id
                for user_id, user in ((current_user_id, current_user), (other_id, other))
                if user is None
            ]
        )
    return current_user, other


def _run_paired_write(
    operation: str,
    *,
    counterpart_step: Callable[[], None],
    own_step: Callable[[], None],
) -> None:
    # A failure of the first step leaves both documents untouched.
    counterpart_step()
    try:
        own_step()
    except Exception as e:
        logger.warning(
            "%s: own document not written after counterpart was updated, "
            "state is dangling until the operation is retried",
            operation,
        )
        raise PartialWriteFailure(operation) from e


def create_friend_request(
    *,
    store: DocumentStore,
    sender_id: str,
    receiver_id: str,
) -> Message:
    """
    Create a friend request from sender to receiver.

    If the receiver already asked the sender, the pending request is
    accepted instead.

    Raises:
        CannotBefriendSelfError: If sender and receiver are the same user.
        OneOrMoreUsersNotFound: If one or both users do not exist.
        FriendshipAlreadyExistsError: If the users are already friends.
        FriendRequestAlreadyExistsError: If the request is already pending.
        PartialWriteFailure: If only the receiver's document was written.
    """
    if sender_id == receiver_id:
        raise CannotBefriendSelfError(sender_id)

    sender, _ = _get_users(store=store, current_user_id=sender_id, other_id=receiver_id)

    if receiver_id in sender.friends:
        raise FriendshipAlreadyExistsError(sender_id, receiver_id)
    if receiver_id in sender.friend_requests.received:
        logger.info(
            "Reciprocal friend request from %s to %s, accepting the pending one",
            sender_id,
            receiver_id,
        )
        return accept_friend_request(
            store=store,
            current_user_id=sender_id,
            sender_id=receiver_id,
        )
    if receiver_id in sender.friend_requests.sent:
        raise FriendRequestAlreadyExistsError(sender_id, receiver_id)

    _run_paired_write(
        "create_friend_request",
        counterpart_step=lambda: friendship_crud.add_pending_request(
            store=store, user_id=receiver_id, other_id=sender_id, direction="received"
        ),
        own_step=lambda: friendship_crud.add_pending_request(
            store=store, user_id=sender_id, other_id=receiver_id, direction="sent"
        ),
    )
    logger.info("Friend request sent from %s to %s", sender_id, receiver_id)
    return Message(message="Friend request sent successfully.")


def accept_friend_request(
    *,
    store: DocumentStore,
    current_user_id: str,
    sender_id: str,
) -> Message:
    """
    Accept a friend request from sender_id to current_user_id.

    Raises:
        OneOrMoreUsersNotFound: If one or both users do not exist.
        FriendRequestNotFoundError: If the friend request does not exist.
        PartialWriteFailure: If only the sender's document was written.
    """
    current_user, _ = _get_users(
        store=store, current_user_id=current_user_id, other_id=sender_id
    )
    if sender_id not in current_user.friend_requests.received:
        raise FriendRequestNotFoundError(sender_id, current_user_id)

    _run_paired_write(
        "accept_friend_request",
        counterpart_step=lambda: friendship_crud.add_friend(
            store=store, user_id=sender_id, friend_id=current_user_id
        ),
        own_step=lambda: friendship_crud.add_friend(
            store=store, user_id=current_user_id, friend_id=sender_id
        ),
    )
    logger.info("Friend request from %s accepted by %s", sender_id, current_user_id)
    return Message(message="Friend request accepted successfully.")


def decline_friend_request(
    *,
    store: DocumentStore,
    current_user: str,
    sender_id: str,
) -> Message:
    """
    Decline a friend request from sender_id to current_user.

    Raises:
        OneOrMoreUsersNotFound: If one or both users do not exist.
        FriendRequestNotFoundError: If the friend request does not exist.
        PartialWriteFailure: If only the sender's document was written.
    """
    user, _ = _get_users(store=store, current_user_id=current_user, other_id=sender_id)
    if sender_id not in user.friend_requests.received:
        raise FriendRequestNotFoundError(sender_id, current_user)

    _run_paired_write(
        "decline_friend_request",
        counterpart_step=lambda: friendship_crud.remove_pending_request(
            store=store, user_id=sender_id, other_id=current_user, direction="sent"
        ),
        own_step=lambda: friendship_crud.remove_pending_request(
            store=store, user_id=current_user, other_id=sender_id, direction="received"
        ),
    )
    return Message(message="Friend request declined successfully.")


def cancel_friend_request(
    *,
    store: DocumentStore,
    current_user: str,
    receiver_id: str,
) -> Message:
    """
    Cancel a friend request sent by current_user to receiver_id.

    Raises:
        OneOrMoreUsersNotFound: If one or both users do not exist.
        FriendRequestNotFoundError: If the friend request does not exist.
        PartialWriteFailure: If only the receiver's document was written.
    """
    user, _ = _get_users(store=store, current_user_id=current_user, other_id=receiver_id)
    if receiver_id not in user.friend_requests.sent:
        raise FriendRequestNotFoundError(current_user, receiver_id)

    _run_paired_write(
        "cancel_friend_request",
        counterpart_step=lambda: friendship_crud.remove_pending_request(
            store=store, user_id=receiver_id, other_id=current_user, direction="received"
        ),
        own_step=lambda: friendship_crud.remove_pending_request(
            store=store, user_id=current_user, other_id=receiver_id, direction="sent"
        ),
    )
    return Message(message="Friend request cancelled successfully.")


def remove_friend(
    *,
    store: DocumentStore,
    current_user: str,
    friend_id: str,
) -> Message:
    """
    Remove a friend from current_user's friend list, and current_user from theirs.

    Raises:
        OneOrMoreUsersNotFound: If one or both users do not exist.
        FriendshipNotFoundError: If the friendship does not exist.
        PartialWriteFailure: If only the friend's document was written.
    """
    user, _ = _get_users(store=store, current_user_id=current_user, other_id=friend_id)
    if friend_id not in user.friends:
        raise FriendshipNotFoundError(current_user, friend_id)

    _run_paired_write(
        "remove_friend",
        counterpart_step=lambda: friendship_crud.remove_friend(
            store=store, user_id=friend_id, friend_id=current_user
        ),
        own_step=lambda: friendship_crud.remove_friend(
            store=store, user_id=current_user, friend_id=friend_id
        ),
    )
    logger.info("Friendship between %s and %s removed", current_user, friend_id)
    return Message(message="Friend removed successfully.")
