import pytest
from pytest_mock import MockerFixture

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
from forexvolcano.exceptions.store_exceptions import StoreUnavailableError
from forexvolcano.exceptions.user_exceptions import OneOrMoreUsersNotFound
from forexvolcano.models.user import UserProfile
from forexvolcano.services import friends as friends_services
from forexvolcano.store import InMemoryDocumentStore


def _reload(store: InMemoryDocumentStore, user: UserProfile) -> UserProfile:
    reloaded = users_crud.get_user_by_id(store=store, user_id=user.uid)
    assert reloaded is not None
    return reloaded


def _relations(store: InMemoryDocumentStore, user: UserProfile) -> tuple:
    user = _reload(store, user)
    return (
        sorted(user.friends),
        sorted(user.friend_requests.sent),
        sorted(user.friend_requests.received),
    )


def test_create_friend_request_success(
    mocker: MockerFixture,
    store: InMemoryDocumentStore,
    user_factory,
):
    sender = user_factory()
    receiver = user_factory()
    mock_add = mocker.patch("forexvolcano.crud.friendship.add_pending_request")

    result = friends_services.create_friend_request(
        store=store,
        sender_id=sender.uid,
        receiver_id=receiver.uid,
    )

    # Counterpart first, own document last
    assert mock_add.call_args_list == [
        mocker.call(
            store=store, user_id=receiver.uid, other_id=sender.uid, direction="received"
        ),
        mocker.call(
            store=store, user_id=sender.uid, other_id=receiver.uid, direction="sent"
        ),
    ]
    assert result.message == "Friend request sent successfully."


def test_create_friend_request_to_self(store: InMemoryDocumentStore, user_factory):
    user = user_factory()

    with pytest.raises(CannotBefriendSelfError):
        friends_services.create_friend_request(
            store=store, sender_id=user.uid, receiver_id=user.uid
        )


def test_create_friend_request_unknown_user(store: InMemoryDocumentStore, user_factory):
    sender = user_factory()

    with pytest.raises(OneOrMoreUsersNotFound):
        friends_services.create_friend_request(
            store=store, sender_id=sender.uid, receiver_id="ghost"
        )

    assert _relations(store, sender) == ([], [], [])


def test_create_friend_request_twice(store: InMemoryDocumentStore, user_factory):
    sender = user_factory()
    receiver = user_factory()
    friends_services.create_friend_request(
        store=store, sender_id=sender.uid, receiver_id=receiver.uid
    )

    with pytest.raises(FriendRequestAlreadyExistsError):
        friends_services.create_friend_request(
            store=store, sender_id=sender.uid, receiver_id=receiver.uid
        )

    assert _relations(store, sender) == ([], [receiver.uid], [])
    assert _relations(store, receiver) == ([], [], [sender.uid])


def test_create_friend_request_between_friends(
    store: InMemoryDocumentStore, user_factory
):
    user = user_factory()
    friend = user_factory(friends=[])
    friendship_crud.add_friend(store=store, user_id=user.uid, friend_id=friend.uid)
    friendship_crud.add_friend(store=store, user_id=friend.uid, friend_id=user.uid)

    with pytest.raises(FriendshipAlreadyExistsError):
        friends_services.create_friend_request(
            store=store, sender_id=user.uid, receiver_id=friend.uid
        )


def test_reciprocal_request_accepts_pending_one(
    store: InMemoryDocumentStore, user_factory
):
    alice = user_factory()
    bob = user_factory()
    friends_services.create_friend_request(
        store=store, sender_id=alice.uid, receiver_id=bob.uid
    )

    result = friends_services.create_friend_request(
        store=store, sender_id=bob.uid, receiver_id=alice.uid
    )

    assert result.message == "Friend request accepted successfully."
    assert _relations(store, alice) == ([bob.uid], [], [])
    assert _relations(store, bob) == ([alice.uid], [], [])


def test_send_then_accept(store: InMemoryDocumentStore, user_factory):
    a = user_factory()
    b = user_factory()

    friends_services.create_friend_request(store=store, sender_id=a.uid, receiver_id=b.uid)
    result = friends_services.accept_friend_request(
        store=store, current_user_id=b.uid, sender_id=a.uid
    )

    assert result.message == "Friend request accepted successfully."
    assert _relations(store, a) == ([b.uid], [], [])
    assert _relations(store, b) == ([a.uid], [], [])


def test_send_then_decline(store: InMemoryDocumentStore, user_factory):
    a = user_factory()
    b = user_factory()

    friends_services.create_friend_request(store=store, sender_id=a.uid, receiver_id=b.uid)
    result = friends_services.decline_friend_request(
        store=store, current_user=b.uid, sender_id=a.uid
    )

    assert result.message == "Friend request declined successfully."
    assert _relations(store, a) == ([], [], [])
    assert _relations(store, b) == ([], [], [])


def test_send_then_cancel(store: InMemoryDocumentStore, user_factory):
    a = user_factory()
    b = user_factory()

    friends_services.create_friend_request(store=store, sender_id=a.uid, receiver_id=b.uid)
    result = friends_services.cancel_friend_request(
        store=store, current_user=a.uid, receiver_id=b.uid
    )

    assert result.message == "Friend request cancelled successfully."
    assert _relations(store, a) == ([], [], [])
    assert _relations(store, b) == ([], [], [])


def test_accept_without_request(store: InMemoryDocumentStore, user_factory):
    a = user_factory()
    b = user_factory()

    with pytest.raises(FriendRequestNotFoundError):
        friends_services.accept_friend_request(
            store=store, current_user_id=b.uid, sender_id=a.uid
        )

    assert _relations(store, a) == ([], [], [])
    assert _relations(store, b) == ([], [], [])


def test_sender_cannot_accept_own_request(store: InMemoryDocumentStore, user_factory):
    a = user_factory()
    b = user_factory()
    friends_services.create_friend_request(store=store, sender_id=a.uid, receiver_id=b.uid)

    with pytest.raises(FriendRequestNotFoundError):
        friends_services.accept_friend_request(
            store=store, current_user_id=a.uid, sender_id=b.uid
        )


@pytest.mark.parametrize(
    "operation, kwargs_name",
    [
        (friends_services.decline_friend_request, "sender_id"),
        (friends_services.cancel_friend_request, "receiver_id"),
    ],
)
def test_resolving_missing_request(
    store: InMemoryDocumentStore, user_factory, operation, kwargs_name
):
    a = user_factory()
    b = user_factory()

    with pytest.raises(FriendRequestNotFoundError):
        operation(store=store, current_user=a.uid, **{kwargs_name: b.uid})


def test_remove_friend_twice_is_idempotent(store: InMemoryDocumentStore, user_factory):
    a = user_factory()
    b = user_factory()
    friends_services.create_friend_request(store=store, sender_id=a.uid, receiver_id=b.uid)
    friends_services.accept_friend_request(
        store=store, current_user_id=b.uid, sender_id=a.uid
    )

    result = friends_services.remove_friend(store=store, current_user=a.uid, friend_id=b.uid)
    after_once = (_relations(store, a), _relations(store, b))

    with pytest.raises(FriendshipNotFoundError):
        friends_services.remove_friend(store=store, current_user=a.uid, friend_id=b.uid)

    assert result.message == "Friend removed successfully."
    assert after_once == (([], [], []), ([], [], []))
    assert (_relations(store, a), _relations(store, b)) == after_once


def test_partial_send_converges_on_retry(
    mocker: MockerFixture, store: InMemoryDocumentStore, user_factory
):
    sender = user_factory()
    receiver = user_factory()
    real_add = friendship_crud.add_pending_request

    def fail_own_write(**kwargs):
        if kwargs["user_id"] == sender.uid:
            raise StoreUnavailableError()
        return real_add(**kwargs)

    patched = mocker.patch(
        "forexvolcano.crud.friendship.add_pending_request", side_effect=fail_own_write
    )

    with pytest.raises(PartialWriteFailure) as exc_info:
        friends_services.create_friend_request(
            store=store, sender_id=sender.uid, receiver_id=receiver.uid
        )

    assert exc_info.value.operation == "create_friend_request"
    assert isinstance(exc_info.value.__cause__, StoreUnavailableError)
    assert _relations(store, sender) == ([], [], [])
    assert _relations(store, receiver) == ([], [], [sender.uid])

    patched.side_effect = real_add
    friends_services.create_friend_request(
        store=store, sender_id=sender.uid, receiver_id=receiver.uid
    )

    assert _relations(store, sender) == ([], [receiver.uid], [])
    assert _relations(store, receiver) == ([], [], [sender.uid])


def test_partial_accept_converges_on_retry(
    mocker: MockerFixture, store: InMemoryDocumentStore, user_factory
):
    sender = user_factory()
    receiver = user_factory()
    friends_services.create_friend_request(
        store=store, sender_id=sender.uid, receiver_id=receiver.uid
    )
    real_add_friend = friendship_crud.add_friend

    def fail_own_write(**kwargs):
        if kwargs["user_id"] == receiver.uid:
            raise StoreUnavailableError()
        return real_add_friend(**kwargs)

    patched = mocker.patch(
        "forexvolcano.crud.friendship.add_friend", side_effect=fail_own_write
    )

    with pytest.raises(PartialWriteFailure):
        friends_services.accept_friend_request(
            store=store, current_user_id=receiver.uid, sender_id=sender.uid
        )

    assert _relations(store, sender) == ([receiver.uid], [], [])
    assert _relations(store, receiver) == ([], [], [sender.uid])

    patched.side_effect = real_add_friend
    friends_services.accept_friend_request(
        store=store, current_user_id=receiver.uid, sender_id=sender.uid
    )

    assert _relations(store, sender) == ([receiver.uid], [], [])
    assert _relations(store, receiver) == ([sender.uid], [], [])


def test_failed_counterpart_write_leaves_no_trace(
    mocker: MockerFixture, store: InMemoryDocumentStore, user_factory
):
    a = user_factory()
    b = user_factory()
    mocker.patch(
        "forexvolcano.crud.friendship.add_pending_request",
        side_effect=StoreUnavailableError(),
    )

    with pytest.raises(StoreUnavailableError):
        friends_services.create_friend_request(store=store, sender_id=a.uid, receiver_id=b.uid)

    assert _relations(store, a) == ([], [], [])
    assert _relations(store, b) == ([], [], [])
