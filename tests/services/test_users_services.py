import base64

import pytest
from pytest_mock import MockerFixture

from forexvolcano.crud import user as users_crud
from forexvolcano.exceptions.user_exceptions import (
    EmptyUsernameError,
    UsernameAlreadyExists,
    UsernameNotFound,
    UserNotFound,
)
from forexvolcano.models.user import UserUpdateMe
from forexvolcano.services import friends as friends_services
from forexvolcano.services import users as users_services
from forexvolcano.store import InMemoryDocumentStore


def test_get_user(store: InMemoryDocumentStore, user_factory):
    user = user_factory()

    result = users_services.get_user(store=store, user_id=user.uid)

    assert result.uid == user.uid
    assert result.username == user.username
    assert result.friends_count == 0


def test_get_user_not_found(store: InMemoryDocumentStore):
    with pytest.raises(UserNotFound):
        users_services.get_user(store=store, user_id="ghost")


def test_get_user_by_username(store: InMemoryDocumentStore, user_factory):
    user = user_factory(username="marie")

    assert users_services.get_user_by_username(store=store, username="marie").uid == user.uid
    with pytest.raises(UsernameNotFound):
        users_services.get_user_by_username(store=store, username="nobody")


def test_search_users_by_prefix(store: InMemoryDocumentStore, user_factory):
    me = user_factory(username="alex")
    alice = user_factory(username="alice")
    alfred = user_factory(username="alfred")
    user_factory(username="bob")
    friends_services.create_friend_request(store=store, sender_id=me.uid, receiver_id=alice.uid)
    me = users_crud.get_user_by_id(store=store, user_id=me.uid)

    results = users_services.get_users(
        store=store, query="al", limit=10, offset=0, current_user=me
    )

    assert [user.uid for user in results] == [alfred.uid, alice.uid]
    assert results[1].sent_request is True
    assert results[0].sent_request is False
    assert all(not user.is_friend for user in results)


def test_relation_lists(store: InMemoryDocumentStore, user_factory):
    me = user_factory()
    friend = user_factory()
    wants_me = user_factory()
    i_want = user_factory()
    friends_services.create_friend_request(store=store, sender_id=me.uid, receiver_id=friend.uid)
    friends_services.accept_friend_request(
        store=store, current_user_id=friend.uid, sender_id=me.uid
    )
    friends_services.create_friend_request(
        store=store, sender_id=wants_me.uid, receiver_id=me.uid
    )
    friends_services.create_friend_request(store=store, sender_id=me.uid, receiver_id=i_want.uid)
    me = users_crud.get_user_by_id(store=store, user_id=me.uid)

    friends = users_services.get_friends(store=store, current_user=me)
    sent = users_services.get_sent_friend_requests(store=store, current_user=me)
    received = users_services.get_received_friend_requests(store=store, current_user=me)

    assert [(u.uid, u.is_friend) for u in friends] == [(friend.uid, True)]
    assert [(u.uid, u.sent_request) for u in sent] == [(i_want.uid, True)]
    assert [(u.uid, u.received_request) for u in received] == [(wants_me.uid, True)]


def test_get_suggestions_excludes_known_users(store: InMemoryDocumentStore, user_factory):
    me = user_factory()
    friend = user_factory()
    pending = user_factory()
    strangers = [user_factory() for _ in range(7)]
    friends_services.create_friend_request(store=store, sender_id=me.uid, receiver_id=friend.uid)
    friends_services.accept_friend_request(
        store=store, current_user_id=friend.uid, sender_id=me.uid
    )
    friends_services.create_friend_request(store=store, sender_id=pending.uid, receiver_id=me.uid)
    me = users_crud.get_user_by_id(store=store, user_id=me.uid)

    suggestions = users_services.get_suggestions(store=store, current_user=me)

    assert len(suggestions) == 5
    assert {user.uid for user in suggestions} <= {user.uid for user in strangers}


def test_update_me(store: InMemoryDocumentStore, user_factory):
    user = user_factory(username="before")

    result = users_services.update_me(
        store=store,
        current_user=user,
        user_in=UserUpdateMe(username="  after ", bio="new bio"),
    )

    assert result.username == "after"
    assert result.bio == "new bio"
    stored = users_crud.get_user_by_id(store=store, user_id=user.uid)
    assert stored is not None
    assert stored.username == "after"


def test_update_me_keeps_own_username(store: InMemoryDocumentStore, user_factory):
    user = user_factory(username="same")

    result = users_services.update_me(
        store=store, current_user=user, user_in=UserUpdateMe(username="same")
    )

    assert result.username == "same"


@pytest.mark.parametrize(
    "username, expected_exc",
    [
        ("   ", EmptyUsernameError),
        ("taken", UsernameAlreadyExists),
    ],
)
def test_update_me_invalid_username(
    store: InMemoryDocumentStore, user_factory, username, expected_exc
):
    user_factory(username="taken")
    user = user_factory()

    with pytest.raises(expected_exc):
        users_services.update_me(
            store=store, current_user=user, user_in=UserUpdateMe(username=username)
        )


def test_update_me_username_claimed_concurrently(
    mocker: MockerFixture, store: InMemoryDocumentStore, user_factory
):
    first = user_factory(username="first")
    second = user_factory(username="second")
    # Both renames pass the lookup before either user document is updated.
    mocker.patch(
        "forexvolcano.services.users.users_crud.get_user_by_username", return_value=None
    )
    users_services.update_me(
        store=store, current_user=first, user_in=UserUpdateMe(username="wanted")
    )

    with pytest.raises(UsernameAlreadyExists):
        users_services.update_me(
            store=store, current_user=second, user_in=UserUpdateMe(username="wanted")
        )

    stored = users_crud.get_user_by_id(store=store, user_id=second.uid)
    assert stored is not None
    assert stored.username == "second"


def test_update_me_releases_old_username(store: InMemoryDocumentStore, user_factory):
    user = user_factory(username="old")
    users_services.update_me(
        store=store, current_user=user, user_in=UserUpdateMe(username="new")
    )
    renamed = users_crud.get_user_by_id(store=store, user_id=user.uid)
    assert renamed is not None

    users_services.update_me(
        store=store, current_user=renamed, user_in=UserUpdateMe(username="newer")
    )

    assert store.get(users_crud.USERNAMES, "new") is None
    assert store.get(users_crud.USERNAMES, "newer") is not None
    other = user_factory()
    result = users_services.update_me(
        store=store, current_user=other, user_in=UserUpdateMe(username="new")
    )
    assert result.username == "new"


def test_update_avatar(store: InMemoryDocumentStore, blob_host, user_factory):
    user = user_factory()
    image = base64.b64encode(b"jpeg bytes").decode()

    result = users_services.update_avatar(
        store=store, blob_host=blob_host, current_user=user, image=image
    )

    [path] = blob_host.uploads
    assert path.startswith(f"avatars/{user.uid}")
    assert blob_host.uploads[path] == b"jpeg bytes"
    assert result.avatar_url == f"https://media.example.com/{path}"
