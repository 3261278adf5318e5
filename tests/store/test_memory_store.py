import pytest

from forexvolcano.core.enums import ChangeType
from forexvolcano.crud.user import PREFIX_END
from forexvolcano.exceptions.store_exceptions import (
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
)
from forexvolcano.store import (
    ArrayRemove,
    ArrayUnion,
    Increment,
    InMemoryDocumentStore,
)


def test_create_and_get(store: InMemoryDocumentStore):
    created = store.create("users", {"username": "alice"}, doc_id="a")

    assert created.id == "a"
    fetched = store.get("users", "a")
    assert fetched is not None
    assert fetched.data == {"username": "alice"}
    assert store.get("users", "missing") is None


def test_create_generates_id(store: InMemoryDocumentStore):
    created = store.create("users", {"username": "alice"})

    assert created.id
    assert store.get("users", created.id) is not None


def test_create_duplicate(store: InMemoryDocumentStore):
    store.create("users", {"username": "alice"}, doc_id="a")

    with pytest.raises(DocumentAlreadyExistsError):
        store.create("users", {"username": "other"}, doc_id="a")

    snapshot = store.get("users", "a")
    assert snapshot is not None
    assert snapshot.data == {"username": "alice"}


def test_reads_are_copies(store: InMemoryDocumentStore):
    store.create("users", {"friends": ["b"]}, doc_id="a")

    snapshot = store.get("users", "a")
    assert snapshot is not None
    snapshot.data["friends"].append("c")

    again = store.get("users", "a")
    assert again is not None
    assert again.data["friends"] == ["b"]


def test_update_transforms_are_idempotent(store: InMemoryDocumentStore):
    store.create(
        "users",
        {"friends": [], "friend_requests": {"sent": [], "received": ["b"]}},
        doc_id="a",
    )
    changes = {
        "friends": ArrayUnion("b"),
        "friend_requests.received": ArrayRemove("b"),
    }

    store.update("users", "a", changes)
    snapshot = store.update("users", "a", changes)

    assert snapshot.data == {
        "friends": ["b"],
        "friend_requests": {"sent": [], "received": []},
    }


def test_update_increment(store: InMemoryDocumentStore):
    store.create("posts", {"comment_count": 0}, doc_id="p1")

    store.update("posts", "p1", {"comment_count": Increment()})
    snapshot = store.update("posts", "p1", {"comment_count": Increment(2)})

    assert snapshot.data["comment_count"] == 3


def test_update_missing_document(store: InMemoryDocumentStore):
    with pytest.raises(DocumentNotFoundError):
        store.update("users", "ghost", {"friends": ArrayUnion("a")})

    assert store.get("users", "ghost") is None


def test_set_with_and_without_merge(store: InMemoryDocumentStore):
    store.set("users", "a", {"username": "alice", "bio": "hi"})

    merged = store.set("users", "a", {"bio": "hello"}, merge=True)
    assert merged.data == {"username": "alice", "bio": "hello"}

    replaced = store.set("users", "a", {"bio": "only"})
    assert replaced.data == {"bio": "only"}


def test_delete(store: InMemoryDocumentStore):
    store.create("users", {"username": "alice"}, doc_id="a")

    store.delete("users", "a")
    store.delete("users", "a")

    assert store.get("users", "a") is None


def test_query_orders_with_id_tie_break(store: InMemoryDocumentStore):
    store.create("posts", {"created_at": 100}, doc_id="c")
    store.create("posts", {"created_at": 200}, doc_id="b")
    store.create("posts", {"created_at": 100}, doc_id="a")
    store.create("posts", {"content": "no timestamp"}, doc_id="z")

    ascending = store.query("posts", order_by="created_at")
    descending = store.query("posts", order_by="created_at", descending=True)

    assert [doc.id for doc in ascending] == ["a", "c", "b"]
    assert [doc.id for doc in descending] == ["b", "a", "c"]


def test_query_prefix_range_and_paging(store: InMemoryDocumentStore):
    for doc_id, username in [("1", "alice"), ("2", "alfred"), ("3", "bob"), ("4", "al")]:
        store.create("users", {"username": username}, doc_id=doc_id)

    snapshots = store.query(
        "users", order_by="username", start_at="al", end_at="al" + PREFIX_END
    )
    assert [doc.data["username"] for doc in snapshots] == ["al", "alfred", "alice"]

    page = store.query(
        "users", order_by="username", start_at="al", end_at="al" + PREFIX_END, offset=1, limit=1
    )
    assert [doc.data["username"] for doc in page] == ["alfred"]


def test_find(store: InMemoryDocumentStore):
    store.create("users", {"username": "alice"}, doc_id="a")
    store.create("users", {"username": "bob"}, doc_id="b")

    found = store.find("users", "username", "bob")

    assert [doc.id for doc in found] == ["b"]


def test_collections_are_isolated(store: InMemoryDocumentStore):
    store.create("posts/p1/comments", {"content": "first"}, doc_id="c1")
    store.create("posts/p2/comments", {"content": "second"}, doc_id="c1")

    assert [doc.data["content"] for doc in store.query("posts/p1/comments")] == ["first"]
    assert store.query("posts") == []


def test_watch_yields_initial_snapshot_then_changes(store: InMemoryDocumentStore):
    store.create("posts", {"created_at": 100}, doc_id="p1")
    stream = store.watch("posts", order_by="created_at", descending=True)

    initial = next(stream)
    assert [doc.id for doc in initial.documents] == ["p1"]
    assert [change.type for change in initial.changes] == [ChangeType.ADDED]

    store.create("posts", {"created_at": 200}, doc_id="p2")
    batch = next(stream)
    assert [doc.id for doc in batch.documents] == ["p2", "p1"]
    assert [(change.type, change.document.id) for change in batch.changes] == [
        (ChangeType.ADDED, "p2")
    ]

    store.update("posts", "p1", {"created_at": 300})
    batch = next(stream)
    assert [doc.id for doc in batch.documents] == ["p1", "p2"]
    assert [change.type for change in batch.changes] == [ChangeType.MODIFIED]

    store.delete("posts", "p2")
    batch = next(stream)
    assert [doc.id for doc in batch.documents] == ["p1"]
    assert [change.type for change in batch.changes] == [ChangeType.REMOVED]

    stream.close()


def test_watch_filter_reports_documents_leaving_the_query(store: InMemoryDocumentStore):
    store.create("posts", {"author_uid": "a", "created_at": 1}, doc_id="p1")
    stream = store.watch("posts", where={"author_uid": "a"})
    next(stream)

    store.create("posts", {"author_uid": "b", "created_at": 2}, doc_id="other")
    store.update("posts", "p1", {"author_uid": "b"})
    batch = next(stream)

    assert batch.documents == []
    assert [(change.type, change.document.id) for change in batch.changes] == [
        (ChangeType.REMOVED, "p1")
    ]
    stream.close()


def test_watch_close_unsubscribes(store: InMemoryDocumentStore):
    stream = store.watch("posts")
    next(stream)
    assert len(store._watchers["posts"]) == 1

    stream.close()

    assert store._watchers["posts"] == []
