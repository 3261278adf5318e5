import copy
import queue
import threading
import uuid
from collections import defaultdict
from collections.abc import Iterator, Mapping
from typing import Any

from forexvolcano.core.enums import ChangeType
from forexvolcano.exceptions.store_exceptions import (
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
)

from .base import ChangeBatch, DocumentChange, DocumentSnapshot
from .fields import MISSING, apply_update, get_field, matches, select_documents

__all__ = ["InMemoryDocumentStore"]


class InMemoryDocumentStore:
    """
    Process-local document store.

    Every read returns a deep copy, so callers can never mutate stored state.
    Watchers receive raw change events through their own queue and turn them
    into batches relative to the query they watch.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._watchers: dict[str, list[queue.Queue]] = defaultdict(list)
        self._lock = threading.RLock()

    def _snapshot(self, doc_id: str, data: Mapping[str, Any]) -> DocumentSnapshot:
        return DocumentSnapshot(id=doc_id, data=copy.deepcopy(dict(data)))

    def _all(self, collection: str) -> list[DocumentSnapshot]:
        return [
            self._snapshot(doc_id, data)
            for doc_id, data in self._collections[collection].items()
        ]

    def _notify(self, collection: str, change_type: ChangeType, snapshot: DocumentSnapshot) -> None:
        for events in self._watchers[collection]:
            events.put(DocumentChange(type=change_type, document=snapshot))

    def get(self, collection: str, doc_id: str) -> DocumentSnapshot | None:
        with self._lock:
            data = self._collections[collection].get(doc_id)
            return None if data is None else self._snapshot(doc_id, data)

    def find(
        self,
        collection: str,
        field: str,
        value: Any,
        *,
        limit: int | None = None,
    ) -> list[DocumentSnapshot]:
        return self.query(collection, where={field: value}, limit=limit)

    def query(
        self,
        collection: str,
        *,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        start_at: Any = None,
        end_at: Any = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[DocumentSnapshot]:
        with self._lock:
            documents = self._all(collection)
        return select_documents(
            documents,
            where=where,
            order_by=order_by,
            descending=descending,
            start_at=start_at,
            end_at=end_at,
            limit=limit,
            offset=offset,
        )

    def create(
        self,
        collection: str,
        data: Mapping[str, Any],
        *,
        doc_id: str | None = None,
    ) -> DocumentSnapshot:
        doc_id = doc_id or uuid.uuid4().hex
        with self._lock:
            if doc_id in self._collections[collection]:
                raise DocumentAlreadyExistsError(collection, doc_id)
            self._collections[collection][doc_id] = copy.deepcopy(dict(data))
            snapshot = self._snapshot(doc_id, data)
            self._notify(collection, ChangeType.ADDED, snapshot)
        return snapshot

    def set(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
        *,
        merge: bool = False,
    ) -> DocumentSnapshot:
        with self._lock:
            existing = self._collections[collection].get(doc_id)
            if merge and existing is not None:
                stored = apply_update(existing, data)
            else:
                stored = copy.deepcopy(dict(data))
            self._collections[collection][doc_id] = stored
            snapshot = self._snapshot(doc_id, stored)
            change_type = ChangeType.ADDED if existing is None else ChangeType.MODIFIED
            self._notify(collection, change_type, snapshot)
        return snapshot

    def update(
        self,
        collection: str,
        doc_id: str,
        changes: Mapping[str, Any],
    ) -> DocumentSnapshot:
        with self._lock:
            existing = self._collections[collection].get(doc_id)
            if existing is None:
                raise DocumentNotFoundError(collection, doc_id)
            stored = apply_update(existing, changes)
            self._collections[collection][doc_id] = stored
            snapshot = self._snapshot(doc_id, stored)
            self._notify(collection, ChangeType.MODIFIED, snapshot)
        return snapshot

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            existing = self._collections[collection].pop(doc_id, None)
            if existing is not None:
                self._notify(collection, ChangeType.REMOVED, self._snapshot(doc_id, existing))

    def watch(
        self,
        collection: str,
        *,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> Iterator[ChangeBatch]:
        """
        Yield the initial result set, then one batch per burst of writes.

        The generator blocks between batches and never ends on its own; close
        it to unsubscribe.
        """
        events: queue.Queue = queue.Queue()
        with self._lock:
            self._watchers[collection].append(events)
            documents = self.query(
                collection, where=where, order_by=order_by, descending=descending
            )
        known = {doc.id for doc in documents}
        try:
            yield ChangeBatch(
                changes=[
                    DocumentChange(type=ChangeType.ADDED, document=doc)
                    for doc in documents
                ],
                documents=documents,
            )
            while True:
                pending = [events.get()]
                while True:
                    try:
                        pending.append(events.get_nowait())
                    except queue.Empty:
                        break

                changes = []
                for event in pending:
                    doc = event.document
                    relevant = event.type != ChangeType.REMOVED and matches(doc.data, where)
                    if relevant and order_by is not None:
                        relevant = get_field(doc.data, order_by) is not MISSING
                    if relevant:
                        change_type = ChangeType.MODIFIED if doc.id in known else ChangeType.ADDED
                        known.add(doc.id)
                        changes.append(DocumentChange(type=change_type, document=doc))
                    elif doc.id in known:
                        known.discard(doc.id)
                        changes.append(DocumentChange(type=ChangeType.REMOVED, document=doc))
                if not changes:
                    continue

                documents = self.query(
                    collection, where=where, order_by=order_by, descending=descending
                )
                yield ChangeBatch(changes=changes, documents=documents)
        finally:
            with self._lock:
                self._watchers[collection].remove(events)
