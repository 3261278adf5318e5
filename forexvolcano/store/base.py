from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from forexvolcano.core.enums import ChangeType

__all__ = [
    "DocumentSnapshot",
    "DocumentChange",
    "ChangeBatch",
    "DocumentStore",
]


@dataclass(frozen=True)
class DocumentSnapshot:
    id: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DocumentChange:
    type: ChangeType
    document: DocumentSnapshot


@dataclass(frozen=True)
class ChangeBatch:
    changes: list[DocumentChange]
    # Full result set of the watched query after the changes were applied.
    documents: list[DocumentSnapshot]


class DocumentStore(Protocol):
    """
    A document store addressed by collection path and document id.

    Collection paths may nest (``"posts/<id>/comments"``). Every method may
    raise ``StoreUnavailableError`` when the backend cannot be reached.
    """

    def get(self, collection: str, doc_id: str) -> DocumentSnapshot | None: ...

    def find(
        self,
        collection: str,
        field: str,
        value: Any,
        *,
        limit: int | None = None,
    ) -> list[DocumentSnapshot]: ...

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
    ) -> list[DocumentSnapshot]: ...

    def create(
        self,
        collection: str,
        data: Mapping[str, Any],
        *,
        doc_id: str | None = None,
    ) -> DocumentSnapshot: ...

    def set(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
        *,
        merge: bool = False,
    ) -> DocumentSnapshot: ...

    def update(
        self,
        collection: str,
        doc_id: str,
        changes: Mapping[str, Any],
    ) -> DocumentSnapshot: ...

    def delete(self, collection: str, doc_id: str) -> None: ...

    def watch(
        self,
        collection: str,
        *,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> Iterator[ChangeBatch]: ...
