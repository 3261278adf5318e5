"""
Field-level document semantics shared by every store backend.

Documents are plain JSON-like dicts. Field paths use dots to reach into nested
maps (``"friend_requests.sent"``). Updates merge into the stored document one
field at a time, and the array transforms below behave like set operations so
that re-applying the same update is a no-op.
"""

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from forexvolcano.core.enums import ChangeType

from .base import ChangeBatch, DocumentChange, DocumentSnapshot

__all__ = [
    "MISSING",
    "FieldTransform",
    "ArrayUnion",
    "ArrayRemove",
    "Increment",
    "get_field",
    "apply_update",
    "matches",
    "select_documents",
    "diff_documents",
]


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class FieldTransform:
    def apply(self, current: Any) -> Any:
        raise NotImplementedError


class ArrayUnion(FieldTransform):
    """Add each value to the array unless it is already present."""

    def __init__(self, *values: Any):
        self.values = values

    def apply(self, current: Any) -> list[Any]:
        result = list(current) if isinstance(current, list) else []
        for value in self.values:
            if value not in result:
                result.append(value)
        return result

    def __repr__(self) -> str:
        return f"ArrayUnion{self.values!r}"


class ArrayRemove(FieldTransform):
    """Remove every occurrence of each value. Absent values are ignored."""

    def __init__(self, *values: Any):
        self.values = values

    def apply(self, current: Any) -> list[Any]:
        if not isinstance(current, list):
            return []
        return [item for item in current if item not in self.values]

    def __repr__(self) -> str:
        return f"ArrayRemove{self.values!r}"


class Increment(FieldTransform):
    def __init__(self, amount: int | float = 1):
        self.amount = amount

    def apply(self, current: Any) -> int | float:
        if isinstance(current, bool) or not isinstance(current, (int, float)):
            current = 0
        return current + self.amount

    def __repr__(self) -> str:
        return f"Increment({self.amount!r})"


def get_field(data: Mapping[str, Any], path: str) -> Any:
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return MISSING
        current = current[part]
    return current


def _set_field(data: dict[str, Any], path: str, value: Any) -> None:
    *parents, leaf = path.split(".")
    current = data
    for part in parents:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    if isinstance(value, FieldTransform):
        value = value.apply(current.get(leaf))
    current[leaf] = copy.deepcopy(value)


def apply_update(data: Mapping[str, Any], changes: Mapping[str, Any]) -> dict[str, Any]:
    """
    Merge ``changes`` into a copy of ``data``.

    Parameters:
        data (Mapping): The stored document.
        changes (Mapping): Field path to new value or ``FieldTransform``.
    Returns:
        dict: The merged document. ``data`` is left untouched.
    """
    merged = copy.deepcopy(dict(data))
    for path, value in changes.items():
        _set_field(merged, path, value)
    return merged


def matches(data: Mapping[str, Any], where: Mapping[str, Any] | None) -> bool:
    if not where:
        return True
    return all(get_field(data, path) == value for path, value in where.items())


def _in_range(value: Any, start_at: Any, end_at: Any, descending: bool) -> bool:
    lower, upper = (end_at, start_at) if descending else (start_at, end_at)
    try:
        if lower is not None and value < lower:
            return False
        if upper is not None and value > upper:
            return False
    except TypeError:
        return False
    return True


def select_documents(
    documents: Iterable[DocumentSnapshot],
    *,
    where: Mapping[str, Any] | None = None,
    order_by: str | None = None,
    descending: bool = False,
    start_at: Any = None,
    end_at: Any = None,
    limit: int | None = None,
    offset: int = 0,
) -> list[DocumentSnapshot]:
    """
    Filter, order and page a set of documents.

    Documents missing the ``order_by`` field are left out of ordered results.
    ``start_at`` and ``end_at`` are inclusive bounds in iteration order, so for
    a descending query ``start_at`` is the upper bound. Equal sort keys are
    ordered by document id ascending.
    """
    selected = sorted(
        (doc for doc in documents if matches(doc.data, where)),
        key=lambda doc: doc.id,
    )
    if order_by is not None:
        selected = [
            doc
            for doc in selected
            if get_field(doc.data, order_by) is not MISSING
            and _in_range(get_field(doc.data, order_by), start_at, end_at, descending)
        ]
        selected.sort(key=lambda doc: get_field(doc.data, order_by), reverse=descending)
    selected = selected[offset:]
    if limit is not None:
        selected = selected[:limit]
    return selected


def diff_documents(
    previous: Mapping[str, Mapping[str, Any]],
    documents: list[DocumentSnapshot],
) -> ChangeBatch:
    current = {doc.id: doc for doc in documents}
    changes: list[DocumentChange] = []
    for doc in documents:
        if doc.id not in previous:
            changes.append(DocumentChange(type=ChangeType.ADDED, document=doc))
        elif previous[doc.id] != doc.data:
            changes.append(DocumentChange(type=ChangeType.MODIFIED, document=doc))
    for doc_id, data in previous.items():
        if doc_id not in current:
            changes.append(
                DocumentChange(
                    type=ChangeType.REMOVED,
                    document=DocumentSnapshot(id=doc_id, data=dict(data)),
                )
            )
    return ChangeBatch(changes=changes, documents=documents)
