from .base import ChangeBatch, DocumentChange, DocumentSnapshot, DocumentStore
from .fields import ArrayRemove, ArrayUnion, Increment
from .memory import InMemoryDocumentStore
from .sql import SQLDocumentStore

__all__ = [
    "ChangeBatch",
    "DocumentChange",
    "DocumentSnapshot",
    "DocumentStore",
    "ArrayRemove",
    "ArrayUnion",
    "Increment",
    "InMemoryDocumentStore",
    "SQLDocumentStore",
]
