from typing import Any

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel

from forexvolcano.utils import now_timestamp

__all__ = [
    "Document",
]


class Document(SQLModel, table=True):
    collection: str = Field(primary_key=True, max_length=512)
    id: str = Field(primary_key=True, max_length=255)
    data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    updated_at: float = Field(default_factory=now_timestamp, nullable=False)
    version: int = Field(default=1, nullable=False)
