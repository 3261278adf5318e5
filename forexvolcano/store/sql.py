import time
import uuid
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from logging import getLogger
from typing import Any

from sqlalchemy import update as sa_update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session, col, select

from forexvolcano.exceptions.store_exceptions import (
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
    StoreUnavailableError,
)
from forexvolcano.models.document import Document
from forexvolcano.utils import now_timestamp

from .base import ChangeBatch, DocumentSnapshot
from .fields import apply_update, diff_documents, select_documents

__all__ = ["SQLDocumentStore"]

logger = getLogger(__name__)

MAX_WRITE_ATTEMPTS = 10


class SQLDocumentStore:
    """
    Document store kept in a single SQL table of JSON documents.

    String equality filters run in SQL; ordering, ranges and paging run on the
    filtered rows in Python with the same semantics as the in-memory store.
    Each write is a read-modify-write of one row, committed only if the row
    version still matches the one that was read.
    """

    def __init__(self, engine: Engine, *, poll_interval: float = 1.0) -> None:
        self.engine = engine
        self.poll_interval = poll_interval

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with Session(self.engine) as session:
                yield session
        except OperationalError as e:
            logger.warning("Document store unreachable: %s", e)
            raise StoreUnavailableError from e

    @staticmethod
    def _snapshot(row: Document) -> DocumentSnapshot:
        return DocumentSnapshot(id=row.id, data=dict(row.data))

    def get(self, collection: str, doc_id: str) -> DocumentSnapshot | None:
        with self._session() as session:
            row = session.get(Document, (collection, doc_id))
            return None if row is None else self._snapshot(row)

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
        stmt = select(Document).where(col(Document.collection) == collection)
        for path, value in (where or {}).items():
            if isinstance(value, str):
                element = col(Document.data)[tuple(path.split("."))]
                stmt = stmt.where(element.as_string() == value)

        with self._session() as session:
            documents = [self._snapshot(row) for row in session.exec(stmt).all()]

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
        row = Document(collection=collection, id=doc_id, data=dict(data))
        with self._session() as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DocumentAlreadyExistsError(collection, doc_id) from e
            session.refresh(row)
            return self._snapshot(row)

    def _write(
        self,
        collection: str,
        doc_id: str,
        build: Callable[[dict[str, Any] | None], dict[str, Any]],
    ) -> DocumentSnapshot:
        """
        Compare-and-swap write of one document.

        ``build`` receives the stored data (``None`` when the document is
        missing) and returns the new data. The row is only replaced if its
        version is unchanged since the read; otherwise the read and ``build``
        run again.
        """
        for attempt in range(MAX_WRITE_ATTEMPTS):
            with self._session() as session:
                row = session.get(Document, (collection, doc_id))
                data = build(None if row is None else row.data)
                if row is None:
                    session.add(Document(collection=collection, id=doc_id, data=data))
                    try:
                        session.commit()
                    except IntegrityError:
                        session.rollback()
                        continue
                    return DocumentSnapshot(id=doc_id, data=data)

                stmt = (
                    sa_update(Document)
                    .where(
                        col(Document.collection) == collection,
                        col(Document.id) == doc_id,
                        col(Document.version) == row.version,
                    )
                    .values(data=data, version=row.version + 1, updated_at=now_timestamp())
                    .execution_options(synchronize_session=False)
                )
                result = session.execute(stmt)
                session.commit()
                if result.rowcount == 1:
                    return DocumentSnapshot(id=doc_id, data=data)
            logger.debug(
                "Write conflict on %s/%s, retrying (attempt %d)",
                collection,
                doc_id,
                attempt + 1,
            )
        raise StoreUnavailableError(
            f"Too many concurrent writes to {collection}/{doc_id}. Please try again."
        )

    def set(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
        *,
        merge: bool = False,
    ) -> DocumentSnapshot:
        def build(current: dict[str, Any] | None) -> dict[str, Any]:
            return apply_update(current if merge and current is not None else {}, data)

        return self._write(collection, doc_id, build)

    def update(
        self,
        collection: str,
        doc_id: str,
        changes: Mapping[str, Any],
    ) -> DocumentSnapshot:
        def build(current: dict[str, Any] | None) -> dict[str, Any]:
            if current is None:
                raise DocumentNotFoundError(collection, doc_id)
            return apply_update(current, changes)

        return self._write(collection, doc_id, build)

    def delete(self, collection: str, doc_id: str) -> None:
        with self._session() as session:
            row = session.get(Document, (collection, doc_id))
            if row is not None:
                session.delete(row)
                session.commit()

    def watch(
        self,
        collection: str,
        *,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> Iterator[ChangeBatch]:
        """
        Poll the query and yield a batch whenever its result set changes.

        The first batch is the initial result set. Between polls the generator
        sleeps for ``poll_interval`` seconds.
        """
        previous: dict[str, dict[str, Any]] | None = None
        while True:
            documents = self.query(
                collection, where=where, order_by=order_by, descending=descending
            )
            batch = diff_documents(previous or {}, documents)
            if previous is None or batch.changes:
                previous = {doc.id: doc.data for doc in documents}
                yield batch
            else:
                time.sleep(self.poll_interval)
