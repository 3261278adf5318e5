from fastapi import status

from .base import AppError


class DocumentNotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, collection: str, doc_id: str):
        detail = f"Document {doc_id} not found in collection {collection}."
        super().__init__(detail)
        self.collection = collection
        self.doc_id = doc_id


class StoreUnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, detail: str | None = None):
        super().__init__(detail or "The document store is unavailable. Please try again.")


class DocumentAlreadyExistsError(AppError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, collection: str, doc_id: str):
        detail = f"Document {doc_id} already exists in collection {collection}."
        super().__init__(detail)
        self.collection = collection
        self.doc_id = doc_id
