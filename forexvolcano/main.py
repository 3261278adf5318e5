from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from logging import getLogger

from fastapi import FastAPI
from fastapi.routing import APIRoute

from forexvolcano.api.main import api_router
from forexvolcano.core.blobs import BlobHost, LocalBlobHost
from forexvolcano.core.config import settings
from forexvolcano.core.db import get_engine, init_db
from forexvolcano.exceptions.handlers import register_exception_handlers
from forexvolcano.logging_.logger import setup_logger
from forexvolcano.models.auth_schemas import Identity
from forexvolcano.services.auth import AuthProvider
from forexvolcano.store import DocumentStore, InMemoryDocumentStore, SQLDocumentStore

logger = getLogger(__name__)


def custom_generate_unique_id(route: APIRoute) -> str:
    return f"{route.tags[0]}-{route.name}"


def build_store() -> DocumentStore:
    if settings.STORE_BACKEND == "sql":
        engine = get_engine(settings.SQLALCHEMY_DATABASE_URI)
        init_db(engine)
        return SQLDocumentStore(engine, poll_interval=settings.WATCH_POLL_INTERVAL)
    return InMemoryDocumentStore()


def log_identity_change(identity: Identity | None) -> None:
    if identity is None:
        logger.info("Viewer signed out")
    else:
        logger.info("Viewer signed in as %s (%s)", identity.uid, identity.username)


def create_app(
    *,
    store: DocumentStore | None = None,
    blob_host: BlobHost | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if configure_logging:
            setup_logger("api")
        logger.info("Starting %s (%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)
        yield

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json" if settings.is_local else None,
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    app.state.store = store if store is not None else build_store()
    app.state.blob_host = blob_host or LocalBlobHost(
        settings.MEDIA_ROOT, settings.MEDIA_BASE_URL
    )
    app.state.auth = AuthProvider(app.state.store)
    app.state.auth.subscribe(log_identity_change)

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
