from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from forexvolcano.models.document import Document  # noqa: F401


def get_engine(database_uri: str) -> Engine:
    if database_uri.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if database_uri in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(
                database_uri, connect_args=connect_args, poolclass=StaticPool
            )
        return create_engine(database_uri, connect_args=connect_args)
    return create_engine(database_uri, pool_pre_ping=True)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)
