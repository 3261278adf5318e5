from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from forexvolcano.core.blobs import BlobHost
from forexvolcano.core.config import settings
from forexvolcano.models.user import UserProfile
from forexvolcano.services.auth import AuthProvider
from forexvolcano.store import DocumentStore

reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/login/access-token"
)
optional_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/login/access-token", auto_error=False
)


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_auth_provider(request: Request) -> AuthProvider:
    return request.app.state.auth


def get_blob_host(request: Request) -> BlobHost:
    return request.app.state.blob_host


StoreDep = Annotated[DocumentStore, Depends(get_store)]
AuthDep = Annotated[AuthProvider, Depends(get_auth_provider)]
BlobHostDep = Annotated[BlobHost, Depends(get_blob_host)]
TokenDep = Annotated[str, Depends(reusable_oauth2)]
OptionalTokenDep = Annotated[str | None, Depends(optional_oauth2)]


def get_current_user(auth: AuthDep, token: TokenDep) -> UserProfile:
    return auth.identity_from_token(token)


def get_optional_user(auth: AuthDep, token: OptionalTokenDep) -> UserProfile | None:
    if token is None:
        return None
    return auth.identity_from_token(token)


CurrentUser = Annotated[UserProfile, Depends(get_current_user)]
OptionalUser = Annotated[UserProfile | None, Depends(get_optional_user)]
