import uuid
from collections.abc import Callable
from datetime import timedelta
from logging import getLogger
from urllib.parse import quote

import jwt
from pydantic import ValidationError

from forexvolcano.core import security
from forexvolcano.core.config import settings
from forexvolcano.crud import auth as auth_crud
from forexvolcano.crud import user as users_crud
from forexvolcano.exceptions.store_exceptions import DocumentAlreadyExistsError
from forexvolcano.exceptions.user_exceptions import (
    EmailAlreadyExists,
    EmptyUsernameError,
    InvalidCredentialsError,
    InvalidTokenError,
    UsernameAlreadyExists,
    UserNotFound,
)
from forexvolcano.models.auth_schemas import (
    Credentials,
    Identity,
    Message,
    Token,
    TokenPayload,
)
from forexvolcano.models.user import UserProfile, UserRegister
from forexvolcano.store import DocumentStore

logger = getLogger(__name__)

IdentityListener = Callable[[Identity | None], None]


def default_avatar_url(username: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(username)}&background=random"


class AuthProvider:
    """
    Issues viewer identities.

    Registration, sign-in and sign-out go through here. Listeners registered
    with ``subscribe`` are told about every identity change: the new identity
    after a sign-in, None after a sign-out.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self._listeners: list[IdentityListener] = []

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, identity: Identity | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(identity)
            except Exception:
                logger.exception("Identity listener %r failed", listener)

    def register(self, user_in: UserRegister) -> UserProfile:
        """
        Create credentials and a user document with empty relation sets.

        Raises:
            EmptyUsernameError: If the username is blank.
            UsernameAlreadyExists: If the username is taken.
            EmailAlreadyExists: If the email is already registered.
        """
        username = user_in.username.strip()
        if not username:
            raise EmptyUsernameError()
        if auth_crud.get_credentials(store=self.store, email=user_in.email) is not None:
            raise EmailAlreadyExists(user_in.email)
        if users_crud.get_user_by_username(store=self.store, username=username) is not None:
            raise UsernameAlreadyExists(username)

        uid = uuid.uuid4().hex
        try:
            users_crud.reserve_username(store=self.store, username=username, user_id=uid)
        except DocumentAlreadyExistsError as e:
            raise UsernameAlreadyExists(username) from e

        user = users_crud.create_user(
            store=self.store,
            user=UserProfile(
                uid=uid,
                username=username,
                email=user_in.email,
                avatar_url=default_avatar_url(username),
            ),
        )
        try:
            auth_crud.create_credentials(
                store=self.store,
                email=user_in.email,
                credentials=Credentials(
                    uid=user.uid,
                    hashed_password=security.get_password_hash(user_in.password),
                ),
            )
        except DocumentAlreadyExistsError as e:
            # Lost a race on the same email, undo the user document.
            self.store.delete(users_crud.USERS, user.uid)
            users_crud.release_username(
                store=self.store, username=username, user_id=user.uid
            )
            raise EmailAlreadyExists(user_in.email) from e

        logger.info("Registered user %s (%s)", user.uid, user.username)
        return user

    def authenticate(self, email: str, password: str) -> UserProfile | None:
        credentials = auth_crud.get_credentials(store=self.store, email=email)
        if credentials is None:
            return None
        if not security.verify_password(password, credentials.hashed_password):
            return None
        return users_crud.get_user_by_id(store=self.store, user_id=credentials.uid)

    def sign_in(self, email: str, password: str) -> Token:
        """
        Raises:
            InvalidCredentialsError: If the email or password is wrong.
        """
        user = self.authenticate(email, password)
        if user is None:
            raise InvalidCredentialsError()
        access_token = security.create_access_token(
            user.uid, expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        self._notify(Identity(uid=user.uid, username=user.username, email=user.email))
        return Token(access_token=access_token)

    def _decode(self, token: str) -> TokenPayload:
        try:
            payload = security.decode_access_token(token)
            token_data = TokenPayload(**payload)
        except (jwt.InvalidTokenError, ValidationError) as e:
            raise InvalidTokenError() from e
        if token_data.sub is None or token_data.jti is None:
            raise InvalidTokenError()
        if auth_crud.is_token_revoked(store=self.store, jti=token_data.jti):
            raise InvalidTokenError()
        return token_data

    def sign_out(self, token: str) -> Message:
        """
        Revoke a token. Later requests made with it are rejected.

        Raises:
            InvalidTokenError: If the token is invalid or already revoked.
        """
        token_data = self._decode(token)
        auth_crud.revoke_token(store=self.store, jti=token_data.jti or "")
        self._notify(None)
        return Message(message="Signed out successfully.")

    def identity_from_token(self, token: str) -> UserProfile:
        """
        Resolve a bearer token to the current user document.

        Raises:
            InvalidTokenError: If the token is invalid, expired or revoked.
            UserNotFound: If the user behind the token no longer exists.
        """
        token_data = self._decode(token)
        user_id = token_data.sub or ""
        user = users_crud.get_user_by_id(store=self.store, user_id=user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user
