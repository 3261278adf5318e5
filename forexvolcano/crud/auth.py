from forexvolcano.models.auth_schemas import Credentials
from forexvolcano.store import DocumentStore
from forexvolcano.utils import now_timestamp

CREDENTIALS = "credentials"
REVOKED_TOKENS = "revoked_tokens"


def _credentials_key(email: str) -> str:
    return email.strip().lower()


def create_credentials(
    *,
    store: DocumentStore,
    email: str,
    credentials: Credentials,
) -> Credentials:
    """
    Store the credentials of a user, keyed by normalized email.

    Raises:
        DocumentAlreadyExistsError: If the email is already registered.
    """
    snapshot = store.create(
        CREDENTIALS, credentials.model_dump(), doc_id=_credentials_key(email)
    )
    return Credentials.model_validate(snapshot.data)


def get_credentials(*, store: DocumentStore, email: str) -> Credentials | None:
    snapshot = store.get(CREDENTIALS, _credentials_key(email))
    if snapshot is None:
        return None
    return Credentials.model_validate(snapshot.data)


def revoke_token(*, store: DocumentStore, jti: str) -> None:
    store.set(REVOKED_TOKENS, jti, {"revoked_at": now_timestamp()})


def is_token_revoked(*, store: DocumentStore, jti: str) -> bool:
    return store.get(REVOKED_TOKENS, jti) is not None
