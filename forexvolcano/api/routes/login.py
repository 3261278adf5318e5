from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm

from forexvolcano.api.deps import AuthDep, TokenDep
from forexvolcano.models.auth_schemas import Message, Token

router = APIRouter(tags=["login"])


@router.post("/login/access-token")
def login_access_token(
    auth: AuthDep, form_data: Annotated[OAuth2PasswordRequestForm, Depends()]
) -> Token:
    """
    OAuth2 compatible token login, get an access token for future requests.
    The form's username field carries the email.
    """
    return auth.sign_in(email=form_data.username, password=form_data.password)


@router.post("/logout")
def logout(auth: AuthDep, token: TokenDep) -> Message:
    return auth.sign_out(token)
