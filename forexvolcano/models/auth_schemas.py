from sqlmodel import Field, SQLModel


# Generic message
class Message(SQLModel):
    message: str


# JSON payload containing access token
class Token(SQLModel):
    access_token: str
    token_type: str = Field(
        default="bearer", description="Type of the token, usually 'bearer'"
    )


# Contents of JWT token
class TokenPayload(SQLModel):
    sub: str | None = Field(
        default=None, description="Subject of the token, usually the user ID"
    )
    jti: str | None = Field(default=None, description="Unique token id, used for sign-out")


# Stored in the "credentials" collection, keyed by email
class Credentials(SQLModel):
    uid: str
    hashed_password: str


# Identity issued by the authentication provider
class Identity(SQLModel):
    uid: str
    username: str
    email: str
