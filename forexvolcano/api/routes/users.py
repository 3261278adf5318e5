from fastapi import APIRouter, Query

from forexvolcano.api.deps import (
    AuthDep,
    CurrentUser,
    OptionalUser,
    StoreDep,
)
from forexvolcano.converters import user as user_converters
from forexvolcano.models.user import UserRegister
from forexvolcano.schemas.post import PostPublic
from forexvolcano.schemas.user import UserPublic, UserWithFriendStatus
from forexvolcano.services import feed as feed_service
from forexvolcano.services import users as users_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/search", response_model=list[UserWithFriendStatus])
def search_users(
    *,
    store: StoreDep,
    current_user: CurrentUser,
    query: str = Query(..., min_length=1),
    offset: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=50),
) -> list[UserWithFriendStatus]:
    return users_service.get_users(
        store=store,
        current_user=current_user,
        query=query,
        offset=offset,
        limit=limit,
    )


@router.get("/suggestions", response_model=list[UserWithFriendStatus])
def get_suggestions(
    *, store: StoreDep, current_user: CurrentUser
) -> list[UserWithFriendStatus]:
    return users_service.get_suggestions(store=store, current_user=current_user)


@router.post("/signup", response_model=UserPublic)
def register_user(*, auth: AuthDep, user_in: UserRegister) -> UserPublic:
    return user_converters.to_public(auth.register(user_in))


@router.get("/by-username/{username}", response_model=UserPublic)
def get_user_by_username(*, store: StoreDep, username: str) -> UserPublic:
    return users_service.get_user_by_username(store=store, username=username)


@router.get("/{user_id}", response_model=UserPublic)
def get_user(*, store: StoreDep, user_id: str) -> UserPublic:
    return users_service.get_user(store=store, user_id=user_id)


@router.get("/{user_id}/posts", response_model=list[PostPublic])
def get_user_posts(
    store: StoreDep,
    current_user: OptionalUser,
    user_id: str,
    limit: int = Query(20, ge=1, le=50),
    offset: int = Query(0, ge=0),
) -> list[PostPublic]:
    return feed_service.get_user_posts(
        store=store,
        viewer_uid=current_user.uid if current_user else None,
        author_uid=user_id,
        limit=limit,
        offset=offset,
    )
