from fastapi import APIRouter

from forexvolcano.api.deps import (
    BlobHostDep,
    CurrentUser,
    StoreDep,
)
from forexvolcano.converters import user as user_converters
from forexvolcano.models.user import AvatarUpdate, UserUpdateMe
from forexvolcano.schemas.user import UserMe, UserWithFriendStatus
from forexvolcano.services import users as users_service

router = APIRouter(prefix="/me", tags=["me"])


@router.get("/", response_model=UserMe)
def get_current_user(current_user: CurrentUser) -> UserMe:
    return user_converters.to_me(current_user)


@router.patch("/", response_model=UserMe)
def update_user_me(
    *, store: StoreDep, user_in: UserUpdateMe, current_user: CurrentUser
) -> UserMe:
    return users_service.update_me(
        store=store, user_in=user_in, current_user=current_user
    )


@router.patch("/avatar", response_model=UserMe)
def update_avatar_me(
    *,
    store: StoreDep,
    blob_host: BlobHostDep,
    body: AvatarUpdate,
    current_user: CurrentUser,
) -> UserMe:
    return users_service.update_avatar(
        store=store, blob_host=blob_host, current_user=current_user, image=body.image
    )


@router.get("/friends", response_model=list[UserWithFriendStatus])
def get_friends(
    store: StoreDep, current_user: CurrentUser
) -> list[UserWithFriendStatus]:
    return users_service.get_friends(store=store, current_user=current_user)


@router.get("/requests/sent", response_model=list[UserWithFriendStatus])
def get_sent_requests(
    store: StoreDep, current_user: CurrentUser
) -> list[UserWithFriendStatus]:
    return users_service.get_sent_friend_requests(
        store=store, current_user=current_user
    )


@router.get("/requests/received", response_model=list[UserWithFriendStatus])
def get_received_requests(
    store: StoreDep, current_user: CurrentUser
) -> list[UserWithFriendStatus]:
    return users_service.get_received_friend_requests(
        store=store, current_user=current_user
    )
