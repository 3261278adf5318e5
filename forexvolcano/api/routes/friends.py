from fastapi import APIRouter

from forexvolcano.api.deps import (
    CurrentUser,
    StoreDep,
)
from forexvolcano.models.auth_schemas import Message
from forexvolcano.services import friends as friends_service

router = APIRouter(prefix="/friends", tags=["friends"])


@router.post("/request/{receiver_id}")
def send_friend_request(
    *, store: StoreDep, current_user: CurrentUser, receiver_id: str
) -> Message:
    return friends_service.create_friend_request(
        store=store,
        sender_id=current_user.uid,
        receiver_id=receiver_id,
    )


@router.post("/accept/{sender_id}")
def accept_friend_request(
    *, store: StoreDep, current_user: CurrentUser, sender_id: str
) -> Message:
    return friends_service.accept_friend_request(
        store=store,
        current_user_id=current_user.uid,
        sender_id=sender_id,
    )


@router.post("/decline/{sender_id}")
def decline_friend_request(
    *,
    store: StoreDep,
    current_user: CurrentUser,
    sender_id: str,
) -> Message:
    return friends_service.decline_friend_request(
        store=store,
        current_user=current_user.uid,
        sender_id=sender_id,
    )


@router.delete("/cancel/{receiver_id}")
def cancel_friend_request(
    *,
    store: StoreDep,
    current_user: CurrentUser,
    receiver_id: str,
) -> Message:
    return friends_service.cancel_friend_request(
        store=store,
        current_user=current_user.uid,
        receiver_id=receiver_id,
    )


@router.delete("/{friend_id}")
def remove_friend(
    *,
    store: StoreDep,
    current_user: CurrentUser,
    friend_id: str,
) -> Message:
    return friends_service.remove_friend(
        store=store,
        current_user=current_user.uid,
        friend_id=friend_id,
    )
