from fastapi import APIRouter

from forexvolcano.api.deps import (
    BlobHostDep,
    CurrentUser,
    OptionalUser,
    StoreDep,
)
from forexvolcano.models.auth_schemas import Message
from forexvolcano.models.post import CommentCreate, PostCreate, PostPrivacyUpdate
from forexvolcano.schemas.post import CommentPublic, PostPublic
from forexvolcano.services import posts as posts_service

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("/", response_model=PostPublic, status_code=201)
def create_post(
    *,
    store: StoreDep,
    blob_host: BlobHostDep,
    current_user: CurrentUser,
    post_in: PostCreate,
) -> PostPublic:
    return posts_service.create_post(
        store=store, blob_host=blob_host, current_user=current_user, post_in=post_in
    )


@router.get("/{post_id}", response_model=PostPublic)
def get_post(*, store: StoreDep, current_user: OptionalUser, post_id: str) -> PostPublic:
    return posts_service.get_post(
        store=store,
        viewer_uid=current_user.uid if current_user else None,
        post_id=post_id,
    )


@router.delete("/{post_id}", response_model=Message)
def delete_post(*, store: StoreDep, current_user: CurrentUser, post_id: str) -> Message:
    return posts_service.delete_post(
        store=store, current_user_id=current_user.uid, post_id=post_id
    )


@router.patch("/{post_id}/privacy", response_model=PostPublic)
def update_post_privacy(
    *,
    store: StoreDep,
    current_user: CurrentUser,
    post_id: str,
    body: PostPrivacyUpdate,
) -> PostPublic:
    return posts_service.update_post_privacy(
        store=store,
        current_user_id=current_user.uid,
        post_id=post_id,
        privacy=body.privacy,
    )


@router.post("/{post_id}/like", response_model=PostPublic)
def like_post(*, store: StoreDep, current_user: CurrentUser, post_id: str) -> PostPublic:
    return posts_service.like_post(
        store=store, current_user_id=current_user.uid, post_id=post_id
    )


@router.delete("/{post_id}/like", response_model=PostPublic)
def unlike_post(
    *, store: StoreDep, current_user: CurrentUser, post_id: str
) -> PostPublic:
    return posts_service.unlike_post(
        store=store, current_user_id=current_user.uid, post_id=post_id
    )


@router.get("/{post_id}/comments", response_model=list[CommentPublic])
def get_comments(
    *, store: StoreDep, current_user: OptionalUser, post_id: str
) -> list[CommentPublic]:
    return posts_service.get_comments(
        store=store,
        viewer_uid=current_user.uid if current_user else None,
        post_id=post_id,
    )


@router.post("/{post_id}/comments", response_model=CommentPublic, status_code=201)
def add_comment(
    *,
    store: StoreDep,
    current_user: CurrentUser,
    post_id: str,
    body: CommentCreate,
) -> CommentPublic:
    return posts_service.add_comment(
        store=store, current_user=current_user, post_id=post_id, content=body.content
    )
