from fastapi import APIRouter, Query

from forexvolcano.api.deps import OptionalUser, StoreDep
from forexvolcano.schemas.post import PostPublic
from forexvolcano.services import feed as feed_service

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("/", response_model=list[PostPublic])
def get_feed(
    store: StoreDep,
    current_user: OptionalUser,
    limit: int = Query(20, ge=1, le=50),
    offset: int = Query(0, ge=0),
) -> list[PostPublic]:
    """
    Posts the viewer may see, newest first. Anonymous viewers only get public posts.
    """
    return feed_service.get_feed(
        store=store,
        viewer_uid=current_user.uid if current_user else None,
        limit=limit,
        offset=offset,
    )
