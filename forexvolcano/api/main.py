from fastapi import APIRouter

from forexvolcano.api.routes import (
    feed,
    friends,
    login,
    me,
    posts,
    users,
    utils,
)

api_router = APIRouter()
api_router.include_router(login.router)
api_router.include_router(users.router)
api_router.include_router(utils.router)
api_router.include_router(feed.router)
api_router.include_router(posts.router)
api_router.include_router(friends.router)
api_router.include_router(me.router)
