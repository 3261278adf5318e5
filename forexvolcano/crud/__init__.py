from . import auth, comment, friendship, post, user

__all__ = [
    "auth",
    "comment",
    "friendship",
    "post",
    "user",
]
