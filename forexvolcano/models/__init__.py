from .auth_schemas import Credentials, Identity, Message, Token, TokenPayload
from .document import Document
from .post import Comment, CommentCreate, Post, PostBase, PostCreate, PostPrivacyUpdate
from .user import AvatarUpdate, FriendRequests, UserBase, UserProfile, UserRegister, UserUpdateMe

__all__ = [
    "Credentials",
    "Identity",
    "Message",
    "Token",
    "TokenPayload",
    "Document",
    "Comment",
    "CommentCreate",
    "Post",
    "PostBase",
    "PostCreate",
    "PostPrivacyUpdate",
    "AvatarUpdate",
    "FriendRequests",
    "UserBase",
    "UserProfile",
    "UserRegister",
    "UserUpdateMe",
]
