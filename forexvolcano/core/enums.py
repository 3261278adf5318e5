from enum import Enum, unique


@unique
class PostPrivacy(str, Enum):
    PUBLIC = "public"
    FRIENDS = "friends"
    PRIVATE = "private"


@unique
class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


@unique
class ChangeType(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
