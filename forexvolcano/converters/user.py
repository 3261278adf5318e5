from forexvolcano.models.user import UserProfile
from forexvolcano.schemas.user import UserMe, UserPublic, UserWithFriendStatus
from forexvolcano.utils import timestamp_to_datetime


def _public_fields(user: UserProfile) -> dict:
    return {
        "uid": user.uid,
        "username": user.username,
        "bio": user.bio,
        "avatar_url": user.avatar_url,
        "role": user.role,
        "created_at": timestamp_to_datetime(user.created_at),
        "friends_count": len(user.friends),
    }


def to_public(user: UserProfile) -> UserPublic:
    UserProfile.model_validate(user)
    return UserPublic(**_public_fields(user))


def to_with_friend_status(
    user: UserProfile,
    *,
    current_user: UserProfile,
) -> UserWithFriendStatus:
    """
    Converts a UserProfile to a UserWithFriendStatus, including friendship status
    and friend request status between the current user and the specified user.

    The status is read from the current user's own relation sets.

    Parameters:
        user (UserProfile): The user to convert.
        current_user (UserProfile): The user viewing ``user``.
    Returns:
        UserWithFriendStatus: The converted user with friendship details.
    Raises:
        ValidationError: If the user does not match the expected model.
    """
    UserProfile.model_validate(user)
    return UserWithFriendStatus(
        **_public_fields(user),
        is_friend=user.uid in current_user.friends,
        sent_request=user.uid in current_user.friend_requests.sent,
        received_request=user.uid in current_user.friend_requests.received,
    )


def to_me(user: UserProfile) -> UserMe:
    UserProfile.model_validate(user)
    return UserMe(
        **_public_fields(user),
        email=user.email,
        sent_requests_count=len(user.friend_requests.sent),
        received_requests_count=len(user.friend_requests.received),
    )
