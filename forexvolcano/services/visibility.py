from forexvolcano.core.enums import PostPrivacy
from forexvolcano.crud.friendship import FriendshipLookup
from forexvolcano.models.post import Post


def is_visible(
    viewer_uid: str | None,
    post: Post,
    are_friends: FriendshipLookup,
) -> bool:
    """
    Decide whether a viewer may see a post.

    Rules, first match wins:
    1. The author always sees their own post.
    2. Public posts are visible to everyone, anonymous viewers included.
    3. Friends-only posts are visible when ``are_friends(viewer, author)``.
    4. Anything else (private posts) is hidden.

    Parameters:
        viewer_uid (str | None): The viewer, None when anonymous.
        post (Post): The candidate post.
        are_friends (FriendshipLookup): True iff the viewer is in the author's friends.
    Returns:
        bool: True if the viewer may see the post.
    """
    if viewer_uid is not None and post.author_uid == viewer_uid:
        return True
    if post.privacy == PostPrivacy.PUBLIC:
        return True
    if post.privacy == PostPrivacy.FRIENDS:
        return viewer_uid is not None and are_friends(viewer_uid, post.author_uid)
    return False
