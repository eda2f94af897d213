#a like is the same (user, post) membership as a follow and bumps the same follower_count
import logging

from .errors import AuthorizationError, NotFoundError

logger = logging.getLogger(__name__)


def _require_user(user):
    if user is None:
        raise AuthorizationError("You need to log in first")


def follow(store, user, post_id):
    _require_user(user)
    added = store.add_follow(user.id, post_id)
    if added:
        logger.info("User %s followed post %s", user.username, post_id)
    return added


def unfollow(store, user, post_id):
    _require_user(user)
    removed = store.remove_follow(user.id, post_id)
    if removed:
        logger.info("User %s unfollowed post %s", user.username, post_id)
    return removed


def like(store, user, post_id, allow_self_like=False):
    _require_user(user)
    if not allow_self_like:
        post = store.get_post_by_id(post_id)
        if not post:
            raise NotFoundError(f"Post {post_id} not found")
        #dont let people like their own stuff
        if post.is_authored_by(user):
            raise AuthorizationError("You can't like your own post.")
    return follow(store, user, post_id)


def is_following(store, user, post_id):
    if user is None:
        return False
    return store.is_following(user.id, post_id)


def list_followed(store, user):
    if user is None:
        return set()
    return store.followed_post_ids(user.id)
