#ordering and filtering work on already-loaded posts, which the store returns in insertion order
import logging
from datetime import datetime

from .errors import AuthorizationError, NotFoundError, ValidationError
from .models import SortOrder

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "general"
MAX_TITLE_LENGTH = 200
EVENT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def order_posts(posts, order=SortOrder.POST_TIME):
    order = SortOrder.parse(order)
    # sorted() is stable, and stays stable with reverse=True
    if order is SortOrder.POST_TIME:
        return sorted(posts, key=lambda post: post.created_at, reverse=True)
    if order is SortOrder.EVENT_TIME:
        return sorted(posts, key=lambda post: (post.event_time is None, post.event_time or ""))
    return sorted(posts, key=lambda post: post.follower_count, reverse=True)


def filter_posts(posts, category=None):
    wanted = str(category or "").strip().lower()
    if not wanted or wanted == "all":
        return list(posts)
    return [post for post in posts if post.category.lower() == wanted]


def list_posts(store, order=SortOrder.POST_TIME, category=None):
    return order_posts(filter_posts(store.list_posts(), category), order)


def list_categories(store):
    return sorted({post.category for post in store.list_posts()})


#accepts a datetime, an ISO string, or the value of an html datetime-local input
def parse_event_time(value):
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.strftime(EVENT_TIME_FORMAT)
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"Invalid event time: {value}")
    return parsed.strftime(EVENT_TIME_FORMAT)


#anonymous submissions (author is None) create nothing and return None, the caller just redirects
def create_post(store, author, category, title, body, event_time=None):
    if author is None:
        logger.info("Ignoring post submitted without a logged in user")
        return None

    title = (title or "").strip()
    body = (body or "").strip()
    category = (category or "").strip().lower() or DEFAULT_CATEGORY

    #check for null post
    if not title or not body:
        raise ValidationError("Your post must include a title and content.")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError("Title too long.")

    post = store.insert_post(category, title, body, author.username, parse_event_time(event_time))
    logger.info("User %s created post %s in %s", author.username, post.id, category)
    return post


def delete_post(store, post_id, requesting_user):
    if requesting_user is None:
        raise AuthorizationError("You need to log in first")

    post = store.get_post_by_id(post_id)
    if not post:
        raise NotFoundError(f"Post {post_id} not found")

    #check user
    if not post.is_authored_by(requesting_user):
        logger.warning("User %s tried to delete post %s owned by %s",
                       requesting_user.username, post_id, post.author_username)
        raise AuthorizationError("You are not authorized to delete this post.")

    store.delete_post(post_id)
    logger.info("User %s deleted post %s", requesting_user.username, post_id)


def posts_by_author(store, username, order=SortOrder.POST_TIME):
    return order_posts(store.list_posts_by_author(username), order)


def followed_posts(store, user, order=SortOrder.POST_TIME):
    if user is None:
        return []
    return order_posts(store.list_followed_posts(user.id), order)
