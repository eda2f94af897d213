from enum import Enum

from flask_login import UserMixin

from .errors import ValidationError


#class for each microblog user, built straight from a users row
class User(UserMixin):
    def __init__(self, id, username, external_identity_hash, avatar_ref, created_at, password_hash=None):
        self.id = id
        self.username = username
        self.external_identity_hash = external_identity_hash
        self.avatar_ref = avatar_ref
        self.created_at = created_at
        self.password_hash = password_hash

    def __repr__(self):
        return f"<User {self.id} {self.username}>"


#class for each post/event on the feed
class Post:
    def __init__(self, id, category, title, body, author_username, created_at, event_time, follower_count):
        self.id = id
        self.category = category
        self.title = title
        self.body = body
        self.author_username = author_username
        self.created_at = created_at
        self.event_time = event_time
        self.follower_count = follower_count

    def is_authored_by(self, user):
        return user is not None and user.username == self.author_username

    def __repr__(self):
        return f"<Post {self.id} {self.title!r} followers={self.follower_count}>"


#enum for the feed orderings, values match the sortType form field
class SortOrder(Enum):
    POST_TIME = "postTime"
    EVENT_TIME = "eventTime"
    FOLLOWER_COUNT = "followerCount"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        if not value:
            return cls.POST_TIME
        aliases = {
            "post_time": cls.POST_TIME,
            "event_time": cls.EVENT_TIME,
            "follower_count": cls.FOLLOWER_COUNT,
            "followers": cls.FOLLOWER_COUNT,
        }
        for order in cls:
            if order.value == value:
                return order
        if value in aliases:
            return aliases[value]
        raise ValidationError(f"Unknown sort type: {value}")
