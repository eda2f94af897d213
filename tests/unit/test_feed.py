"""
Unit tests for feed ordering, filtering, creation and deletion.
"""
from datetime import datetime

import pytest

from microblog import feed, follows
from microblog.errors import AuthorizationError, NotFoundError, ValidationError
from microblog.models import Post, SortOrder


def make_post(id, created_at="2024-05-01 12:00:00", event_time=None, follower_count=0, category="soccer"):
    return Post(id, category, f"Post {id}", "body", "bob", created_at, event_time, follower_count)


class TestOrderPosts:
    def test_follower_count_non_increasing_with_stable_ties(self):
        posts = [make_post(1, follower_count=2), make_post(2, follower_count=5),
                 make_post(3, follower_count=2), make_post(4, follower_count=5), make_post(5)]

        ordered = feed.order_posts(posts, SortOrder.FOLLOWER_COUNT)

        assert [p.id for p in ordered] == [2, 4, 1, 3, 5]

    def test_post_time_newest_first(self):
        posts = [make_post(1, created_at="2024-05-01 12:00:00"),
                 make_post(2, created_at="2024-06-01 12:00:00"),
                 make_post(3, created_at="2024-05-01 12:00:00")]

        ordered = feed.order_posts(posts, "postTime")

        assert [p.id for p in ordered] == [2, 1, 3]

    def test_event_time_soonest_first_and_missing_last(self):
        posts = [make_post(1, event_time=None),
                 make_post(2, event_time="2024-08-10 12:30:00"),
                 make_post(3, event_time="2024-06-10 12:30:00"),
                 make_post(4, event_time=None)]

        ordered = feed.order_posts(posts, SortOrder.EVENT_TIME)

        assert [p.id for p in ordered] == [3, 2, 1, 4]

    def test_unknown_order_rejected(self):
        with pytest.raises(ValidationError):
            feed.order_posts([], "bogus")

    def test_snake_case_alias(self):
        assert SortOrder.parse("follower_count") is SortOrder.FOLLOWER_COUNT
        assert SortOrder.parse(None) is SortOrder.POST_TIME


class TestFilterPosts:
    def test_no_filter_keeps_everything(self):
        posts = [make_post(1), make_post(2, category="football")]
        assert feed.filter_posts(posts, None) == posts
        assert feed.filter_posts(posts, "") == posts
        assert feed.filter_posts(posts, "all") == posts
        assert feed.filter_posts(posts, " All ") == posts

    def test_category_match_is_case_insensitive(self):
        posts = [make_post(1), make_post(2, category="football")]
        assert [p.id for p in feed.filter_posts(posts, "Football")] == [2]


class TestCreatePost:
    def test_anonymous_is_a_silent_noop(self, store):
        assert feed.create_post(store, None, "soccer", "Pickup", "...") is None
        assert store.list_posts() == []

    def test_create(self, store, bob):
        post = feed.create_post(store, bob, "Soccer", " Pickup ", "Come play", "2024-06-10T12:30")

        assert post.title == "Pickup"
        assert post.category == "soccer"
        assert post.author_username == "bob"
        assert post.event_time == "2024-06-10 12:30:00"
        assert post.follower_count == 0

    def test_missing_category_defaults(self, store, bob):
        post = feed.create_post(store, bob, "", "Pickup", "Come play")
        assert post.category == feed.DEFAULT_CATEGORY

    def test_blank_fields_rejected(self, store, bob):
        with pytest.raises(ValidationError):
            feed.create_post(store, bob, "soccer", "  ", "body")
        with pytest.raises(ValidationError):
            feed.create_post(store, bob, "soccer", "title", "")
        assert store.list_posts() == []

    def test_bad_event_time_rejected(self, store, bob):
        with pytest.raises(ValidationError):
            feed.create_post(store, bob, "soccer", "title", "body", "next tuesday")

    def test_event_time_from_datetime(self):
        assert feed.parse_event_time(datetime(2024, 6, 10, 8, 30)) == "2024-06-10 08:30:00"

    def test_visible_immediately(self, store, bob):
        post = feed.create_post(store, bob, "soccer", "Pickup", "...")
        assert [p.id for p in feed.list_posts(store)] == [post.id]


class TestDeletePost:
    def test_owner_can_delete(self, store, bob):
        post = feed.create_post(store, bob, "soccer", "Pickup", "...")
        feed.delete_post(store, post.id, bob)
        assert store.get_post_by_id(post.id) is None

    def test_non_owner_cannot_delete(self, store, bob, alice):
        post = feed.create_post(store, bob, "soccer", "Pickup", "...")
        with pytest.raises(AuthorizationError):
            feed.delete_post(store, post.id, alice)
        assert store.get_post_by_id(post.id) is not None

    def test_anonymous_cannot_delete(self, store, bob):
        post = feed.create_post(store, bob, "soccer", "Pickup", "...")
        with pytest.raises(AuthorizationError):
            feed.delete_post(store, post.id, None)

    def test_missing_post(self, store, bob):
        with pytest.raises(NotFoundError):
            feed.delete_post(store, 42, bob)


class TestProfileQueries:
    def test_posts_by_author_and_followed(self, store, bob, alice):
        mine = feed.create_post(store, alice, "soccer", "Mine", "...")
        theirs = feed.create_post(store, bob, "soccer", "Theirs", "...")
        store.add_follow(alice.id, theirs.id)

        assert [p.id for p in feed.posts_by_author(store, "alice")] == [mine.id]
        assert [p.id for p in feed.followed_posts(store, alice)] == [theirs.id]
        assert feed.followed_posts(store, None) == []

    def test_list_categories(self, store, bob):
        feed.create_post(store, bob, "soccer", "A", "...")
        feed.create_post(store, bob, "football", "B", "...")
        feed.create_post(store, bob, "soccer", "C", "...")
        assert feed.list_categories(store) == ["football", "soccer"]


def test_register_post_filter_follow_unfollow(store, bob):
    post = feed.create_post(store, bob, "soccer", "Pickup", "...")
    feed.create_post(store, bob, "football", "Other", "...")

    assert [p.id for p in feed.list_posts(store, category="soccer")] == [post.id]

    follows.follow(store, bob, post.id)
    assert store.get_post_by_id(post.id).follower_count == 1

    follows.unfollow(store, bob, post.id)
    assert store.get_post_by_id(post.id).follower_count == 0
