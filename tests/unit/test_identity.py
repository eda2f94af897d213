"""
Unit tests for registration, login and OAuth-backed users.
"""
import pytest

from microblog import identity
from microblog.errors import ValidationError


class TestRegisterUser:
    def test_register_normalises_and_sets_avatar(self, store):
        user = identity.register_user(store, "  Bob ")
        assert user.username == "bob"
        assert user.avatar_ref == "/avatar/bob"
        assert user.password_hash is None
        assert user.created_at

    @pytest.mark.parametrize("username", ["", "bad name", "semi;colon", "x" * 50])
    def test_invalid_usernames(self, store, username):
        with pytest.raises(ValidationError):
            identity.register_user(store, username)

    def test_duplicate_username(self, store):
        identity.register_user(store, "bob")
        with pytest.raises(ValidationError):
            identity.register_user(store, "BOB")

    def test_short_password(self, store):
        with pytest.raises(ValidationError):
            identity.register_user(store, "bob", "short")

    def test_password_is_hashed(self, store):
        user = identity.register_user(store, "bob", "longenough")
        assert user.password_hash and user.password_hash != "longenough"


class TestAuthenticate:
    def test_password_user(self, store):
        identity.register_user(store, "alice", "alicepassword")
        assert identity.authenticate(store, "Alice", "alicepassword").username == "alice"
        assert identity.authenticate(store, "alice", "wrong-password") is None
        assert identity.authenticate(store, "alice", "") is None

    def test_passwordless_user_logs_in_by_name(self, store):
        identity.register_user(store, "bob")
        assert identity.authenticate(store, "bob").username == "bob"
        assert identity.authenticate(store, "bob", "").username == "bob"

    def test_oauth_user_cannot_log_in_by_name(self, store):
        identity.find_or_create_oauth_user(store, "google-123", "Jane Doe")
        assert identity.authenticate(store, "jane-doe") is None
        assert identity.authenticate(store, "jane-doe", "") is None
        assert identity.authenticate(store, "jane-doe", "guess") is None

    def test_unknown_user(self, store):
        assert identity.authenticate(store, "ghost", "whatever") is None
        assert identity.authenticate(store, "") is None


class TestOAuthUsers:
    def test_creates_then_reuses(self, store):
        user = identity.find_or_create_oauth_user(store, "google-123", "Jane Doe")
        assert user.username == "jane-doe"
        assert user.external_identity_hash == identity.hash_identity("google-123")
        assert user.avatar_ref == "/avatar/jane-doe"

        again = identity.find_or_create_oauth_user(store, "google-123", "Jane D.")
        assert again.id == user.id

    def test_username_collision_gets_suffix(self, store):
        identity.register_user(store, "jane-doe")
        user = identity.find_or_create_oauth_user(store, "google-456", "Jane Doe")
        assert user.username == "jane-doe2"

    def test_provider_id_is_not_stored_raw(self, store):
        user = identity.find_or_create_oauth_user(store, "google-789", "Sam")
        assert "google-789" not in user.external_identity_hash

    @pytest.mark.parametrize("display_name,expected", [
        ("Jane Doe", "jane-doe"),
        ("  Émile!! ", "mile"),
        ("", "user"),
        ("***", "user"),
    ])
    def test_username_from_display_name(self, display_name, expected):
        assert identity.username_from_display_name(display_name) == expected
        assert identity.is_valid_username(identity.username_from_display_name(display_name))


def test_current_identity_is_none_outside_login(app):
    with app.test_request_context("/"):
        assert identity.current_identity() is None
