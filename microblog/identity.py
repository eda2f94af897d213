import hashlib
import logging
import re

from flask_login import current_user
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import ValidationError

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 50
MIN_PASSWORD_LENGTH = 8
#compared against when the username doesn't exist so both paths cost the same
DUMMY_HASH = generate_password_hash("not-a-real-password")


#function for validating username characters
def is_valid_username(username):
    return re.match(r'^[a-zA-Z0-9_-]+$', username) is not None


def hash_identity(provider_id):
    return hashlib.sha256(str(provider_id).encode("utf-8")).hexdigest()


def avatar_ref_for(username):
    return f"/avatar/{username}"


def register_user(store, username, password=None):
    username = (username or "").strip().lower()

    if not username:
        raise ValidationError("Username is required.")
    if not is_valid_username(username):
        raise ValidationError("Username can only contain letters, numbers, underscores, and hyphens.")
    if len(username) >= MAX_USERNAME_LENGTH:
        raise ValidationError("Username too long.")
    if password is not None and len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if store.username_exists(username):
        raise ValidationError("This username is already in use")

    password_hash = generate_password_hash(password) if password else None
    user = store.create_user(username, password_hash=password_hash)
    store.set_avatar_ref(user.id, avatar_ref_for(user.username))
    logger.info("Registered user %s", user.username)
    return store.get_user_by_id(user.id)


def authenticate(store, username, password=None):
    username = (username or "").strip().lower()
    user = store.get_user_by_username(username) if username else None

    if user is None:
        # dummy comparison to prevent timing attack
        check_password_hash(DUMMY_HASH, password or "")
        return None
    if user.password_hash is None:
        #oauth accounts only sign in through their provider
        if user.external_identity_hash is not None:
            check_password_hash(DUMMY_HASH, password or "")
            return None
        #local users created without a password log in by name only
        return user if not password else None
    if password and check_password_hash(user.password_hash, password):
        return user
    return None


#turns a provider display name like "Jane Doe" into something that passes is_valid_username
def username_from_display_name(display_name):
    base = re.sub(r'[^a-z0-9_-]+', '-', (display_name or "").strip().lower()).strip('-')
    return base[:MAX_USERNAME_LENGTH - 5] or "user"


def find_or_create_oauth_user(store, provider_id, display_name):
    identity_hash = hash_identity(provider_id)
    user = store.get_user_by_identity_hash(identity_hash)
    if user:
        return user

    base = username_from_display_name(display_name)
    username = base
    suffix = 1
    while store.username_exists(username):
        suffix += 1
        username = f"{base}{suffix}"

    user = store.create_user(username, external_identity_hash=identity_hash)
    store.set_avatar_ref(user.id, avatar_ref_for(user.username))
    logger.info("Registered OAuth user %s", user.username)
    return store.get_user_by_id(user.id)


#the logged in user, or None when anonymous
def current_identity():
    if current_user and current_user.is_authenticated:
        # unwrap the werkzeug LocalProxy so callers get the real object
        return current_user._get_current_object()
    return None
