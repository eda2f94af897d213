import logging
import sqlite3
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests
from flask import (Blueprint, Response, abort, current_app, flash, jsonify, redirect, render_template, request,
                   session, url_for)
from flask_login import login_required, login_user, logout_user
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from . import feed, follows, identity, oauth
from .errors import MicroblogError, ValidationError
from .extensions import get_avatars, get_store, limiter
from .identity import current_identity
from .models import SortOrder

logger = logging.getLogger(__name__)

bp = Blueprint("main", __name__)

#where a rejected form submission goes back to, everything else lands on the feed
ERROR_REDIRECTS = {
    "main.register": "main.register",
    "main.login": "main.login",
    "main.delete": "main.profile",
}


def wants_json():
    return request.is_json or request.accept_mimetypes.best == "application/json"


def login_rate_limit():
    return current_app.config["LOGIN_RATE_LIMIT"]


#form and json bodies share field names. json can carry numbers or lists where a string is expected
def field(data, name):
    value = data.get(name)
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"Invalid value for {name}")
    return value


#same-host referrer with the error added to its query string, None if there is no usable referrer
def referrer_with_error(message):
    if not request.referrer:
        return None
    parts = urlsplit(request.referrer)
    if parts.netloc != request.host:
        return None
    query = [(k, v) for k, v in parse_qsl(parts.query) if k != "error"]
    query.append(("error", message))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), ""))


@bp.errorhandler(MicroblogError)
def handle_microblog_error(e):
    logger.info("Rejected %s %s: %s", request.method, request.path, e.message)
    if wants_json():
        return jsonify({"success": False, "error": e.message}), e.status_code
    if request.endpoint in ERROR_REDIRECTS:
        return redirect(url_for(ERROR_REDIRECTS[request.endpoint], error=e.message))
    return redirect(referrer_with_error(e.message) or url_for("main.home", error=e.message))


@bp.errorhandler(sqlite3.Error)
def handle_database_error(e):
    logger.exception("Database error while handling %s %s", request.method, request.path)
    if wants_json():
        return jsonify({"success": False, "error": "Internal server error"}), 500
    return render_template("error.html", message="Something went wrong on our end."), 500


def render_feed(order, category=None):
    store = get_store()
    user = current_identity()
    order = SortOrder.parse(order)
    return render_template(
        "home.html",
        posts=feed.list_posts(store, order, category),
        user=user,
        followed=follows.list_followed(store, user),
        categories=feed.list_categories(store),
        sort_type=order.value,
        sport_filter=category or "",
        error=request.args.get("error"),
    )


#feed page, anonymous users see it too
@bp.route("/")
def home():
    return render_feed(current_app.config["DEFAULT_SORT"])


@bp.route("/sortPosts", methods=["POST"])
def sort_posts():
    data = request.get_json(silent=True) or request.form
    return render_feed(field(data, "sortType"), field(data, "sportFilter"))


#for making a post/event. anonymous submissions just bounce back to the feed
@bp.route("/posts", methods=["POST"])
def create_post():
    data = request.get_json(silent=True) or request.form
    post = feed.create_post(
        get_store(),
        current_identity(),
        category=field(data, "sport"),
        title=field(data, "title"),
        body=field(data, "content"),
        event_time=field(data, "eventTime"),
    )
    if wants_json():
        return jsonify({"success": post is not None, "id": post.id if post else None})
    return redirect(url_for("main.home"))


def relation_response(post_id, changed):
    if wants_json():
        post = get_store().get_post_by_id(post_id)
        return jsonify({
            "success": True,
            "changed": changed,
            "following": follows.is_following(get_store(), current_identity(), post_id),
            "followers": post.follower_count if post else 0,
        })
    return redirect(request.referrer or url_for("main.home"))


@bp.route("/follow/<int:post_id>", methods=["POST"])
def follow(post_id):
    changed = follows.follow(get_store(), current_identity(), post_id)
    return relation_response(post_id, changed)


@bp.route("/unfollow/<int:post_id>", methods=["POST"])
def unfollow(post_id):
    changed = follows.unfollow(get_store(), current_identity(), post_id)
    return relation_response(post_id, changed)


@bp.route("/like/<int:post_id>", methods=["POST"])
def like(post_id):
    changed = follows.like(get_store(), current_identity(), post_id,
                           allow_self_like=current_app.config["ALLOW_SELF_LIKE"])
    return relation_response(post_id, changed)


@bp.route("/delete/<int:post_id>", methods=["POST"])
@login_required
def delete(post_id):
    feed.delete_post(get_store(), post_id, current_identity())
    flash("Post deleted.")
    return redirect(url_for("main.profile"))


@bp.route("/avatar/<username>")
def avatar(username):
    #only registered users get an image
    if get_store().get_user_by_username(username.lower()) is None:
        abort(404)
    data = get_avatars().get(username)
    response = Response(data, mimetype="image/png")
    response.headers["Cache-Control"] = "public, max-age=86400"
    return response


#for viewing users own page: their posts plus what they follow
@bp.route("/profile")
@login_required
def profile():
    store = get_store()
    user = current_identity()
    return render_template(
        "profile.html",
        user=user,
        posts=feed.posts_by_author(store, user.username),
        followed_posts=feed.followed_posts(store, user),
        followed=follows.list_followed(store, user),
        error=request.args.get("error"),
    )


@bp.route("/register", methods=["GET", "POST"])
@limiter.limit(login_rate_limit, methods=["POST"])
def register():
    if request.method == "POST":
        password = request.form.get("password") or None
        user = identity.register_user(get_store(), request.form.get("username"), password)
        login_user(user)
        flash("Account created successfully!")
        return redirect(url_for("main.home"))
    return render_template("login_register.html", action="register", error=request.args.get("error"))


# the landing page for logged out users
@bp.route("/login", methods=["GET", "POST"])
@limiter.limit(login_rate_limit, methods=["POST"])
def login():
    if request.method == "POST":
        user = identity.authenticate(get_store(), request.form.get("username"), request.form.get("password"))
        if user:
            login_user(user)
            return redirect(url_for("main.home"))
        return redirect(url_for("main.login", error="Invalid credentials"))
    return render_template("login_register.html", action="login", error=request.args.get("error"))


#logs user out
@bp.route("/logout", methods=["GET", "POST"])
def logout():
    logout_user()
    return redirect(url_for("main.home"))


@bp.route("/auth/google")
def google_login():
    if not oauth.is_configured(current_app.config):
        return redirect(url_for("main.login", error="Google sign-in is not configured"))
    url, state = oauth.authorization_url(current_app.config)
    session["oauth_state"] = state
    return redirect(url)


@bp.route("/auth/google/callback")
def google_callback():
    try:
        provider_id, display_name = oauth.fetch_profile(
            current_app.config, session.pop("oauth_state", None), request.url)
    except (OAuth2Error, requests.RequestException) as e:
        logger.warning("Google sign-in failed: %s", e)
        return redirect(url_for("main.login", error="Google sign-in failed"))
    user = identity.find_or_create_oauth_user(get_store(), provider_id, display_name)
    login_user(user)
    return redirect(url_for("main.home"))


@bp.route("/error")
def error():
    return render_template("error.html", message=request.args.get("error"))
