#google sign-in. for plain-http local development set OAUTHLIB_INSECURE_TRANSPORT=1
import logging

from requests_oauthlib import OAuth2Session

from .errors import ValidationError

logger = logging.getLogger(__name__)

AUTHORIZATION_BASE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPE = ["openid", "profile"]


def is_configured(config):
    return bool(config.get("GOOGLE_CLIENT_ID") and config.get("GOOGLE_CLIENT_SECRET"))


def google_session(config, state=None):
    if not is_configured(config):
        raise ValidationError("Google sign-in is not configured")
    return OAuth2Session(
        config["GOOGLE_CLIENT_ID"],
        scope=SCOPE,
        redirect_uri=config["GOOGLE_REDIRECT_URI"],
        state=state,
    )


#returns (url to send the browser to, state to keep in the session)
def authorization_url(config):
    return google_session(config).authorization_url(AUTHORIZATION_BASE_URL, prompt="select_account")


#exchanges the callback for a token and returns (provider user id, display name)
def fetch_profile(config, state, authorization_response):
    google = google_session(config, state=state)
    google.fetch_token(
        TOKEN_URL,
        client_secret=config["GOOGLE_CLIENT_SECRET"],
        authorization_response=authorization_response,
    )
    response = google.get(USERINFO_URL)
    response.raise_for_status()
    profile = response.json()
    if not profile.get("sub"):
        raise ValidationError("Google did not return an account id")
    logger.debug("Fetched Google profile for %s", profile.get("name"))
    return profile["sub"], profile.get("name") or profile.get("given_name") or ""
