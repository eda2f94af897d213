from flask import current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager

limiter = Limiter(get_remote_address, storage_uri="memory://")

#set up flask-login
login_manager = LoginManager()
login_manager.login_view = "main.login"
login_manager.login_message = None


def get_store():
    return current_app.extensions["microblog.store"]


def get_avatars():
    return current_app.extensions["microblog.avatars"]


#flask-login calls this with the user id stored in the session
@login_manager.user_loader
def load_user(user_id):
    try:
        return get_store().get_user_by_id(int(user_id))
    except ValueError:
        return None
