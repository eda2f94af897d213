import logging

from flask import Flask

from .avatar import AvatarCache
from .config import DEV_SECRET_KEY, Config
from .db import Store
from .extensions import limiter, login_manager

logger = logging.getLogger(__name__)


def create_app(overrides=None):
    #set up flask app config
    app = Flask(__name__)
    app.config.update(Config().as_dict())
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(level=app.config["LOG_LEVEL"])
    if app.config["SECRET_KEY"] == DEV_SECRET_KEY and not app.testing:
        logger.warning("SECRET_KEY is not set, using the development placeholder")

    store = Store(app.config["DATABASE_PATH"])
    store.db_setup()
    if app.config["SEED_SAMPLE_DATA"]:
        store.seed_sample_data()

    app.extensions["microblog.store"] = store
    app.extensions["microblog.avatars"] = AvatarCache(
        folder=app.config["AVATAR_FOLDER"] or None,
        size=app.config["AVATAR_SIZE"],
    )

    login_manager.init_app(app)
    limiter.init_app(app)

    from .views import bp
    app.register_blueprint(bp)

    return app
