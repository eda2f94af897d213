import os

from dotenv import load_dotenv

DEV_SECRET_KEY = "dev-secret-change-me"


def env_flag(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


#settings read from the environment (and .env), copied into app.config by create_app
class Config:
    def __init__(self):
        #load env file
        load_dotenv()

        self.SECRET_KEY = os.getenv("SECRET_KEY", DEV_SECRET_KEY)
        self.DATABASE_PATH = os.getenv("DATABASE_PATH", "microblog.db")
        self.AVATAR_FOLDER = os.getenv("AVATAR_FOLDER", os.path.join("static", "avatar"))
        self.AVATAR_SIZE = int(os.getenv("AVATAR_SIZE", 100))
        self.ALLOW_SELF_LIKE = env_flag("ALLOW_SELF_LIKE")
        self.DEFAULT_SORT = os.getenv("DEFAULT_SORT", "postTime")
        self.SEED_SAMPLE_DATA = env_flag("SEED_SAMPLE_DATA")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

        self.GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
        self.GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
        self.GOOGLE_REDIRECT_URI = os.getenv("GOOGLE_REDIRECT_URI", "http://localhost:5001/auth/google/callback")

        self.RATELIMIT_ENABLED = env_flag("RATELIMIT_ENABLED", True)
        self.LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "5 per minute")
        self.MAX_CONTENT_LENGTH = 1 * 1024 * 1024
        self.TEMPLATES_AUTO_RELOAD = True

    def as_dict(self):
        return {key: value for key, value in vars(self).items() if key.isupper()}
