#super simple python file to register a user, just write username and optionally a password as arguments when running

import sys

from microblog.config import Config
from microblog.db import Store
from microblog.errors import ValidationError
from microblog.identity import register_user


def add_user(username, password=None, db_path=None):
    store = Store(db_path or Config().DATABASE_PATH)
    store.db_setup()
    user = register_user(store, username, password)
    print("Entered data: \n username: " + user.username + "\n id = " + str(user.id))
    return user


if __name__ == "__main__":
    if len(sys.argv) < 2:
        sys.exit("usage: python add_user.py <username> [password]")
    try:
        add_user(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)
    except ValidationError as e:
        sys.exit(e.message)
