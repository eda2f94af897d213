#sqlite row store. nothing else opens a connection, and every method opens its own short-lived one
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime

from .errors import NotFoundError, ValidationError
from .identity import hash_identity
from .models import Post, User

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, username, external_identity_hash, avatar_ref, created_at, password_hash"
POST_COLUMNS = "id, category, title, body, author_username, created_at, event_time, follower_count"

SAMPLE_USERS = [
    ("footballguy", "sample-google-id-1", "2024-01-01 12:00:00"),
    ("soccerlover", "sample-google-id-2", "2024-01-02 12:00:00"),
]

SAMPLE_POSTS = [
    ("football", "Football at the park!", "We are doing a chill pickup game of football at the park. Anyone is welcome to join!",
     "footballguy", "2024-05-05 08:30:00", "2024-06-10 12:30:00"),
    ("football", "Pickup game at Russel", "Need at least 12 players for a pickup game at russel. follow if interested.",
     "footballguy", "2024-04-05 16:40:00", "2024-08-10 12:30:00"),
    ("soccer", "Chill soccer game!", "Join us for a chill game of soccer at the park!",
     "soccerlover", "2024-05-05 18:30:00", "2024-06-10 08:30:00"),
    ("soccer", "Soccer game at Russel", "Come watch us play at russel field facing our biggest rivals!",
     "soccerlover", "2024-06-05 10:30:00", "2024-11-10 15:30:00"),
]


def timestamp_now():
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


class Store:
    def __init__(self, db_path):
        self.db_path = db_path

    #establishes connection with database and enables FKs. commits on success, rolls back on error
    @contextmanager
    def get_db_connection(self):
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    #same as above but takes the write lock up front, so a read-then-write runs as one unit
    @contextmanager
    def transaction(self):
        with self.get_db_connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            yield conn

    #initialize DB function
    def db_setup(self):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute('''
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER,
                    username TEXT NOT NULL UNIQUE,
                    external_identity_hash TEXT UNIQUE,
                    avatar_ref TEXT,
                    password_hash TEXT,
                    created_at TEXT NOT NULL,
                    PRIMARY KEY(id AUTOINCREMENT)
                );
                ''')
            cur.execute('''
                CREATE TABLE IF NOT EXISTS posts (
                    id INTEGER,
                    category TEXT NOT NULL,
                    title TEXT NOT NULL,
                    body TEXT NOT NULL,
                    author_username TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    event_time TEXT,
                    follower_count INTEGER NOT NULL DEFAULT 0 CHECK (follower_count >= 0),
                    PRIMARY KEY(id AUTOINCREMENT),
                    FOREIGN KEY(author_username) REFERENCES users(username) ON DELETE CASCADE
                );
                ''')
            #one shared relation keyed by (user, post)
            cur.execute('''
                CREATE TABLE IF NOT EXISTS follows (
                    user_id INTEGER NOT NULL,
                    post_id INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, post_id),
                    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
                    FOREIGN KEY (post_id) REFERENCES posts(id) ON DELETE CASCADE
                );
                ''')
        logger.info("Database ready at %s", self.db_path)

    #inserts the sample users and events, only into an empty database
    def seed_sample_data(self):
        with self.transaction() as conn:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM users")
            if cur.fetchone()[0]:
                return False
            for username, provider_id, created_at in SAMPLE_USERS:
                cur.execute("""
                    INSERT INTO users (username, external_identity_hash, avatar_ref, created_at)
                    VALUES (?, ?, ?, ?)
                """, (username, hash_identity(provider_id), f"/avatar/{username}", created_at))
            cur.executemany("""
                INSERT INTO posts (category, title, body, author_username, created_at, event_time)
                VALUES (?, ?, ?, ?, ?, ?)
            """, SAMPLE_POSTS)
        logger.info("Seeded %d sample users and %d sample posts", len(SAMPLE_USERS), len(SAMPLE_POSTS))
        return True

    # ----- users -----

    def create_user(self, username, password_hash=None, external_identity_hash=None):
        try:
            with self.get_db_connection() as conn:
                cur = conn.cursor()
                cur.execute("""
                    INSERT INTO users (username, external_identity_hash, password_hash, created_at)
                    VALUES (?, ?, ?, ?)
                """, (username, external_identity_hash, password_hash, timestamp_now()))
                user_id = cur.lastrowid
        except sqlite3.IntegrityError:
            raise ValidationError("This username is already in use")
        return self.get_user_by_id(user_id)

    # helper function to get user object by userid
    def get_user_by_id(self, user_id):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
        return User(*row) if row else None

    def get_user_by_username(self, username):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE username = ?", (username,))
            row = cur.fetchone()
        return User(*row) if row else None

    def get_user_by_identity_hash(self, identity_hash):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE external_identity_hash = ?", (identity_hash,))
            row = cur.fetchone()
        return User(*row) if row else None

    def username_exists(self, username):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT 1 FROM users WHERE username = ?", (username,))
            return cur.fetchone() is not None

    def set_avatar_ref(self, user_id, avatar_ref):
        with self.get_db_connection() as conn:
            conn.execute("UPDATE users SET avatar_ref = ? WHERE id = ?", (avatar_ref, user_id))

    # ----- posts -----

    def insert_post(self, category, title, body, author_username, event_time=None):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                INSERT INTO posts (category, title, body, author_username, created_at, event_time)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (category, title, body, author_username, timestamp_now(), event_time))
            post_id = cur.lastrowid
        return self.get_post_by_id(post_id)

    #helper function to get a post object by its post id
    def get_post_by_id(self, post_id):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {POST_COLUMNS} FROM posts WHERE id = ?", (post_id,))
            row = cur.fetchone()
        return Post(*row) if row else None

    #all posts in insertion order, ordering happens in feed.order_posts
    def list_posts(self):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {POST_COLUMNS} FROM posts ORDER BY id")
            rows = cur.fetchall()
        return [Post(*row) for row in rows]

    def list_posts_by_author(self, username):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {POST_COLUMNS} FROM posts WHERE author_username = ? ORDER BY id", (username,))
            rows = cur.fetchall()
        return [Post(*row) for row in rows]

    def list_followed_posts(self, user_id):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                SELECT posts.id, posts.category, posts.title, posts.body, posts.author_username,
                       posts.created_at, posts.event_time, posts.follower_count
                FROM posts
                JOIN follows ON follows.post_id = posts.id
                WHERE follows.user_id = ?
                ORDER BY posts.id
            """, (user_id,))
            rows = cur.fetchall()
        return [Post(*row) for row in rows]

    #returns False when there was nothing to delete
    def delete_post(self, post_id):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM posts WHERE id = ?", (post_id,))
            return cur.rowcount > 0

    # ----- follow relation -----

    def is_following(self, user_id, post_id):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT 1 FROM follows WHERE user_id = ? AND post_id = ?", (user_id, post_id))
            return cur.fetchone() is not None

    def followed_post_ids(self, user_id):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT post_id FROM follows WHERE user_id = ?", (user_id,))
            return {row[0] for row in cur.fetchall()}

    def count_followers(self, post_id):
        with self.get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM follows WHERE post_id = ?", (post_id,))
            return cur.fetchone()[0]

    #membership insert and counter bump in one transaction. False if the pair already existed
    def add_follow(self, user_id, post_id):
        with self.transaction() as conn:
            cur = conn.cursor()
            cur.execute("SELECT 1 FROM posts WHERE id = ?", (post_id,))
            if not cur.fetchone():
                raise NotFoundError(f"Post {post_id} not found")
            cur.execute("""
                INSERT OR IGNORE INTO follows (user_id, post_id, created_at)
                VALUES (?, ?, ?)
            """, (user_id, post_id, timestamp_now()))
            if cur.rowcount == 0:
                return False
            cur.execute("UPDATE posts SET follower_count = follower_count + 1 WHERE id = ?", (post_id,))
            return True

    #membership delete and counter drop in one transaction. False if the pair was absent
    def remove_follow(self, user_id, post_id):
        with self.transaction() as conn:
            cur = conn.cursor()
            cur.execute("SELECT 1 FROM posts WHERE id = ?", (post_id,))
            if not cur.fetchone():
                raise NotFoundError(f"Post {post_id} not found")
            cur.execute("DELETE FROM follows WHERE user_id = ? AND post_id = ?", (user_id, post_id))
            if cur.rowcount == 0:
                return False
            cur.execute("""
                UPDATE posts SET follower_count = follower_count - 1
                WHERE id = ? AND follower_count > 0
            """, (post_id,))
            return True
