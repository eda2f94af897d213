import io
import logging
import os
import threading

from PIL import Image, ImageDraw, ImageFont
from werkzeug.utils import secure_filename

from .errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 100
FALLBACK_COLOR = "#7f8c8d"
TEXT_COLOR = "#ffffff"
FONT_NAMES = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf")

#fixed ordered buckets over the alphabet, first match wins
COLOR_BUCKETS = (
    ("abcd", "#e74c3c"),
    ("efghij", "#e67e22"),
    ("klmn", "#27ae60"),
    ("opqrstu", "#2980b9"),
    ("vwxyz", "#8e44ad"),
)


def avatar_color(letter):
    letter = letter.lower()
    for letters, color in COLOR_BUCKETS:
        if letter in letters:
            return color
    return FALLBACK_COLOR


def _load_font(px):
    for name in FONT_NAMES:
        try:
            return ImageFont.truetype(name, px)
        except OSError:
            continue
    return ImageFont.load_default(size=px)


def generate_avatar(username, size=DEFAULT_SIZE):
    if not username:
        raise ValidationError("Cannot draw an avatar without a username")

    letter = username[0].lower()
    image = Image.new("RGB", (size, size), avatar_color(letter))
    draw = ImageDraw.Draw(image)
    font = _load_font(int(size * 0.7))
    #anchor "ms" puts the baseline of the glyph at 75% of the height, centered horizontally
    draw.text((size / 2, size * 0.75), letter.upper(), fill=TEXT_COLOR, font=font, anchor="ms")

    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


#write-once cache of avatar pngs keyed by lower-cased username, optionally persisted as <username>.png
class AvatarCache:
    def __init__(self, folder=None, size=DEFAULT_SIZE):
        self.folder = folder
        self.size = size
        self._images = {}
        self._lock = threading.Lock()
        if folder:
            os.makedirs(folder, exist_ok=True)

    def _path_for(self, key):
        filename = f"{key}.png"
        #names that need sanitising could collide with a real user's file, keep those in memory only
        if not self.folder or secure_filename(filename) != filename:
            return None
        return os.path.join(self.folder, filename)

    def get(self, username):
        if not username:
            raise ValidationError("Cannot draw an avatar without a username")
        key = username.lower()

        cached = self._images.get(key)
        if cached is not None:
            return cached

        with self._lock:
            cached = self._images.get(key)
            if cached is not None:
                return cached
            data = self._load_or_generate(key)
            self._images[key] = data
            return data

    def _load_or_generate(self, key):
        path = self._path_for(key)
        if path and os.path.exists(path):
            with open(path, "rb") as f:
                return f.read()

        data = generate_avatar(key, self.size)
        logger.info("Generated avatar for %s", key)
        if path:
            try:
                with open(path, "xb") as f:
                    f.write(data)
            except FileExistsError:
                #another process got there first, keep its bytes
                with open(path, "rb") as f:
                    return f.read()
        return data

    def __contains__(self, username):
        return username.lower() in self._images
