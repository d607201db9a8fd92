import os
from pathlib import Path

APP_ROOT      = Path(__file__).resolve().parents[1]
TEAM_NAME     = "Mapo 70s Reserve Squad"

DB_PATH        = os.getenv("MATCH_DB_PATH", str(APP_ROOT / "assets" / "matches.db"))
PHOTO_DIR      = os.getenv("PHOTO_DIR", str(APP_ROOT / "static" / "photos"))
APP_BASE_URL   = os.getenv("APP_BASE_URL", "")
# Relative URLs are resolved against the page URL when the report is exported
PHOTO_BASE_URL = os.getenv("PHOTO_BASE_URL", "app/static/photos/")

USER_AGENT    = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/135.0.0.0 Safari/537.36"
)

# Hosts whose images refuse canvas reads; fetched through the image proxy instead
PROXY_BASE  = "https://images.weserv.nl/"
PROXY_HOSTS = ("firebasestorage.googleapis.com",)

EXPORT_SCALE      = 2
EXPORT_BACKGROUND = "#ffffff"
JPEG_QUALITY      = 90
REPAINT_DELAY_SEC = 1.0

TOAST_DURATION_SEC = 3.0

MAX_PHOTOS          = 6
MAX_PHOTO_BYTES     = 5 * 1024 * 1024
ALLOWED_PHOTO_TYPES = ["image/jpeg", "image/png", "image/webp", "image/gif"]

NOTABLE_GOALS_THRESHOLD = 10
