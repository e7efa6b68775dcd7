# libtrends/config.py
import os
from pathlib import Path
from dotenv import load_dotenv, find_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Project root .env first; values already present in the process env win
load_dotenv(PROJECT_ROOT / ".env", override=False)
load_dotenv(find_dotenv(usecwd=True), override=False)

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))

UI_DIR = os.getenv("UI_DIR", str(PROJECT_ROOT / "ui"))
ALLOWED_ORIGIN = os.getenv("ALLOWED_ORIGIN", "http://localhost:3000")

# Zotero library. An empty key means anonymous access (public libraries only).
ZOTERO_API_KEY = os.getenv("ZOTERO_API_KEY", "")
ZOTERO_LIBRARY_ID = os.getenv("ZOTERO_LIBRARY_ID", "6297645")
ZOTERO_LIBRARY_TYPE = os.getenv("ZOTERO_LIBRARY_TYPE", "groups")
ZOTERO_API_BASE_URL = os.getenv("ZOTERO_API_BASE_URL", "https://api.zotero.org").rstrip("/")
ZOTERO_ITEMS_PER_PAGE = int(os.getenv("ZOTERO_ITEMS_PER_PAGE", "100"))
ZOTERO_TIMEOUT = float(os.getenv("ZOTERO_TIMEOUT", "10"))

BREAKER_FAIL_MAX = int(os.getenv("BREAKER_FAIL_MAX", "5"))
BREAKER_RESET_TIMEOUT = int(os.getenv("BREAKER_RESET_TIMEOUT", "60"))

# Chart settings
STREAM_GRAPH_TAGS = int(os.getenv("STREAM_GRAPH_TAGS", "10"))
TOP_TAGS_COUNT = int(os.getenv("TOP_TAGS_COUNT", "15"))

# Kandinsky-inspired palette
DEFAULT_CHART_COLORS = [
    "#FFD700",  # gold
    "#E63946",  # red
    "#457B9D",  # blue
    "#FFC30B",  # yellow
    "#D62828",  # dark red
    "#1D3557",  # navy
    "#F77F00",  # orange
    "#06A77D",  # teal
    "#8338EC",  # purple
    "#0A0908",  # black
    "#FB5607",  # bright orange
    "#3A86FF",  # bright blue
    "#FF006E",  # pink
    "#FFBE0B",  # bright yellow
    "#06FFA5",  # mint
]
_colors_env = os.getenv("CHART_COLORS", "")
CHART_COLORS = [c.strip() for c in _colors_env.split(",") if c.strip()] or list(DEFAULT_CHART_COLORS)

REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB = int(os.getenv("REDIS_DB", "0"))
RATE_LIMIT_PER_MINUTE = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
