# wpaudit/config.py
import os
from typing import List, Tuple
from dotenv import load_dotenv

load_dotenv()

# Relay transport
RELAY_TIMEOUT = float(os.getenv("WPAUDIT_RELAY_TIMEOUT", "8.0"))
CACHE_TTL = float(os.getenv("WPAUDIT_CACHE_TTL", "60"))
PROBE_CONCURRENCY = int(os.getenv("WPAUDIT_PROBE_CONCURRENCY", "4"))
FAILURE_THRESHOLD = 2
HEALTH_GRACE_SECONDS = 120.0
MIN_BODY_LENGTH = 100

DEFAULT_RELAYS: List[Tuple[str, str]] = [
    ("AllOrigins", "https://api.allorigins.win/raw?url={url}"),
    ("CorsProxy.io", "https://corsproxy.io/?{url}"),
    ("CodeTabs", "https://api.codetabs.com/v1/proxy?quest={url}"),
]

REQUEST_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                  "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
}

# Audit engine
MAX_USERS = 10
AUTHOR_PROBES = 3
HISTORY_KEY = "wp-audit-history"
MAX_HISTORY = 10
MAX_JOBS = int(os.getenv("WPAUDIT_MAX_JOBS", "100"))

# HTTP surface
ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("WPAUDIT_ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]
LOG_LEVEL = os.getenv("WPAUDIT_LOG_LEVEL", "INFO").upper()


def relays_from_env(raw: str = None) -> List[Tuple[str, str]]:
    """
    Parse WPAUDIT_RELAYS ("Name=https://relay/?u={url};Other=...").
    Falls back to DEFAULT_RELAYS when unset or when nothing usable is listed.
    """
    raw = os.getenv("WPAUDIT_RELAYS", "") if raw is None else raw
    relays: List[Tuple[str, str]] = []
    for chunk in raw.split(";"):
        if "=" not in chunk:
            continue
        name, template = chunk.split("=", 1)
        name, template = name.strip(), template.strip()
        if name and "{url}" in template:
            relays.append((name, template))
    return relays or list(DEFAULT_RELAYS)
