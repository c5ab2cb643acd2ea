"""Browser-like request headers with light randomization.

Feeds and article pages are often requested by browsers too, so requests
carry plausible browser headers instead of an identical fingerprint every
time. The randomness is cosmetic and uses the non-cryptographic ``random``
module.
"""

import random
from typing import Optional

# Common browser Accept-Language values
FEED_ACCEPT_LANGUAGES = [
    "en-US,en;q=0.9",
    "en-GB,en;q=0.9",
    "en-US,en;q=0.9,es;q=0.8",
    "en-US,en;q=0.9,fr;q=0.8",
    "en-US,en;q=0.9,de;q=0.8",
]

PAGE_ACCEPT_LANGUAGES = FEED_ACCEPT_LANGUAGES + [
    "en-US,en;q=0.9,ja;q=0.8",
    "en-US,en;q=0.9,zh-CN;q=0.8,zh;q=0.7",
    "en-US,en;q=0.9,ru;q=0.8",
    "fr-FR,fr;q=0.9,en;q=0.8",
    "de-DE,de;q=0.9,en;q=0.8",
    "es-ES,es;q=0.9,en;q=0.8",
]

SEC_FETCH_MODES = ["navigate", "no-cors", "cors"]

DNT_PROBABILITY = 0.3
KEEP_ALIVE_PROBABILITY = 0.8


def feed_headers(user_agent: str, rng: Optional[random.Random] = None) -> dict[str, str]:
    """Build headers for fetching an RSS/Atom feed."""
    rng = rng or random.Random()
    headers = {
        "User-Agent": user_agent,
        "Accept": (
            "application/rss+xml,application/atom+xml,application/xml;q=0.9,"
            "text/xml;q=0.8,text/html;q=0.7,*/*;q=0.5"
        ),
        "Cache-Control": "no-cache",
        "Accept-Language": rng.choice(FEED_ACCEPT_LANGUAGES),
        "Connection": "keep-alive",
    }

    if rng.random() < DNT_PROBABILITY:
        headers["DNT"] = "1"

    return headers


def page_headers(user_agent: str, rng: Optional[random.Random] = None) -> dict[str, str]:
    """Build headers for fetching an article page."""
    rng = rng or random.Random()
    headers = {
        "User-Agent": user_agent,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,*/*;q=0.8"
        ),
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Upgrade-Insecure-Requests": "1",
        "Accept-Language": rng.choice(PAGE_ACCEPT_LANGUAGES),
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": rng.choice(SEC_FETCH_MODES),
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-User": "?1",
    }

    if rng.random() < DNT_PROBABILITY:
        headers["DNT"] = "1"

    if rng.random() < KEEP_ALIVE_PROBABILITY:
        headers["Connection"] = "keep-alive"

    return headers
