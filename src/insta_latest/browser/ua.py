"""Client identity profiles: User-Agent strings and matching request headers."""
import random

DESKTOP_CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/{version} Safari/537.36"
)

# Rotated per static fetch so repeated attempts do not share a fingerprint.
USER_AGENT_POOL = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.0 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
)

_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
    "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
)


def build_user_agent(chrome_version: str = "120.0.0.0", template: str = "") -> str:
    """Build a User-Agent string for the given Chrome version.

    If *template* is empty, uses a Windows desktop Chrome UA template.
    """
    return (template or DESKTOP_CHROME_UA).format(version=chrome_version)


def pick_user_agent(pool=USER_AGENT_POOL, rng=random) -> str:
    return rng.choice(list(pool))


def navigation_headers(user_agent: str = "", *, no_cache: bool = False) -> dict[str, str]:
    """Headers a desktop Chrome sends on a top-level document navigation.

    ``sec-ch-ua`` hints are only sent when the UA claims to be Chromium.
    """
    headers = {
        "Accept": _ACCEPT,
        "Accept-Language": "en-US,en;q=0.9",
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "upgrade-insecure-requests": "1",
    }
    if user_agent:
        headers["User-Agent"] = user_agent
    if not user_agent or "Chrome/" in user_agent:
        headers["sec-ch-ua"] = '"Not_A Brand";v="8", "Chromium";v="120"'
        headers["sec-ch-ua-mobile"] = "?0"
        headers["sec-ch-ua-platform"] = '"Windows"'
    if no_cache:
        headers["Cache-Control"] = "no-cache"
        headers["Pragma"] = "no-cache"
    return headers
