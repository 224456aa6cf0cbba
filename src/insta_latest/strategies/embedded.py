"""Embedded initial-state extraction from profile markup.

The profile document has at various times shipped its first page of posts
as JSON inside an inline ``<script>``: assigned to ``window._sharedData``,
passed to ``window.__additionalDataLoaded`` or registered as the
``InstagramWebSharedData`` module. The user object has lived at several
nesting paths. Both lists are searched first-match-wins.
"""
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable

from ..cascade import first_match
from ..config import POST_URL
from ..models import NO_CAPTION, CaptionStatus, PostRecord

log = logging.getLogger(__name__)

SCRIPT_PATTERNS = (
    ("sharedData", re.compile(r"window\._sharedData\s*=\s*(.+);")),
    ("additionalDataLoaded", re.compile(r"window\.__additionalDataLoaded\([^,]+,(.+)\);")),
    ("InstagramWebSharedData", re.compile(r'__d\("InstagramWebSharedData",[^{]+(\{.+\})\);')),
)

# Paths from the parsed payload to the profile's user object.
USER_PATHS = (
    ("entry_data", "ProfilePage", 0, "graphql", "user"),
    ("user",),
    ("data", "user"),
)

TIMELINE_EDGES = ("edge_owner_to_timeline_media", "edges")


def dig(data: Any, path: Iterable) -> Any:
    """Follow ``path`` (dict keys / list indexes) into ``data``; None on any miss."""
    cur = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(cur, list) or not -len(cur) <= key < len(cur):
                return None
            cur = cur[key]
        else:
            if not isinstance(cur, dict):
                return None
            cur = cur.get(key)
        if cur is None:
            return None
    return cur


def iso_from_unix(ts: Any) -> str | None:
    """Unix seconds → ``YYYY-MM-DDTHH:MM:SS.mmmZ`` (UTC, millisecond precision)."""
    if ts is None or isinstance(ts, bool):
        return None
    try:
        dt = datetime.fromtimestamp(float(ts), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_script_payload(script_text: str) -> tuple[str, Any] | None:
    """Return ``(pattern_name, payload)`` for the first pattern yielding valid JSON."""
    if not script_text:
        return None

    def _probe(entry):
        name, pattern = entry
        m = pattern.search(script_text)
        if not m:
            return None
        try:
            return json.loads(m.group(1))
        except ValueError as e:
            log.warning(f"Malformed JSON in {name} block: {e}")
            return None

    hit = first_match(SCRIPT_PATTERNS, _probe)
    if hit is None:
        return None
    return hit.candidate[0], hit.value


def find_timeline_edges(payload: Any) -> list | None:
    """Locate the user's timeline edges at any known nesting path."""
    hit = first_match(USER_PATHS, lambda path: dig(dig(payload, path), TIMELINE_EDGES))
    if hit is None or not isinstance(hit.value, list):
        return None
    log.debug(f"Timeline edges found at {'.'.join(map(str, hit.candidate))}")
    return hit.value


def _safe_count(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    return n if n >= 0 else None


def post_from_node(node: dict) -> PostRecord | None:
    """Map a timeline media node to a PostRecord; None without a display URL."""
    if not isinstance(node, dict):
        return None
    image_url = node.get("display_url") or ""
    if not image_url:
        return None

    caption = dig(node, ("edge_media_to_caption", "edges", 0, "node", "text")) or ""
    likes = dig(node, ("edge_liked_by", "count"))
    if likes is None:
        likes = dig(node, ("edge_media_preview_like", "count"))
    shortcode = node.get("shortcode")

    post_id = node.get("id")
    return PostRecord(
        id=str(post_id) if post_id is not None else None,
        caption=caption or NO_CAPTION,
        caption_status=CaptionStatus.PRESENT if caption else CaptionStatus.ABSENT,
        image_url=image_url,
        timestamp=iso_from_unix(node.get("taken_at_timestamp")),
        like_count=_safe_count(likes),
        post_url=POST_URL.format(shortcode=shortcode) if shortcode else None,
    )


def extract_from_scripts(scripts: Iterable[str]) -> PostRecord | None:
    """Scan script bodies in order; return the first fully-populated post."""
    for i, text in enumerate(scripts):
        parsed = parse_script_payload(text)
        if parsed is None:
            continue
        name, payload = parsed
        log.info(f"Found embedded data ({name}) in script block {i + 1}")
        edges = find_timeline_edges(payload)
        if not edges:
            log.debug(f"Script block {i + 1}: no timeline edges at known paths")
            continue
        post = post_from_node(edges[0].get("node") if isinstance(edges[0], dict) else None)
        if post is None:
            log.warning(f"Script block {i + 1}: first edge lacks a display URL")
            continue
        return post
    return None
