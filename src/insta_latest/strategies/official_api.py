"""Official Graph API retrieval.

Stable, documented schema, but only returns media owned by the token's
account and needs a valid token, so the orchestrator tries it last.
"""
import logging

import requests

from ..config import EngineSettings, TargetConfig
from ..engine.errors import ConfigurationError, RetrievalError, StructuralExtractionError
from ..models import NO_CAPTION, CaptionStatus, PostRecord, RetrievalOutcome

log = logging.getLogger(__name__)

MEDIA_ENDPOINT = "https://graph.instagram.com/me/media"
MEDIA_FIELDS = "id,caption,media_type,media_url,thumbnail_url,permalink,timestamp"


def post_from_media(item: dict) -> PostRecord:
    """Map one Graph API media object to a PostRecord."""
    caption = item.get("caption") or ""
    image_url = item.get("media_url") or ""
    if item.get("media_type") == "VIDEO" and item.get("thumbnail_url"):
        image_url = item["thumbnail_url"]
    return PostRecord(
        id=item.get("id"),
        caption=caption or NO_CAPTION,
        caption_status=CaptionStatus.PRESENT if caption else CaptionStatus.ABSENT,
        image_url=image_url,
        timestamp=item.get("timestamp"),
        post_url=item.get("permalink"),
    )


class OfficialApiStrategy:
    name = "api"
    requires_credential = True

    def __init__(self, settings: EngineSettings | None = None, *,
                 session: requests.Session | None = None):
        settings = settings or EngineSettings()
        self._session = session or requests.Session()
        self._timeout = settings.request_timeout

    def run(self, target: TargetConfig) -> RetrievalOutcome:
        try:
            post = self.fetch_latest(target)
        except RetrievalError as e:
            log.error(f"Error fetching latest post via API: {e}")
            return RetrievalOutcome.failure(str(e))
        except Exception as e:
            log.exception(f"Unexpected error in API retrieval for {target.identifier}")
            return RetrievalOutcome.failure(f"unexpected {type(e).__name__}: {e}")
        post.source = self.name
        log.info(f"Successfully fetched latest post via API for {target.identifier}")
        return RetrievalOutcome.success(post)

    def fetch_latest(self, target: TargetConfig) -> PostRecord:
        if not target.credential:
            raise ConfigurationError("No Instagram access token provided")

        log.info("Attempting to fetch latest post via official API")
        try:
            response = self._session.get(
                MEDIA_ENDPOINT,
                params={"fields": MEDIA_FIELDS, "access_token": target.credential},
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            # requests echoes the full URL, token included
            message = str(e).replace(target.credential, "***")
            raise StructuralExtractionError(f"API error: {message}") from e

        items = body.get("data") if isinstance(body, dict) else None
        if not items:
            log.warning("No posts found via API")
            raise StructuralExtractionError("No posts found")
        if not isinstance(items, list) or not isinstance(items[0], dict):
            raise StructuralExtractionError("Unexpected API response shape")

        post = post_from_media(items[0])
        if not post.image_url:
            raise StructuralExtractionError("API media item has no image URL")
        return post
