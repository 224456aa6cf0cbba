"""Static retrieval: plain HTTP fetch of the profile document + markup parsing.

No JavaScript runs, so this only works while the profile still ships its
first posts in the initial HTML. Lighter than the browser strategy and used
as its fallback.
"""
import logging
import random
import time
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from ..browser.ua import USER_AGENT_POOL, navigation_headers, pick_user_agent
from ..config import EngineSettings, TargetConfig
from ..engine.diagnostics import DiagnosticsSink, FailureBundle
from ..engine.errors import RetrievalError, StructuralExtractionError, TransientNetworkError
from ..models import CAPTION_UNAVAILABLE, CaptionStatus, PostRecord, RetrievalOutcome
from .embedded import extract_from_scripts
from .retry import RetryPolicy, SleepFn

log = logging.getLogger(__name__)

BASE_URL = "https://www.instagram.com"
POST_LINK_SELECTOR = 'a[href*="/p/"]'
CDN_IMAGE_SELECTOR = 'img[src*="instagram"]'


# connection resets surface as ChunkedEncodingError when they cut a body short
_RETRYABLE = (
    requests.Timeout,
    requests.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
    TransientNetworkError,
)


def _is_retryable_status(status: int) -> bool:
    return status == 429 or status >= 500


class StaticStrategy:
    """Fetch with retry/backoff, then embedded-state and direct-markup extraction."""

    name = "static"
    requires_credential = False

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        session: requests.Session | None = None,
        retry: RetryPolicy | None = None,
        user_agents=USER_AGENT_POOL,
        sleep_fn: SleepFn | None = None,
        rng=None,
        diagnostics: DiagnosticsSink | None = None,
    ):
        settings = settings or EngineSettings()
        self._session = session or requests.Session()
        self._retry = retry or RetryPolicy(timeout_seconds=settings.request_timeout)
        self._user_agents = tuple(user_agents)
        self._sleep = sleep_fn or time.sleep
        self._rng = rng or random
        self._diagnostics = diagnostics

    def run(self, target: TargetConfig) -> RetrievalOutcome:
        identifier = target.identifier
        log.info(f"Attempting static retrieval for {identifier}")
        t0 = time.monotonic()
        try:
            html = self.fetch_profile(target.profile_url)
            post = self.extract(html)
        except RetrievalError as e:
            log.error(f"Static retrieval failed for {identifier}: {e}")
            self._save_failure(identifier, e, t0)
            return RetrievalOutcome.failure(str(e))
        except Exception as e:
            log.exception(f"Unexpected error in static retrieval for {identifier}")
            return RetrievalOutcome.failure(f"unexpected {type(e).__name__}: {e}")
        post.source = self.name
        log.info(f"Successfully fetched latest post via static retrieval for {identifier}")
        return RetrievalOutcome.success(post)

    # ── Fetch ───────────────────────────────────────────────────────────────

    def fetch_profile(self, url: str) -> str:
        """GET ``url`` with up to ``max_attempts`` tries and exponential backoff.

        Raises TransientNetworkError once the attempt budget is spent, and
        StructuralExtractionError at once for non-retryable statuses or an
        empty body.
        """
        user_agent = pick_user_agent(self._user_agents, self._rng)
        headers = navigation_headers(user_agent, no_cache=True)
        log.info(f"Using user agent: {user_agent}")

        html = ""
        attempts = self._retry.max_attempts
        for attempt in range(1, attempts + 1):
            log.info(f"Attempt {attempt}/{attempts} to fetch {url}")
            try:
                response = self._session.get(
                    url, headers=headers, timeout=self._retry.timeout_seconds,
                    allow_redirects=True,
                )
                status = response.status_code
                if status >= 400:
                    if not _is_retryable_status(status):
                        raise StructuralExtractionError(f"HTTP {status} from {url}")
                    raise TransientNetworkError(f"HTTP {status} from {url}")
                html = response.text
                break
            except _RETRYABLE as e:
                log.warning(f"Attempt {attempt} failed: {e}")
                if attempt >= attempts:
                    raise TransientNetworkError(f"Failed after {attempts} attempts: {e}") from e
                delay = self._retry.backoff(attempt, self._rng)
                log.info(f"Retrying in {delay:.1f} seconds...")
                self._sleep(delay)
            except requests.RequestException as e:
                raise StructuralExtractionError(f"request rejected: {e}") from e

        if not html or not html.strip():
            raise StructuralExtractionError("Invalid HTML content received")
        if self._diagnostics is not None:
            self._diagnostics.save_markup("instagram-profile", html)
        return html

    # ── Extraction ──────────────────────────────────────────────────────────

    def extract(self, html: str) -> PostRecord:
        """Embedded state first, then direct markup."""
        soup = BeautifulSoup(html, "html.parser")
        if soup.find() is None:
            raise StructuralExtractionError("Response body is not markup")

        scripts = [s.string or s.get_text() or "" for s in soup.find_all("script")]
        log.info(f"Scanning {len(scripts)} script blocks for embedded data")
        post = extract_from_scripts(scripts)
        if post is not None:
            return post

        log.info("No embedded data found, trying direct HTML parsing")
        post = self._extract_from_markup(soup)
        if post is not None:
            return post
        raise StructuralExtractionError(
            "Could not extract post data from embedded state or markup"
        )

    @staticmethod
    def _extract_from_markup(soup: BeautifulSoup) -> PostRecord | None:
        link = next(
            (a.get("href") for a in soup.select(POST_LINK_SELECTOR) if a.get("href")),
            None,
        )
        if not link:
            log.debug("No post links in markup")
            return None
        img = soup.select_one(CDN_IMAGE_SELECTOR)
        image_url = img.get("src") if img is not None else ""
        if not image_url:
            log.debug("No CDN image in markup")
            return None
        log.info("Extracted basic post data via direct HTML parsing")
        return PostRecord(
            caption=CAPTION_UNAVAILABLE,
            caption_status=CaptionStatus.UNAVAILABLE,
            image_url=image_url,
            post_url=urljoin(BASE_URL + "/", link),
        )

    def _save_failure(self, identifier: str, error: RetrievalError, t0: float):
        if self._diagnostics is None:
            return
        self._diagnostics.save_failure(FailureBundle(
            strategy=self.name,
            identifier=identifier,
            reason=str(error),
            signal=error.signal.value,
            elapsed=round(time.monotonic() - t0, 2),
        ))
