"""Browser-driven retrieval: render the profile in headless Chromium.

Most reliable against bot detection, and the most expensive. Every DOM
lookup goes through an ordered selector list because the profile markup
uses rotating, obfuscated class names; structural and attribute selectors
come first and class-fragment selectors last.

The browser session is scoped to one run() call and always closed.
"""
import logging
import random
import time
from typing import Callable

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ..browser.session import find_system_chrome, open_browser
from ..browser.ua import build_user_agent
from ..cascade import first_match
from ..config import EngineSettings, TargetConfig
from ..engine.diagnostics import DiagnosticsSink, FailureBundle, describe_page
from ..engine.errors import (
    RetrievalError,
    ResourceError,
    StructuralExtractionError,
    TransientNetworkError,
)
from ..human.behavior import human_click, settle
from ..models import NO_CAPTION, CaptionStatus, PostRecord, RetrievalOutcome

log = logging.getLogger(__name__)

# ── Selector cascades ───────────────────────────────────────────────────────

CONSENT_SELECTORS = [
    'button:has-text("Allow all cookies")',
    'button:has-text("Decline optional cookies")',
    'button:has-text("Only allow essential cookies")',
    'div[role="dialog"] button[tabindex="0"][type="button"]:not([disabled])',
]

PROFILE_POST_SELECTORS = [
    'article a, a[href*="/p/"]',
    'a[href*="/p/"]',
    'div[role="button"] a',
    'main article a',
    'div._aagw a',
    'div._aabd a',
    'div[class*="_aa"] a[href*="/p/"]',
    'a[role="link"][tabindex="0"][href*="/p/"]',
    'main a[href^="/p/"]',
    'div[role="presentation"] a[href^="/p/"]',
]

POST_PAGE_SELECTORS = [
    'article[role="presentation"]',
    'div[role="dialog"]',
    'main article',
    'div._aatk',
    'div[class*="_aa"]',
    'section main',
]

CAPTION_SELECTORS = [
    'div[role="dialog"] ul li span',
    'article[role="presentation"] ul li span',
    'div[role="dialog"] h1 + div span',
    'article div._a9zs span',
    'h1 + div span',
    'div._a9zs span',
    'span[dir="auto"]',
    'div._ae5q span',
    'div[class*="_ae"] span',
    'div[class*="_aa"] span[dir="auto"]',
    'ul li span[dir="auto"]',
]

IMAGE_SELECTORS = [
    'div[role="dialog"] img[decoding="auto"]',
    'article[role="presentation"] img[decoding="auto"]',
    'div[role="dialog"] img[crossorigin="anonymous"]',
    'article div._aagv img',
    'article img',
    'div._aagv img',
    'div[class*="_aa"] img',
    'div[class*="_ab"] img',
    'img[crossorigin="anonymous"]',
    'img[alt]',
    'img[style*="object-fit"]',
]

TIME_SELECTORS = ['time[datetime]', 'time', 'div[class*="_aa"] time', 'a time']

POST_PATH = "/p/"
MIN_CAPTION_CHARS = 5
MIN_IMAGE_PX = 300
CDN_MARKERS = ("instagram", "fbcdn")

_ALL_IMAGES_JS = """imgs => imgs.map(i => ({
    src: i.getAttribute('src') || '',
    width: i.width,
    height: i.height,
}))"""
_HREFS_JS = "els => els.map(e => e.href).filter(Boolean)"


class BrowserStrategy:
    """Render profile → follow first post link → read the post page."""

    name = "browser"
    requires_credential = False

    # (wait_until, timeout_ms); the second entry is the single navigation retry
    PROFILE_NAVIGATION = (("networkidle", 120_000), ("domcontentloaded", 60_000))
    POST_NAVIGATION_TIMEOUT_MS = 30_000
    PROFILE_SETTLE_MS = (5000, 3000)
    POST_SETTLE_MS = (2000, 1500)
    LINK_WAIT_MS = 8000
    CONTAINER_WAIT_MS = 5000

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        diagnostics: DiagnosticsSink | None = None,
        playwright_factory: Callable | None = None,
        rng=None,
    ):
        self._settings = settings or EngineSettings()
        self._diagnostics = diagnostics or DiagnosticsSink(verbosity="off")
        self._playwright_factory = playwright_factory or sync_playwright
        self._rng = rng or random

    def _executable_path(self) -> str:
        path = self._settings.browser_executable
        if path == "system":
            return find_system_chrome() or ""
        return path

    def run(self, target: TargetConfig) -> RetrievalOutcome:
        identifier = target.identifier
        log.info(f"Attempting browser retrieval for {identifier}")
        t0 = time.monotonic()
        try:
            with self._playwright_factory() as playwright:
                with open_browser(
                    playwright,
                    headless=self._settings.headless,
                    executable_path=self._executable_path(),
                    user_agent=build_user_agent(),
                    locale=self._settings.locale,
                ) as page:
                    try:
                        post = self.scrape(page, target)
                    except RetrievalError as e:
                        self._save_failure(page, identifier, e, t0)
                        raise
        except RetrievalError as e:
            log.error(f"Browser retrieval failed for {identifier}: {e}")
            return RetrievalOutcome.failure(str(e))
        except PlaywrightError as e:
            log.error(f"Browser retrieval failed for {identifier}: {e}")
            return RetrievalOutcome.failure(f"browser error: {e}")
        except Exception as e:
            log.exception(f"Unexpected error in browser retrieval for {identifier}")
            return RetrievalOutcome.failure(f"unexpected {type(e).__name__}: {e}")

        post.source = self.name
        log.info(f"Successfully fetched latest post via browser for {identifier} "
                 f"({time.monotonic() - t0:.1f}s)")
        return RetrievalOutcome.success(post)

    # ── Steps ───────────────────────────────────────────────────────────────

    def scrape(self, page, target: TargetConfig) -> PostRecord:
        """Drive an open page from the profile grid to a PostRecord. Raises RetrievalError."""
        self.open_profile(page, target.profile_url)
        self._diagnostics.capture_page(page, "instagram-profile")
        settle(page, *self.PROFILE_SETTLE_MS, rng=self._rng)
        self.dismiss_consent(page)

        links = self.collect_post_links(page)
        if not links:
            self._diagnostics.capture_page(page, "instagram-no-posts")
            raise StructuralExtractionError("No post links found on the profile")
        log.info(f"Found {len(links)} post links, using the first one")

        self.open_post(page, links[0])
        self._diagnostics.capture_page(page, "instagram-post")
        settle(page, *self.POST_SETTLE_MS, rng=self._rng)

        hit = first_match(POST_PAGE_SELECTORS, self._wait_probe(page, self.CONTAINER_WAIT_MS))
        if hit is None:
            raise StructuralExtractionError("Post page elements not found after trying all selectors")
        log.info(f"Post page rendered ({hit.candidate})")

        caption = self.extract_caption(page)
        image_url = self.extract_image(page)
        timestamp = self.extract_timestamp(page)

        return PostRecord(
            caption=caption or NO_CAPTION,
            caption_status=CaptionStatus.PRESENT if caption else CaptionStatus.ABSENT,
            image_url=image_url,
            timestamp=timestamp,
            post_url=page.url,
        )

    def open_profile(self, page, url: str) -> None:
        """Navigate to the profile, retrying once with a looser readiness condition."""
        (strict, strict_timeout), (loose, loose_timeout) = self.PROFILE_NAVIGATION
        log.info(f"Navigating to profile: {url}")
        try:
            page.goto(url, wait_until=strict, timeout=strict_timeout)
            return
        except PlaywrightError as e:
            log.warning(f"Navigation with {strict} failed: {e}")
        log.info(f"Retrying with {loose} wait condition")
        try:
            page.goto(url, wait_until=loose, timeout=loose_timeout)
        except PlaywrightTimeoutError as e:
            raise TransientNetworkError(f"Profile navigation timed out: {e}") from e
        except PlaywrightError as e:
            raise ResourceError(f"Profile navigation failed: {e}") from e

    def open_post(self, page, url: str) -> None:
        log.info(f"Navigating to post: {url}")
        try:
            page.goto(url, wait_until="networkidle", timeout=self.POST_NAVIGATION_TIMEOUT_MS)
        except PlaywrightTimeoutError as e:
            raise TransientNetworkError(f"Post navigation timed out: {e}") from e

    def dismiss_consent(self, page) -> bool:
        """Click a cookie-consent button if one is showing. Never raises."""
        try:
            hit = first_match(CONSENT_SELECTORS, page.query_selector)
            if hit is None:
                return False
            log.info(f"Dismissing consent dialog ({hit.candidate})")
            human_click(page, hit.value, rng=self._rng)
            page.wait_for_timeout(2000)
            return True
        except PlaywrightError as e:
            log.info(f"Consent dialog not dismissed: {e}")
            return False

    def collect_post_links(self, page) -> list[str]:
        """Post permalinks under the first selector that matches anything."""
        hit = first_match(PROFILE_POST_SELECTORS, self._wait_probe(page, self.LINK_WAIT_MS))
        if hit is None:
            log.warning("No post link selector matched")
            return []
        log.info(f"Found working selector: {hit.candidate}")
        hrefs = page.eval_on_selector_all(hit.candidate, _HREFS_JS) or []
        links: list[str] = []
        for href in hrefs:
            if isinstance(href, str) and POST_PATH in href and href not in links:
                links.append(href)
        return links

    def extract_caption(self, page) -> str | None:
        def _probe(selector):
            for el in page.query_selector_all(selector):
                text = (el.text_content() or "").strip()
                if len(text) > MIN_CAPTION_CHARS:
                    return text
            return None

        hit = first_match(CAPTION_SELECTORS, _probe)
        if hit is None:
            log.info("No caption element found")
            return None
        log.debug(f"Caption via {hit.candidate}")
        return hit.value

    def extract_image(self, page) -> str:
        """Image URL via selector cascade, then the size/host heuristic."""
        def _probe(selector):
            el = page.query_selector(selector)
            return el.get_attribute("src") if el is not None else None

        hit = first_match(IMAGE_SELECTORS, _probe)
        if hit is not None:
            log.debug(f"Image via {hit.candidate}")
            return hit.value

        log.info("Could not extract image URL with selectors, trying size heuristic")
        images = page.eval_on_selector_all("img", _ALL_IMAGES_JS) or []
        candidates = [
            img["src"] for img in images
            if isinstance(img, dict)
            and (img.get("width") or 0) > MIN_IMAGE_PX
            and (img.get("height") or 0) > MIN_IMAGE_PX
            and any(marker in (img.get("src") or "") for marker in CDN_MARKERS)
        ]
        if not candidates:
            raise StructuralExtractionError("Could not extract image URL from the post")
        log.info(f"Found {len(candidates)} potential post images")
        return candidates[0]

    def extract_timestamp(self, page) -> str | None:
        def _probe(selector):
            el = page.query_selector(selector)
            return el.get_attribute("datetime") if el is not None else None

        try:
            hit = first_match(TIME_SELECTORS, _probe)
        except PlaywrightError as e:
            log.debug(f"Timestamp lookup failed: {e}")
            return None
        return hit.value if hit is not None else None

    # ── Helpers ─────────────────────────────────────────────────────────────

    @staticmethod
    def _wait_probe(page, timeout_ms: int):
        def _probe(selector):
            log.debug(f"Trying selector: {selector}")
            try:
                page.wait_for_selector(selector, timeout=timeout_ms, state="attached")
            except PlaywrightTimeoutError:
                log.debug(f"Selector {selector} not found, trying next")
                return None
            return selector
        return _probe

    def _save_failure(self, page, identifier: str, error: RetrievalError, t0: float):
        if not self._diagnostics.enabled:
            return
        self._diagnostics.capture_page(page, "instagram-failure")
        self._diagnostics.save_failure(FailureBundle(
            strategy=self.name,
            identifier=identifier,
            reason=str(error),
            signal=error.signal.value,
            elapsed=round(time.monotonic() - t0, 2),
            **describe_page(page),
        ))
