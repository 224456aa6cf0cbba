"""Scoped headless-browser session.

One isolated browser per retrieval call: launched on entry, closed on every
exit path. Callers supply the Playwright handle so tests can substitute it.
"""
import logging
import os
import platform
import shutil
from contextlib import contextmanager
from typing import Any

from ..engine.errors import ResourceError
from .stealth import install_stealth
from .ua import build_user_agent, navigation_headers

log = logging.getLogger(__name__)

VIEWPORT = {"width": 1920, "height": 1080}

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
    "--disable-site-isolation-trials",
    "--disable-infobars",
    "--window-size=1920,1080",
]


def find_system_chrome() -> str | None:
    """Locate a system Chrome/Chromium binary, or None to use Playwright's bundle."""
    system = platform.system()
    if system == "Darwin":
        for candidate in (
            "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
            "/Applications/Chromium.app/Contents/MacOS/Chromium",
        ):
            if os.path.isfile(candidate):
                return candidate
        return None
    if system == "Linux":
        for name in ("google-chrome", "google-chrome-stable", "chromium-browser", "chromium"):
            path = shutil.which(name)
            if path:
                return path
    return None


@contextmanager
def open_browser(
    playwright: Any,
    *,
    headless: bool = True,
    executable_path: str = "",
    user_agent: str = "",
    locale: str = "en-US",
    extra_args: list[str] | None = None,
):
    """Launch Chromium with a realistic identity and yield a fresh page.

    Raises ResourceError if the browser cannot be launched. The browser is
    closed when the block exits, whether it returns or raises.
    """
    user_agent = user_agent or build_user_agent()
    args = list(LAUNCH_ARGS)
    if extra_args:
        args.extend(extra_args)

    launch_kwargs: dict[str, Any] = {"headless": headless, "args": args}
    if executable_path:
        launch_kwargs["executable_path"] = executable_path

    try:
        browser = playwright.chromium.launch(**launch_kwargs)
    except Exception as e:
        raise ResourceError(f"browser launch failed: {e}") from e

    try:
        context = browser.new_context(
            user_agent=user_agent,
            viewport=VIEWPORT,
            device_scale_factor=1,
            locale=locale,
            extra_http_headers=navigation_headers(),
        )
        install_stealth(context)
        page = context.new_page()
        page.on("console", lambda msg: log.debug(f"Browser console: {msg.text}"))
        page.on("pageerror", lambda err: log.debug(f"Page error: {err}"))
        log.info(f"Browser session opened ({os.path.basename(executable_path) or 'bundled chromium'})")
        yield page
    finally:
        try:
            browser.close()
        except Exception as e:
            log.warning(f"Failed to close browser cleanly: {e}")
