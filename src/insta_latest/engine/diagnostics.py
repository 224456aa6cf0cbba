"""Diagnostic artifacts written while strategies run.

Raw markup, page screenshots and a JSON failure bundle per strategy. Every
artifact has a fixed file name and is overwritten in place, so repeated runs
never grow the directory. Nothing here is read back by the engine, and no
method raises. Zero overhead when disabled (verbosity="off").
"""
import json
import logging
import os
import time
from dataclasses import dataclass, field, asdict

log = logging.getLogger(__name__)


class DiagnosticsVerbosity:
    OFF = "off"             # nothing written
    STANDARD = "standard"   # raw markup + failure bundles
    FULL = "full"           # + page screenshots (~200-500ms each)

    ALL = (OFF, STANDARD, FULL)


@dataclass
class FailureBundle:
    strategy: str
    identifier: str
    reason: str
    signal: str = ""
    page_url: str = ""
    page_title: str = ""
    elapsed: float = 0.0
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return asdict(self)


def _safe_name(name: str) -> str:
    cleaned = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in name)
    return cleaned[:60] or "artifact"


class DiagnosticsSink:
    """Best-effort writer for debugging artifacts."""

    def __init__(self, directory: str = "logs", verbosity: str = DiagnosticsVerbosity.OFF):
        if verbosity not in DiagnosticsVerbosity.ALL:
            log.warning(f"Unknown diagnostics verbosity {verbosity!r}, disabling")
            verbosity = DiagnosticsVerbosity.OFF
        self.directory = directory
        self.verbosity = verbosity

    @property
    def enabled(self) -> bool:
        return self.verbosity != DiagnosticsVerbosity.OFF and bool(self.directory)

    def _path(self, name: str, ext: str) -> str:
        os.makedirs(self.directory, exist_ok=True)
        return os.path.join(self.directory, f"{_safe_name(name)}.{ext}")

    def save_markup(self, name: str, html: str) -> str:
        """Write raw markup to ``<dir>/<name>.html``. Returns the path or ''."""
        if not self.enabled or not html:
            return ""
        try:
            path = self._path(name, "html")
            with open(path, "w", encoding="utf-8") as f:
                f.write(html)
            log.debug(f"Saved markup to {path}")
            return path
        except Exception as e:
            log.debug(f"Failed to save markup {name}: {e}")
            return ""

    def capture_page(self, page, name: str) -> str:
        """Screenshot ``page`` to ``<dir>/<name>.png`` (FULL only)."""
        if self.verbosity != DiagnosticsVerbosity.FULL or not self.directory:
            return ""
        try:
            path = self._path(name, "png")
            page.screenshot(path=path, full_page=True)
            return path
        except Exception as e:
            log.debug(f"Failed to capture page {name}: {e}")
            return ""

    def save_failure(self, bundle: FailureBundle) -> str:
        """Write the bundle to ``<dir>/<strategy>-failure.json``."""
        if not self.enabled:
            return ""
        try:
            path = self._path(f"{bundle.strategy}-failure", "json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump(bundle.to_dict(), f, ensure_ascii=False, indent=2, default=str)
            return path
        except Exception as e:
            log.debug(f"Failed to save failure bundle: {e}")
            return ""


def describe_page(page) -> dict[str, str]:
    """URL and title of a page, tolerating a closed or crashed page."""
    info = {"page_url": "", "page_title": ""}
    try:
        info["page_url"] = page.url or ""
    except Exception:
        pass
    try:
        info["page_title"] = page.title() or ""
    except Exception:
        pass
    return info
