"""Target and engine configuration.

Paths and flags are injected at construction; ``from_env`` is a convenience
for process wiring and is never called by the engine itself.
"""
import logging
import os
from dataclasses import dataclass, replace

log = logging.getLogger(__name__)

DEFAULT_IDENTIFIER = "bbcnews"
PROFILE_URL = "https://www.instagram.com/{identifier}/"
POST_URL = "https://www.instagram.com/p/{shortcode}/"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    if raw:
        log.warning(f"Ignoring unrecognised boolean {name}={raw!r}")
    return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning(f"Ignoring non-numeric {name}={raw!r}")
        return default


@dataclass
class TargetConfig:
    """The profile to read and the optional Graph API bearer token."""
    identifier: str = DEFAULT_IDENTIFIER
    credential: str | None = None

    def __post_init__(self):
        self.identifier = (self.identifier or "").strip() or DEFAULT_IDENTIFIER
        self.credential = (self.credential or "").strip() or None

    @property
    def profile_url(self) -> str:
        return PROFILE_URL.format(identifier=self.identifier)

    def snapshot(self) -> "TargetConfig":
        """Independent copy for one retrieval call."""
        return replace(self)

    @classmethod
    def from_env(cls) -> "TargetConfig":
        return cls(
            identifier=os.environ.get("TARGET_USERNAME", ""),
            credential=os.environ.get("INSTAGRAM_ACCESS_TOKEN"),
        )


@dataclass(frozen=True)
class EngineSettings:
    headless: bool = True
    browser_executable: str = ""
    diagnostics_dir: str = "logs"
    diagnostics_verbosity: str = "off"
    request_timeout: float = 30.0
    locale: str = "en-US"

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            headless=_env_bool("INSTA_HEADLESS", True),
            browser_executable=os.environ.get("CHROME_PATH", "").strip(),
            diagnostics_dir=os.environ.get("INSTA_DIAGNOSTICS_DIR", "").strip() or "logs",
            diagnostics_verbosity=os.environ.get("INSTA_DIAGNOSTICS", "").strip().lower() or "off",
            request_timeout=_env_float("INSTA_REQUEST_TIMEOUT", 30.0),
        )
