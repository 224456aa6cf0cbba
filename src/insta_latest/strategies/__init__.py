"""strategies — the three ways of acquiring the latest post."""
from .browser import BrowserStrategy  # noqa: F401
from .static import StaticStrategy  # noqa: F401
from .official_api import OfficialApiStrategy  # noqa: F401
