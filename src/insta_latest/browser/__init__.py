"""browser — Playwright session, client identity and stealth primitives.

Zero site-specific dependencies.
"""
from .session import find_system_chrome, open_browser  # noqa: F401
from .stealth import build_stealth_shim, install_stealth  # noqa: F401
from .ua import build_user_agent, pick_user_agent, navigation_headers, USER_AGENT_POOL  # noqa: F401
