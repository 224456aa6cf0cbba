"""Human-like pacing for browser automation.

Fixed waits are an easy bot signal; every pause here is a base duration plus
uniform jitter, and clicks land off-center the way a hand would.
"""

import logging
import math
import random

log = logging.getLogger(__name__)


def _safe_float(val, default: float) -> float:
    try:
        f = float(val)
        if math.isfinite(f):
            return f
    except (TypeError, ValueError):
        pass
    return default


def jittered_ms(base_ms: int, jitter_ms: int, rng=random) -> int:
    """Return ``base_ms`` plus a uniform random extra in ``[0, jitter_ms)``."""
    base_ms = max(0, int(base_ms))
    jitter_ms = max(0, int(jitter_ms))
    return base_ms + (int(rng.random() * jitter_ms) if jitter_ms else 0)


def settle(page, base_ms: int, jitter_ms: int = 0, rng=random) -> int:
    """Let client-side rendering finish. Returns the delay used in ms.

    Uses page.wait_for_timeout() so Playwright keeps processing events while
    waiting; time.sleep() would stall them.
    """
    delay = jittered_ms(base_ms, jitter_ms, rng)
    page.wait_for_timeout(delay)
    log.debug(f"    settle {delay}ms")
    return delay


def human_click(page, element, rng=random) -> None:
    """Click an element at a random point near its center.

    Falls back to element.click() when the element has no usable box.
    """
    if element is None:
        return
    box = None
    try:
        box = element.bounding_box()
    except Exception:
        pass
    bw = _safe_float((box or {}).get("width"), 0.0)
    bh = _safe_float((box or {}).get("height"), 0.0)
    if bw <= 0 or bh <= 0:
        element.click()
        log.debug("    click (no box, fallback)")
        return
    x = _safe_float(box.get("x"), 0.0) + bw / 2 + rng.uniform(-0.3, 0.3) * bw
    y = _safe_float(box.get("y"), 0.0) + bh / 2 + rng.uniform(-0.3, 0.3) * bh
    page.mouse.move(x, y, steps=rng.randint(8, 20))
    page.wait_for_timeout(jittered_ms(50, 100, rng))
    page.mouse.click(x, y)
    log.debug(f"    click ({x:.0f},{y:.0f})")
