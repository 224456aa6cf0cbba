"""human — jittered pacing and off-center clicks for browser automation."""
from .behavior import jittered_ms, settle, human_click  # noqa: F401
