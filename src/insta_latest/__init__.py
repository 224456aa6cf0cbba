"""insta-latest — fetch the most recent post of a public Instagram profile.

Runs an ordered cascade of retrieval strategies (headless browser, static
markup fetch, official Graph API) and returns the first success as a
normalized PostRecord.
"""
from .config import TargetConfig, EngineSettings  # noqa: F401
from .models import PostRecord, RetrievalOutcome, CaptionStatus, Strategy  # noqa: F401
from .engine.errors import RetrievalSignal, RetrievalError  # noqa: F401
from .engine.orchestrator import PostRetriever  # noqa: F401
