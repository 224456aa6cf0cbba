"""telemetry — structured JSONL event logging."""
from .logger import RetrievalEventLogger  # noqa: F401
