"""Normalized error signals for retrieval strategies.

Strategies raise these internally and convert them to a failed
RetrievalOutcome at their own boundary, so the orchestrator only ever sees
outcomes. The signal decides retry behaviour: only TRANSIENT is retried, and
only inside the strategy that raised it.
"""
from enum import Enum


class RetrievalSignal(Enum):
    """Why a strategy step failed."""
    TRANSIENT = "transient"           # timeout, connection reset, 429/5xx
    STRUCTURAL = "structural"         # cascade exhausted, schema shift, bad JSON
    CONFIGURATION = "configuration"   # missing credential
    RESOURCE = "resource"             # browser launch failure


class RetrievalError(Exception):
    """Exception carrying a RetrievalSignal."""

    signal = RetrievalSignal.STRUCTURAL

    def __init__(self, message: str = "", signal: RetrievalSignal | None = None):
        if signal is not None:
            self.signal = signal
        super().__init__(message or self.signal.value)

    @property
    def retryable(self) -> bool:
        return self.signal is RetrievalSignal.TRANSIENT


class TransientNetworkError(RetrievalError):
    signal = RetrievalSignal.TRANSIENT


class StructuralExtractionError(RetrievalError):
    signal = RetrievalSignal.STRUCTURAL


class ConfigurationError(RetrievalError):
    signal = RetrievalSignal.CONFIGURATION


class ResourceError(RetrievalError):
    signal = RetrievalSignal.RESOURCE
