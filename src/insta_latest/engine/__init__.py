"""engine — strategy orchestration, error signals and diagnostics."""
from .errors import (  # noqa: F401
    RetrievalSignal,
    RetrievalError,
    TransientNetworkError,
    StructuralExtractionError,
    ConfigurationError,
    ResourceError,
)
from .diagnostics import DiagnosticsSink, DiagnosticsVerbosity, FailureBundle  # noqa: F401
from .orchestrator import PostRetriever, default_strategies  # noqa: F401
