"""Orchestrator — entry point for latest-post retrieval.

Holds the mutable target and runs strategies one after another in a fixed
priority order: browser, static, official API. The first success wins;
failures are logged and folded into one diagnostic reason.
"""
import logging
import time
from typing import Sequence

from ..config import EngineSettings, TargetConfig
from ..models import RetrievalOutcome, Strategy

log = logging.getLogger(__name__)

EXHAUSTED = "all retrieval methods exhausted"


def default_strategies(settings: EngineSettings | None = None, diagnostics=None) -> list[Strategy]:
    """The production cascade: browser → static → official API."""
    from ..strategies.browser import BrowserStrategy
    from ..strategies.official_api import OfficialApiStrategy
    from ..strategies.static import StaticStrategy

    settings = settings or EngineSettings()
    return [
        BrowserStrategy(settings, diagnostics=diagnostics),
        StaticStrategy(settings, diagnostics=diagnostics),
        OfficialApiStrategy(settings),
    ]


class PostRetriever:
    """Runs the strategy cascade against the current target."""

    def __init__(self, target: TargetConfig | None = None, *,
                 strategies: Sequence[Strategy] | None = None,
                 settings: EngineSettings | None = None,
                 diagnostics=None,
                 event_logger=None):
        self._target = (target or TargetConfig()).snapshot()
        if strategies is None:
            strategies = default_strategies(settings, diagnostics)
        self._strategies = list(strategies)
        self._event_logger = event_logger
        log.info(f"Post retriever initialized for {self._target.identifier} "
                 f"(strategies: {', '.join(s.name for s in self._strategies)})")

    @property
    def target(self) -> TargetConfig:
        return self._target.snapshot()

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    def set_target(self, identifier: str) -> None:
        """Point subsequent retrievals at ``identifier``.

        Calls already in flight keep the identifier they started with.
        """
        self._target.identifier = identifier
        log.info(f"Target username updated to: {identifier}")

    def set_credential(self, credential: str | None) -> None:
        self._target.credential = (credential or "").strip() or None
        log.info(f"Official API credential {'configured' if self._target.credential else 'cleared'}")

    def get_latest_post(self) -> RetrievalOutcome:
        """Return the first successful strategy outcome, or an aggregated failure."""
        target = self._target.snapshot()
        identifier = target.identifier
        t0 = time.monotonic()
        log.info(f"Fetching latest post for {identifier}")
        if self._event_logger:
            self._event_logger.log_run_start(identifier, self.strategy_names)

        reasons: list[str] = []
        attempts = 0
        for strategy in self._strategies:
            if getattr(strategy, "requires_credential", False) and not target.credential:
                log.info(f"  {strategy.name}: no credential configured, skipping")
                if self._event_logger:
                    self._event_logger.log_skip(identifier, strategy.name, "no_credential")
                continue

            attempts += 1
            log.info(f"  Trying {strategy.name} strategy")
            started = time.monotonic()
            outcome = self._run_one(strategy, target)
            duration = round(time.monotonic() - started, 2)
            if self._event_logger:
                self._event_logger.log_attempt(
                    identifier, strategy.name, outcome.ok, outcome.error, duration,
                )

            if outcome.ok:
                log.info(f"  {strategy.name} strategy succeeded in {duration:.1f}s")
                self._log_end(identifier, True, strategy.name, attempts, t0)
                return outcome

            log.warning(f"  {strategy.name} strategy failed: {outcome.error}")
            reasons.append(f"{strategy.name}: {outcome.error}")

        log.error(f"All methods failed to fetch latest post for {identifier}")
        self._log_end(identifier, False, None, attempts, t0)
        reason = EXHAUSTED
        if reasons:
            reason = f"{EXHAUSTED}: " + "; ".join(reasons)
        return RetrievalOutcome.failure(reason)

    def _run_one(self, strategy: Strategy, target: TargetConfig) -> RetrievalOutcome:
        try:
            outcome = strategy.run(target)
        except Exception as e:
            log.exception(f"  {strategy.name} strategy raised past its boundary")
            return RetrievalOutcome.failure(f"unexpected {type(e).__name__}: {e}")
        if not isinstance(outcome, RetrievalOutcome):
            return RetrievalOutcome.failure(f"invalid result type {type(outcome).__name__}")
        return outcome

    def _log_end(self, identifier, ok, source, attempts, t0):
        if self._event_logger:
            self._event_logger.log_run_end(
                identifier, ok, source, attempts, round(time.monotonic() - t0, 2),
            )
