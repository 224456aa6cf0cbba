"""Structured JSONL event logging for retrieval runs."""
import json
import logging
import os
import time

log = logging.getLogger(__name__)


class RetrievalEventLogger:
    """Writes one JSON line per event to ``<log_dir>/retrieval_<run_id>.jsonl``.

    Best-effort: an unwritable directory or a failed write is logged and
    dropped, never raised. Use as a context manager to close on exit.
    """

    def __init__(self, run_id: str, log_dir: str = "logs/retrieval_events"):
        self._run_id = run_id
        self._f = None
        self.path = ""
        try:
            os.makedirs(log_dir, exist_ok=True)
            self.path = os.path.join(log_dir, f"retrieval_{run_id}.jsonl")
            self._f = open(self.path, "a", encoding="utf-8")
        except Exception as e:
            log.warning(f"RetrievalEventLogger: failed to open log file: {e}")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _write(self, event: dict):
        if self._f is None:
            return
        try:
            event["ts"] = time.time()
            event["run_id"] = self._run_id
            self._f.write(json.dumps(event, ensure_ascii=False) + "\n")
            self._f.flush()
        except Exception as e:
            log.warning(f"RetrievalEventLogger: write failed: {e}")

    def log_run_start(self, identifier: str, strategies: list[str]):
        self._write({
            "event": "run_start",
            "identifier": identifier,
            "strategies": strategies,
        })

    def log_attempt(self, identifier: str, strategy: str, ok: bool,
                    error: str | None, duration: float):
        self._write({
            "event": "attempt",
            "identifier": identifier,
            "strategy": strategy,
            "ok": ok,
            "error": error,
            "duration": duration,
        })

    def log_skip(self, identifier: str, strategy: str, reason: str):
        self._write({
            "event": "skip",
            "identifier": identifier,
            "strategy": strategy,
            "reason": reason,
        })

    def log_run_end(self, identifier: str, ok: bool, source: str | None,
                    attempts: int, duration: float):
        self._write({
            "event": "run_end",
            "identifier": identifier,
            "ok": ok,
            "source": source,
            "attempts": attempts,
            "duration": duration,
        })

    def close(self):
        if self._f is not None:
            try:
                self._f.flush()
                self._f.close()
            except Exception:
                pass
            self._f = None
