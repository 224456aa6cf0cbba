"""Tests for RetrievalEventLogger — telemetry contract tests."""
import json
import os
import tempfile

from insta_latest.telemetry.logger import RetrievalEventLogger


def _read(path):
    with open(path) as f:
        return [json.loads(line) for line in f]


def test_run_events_written_as_jsonl():
    with tempfile.TemporaryDirectory() as tmpdir:
        with RetrievalEventLogger("run123", log_dir=tmpdir) as logger:
            logger.log_run_start("nasa", ["browser", "static", "api"])
            logger.log_attempt("nasa", "browser", False, "No post links", 12.3)
            logger.log_skip("nasa", "api", "no_credential")
            logger.log_run_end("nasa", False, None, 2, 15.0)

        assert os.listdir(tmpdir) == ["retrieval_run123.jsonl"]
        events = _read(logger.path)
        assert [e["event"] for e in events] == ["run_start", "attempt", "skip", "run_end"]
        assert all(e["run_id"] == "run123" and "ts" in e for e in events)
        assert events[0]["strategies"] == ["browser", "static", "api"]
        assert events[1]["error"] == "No post links"
        assert events[3]["attempts"] == 2


def test_writes_after_close_are_ignored():
    with tempfile.TemporaryDirectory() as tmpdir:
        logger = RetrievalEventLogger("r1", log_dir=tmpdir)
        logger.close()
        logger.log_run_start("nasa", [])
        logger.close()
        assert _read(logger.path) == []


def test_unwritable_dir_does_not_raise():
    with tempfile.TemporaryDirectory() as tmpdir:
        blocker = os.path.join(tmpdir, "file")
        open(blocker, "w").close()
        logger = RetrievalEventLogger("r2", log_dir=os.path.join(blocker, "sub"))
        logger.log_attempt("nasa", "static", True, None, 1.0)
        logger.close()
        assert logger.path == ""
