"""Tests for the diagnostics sink — fixed names, overwrite, never raise."""
import json
import os
import tempfile
from unittest.mock import MagicMock, PropertyMock

from insta_latest.engine.diagnostics import (
    DiagnosticsSink,
    DiagnosticsVerbosity,
    FailureBundle,
    describe_page,
)


def test_off_writes_nothing():
    with tempfile.TemporaryDirectory() as tmpdir:
        sink = DiagnosticsSink(tmpdir, DiagnosticsVerbosity.OFF)
        page = MagicMock()
        assert sink.save_markup("instagram-profile", "<html></html>") == ""
        assert sink.capture_page(page, "instagram-profile") == ""
        assert sink.save_failure(FailureBundle("static", "nasa", "boom")) == ""
        assert os.listdir(tmpdir) == []
        page.screenshot.assert_not_called()


def test_markup_overwritten_in_place():
    with tempfile.TemporaryDirectory() as tmpdir:
        sink = DiagnosticsSink(tmpdir, DiagnosticsVerbosity.STANDARD)
        sink.save_markup("instagram-profile", "<html>first</html>")
        path = sink.save_markup("instagram-profile", "<html>second</html>")
        assert os.listdir(tmpdir) == ["instagram-profile.html"]
        with open(path, encoding="utf-8") as f:
            assert f.read() == "<html>second</html>"


def test_screenshots_only_at_full():
    with tempfile.TemporaryDirectory() as tmpdir:
        page = MagicMock()
        DiagnosticsSink(tmpdir, DiagnosticsVerbosity.STANDARD).capture_page(page, "instagram-post")
        page.screenshot.assert_not_called()

        path = DiagnosticsSink(tmpdir, DiagnosticsVerbosity.FULL).capture_page(page, "instagram-post")
        assert path == os.path.join(tmpdir, "instagram-post.png")
        page.screenshot.assert_called_once_with(path=path, full_page=True)


def test_failure_bundle_json():
    with tempfile.TemporaryDirectory() as tmpdir:
        sink = DiagnosticsSink(tmpdir, DiagnosticsVerbosity.STANDARD)
        path = sink.save_failure(FailureBundle(
            strategy="browser", identifier="nasa", reason="No post links",
            signal="structural", page_url="https://www.instagram.com/nasa/",
        ))
        assert os.path.basename(path) == "browser-failure.json"
        with open(path) as f:
            data = json.load(f)
        assert data["reason"] == "No post links"
        assert data["signal"] == "structural"
        assert "timestamp" in data


def test_never_raises_on_write_errors():
    page = MagicMock()
    page.screenshot.side_effect = RuntimeError("page crashed")
    with tempfile.TemporaryDirectory() as tmpdir:
        sink = DiagnosticsSink(tmpdir, DiagnosticsVerbosity.FULL)
        assert sink.capture_page(page, "instagram-profile") == ""
        blocker = os.path.join(tmpdir, "file")
        open(blocker, "w").close()
        # directory path is a file: makedirs fails
        bad = DiagnosticsSink(os.path.join(blocker, "sub"), DiagnosticsVerbosity.FULL)
        assert bad.save_markup("x", "<html></html>") == ""
        assert bad.save_failure(FailureBundle("static", "nasa", "boom")) == ""


def test_unknown_verbosity_disables():
    sink = DiagnosticsSink("logs", "loud")
    assert sink.verbosity == DiagnosticsVerbosity.OFF
    assert not sink.enabled


def test_describe_page_tolerates_errors():
    page = MagicMock()
    type(page).url = PropertyMock(return_value="https://www.instagram.com/p/abc/")
    page.title.side_effect = RuntimeError("closed")
    assert describe_page(page) == {"page_url": "https://www.instagram.com/p/abc/", "page_title": ""}
