"""Tests for PostRetriever — cascade order, skipping and aggregation."""
from unittest.mock import MagicMock

from insta_latest.config import TargetConfig
from insta_latest.engine.orchestrator import EXHAUSTED, PostRetriever
from insta_latest.models import PostRecord, RetrievalOutcome


class FakeStrategy:
    def __init__(self, name, outcome=None, requires_credential=False, on_run=None):
        self.name = name
        self.requires_credential = requires_credential
        self._outcome = outcome or RetrievalOutcome.failure(f"{name} broke")
        self._on_run = on_run
        self.calls = []

    def run(self, target):
        self.calls.append(target.identifier)
        if self._on_run:
            self._on_run()
        return self._outcome


def _ok(caption="fresh post"):
    return RetrievalOutcome.success(PostRecord(caption=caption, image_url="http://img"))


def test_first_success_short_circuits():
    browser = FakeStrategy("browser", _ok())
    static = FakeStrategy("static", _ok("other"))
    api = FakeStrategy("api", _ok("third"), requires_credential=True)
    retriever = PostRetriever(TargetConfig("nasa", "tok"), strategies=[browser, static, api])

    outcome = retriever.get_latest_post()

    assert outcome.ok
    assert outcome.post.caption == "fresh post"
    assert len(browser.calls) == 1
    assert static.calls == []
    assert api.calls == []


def test_falls_through_to_second_strategy():
    browser = FakeStrategy("browser")
    static = FakeStrategy("static", _ok())
    api = FakeStrategy("api", _ok("api"), requires_credential=True)
    retriever = PostRetriever(TargetConfig("nasa", "tok"), strategies=[browser, static, api])

    outcome = retriever.get_latest_post()

    assert outcome.post.caption == "fresh post"
    assert len(browser.calls) == 1
    assert len(static.calls) == 1
    assert api.calls == []


def test_api_strategy_skipped_without_credential():
    browser = FakeStrategy("browser")
    static = FakeStrategy("static")
    api = FakeStrategy("api", _ok(), requires_credential=True)
    retriever = PostRetriever(TargetConfig("nasa"), strategies=[browser, static, api])

    outcome = retriever.get_latest_post()

    assert not outcome.ok
    assert api.calls == []
    assert outcome.error.startswith(EXHAUSTED)
    assert "browser: browser broke" in outcome.error
    assert "static: static broke" in outcome.error
    assert "api:" not in outcome.error


def test_all_failing_aggregates_every_reason_in_order():
    strategies = [
        FakeStrategy("browser"),
        FakeStrategy("static"),
        FakeStrategy("api", requires_credential=True),
    ]
    retriever = PostRetriever(TargetConfig("nasa", "tok"), strategies=strategies)

    outcome = retriever.get_latest_post()

    assert outcome.error == (
        "all retrieval methods exhausted: browser: browser broke; "
        "static: static broke; api: api broke"
    )
    assert all(len(s.calls) == 1 for s in strategies)


def test_no_runnable_strategies_still_fails_cleanly():
    api = FakeStrategy("api", _ok(), requires_credential=True)
    outcome = PostRetriever(TargetConfig("nasa"), strategies=[api]).get_latest_post()
    assert outcome.error == EXHAUSTED


def test_raising_strategy_is_contained():
    broken = MagicMock()
    broken.name = "browser"
    broken.requires_credential = False
    broken.run.side_effect = RuntimeError("crashed")
    static = FakeStrategy("static", _ok())

    outcome = PostRetriever(TargetConfig("nasa"), strategies=[broken, static]).get_latest_post()

    assert outcome.ok
    assert len(static.calls) == 1


def test_non_outcome_result_counts_as_failure():
    weird = FakeStrategy("browser")
    weird._outcome = {"caption": "not an outcome"}
    outcome = PostRetriever(TargetConfig("nasa"), strategies=[weird]).get_latest_post()
    assert "invalid result type dict" in outcome.error


def test_set_target_mid_call_only_affects_later_calls():
    holder = {}
    browser = FakeStrategy("browser", on_run=lambda: holder["r"].set_target("changed"))
    static = FakeStrategy("static")
    retriever = PostRetriever(TargetConfig("original"), strategies=[browser, static])
    holder["r"] = retriever

    retriever.get_latest_post()

    # both strategies of the in-flight call saw the snapshot
    assert browser.calls == ["original"]
    assert static.calls == ["original"]
    assert retriever.target.identifier == "changed"

    retriever.get_latest_post()
    assert browser.calls[-1] == "changed"


def test_set_target_last_writer_wins():
    static = FakeStrategy("static", _ok())
    retriever = PostRetriever(strategies=[static])
    assert retriever.target.identifier == "bbcnews"
    retriever.set_target("first")
    retriever.set_target("second")
    retriever.get_latest_post()
    assert static.calls == ["second"]


def test_set_credential_enables_api_strategy():
    api = FakeStrategy("api", _ok(), requires_credential=True)
    retriever = PostRetriever(TargetConfig("nasa"), strategies=[api])
    assert not retriever.get_latest_post().ok
    retriever.set_credential("tok")
    assert retriever.get_latest_post().ok
    assert len(api.calls) == 1


def test_target_property_is_a_copy():
    retriever = PostRetriever(TargetConfig("nasa"), strategies=[])
    retriever.target.identifier = "mutated"
    assert retriever.target.identifier == "nasa"


def test_event_logger_receives_attempts_and_skips():
    events = MagicMock()
    strategies = [
        FakeStrategy("browser"),
        FakeStrategy("static", _ok()),
        FakeStrategy("api", requires_credential=True),
    ]
    retriever = PostRetriever(TargetConfig("nasa"), strategies=strategies, event_logger=events)

    retriever.get_latest_post()

    events.log_run_start.assert_called_once_with("nasa", ["browser", "static", "api"])
    assert events.log_attempt.call_count == 2
    first = events.log_attempt.call_args_list[0].args
    assert first[:4] == ("nasa", "browser", False, "browser broke")
    events.log_skip.assert_not_called()  # success came before the api strategy
    end = events.log_run_end.call_args.args
    assert end[:4] == ("nasa", True, "static", 2)


def test_event_logger_records_skip():
    events = MagicMock()
    api = FakeStrategy("api", requires_credential=True)
    PostRetriever(TargetConfig("nasa"), strategies=[api], event_logger=events).get_latest_post()
    events.log_skip.assert_called_once_with("nasa", "api", "no_credential")


def test_default_strategy_order():
    retriever = PostRetriever(TargetConfig("nasa"))
    assert retriever.strategy_names == ["browser", "static", "api"]


def test_caller_target_is_not_mutated():
    original = TargetConfig("nasa", "tok")
    retriever = PostRetriever(original, strategies=[])
    retriever.set_target("natgeo")
    retriever.set_credential(None)
    assert original.identifier == "nasa"
    assert original.credential == "tok"
    assert retriever.target.identifier == "natgeo"
