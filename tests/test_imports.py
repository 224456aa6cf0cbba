"""Smoke tests: public modules are importable."""


def test_top_level_imports():
    from insta_latest import (
        PostRetriever,
        TargetConfig,
        EngineSettings,
        PostRecord,
        RetrievalOutcome,
        CaptionStatus,
        Strategy,
        RetrievalSignal,
        RetrievalError,
    )
    assert callable(PostRetriever)
    assert callable(TargetConfig)
    assert callable(EngineSettings)
    assert callable(PostRecord)
    assert callable(RetrievalOutcome)
    assert CaptionStatus.UNAVAILABLE.value == "unavailable"
    assert RetrievalSignal.TRANSIENT.value == "transient"
    assert issubclass(RetrievalError, Exception)
    assert Strategy is not None


def test_strategy_imports():
    from insta_latest.strategies import BrowserStrategy, StaticStrategy, OfficialApiStrategy
    assert BrowserStrategy.name == "browser"
    assert StaticStrategy.name == "static"
    assert OfficialApiStrategy.name == "api"
    assert OfficialApiStrategy.requires_credential is True


def test_browser_and_human_imports():
    from insta_latest.browser import (
        find_system_chrome,
        open_browser,
        build_stealth_shim,
        install_stealth,
        build_user_agent,
        navigation_headers,
    )
    from insta_latest.human import settle, human_click, jittered_ms
    assert callable(find_system_chrome)
    assert callable(open_browser)
    assert callable(build_stealth_shim)
    assert callable(install_stealth)
    assert callable(build_user_agent)
    assert callable(navigation_headers)
    assert callable(settle)
    assert callable(human_click)
    assert callable(jittered_ms)


def test_telemetry_imports():
    from insta_latest.telemetry import RetrievalEventLogger
    assert callable(RetrievalEventLogger)
