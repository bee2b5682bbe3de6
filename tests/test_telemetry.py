from __future__ import annotations

import pytest

from markdown_engine.runtime import telemetry


def test_env_flag_and_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MARKDOWN_ENGINE_LOG_LEVEL", "debug")
    monkeypatch.setenv("MARKDOWN_ENGINE_NO_COLOR", "TRUE")
    monkeypatch.delenv("MARKDOWN_ENGINE_LOG_FILE", raising=False)
    settings = telemetry.LogSettings.from_env()
    assert settings.level == "DEBUG"
    assert settings.color is False
    assert settings.log_file is None
    assert telemetry.env_flag("MISSING_FLAG", True) is True


def test_configure_rejects_conflicting_arguments() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="development", settings=telemetry.LogSettings())
    with pytest.raises(ValueError):
        telemetry.configure(preset="chatty")


def test_span_and_events_run_under_development_preset() -> None:
    telemetry.configure(preset="development")
    try:
        with telemetry.span(
            "test::span", component="tests", metadata={"case": "span"}
        ) as handle:
            handle.add_metadata("answer", 42)
            telemetry.record_event("test.event", level="debug", data={"x": 1})
        assert handle.metadata["answer"] == "42"

        with pytest.raises(RuntimeError):
            with telemetry.span("test::failing"):
                raise RuntimeError("boom")
    finally:
        telemetry.configure()
