import json
import logging

from eod_assistant.core.logging_config import setup_logging
from eod_assistant.core.observability import init_sentry
from eod_assistant.core.observability import scrub_credentials
from eod_assistant.settings import Settings


def test_init_sentry_skips_when_dsn_missing(monkeypatch) -> None:
    """Sentry initialization is skipped when DSN is absent."""

    calls: list[dict[str, object]] = []

    def fake_init(**kwargs):
        calls.append(kwargs)

    monkeypatch.setattr("eod_assistant.core.observability.sentry_sdk.init", fake_init)

    settings = Settings(sentry_dsn=None)
    init_sentry(settings)

    assert calls == []


def test_init_sentry_initializes_sdk_with_settings(monkeypatch) -> None:
    """Sentry SDK is initialized with configured runtime settings."""

    calls: list[dict[str, object]] = []

    def fake_init(**kwargs):
        calls.append(kwargs)

    monkeypatch.setattr("eod_assistant.core.observability.sentry_sdk.init", fake_init)

    settings = Settings(
        sentry_dsn="https://examplePublicKey@o0.ingest.sentry.io/0",
        environment="production",
        release="abc123",
        sentry_traces_sample_rate=0.2,
    )
    init_sentry(settings)

    assert len(calls) == 1
    assert calls[0]["dsn"] == "https://examplePublicKey@o0.ingest.sentry.io/0"
    assert calls[0]["environment"] == "production"
    assert calls[0]["release"] == "abc123"
    assert calls[0]["traces_sample_rate"] == 0.2
    assert calls[0]["send_default_pii"] is False
    assert calls[0]["before_send"] is scrub_credentials


def test_scrub_credentials_filters_authorization_header() -> None:
    event = {
        "request": {
            "headers": {"Authorization": "Bearer ghp_secret", "Accept": "*/*"}
        }
    }

    scrubbed = scrub_credentials(event, {})

    assert scrubbed["request"]["headers"] == {
        "Authorization": "[Filtered]",
        "Accept": "*/*",
    }


def test_setup_logging_emits_json(capsys) -> None:
    root_logger = logging.getLogger()
    saved_handlers = root_logger.handlers[:]
    try:
        setup_logging("INFO")
        logging.getLogger("eod_assistant.test").warning(
            "GitHub request failed",
            extra={"path": "/repos/octocat/hello/branches"},
        )
    finally:
        root_logger.handlers[:] = saved_handlers

    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["message"] == "GitHub request failed"
    assert record["level"] == "WARNING"
    assert record["logger"] == "eod_assistant.test"
    assert record["path"] == "/repos/octocat/hello/branches"
