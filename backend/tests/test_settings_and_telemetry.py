from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

from learnrec.config import Settings, get_settings
from learnrec.logging_config import configure_logging
from learnrec.repositories import repositories_from_settings
from learnrec.telemetry import emit_event, register_listener


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_read_prefixed_environment(monkeypatch, fresh_settings) -> None:
    monkeypatch.setenv("LEARNREC_CACHE_TTL_SECONDS", "120")
    monkeypatch.setenv("LEARNREC_RECOMMENDATION_TIMEOUT", "2.5")
    monkeypatch.setenv("LEARNREC_DATA_BACKEND", "snapshot")

    settings = get_settings()

    assert settings.cache_ttl_seconds == 120
    assert settings.recommendation_timeout_seconds == 2.5
    assert settings.data_backend == "snapshot"
    assert settings.trending_window_days == 30


def test_invalid_settings_raise_runtime_error(monkeypatch, fresh_settings) -> None:
    monkeypatch.setenv("LEARNREC_DATA_BACKEND", "mongo")

    with pytest.raises(RuntimeError, match="Invalid recommendation service configuration"):
        get_settings()


def test_snapshot_backend_requires_a_path() -> None:
    with pytest.raises(RuntimeError):
        repositories_from_settings(Settings(data_backend="snapshot", snapshot_path=None))


def test_snapshot_backend_loads_json(tmp_path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(
        '{"courses": [{"id": "x", "category_id": "cat-data", "tags": ["python"]}],'
        ' "learners": [{"id": "alice", "interests": ["Data Science"]},'
        ' {"id": "instructor-1", "role": "instructor", "interests": ["Web"]}]}',
        encoding="utf-8",
    )

    bundle = repositories_from_settings(Settings(data_backend="snapshot", snapshot_path=str(path)))

    assert [course.id for course in bundle.catalog.find_published()] == ["x"]
    assert bundle.profiles.find_interests("alice") == {"Data Science"}
    assert bundle.profiles.find_interests("instructor-1") == set()


def test_invalid_snapshot_is_reported(tmp_path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text('{"courses": [{"id": "x"}]}', encoding="utf-8")

    with pytest.raises(RuntimeError, match="Invalid catalog snapshot"):
        repositories_from_settings(Settings(data_backend="snapshot", snapshot_path=str(path)))


def test_emit_event_sanitizes_payload(telemetry_events) -> None:
    emit_event(
        "recommendations_generated",
        learner_id="alice",
        at=datetime(2026, 1, 2, tzinfo=timezone.utc),
        sources={"trending", "collaborative"},
    )

    event = telemetry_events[-1]
    assert event.name == "recommendations_generated"
    assert event.payload == {
        "learner_id": "alice",
        "at": "2026-01-02T00:00:00+00:00",
        "sources": ["collaborative", "trending"],
    }


def test_listener_failures_do_not_propagate(telemetry_events) -> None:
    def broken(event) -> None:
        raise RuntimeError("listener down")

    unregister = register_listener(broken)
    emit_event("recommendation_source_degraded", source="trending")
    unregister()
    emit_event("recommendation_source_degraded", source="content_similarity")

    assert [event.payload["source"] for event in telemetry_events] == ["trending", "content_similarity"]


def test_configure_logging_honours_debug_flags(monkeypatch) -> None:
    monkeypatch.setenv("LEARNREC_LOG_LEVEL", "warning")
    monkeypatch.setenv("LEARNREC_DEBUG_SQL", "1")
    sql_logger = logging.getLogger("sqlalchemy.engine")
    previous = sql_logger.level

    try:
        configure_logging()
        assert logging.getLogger().level == logging.WARNING
        assert sql_logger.level == logging.INFO
    finally:
        sql_logger.setLevel(previous)
        monkeypatch.setenv("LEARNREC_LOG_LEVEL", "INFO")
        monkeypatch.delenv("LEARNREC_DEBUG_SQL")
        configure_logging()
