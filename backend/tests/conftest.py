from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List

import pytest

from learnrec.models import CourseSummary
from learnrec.telemetry import TelemetryEvent, clear_listeners, register_listener

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_course() -> Callable[..., CourseSummary]:
    def _make(
        course_id: str,
        *,
        category_id: str = "cat-data",
        category_name: str = "Data Science",
        level: str = "beginner",
        tags=(),
        rating: float = 0.0,
        **extra,
    ) -> CourseSummary:
        return CourseSummary(
            id=course_id,
            title=extra.pop("title", course_id.replace("-", " ").title()),
            category_id=category_id,
            category_name=category_name,
            level=level,
            tags=list(tags),
            rating=rating,
            **extra,
        )

    return _make


@pytest.fixture
def telemetry_events() -> List[TelemetryEvent]:
    captured: List[TelemetryEvent] = []
    unregister = register_listener(captured.append)
    yield captured
    unregister()


@pytest.fixture(autouse=True)
def _reset_telemetry_listeners():
    yield
    clear_listeners()
