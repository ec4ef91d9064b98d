"""Read repositories consumed by the recommendation engine."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from ..config import Settings
from .catalog import SqlCourseCatalog
from .interfaces import (
    CatalogFilter,
    CourseCatalog,
    EnrollmentStore,
    LearningPathStore,
    ProfileStore,
    ProgressStore,
)
from .learner_activity import SqlEnrollmentStore, SqlProgressStore
from .learning_paths import SqlLearningPathStore
from .profiles import SqlProfileStore
from .snapshot import (
    CatalogSnapshot,
    SnapshotCourseCatalog,
    SnapshotEnrollmentStore,
    SnapshotLearningPathStore,
    SnapshotProfileStore,
    SnapshotProgressStore,
)


@dataclass(frozen=True)
class RepositoryBundle:
    catalog: CourseCatalog
    progress: ProgressStore
    enrollments: EnrollmentStore
    profiles: ProfileStore
    learning_paths: LearningPathStore


def database_repositories(session_factory: Optional[sessionmaker[Session]] = None) -> RepositoryBundle:
    return RepositoryBundle(
        catalog=SqlCourseCatalog(session_factory),
        progress=SqlProgressStore(session_factory),
        enrollments=SqlEnrollmentStore(session_factory),
        profiles=SqlProfileStore(session_factory),
        learning_paths=SqlLearningPathStore(session_factory),
    )


def snapshot_repositories(snapshot: CatalogSnapshot) -> RepositoryBundle:
    return RepositoryBundle(
        catalog=SnapshotCourseCatalog(snapshot),
        progress=SnapshotProgressStore(snapshot),
        enrollments=SnapshotEnrollmentStore(snapshot),
        profiles=SnapshotProfileStore(snapshot),
        learning_paths=SnapshotLearningPathStore(snapshot),
    )


def repositories_from_settings(settings: Settings) -> RepositoryBundle:
    if settings.data_backend == "snapshot":
        if not settings.snapshot_path:
            raise RuntimeError("LEARNREC_SNAPSHOT_PATH must be set when LEARNREC_DATA_BACKEND=snapshot.")
        return snapshot_repositories(CatalogSnapshot.from_path(Path(settings.snapshot_path)))
    return database_repositories()


__all__ = [
    "CatalogFilter",
    "CatalogSnapshot",
    "CourseCatalog",
    "EnrollmentStore",
    "LearningPathStore",
    "ProfileStore",
    "ProgressStore",
    "RepositoryBundle",
    "database_repositories",
    "repositories_from_settings",
    "snapshot_repositories",
]
