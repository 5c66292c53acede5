"""Release impact analysis for Azure DevOps work items."""

from .models import (
    ArtifactType,
    GitArtifactReference,
    Relation,
    ReleaseManifest,
    RepoReleaseEntry,
    RepositoryInfo,
    WorkItemRecord,
)
from .links import build_artifact_uri, parse_artifact_link
from .resolver import InvalidWorkItemIdError, resolve_work_item_ids
from .fetcher import fetch_repo_map, fetch_work_items
from .aggregator import aggregate_release
from .analyzer import (
    NoWorkItemsFoundError,
    ReleaseAnalysisError,
    ReleaseAnalyzer,
    ReleaseDataSource,
)

__all__ = [
    "ArtifactType",
    "GitArtifactReference",
    "InvalidWorkItemIdError",
    "NoWorkItemsFoundError",
    "Relation",
    "ReleaseAnalysisError",
    "ReleaseAnalyzer",
    "ReleaseDataSource",
    "ReleaseManifest",
    "RepoReleaseEntry",
    "RepositoryInfo",
    "WorkItemRecord",
    "aggregate_release",
    "build_artifact_uri",
    "fetch_repo_map",
    "fetch_work_items",
    "parse_artifact_link",
    "resolve_work_item_ids",
]
