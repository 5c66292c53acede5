"""Fold fetched work items into a per-repository release manifest."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from .links import parse_artifact_link
from .models import ReleaseManifest, RepoReleaseEntry, WorkItemRecord


@dataclass(slots=True)
class _RepoAccumulator:
    repository_id: str
    repository_name: str
    # dicts as insertion-ordered sets
    branches: dict[str, None] = field(default_factory=dict)
    work_item_ids: dict[int, None] = field(default_factory=dict)
    artifact_types: dict[str, None] = field(default_factory=dict)

    def freeze(self) -> RepoReleaseEntry:
        return RepoReleaseEntry(
            repository_id=self.repository_id,
            repository_name=self.repository_name,
            branches=list(self.branches),
            work_item_ids=list(self.work_item_ids),
            artifact_types=list(self.artifact_types),
        )


def aggregate_release(
    resolved_ids: Sequence[int],
    records: Iterable[WorkItemRecord],
    repo_map: Mapping[str, str],
) -> ReleaseManifest:
    """Group the git artifacts linked from ``records`` by repository.

    Repositories keep the order in which they were first linked. A work item
    with no parseable git artifact link is reported as unlinked.
    ``total_work_items`` counts ``resolved_ids``, so items that failed to
    fetch are counted but are neither linked nor unlinked.
    """

    repos: dict[str, _RepoAccumulator] = {}
    unlinked: list[int] = []

    for record in records:
        linked = False
        for relation in record.relations:
            if not relation.is_artifact_link:
                continue
            artifact = parse_artifact_link(relation.url)
            if artifact is None:
                continue

            linked = True
            entry = repos.get(artifact.repository_id)
            if entry is None:
                entry = repos[artifact.repository_id] = _RepoAccumulator(
                    repository_id=artifact.repository_id,
                    repository_name=repo_map.get(artifact.repository_id) or artifact.repository_id,
                )
            entry.work_item_ids[record.id] = None
            entry.artifact_types[artifact.type_token] = None
            if artifact.ref:
                entry.branches[artifact.ref] = None

        if not linked:
            unlinked.append(record.id)

    return ReleaseManifest(
        total_work_items=len(resolved_ids),
        repositories=[entry.freeze() for entry in repos.values()],
        unlinked_work_items=unlinked or None,
    )


__all__ = ["aggregate_release"]
