"""Work item, repository and manifest models for release analysis."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

ARTIFACT_LINK_REL = "ArtifactLink"


class ArtifactType(str, Enum):
    """Kind of git object an artifact link points at."""

    COMMIT = "Commit"
    BRANCH = "Branch"
    PULL_REQUEST = "PullRequest"
    UNKNOWN = "Unknown"

    @classmethod
    def from_token(cls, token: str) -> "ArtifactType":
        return _TOKEN_TYPES.get(token, cls.UNKNOWN)


_TOKEN_TYPES = {
    "Commit": ArtifactType.COMMIT,
    "Ref": ArtifactType.BRANCH,
    "Branch": ArtifactType.BRANCH,
    "PullRequestId": ArtifactType.PULL_REQUEST,
    "PullRequest": ArtifactType.PULL_REQUEST,
}


@dataclass(frozen=True, slots=True)
class GitArtifactReference:
    """A decoded ``vstfs:///Git/...`` artifact link."""

    artifact_type: ArtifactType
    type_token: str
    project_id: str
    repository_id: str
    ref: str = ""


class Relation(BaseModel):
    """A typed link from a work item to another entity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rel_type: str = Field(default="", alias="rel")
    url: str = ""
    attributes: dict[str, Any] | None = None

    @field_validator("rel_type", "url", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_artifact_link(self) -> bool:
        return self.rel_type == ARTIFACT_LINK_REL

    @property
    def comment(self) -> str | None:
        if not self.attributes:
            return None
        return self.attributes.get("comment")


class WorkItemRecord(BaseModel):
    """A work item fetched with its relations expanded."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    relations: list[Relation] = Field(default_factory=list)

    @field_validator("relations", mode="before")
    @classmethod
    def _ensure_list(cls, value: Any) -> Any:
        if value is None:
            return []
        return value


class RepositoryInfo(BaseModel):
    """A git repository entry from the project directory."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""
    name: str = ""

    @field_validator("id", "name", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class WorkItemReference(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int


class WiqlResult(BaseModel):
    """Response of a WIQL query: the matching work item ids, in order."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    work_items: list[WorkItemReference] = Field(default_factory=list, alias="workItems")

    @field_validator("work_items", mode="before")
    @classmethod
    def _ensure_list(cls, value: Any) -> Any:
        if value is None:
            return []
        return value

    @property
    def ids(self) -> list[int]:
        return [item.id for item in self.work_items]


class RepoReleaseEntry(BaseModel):
    """Release impact for one repository."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    repository_name: str = Field(alias="repoName")
    repository_id: str = Field(alias="repoId")
    branches: list[str] = Field(default_factory=list)
    work_item_ids: list[int] = Field(default_factory=list, alias="workItemIds")
    artifact_types: list[str] = Field(default_factory=list, alias="artifactTypes")


class ReleaseManifest(BaseModel):
    """Aggregated list of repositories to release for a set of work items."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_work_items: int = Field(alias="totalWorkItems")
    repositories: list[RepoReleaseEntry] = Field(default_factory=list)
    unlinked_work_items: list[int] | None = Field(default=None, alias="workItemsWithoutLinks")

    @property
    def total_repositories(self) -> int:
        return len(self.repositories)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready dict, omitting the unlinked list when empty."""

        payload: dict[str, Any] = {
            "totalWorkItems": self.total_work_items,
            "totalRepositories": self.total_repositories,
            "repositories": [entry.model_dump(by_alias=True) for entry in self.repositories],
        }
        if self.unlinked_work_items:
            payload["workItemsWithoutLinks"] = list(self.unlinked_work_items)
        return payload


__all__ = [
    "ARTIFACT_LINK_REL",
    "ArtifactType",
    "GitArtifactReference",
    "Relation",
    "RepoReleaseEntry",
    "ReleaseManifest",
    "RepositoryInfo",
    "WiqlResult",
    "WorkItemRecord",
    "WorkItemReference",
]
