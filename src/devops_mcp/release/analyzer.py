"""Release impact analysis: which repositories a set of work items touches."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from ..client.errors import DevOpsRequestError
from .aggregator import aggregate_release
from .fetcher import DEFAULT_FETCH_CONCURRENCY, fetch_repo_map, fetch_work_items
from .models import ReleaseManifest, RepositoryInfo, WorkItemRecord
from .resolver import DEFAULT_MAX_WORK_ITEMS, resolve_work_item_ids

DEFAULT_ANALYSIS_TIMEOUT = 60.0
NO_WORK_ITEMS_MESSAGE = "No work items found"

logger = logging.getLogger(__name__)


class ReleaseDataSource(Protocol):
    """Protocol for the Azure DevOps reads release analysis depends on."""

    async def query_work_item_ids(self, query: str) -> list[int]:
        ...

    async def get_work_item(self, work_item_id: int) -> WorkItemRecord:
        ...

    async def list_repositories(self) -> list[RepositoryInfo]:
        ...


class ReleaseAnalysisError(RuntimeError):
    """Base class for release analysis failures."""


class NoWorkItemsFoundError(ReleaseAnalysisError):
    """Raised when neither ids nor a query yield any work item."""


class ReleaseAnalyzer:
    """Resolve, fetch and aggregate work items into a release manifest."""

    def __init__(
        self,
        source: ReleaseDataSource,
        *,
        max_work_items: int = DEFAULT_MAX_WORK_ITEMS,
        concurrency: int = DEFAULT_FETCH_CONCURRENCY,
        timeout: float = DEFAULT_ANALYSIS_TIMEOUT,
    ) -> None:
        self._source = source
        self.max_work_items = max_work_items
        self.concurrency = concurrency
        self.timeout = timeout

    async def analyze(
        self,
        work_item_ids: str | None = None,
        wiql_query: str | None = None,
    ) -> ReleaseManifest:
        """Build the manifest, raising on resolution failures."""

        ids = await resolve_work_item_ids(
            self._source, work_item_ids, wiql_query, limit=self.max_work_items
        )
        if not ids:
            raise NoWorkItemsFoundError(NO_WORK_ITEMS_MESSAGE)

        records, repo_map = await asyncio.gather(
            fetch_work_items(self._source, ids, concurrency=self.concurrency),
            fetch_repo_map(self._source),
        )
        manifest = aggregate_release(ids, records, repo_map)

        logger.info(
            "Release analysis complete",
            extra={
                "resolved": len(ids),
                "fetched": len(records),
                "repositories": manifest.total_repositories,
                "unlinked": len(manifest.unlinked_work_items or []),
            },
        )
        return manifest

    async def analyze_release(
        self,
        work_item_ids: str | None = None,
        wiql_query: str | None = None,
    ) -> dict[str, Any]:
        """Run an analysis under the overall timeout and return a JSON payload.

        Failures come back as a single ``error`` key instead of raising.
        """

        try:
            manifest = await asyncio.wait_for(
                self.analyze(work_item_ids, wiql_query), timeout=self.timeout
            )
        except NoWorkItemsFoundError as exc:
            return {"error": str(exc)}
        except asyncio.TimeoutError:
            logger.error("Release analysis timed out", extra={"timeout": self.timeout})
            return {"error": f"Release analysis failed: timed out after {self.timeout:g}s"}
        except (ReleaseAnalysisError, DevOpsRequestError, ValueError) as exc:
            logger.error("Release analysis failed", extra={"error": str(exc)})
            return {"error": f"Release analysis failed: {exc}"}
        except Exception as exc:
            logger.exception("Unexpected release analysis failure")
            return {"error": f"Release analysis failed: {exc}"}

        return manifest.to_payload()


__all__ = [
    "DEFAULT_ANALYSIS_TIMEOUT",
    "NO_WORK_ITEMS_MESSAGE",
    "NoWorkItemsFoundError",
    "ReleaseAnalysisError",
    "ReleaseAnalyzer",
    "ReleaseDataSource",
]
