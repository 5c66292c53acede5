"""Concurrent retrieval of work items and the repository directory."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Iterable

from ..client.errors import DevOpsRequestError
from .models import WorkItemRecord

if TYPE_CHECKING:
    from .analyzer import ReleaseDataSource

DEFAULT_FETCH_CONCURRENCY = 5

logger = logging.getLogger(__name__)


async def fetch_work_items(
    source: "ReleaseDataSource",
    ids: Iterable[int],
    *,
    concurrency: int = DEFAULT_FETCH_CONCURRENCY,
) -> list[WorkItemRecord]:
    """Fetch every work item with relations, at most ``concurrency`` at a time.

    Items that fail to load are logged and left out of the result. Nothing is
    retried, and the result order is not guaranteed to match ``ids``.
    """

    semaphore = asyncio.Semaphore(concurrency)

    async def _fetch(work_item_id: int) -> WorkItemRecord | None:
        async with semaphore:
            try:
                return await source.get_work_item(work_item_id)
            except DevOpsRequestError as exc:
                logger.warning(
                    "Skipping work item that could not be fetched",
                    extra={"work_item_id": work_item_id, "error": str(exc)},
                )
                return None
            except Exception as exc:
                logger.warning(
                    "Skipping work item after unexpected fetch error",
                    extra={"work_item_id": work_item_id, "error": repr(exc)},
                )
                return None

    results = await asyncio.gather(*(_fetch(work_item_id) for work_item_id in ids))
    return [record for record in results if record is not None]


async def fetch_repo_map(source: "ReleaseDataSource") -> dict[str, str]:
    """Return repository id to name, or an empty map when the directory is unavailable."""

    try:
        repositories = await source.list_repositories()
    except DevOpsRequestError as exc:
        logger.warning(
            "Repository directory unavailable; falling back to repository ids",
            extra={"error": str(exc)},
        )
        return {}
    except Exception as exc:
        logger.warning(
            "Repository directory failed unexpectedly; falling back to repository ids",
            extra={"error": repr(exc)},
        )
        return {}

    return {repo.id: repo.name for repo in repositories if repo.id}


__all__ = ["DEFAULT_FETCH_CONCURRENCY", "fetch_repo_map", "fetch_work_items"]
