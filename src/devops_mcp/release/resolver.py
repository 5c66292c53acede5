"""Resolution of the work items a release analysis covers."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .analyzer import ReleaseDataSource

DEFAULT_MAX_WORK_ITEMS = 200

# ASCII digits only; int() would also take "1_0" and non-ASCII digits
_INTEGER_TOKEN = re.compile(r"[+-]?[0-9]+")

logger = logging.getLogger(__name__)


class InvalidWorkItemIdError(ValueError):
    """Raised when an explicit work item id is not an integer."""


def parse_work_item_ids(raw: str | None, *, limit: int = DEFAULT_MAX_WORK_ITEMS) -> list[int]:
    """Parse a comma-separated id list, keeping input order and duplicates."""

    if raw is None or not raw.strip():
        return []

    ids: list[int] = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        if not _INTEGER_TOKEN.fullmatch(token):
            raise InvalidWorkItemIdError(f"Invalid work item id '{token}'")
        ids.append(int(token))
    return ids[:limit]


async def resolve_work_item_ids(
    source: "ReleaseDataSource",
    work_item_ids: str | None,
    wiql_query: str | None,
    *,
    limit: int = DEFAULT_MAX_WORK_ITEMS,
) -> list[int]:
    """Return the ids to analyse.

    A non-blank WIQL query takes precedence over the explicit id list.
    Both paths are truncated to ``limit`` entries.
    """

    if wiql_query is not None and wiql_query.strip():
        ids = await source.query_work_item_ids(wiql_query)
        logger.debug("Resolved work items from WIQL", extra={"count": len(ids)})
        return list(ids)[:limit]

    return parse_work_item_ids(work_item_ids, limit=limit)


__all__ = [
    "DEFAULT_MAX_WORK_ITEMS",
    "InvalidWorkItemIdError",
    "parse_work_item_ids",
    "resolve_work_item_ids",
]
