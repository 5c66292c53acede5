"""Tool registration for the DevOps MCP server."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastmcp import Context, FastMCP

from ..config import DevOpsSettings
from ..release import ReleaseAnalyzer


@dataclass(slots=True)
class ToolHandles:
    analyze_release: Any
    analyzer: ReleaseAnalyzer


def register_tools(
    server: FastMCP,
    *,
    settings: DevOpsSettings,
    analyzer: ReleaseAnalyzer,
) -> ToolHandles:
    """Register the release analysis tools on the server."""

    async def _analyze_release(
        work_item_ids: str | None = None,
        wiql_query: str | None = None,
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Return the repositories to release for the given work items."""

        _emit_log(
            context,
            "info",
            "Analyzing release",
            extra={
                "project": settings.project,
                "source": "wiql" if wiql_query and wiql_query.strip() else "ids",
            },
        )

        payload = await analyzer.analyze_release(work_item_ids, wiql_query)

        if "error" in payload:
            _emit_log(context, "warning", "Release analysis returned an error", extra=payload)
        else:
            _emit_log(
                context,
                "info",
                "Release analysis ready",
                extra={
                    "total_work_items": payload["totalWorkItems"],
                    "total_repositories": payload["totalRepositories"],
                },
            )
        return payload

    tool_analyze = server.tool(
        name="devops_analyze_release",
        description=(
            "Analyze a list of work items (tasks, user stories, bugs) and return the "
            "repositories to release, based on the branches, commits and pull requests "
            "linked to each work item. Provide comma-separated work item ids OR a WIQL "
            "query; when a query is given the ids are ignored."
        ),
    )(_analyze_release)

    return ToolHandles(analyze_release=tool_analyze, analyzer=analyzer)


__all__ = ["register_tools", "ToolHandles"]

logger = logging.getLogger(__name__)


def _emit_log(
    context: Context | None,
    level: str,
    message: str,
    *,
    extra: dict[str, Any] | None = None,
) -> None:
    """Best-effort logging that prefers the MCP context logger when available."""

    payload = extra or {}

    if context is not None:
        ctx_logger = getattr(context, "logger", None)
        if ctx_logger is not None:
            log_method = getattr(ctx_logger, level, None)
            if callable(log_method):
                log_method(message, extra=payload)
                return

    fallback = getattr(logger, level, logger.info)
    fallback(message, extra=payload)
