from __future__ import annotations

import asyncio
from typing import Any

from devops_mcp.config import DevOpsSettings
from devops_mcp.release import ReleaseAnalyzer
from devops_mcp.release.links import build_artifact_uri
from devops_mcp.release.models import RepositoryInfo, WorkItemRecord
from devops_mcp.tools import register_tools


class StubTool:
    def __init__(self, fn, name, description=None):
        self.fn = fn
        self.name = name
        self.description = description


class StubServer:
    def __init__(self) -> None:
        self._tools: dict[str, StubTool] = {}

    def tool(self, *args, **kwargs):
        provided_name = None
        if args and isinstance(args[0], str):
            provided_name = args[0]
        provided_name = kwargs.get("name", provided_name)

        def decorator(fn):
            tool_name = provided_name or fn.__name__
            tool = StubTool(fn, tool_name, kwargs.get("description"))
            self._tools[tool_name] = tool
            return tool

        return decorator


class StubLogger:
    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def info(self, message: str, extra: dict[str, Any] | None = None) -> None:
        self.records.append(("info", message, extra or {}))

    def warning(self, message: str, extra: dict[str, Any] | None = None) -> None:
        self.records.append(("warning", message, extra or {}))


class StubContext:
    def __init__(self) -> None:
        self.logger = StubLogger()


class StubDevOps:
    def __init__(self, work_items: dict[int, WorkItemRecord]) -> None:
        self._work_items = work_items

    async def query_work_item_ids(self, query: str) -> list[int]:
        return list(self._work_items)

    async def get_work_item(self, work_item_id: int) -> WorkItemRecord:
        return self._work_items[work_item_id]

    async def list_repositories(self) -> list[RepositoryInfo]:
        return [RepositoryInfo(id="R1", name="orders-service")]


def _register(work_items: dict[int, WorkItemRecord]):
    server = StubServer()
    settings = DevOpsSettings(organization="contoso", project="shop", pat="pat")
    handles = register_tools(
        server,  # type: ignore[arg-type]
        settings=settings,
        analyzer=ReleaseAnalyzer(StubDevOps(work_items)),  # type: ignore[arg-type]
    )
    return server, handles


def _record(work_item_id: int, *repo_ids: str) -> WorkItemRecord:
    return WorkItemRecord.model_validate(
        {
            "id": work_item_id,
            "relations": [
                {"rel": "ArtifactLink", "url": build_artifact_uri("Commit", "shop", repo_id, "abc")}
                for repo_id in repo_ids
            ],
        }
    )


def test_analyze_release_tool_is_registered() -> None:
    server, handles = _register({})

    assert "devops_analyze_release" in server._tools
    assert handles.analyze_release is server._tools["devops_analyze_release"]
    assert "WIQL" in handles.analyze_release.description


def test_analyze_release_tool_returns_manifest_and_logs_to_context() -> None:
    _, handles = _register({1: _record(1, "R1"), 2: _record(2)})
    context = StubContext()

    payload = asyncio.run(handles.analyze_release.fn(work_item_ids="1, 2", context=context))

    assert payload["totalWorkItems"] == 2
    assert payload["repositories"][0]["repoName"] == "orders-service"
    assert payload["workItemsWithoutLinks"] == [2]
    levels = [record[0] for record in context.logger.records]
    assert levels == ["info", "info"]
    assert context.logger.records[0][2]["source"] == "ids"
    assert context.logger.records[-1][2]["total_repositories"] == 1


def test_analyze_release_tool_uses_wiql_when_given() -> None:
    _, handles = _register({4: _record(4, "R1")})
    context = StubContext()

    payload = asyncio.run(
        handles.analyze_release.fn(work_item_ids="99", wiql_query="SELECT [System.Id] FROM WorkItems", context=context)
    )

    assert payload["repositories"][0]["workItemIds"] == [4]
    assert context.logger.records[0][2]["source"] == "wiql"


def test_analyze_release_tool_reports_errors() -> None:
    _, handles = _register({})
    context = StubContext()

    payload = asyncio.run(handles.analyze_release.fn(context=context))

    assert payload == {"error": "No work items found"}
    assert context.logger.records[-1][0] == "warning"


def test_analyze_release_tool_without_context_uses_module_logger(caplog) -> None:
    _, handles = _register({1: _record(1, "R1")})

    with caplog.at_level("INFO", logger="devops_mcp.tools"):
        asyncio.run(handles.analyze_release.fn(work_item_ids="1"))

    assert any(record.message == "Release analysis ready" for record in caplog.records)
