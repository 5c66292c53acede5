from __future__ import annotations

import asyncio
import json

import pytest

from devops_mcp.client import DevOpsClient
from devops_mcp.config import DevOpsSettings
from devops_mcp.release import ReleaseAnalyzer
from devops_mcp.release.models import RepositoryInfo, WorkItemRecord
from devops_mcp.server import client_lifespan, configure_logging, create_server


class StubDevOps:
    async def query_work_item_ids(self, query: str) -> list[int]:
        return []

    async def get_work_item(self, work_item_id: int) -> WorkItemRecord:
        return WorkItemRecord(id=work_item_id)

    async def list_repositories(self) -> list[RepositoryInfo]:
        return []


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in ("MCP_DEVOPS_ORGANIZATION", "MCP_DEVOPS_PROJECT", "MCP_DEVOPS_PAT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_injected_client_enables_tools() -> None:
    settings = DevOpsSettings(organization="contoso", project="shop", max_work_items=50)
    stub = StubDevOps()

    server = create_server(settings, client=stub)

    assert server.tool_handles is not None
    assert isinstance(server.release_analyzer, ReleaseAnalyzer)
    assert server.release_analyzer.max_work_items == 50
    assert server.devops_client is stub

    status = json.loads(server.status_resource())
    assert status["tools"]["enabled"] is True
    assert status["tools"]["names"] == ["devops_analyze_release"]
    assert status["devops"]["client_injected"] is True
    assert status["release_analysis"]["max_work_items"] == 50


def test_configured_settings_build_rest_client() -> None:
    settings = DevOpsSettings(organization="contoso", project="shop", pat="secret")

    server = create_server(settings)

    assert isinstance(server.devops_client, DevOpsClient)
    assert server.devops_client.base_url == "https://dev.azure.com/contoso/shop"
    assert server.tool_handles is not None


def test_missing_credentials_disable_tools() -> None:
    settings = DevOpsSettings(organization="contoso", project="shop")

    server = create_server(settings)

    assert server.devops_client is None
    assert server.tool_handles is None
    status = json.loads(server.status_resource())
    assert status["tools"]["enabled"] is False
    assert status["devops"]["configured"] is False


def test_status_never_exposes_pat() -> None:
    settings = DevOpsSettings(organization="contoso", project="shop", pat="very-secret-token")

    server = create_server(settings, client=StubDevOps())

    assert "very-secret-token" not in server.status_resource()


def test_configure_logging_accepts_level() -> None:
    configure_logging("DEBUG")


class ClosableStub(StubDevOps):
    def __init__(self) -> None:
        self.closed = 0

    async def aclose(self) -> None:
        self.closed += 1


def test_lifespan_closes_client_on_shutdown() -> None:
    stub = ClosableStub()
    lifespan = client_lifespan(stub)  # type: ignore[arg-type]

    async def scenario() -> None:
        async with lifespan(None) as state:  # type: ignore[arg-type]
            assert state == {}
            assert stub.closed == 0

    asyncio.run(scenario())

    assert stub.closed == 1


def test_server_lifespan_closes_owned_rest_client() -> None:
    settings = DevOpsSettings(organization="contoso", project="shop", pat="secret")
    server = create_server(settings)

    async def scenario() -> None:
        async with server.client_lifespan(server):
            pass

    asyncio.run(scenario())

    assert server.devops_client._http.is_closed


def test_server_lifespan_leaves_injected_client_open() -> None:
    stub = ClosableStub()
    server = create_server(DevOpsSettings(organization="contoso", project="shop"), client=stub)

    async def scenario() -> None:
        async with server.client_lifespan(server):
            pass

    asyncio.run(scenario())

    assert stub.closed == 0
