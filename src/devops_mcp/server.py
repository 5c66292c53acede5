"""FastMCP server bootstrap for the DevOps release tools."""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Optional

from fastmcp import FastMCP

from . import __version__
from .client import DevOpsClient
from .config import DevOpsSettings, get_settings
from .release import ReleaseAnalyzer, ReleaseDataSource
from .tools import register_tools


def configure_logging(level: str) -> None:
    """Configure root logging for the DevOps MCP server."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def client_lifespan(client: DevOpsClient | None) -> Callable[[FastMCP], Any]:
    """Return a server lifespan that closes ``client`` on shutdown."""

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        try:
            yield {}
        finally:
            if client is not None:
                await client.aclose()
                logging.getLogger(__name__).debug("Closed Azure DevOps client")

    return lifespan


def create_server(
    settings: Optional[DevOpsSettings] = None,
    client: ReleaseDataSource | None = None,
) -> FastMCP:
    """Instantiate the FastMCP server, registering tools when credentials allow."""

    settings = settings or get_settings()

    client_provided = client is not None
    owned_client: DevOpsClient | None = None
    if not client_provided and settings.is_configured:
        client = owned_client = DevOpsClient(settings)
    lifespan = client_lifespan(owned_client)

    analyzer: ReleaseAnalyzer | None = None
    handles = None

    server = FastMCP(
        name="DevOps Release MCP",
        version=__version__,
        instructions=(
            "Azure DevOps release impact analysis. Use devops_analyze_release with "
            "work item ids or a WIQL query to find the repositories, branches and "
            "artifact types that must be released."
        ),
        lifespan=lifespan,
    )

    if client is not None:
        analyzer = ReleaseAnalyzer(
            client,
            max_work_items=settings.max_work_items,
            concurrency=settings.fetch_concurrency,
            timeout=settings.release_timeout,
        )
        handles = register_tools(server, settings=settings, analyzer=analyzer)
    else:
        logging.getLogger(__name__).warning(
            "Azure DevOps credentials missing; release tools are disabled",
            extra={
                "organization": settings.organization,
                "project": settings.project,
                "pat_set": bool(settings.pat),
            },
        )

    def status_resource() -> str:
        """Return a JSON string summarizing configuration and analyzer limits."""

        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "server_version": __version__,
            "log_level": settings.log_level,
            "devops": {
                "organization": settings.organization,
                "project": settings.project,
                "team": settings.team,
                "api_version": settings.api_version,
                "configured": settings.is_configured,
                "client_injected": client_provided,
            },
            "tools": {
                "enabled": handles is not None,
                "names": ["devops_analyze_release"] if handles is not None else [],
            },
            "release_analysis": {
                "max_work_items": settings.max_work_items,
                "fetch_concurrency": settings.fetch_concurrency,
                "timeout_seconds": settings.release_timeout,
            },
        }
        return json.dumps(payload)

    server.resource(
        "resource://devops/status",
        name="devops_status",
        title="DevOps MCP Status",
        description="Provides the current configuration status for the DevOps MCP server.",
        mime_type="application/json",
        tags={"status", "health"},
    )(status_resource)

    setattr(server, "devops_client", client)
    setattr(server, "release_analyzer", analyzer)
    setattr(server, "tool_handles", handles)
    setattr(server, "status_resource", status_resource)
    setattr(server, "client_lifespan", lifespan)
    return server


def main() -> None:
    """Entry point for running the DevOps MCP server via CLI."""

    settings = get_settings()
    configure_logging(settings.log_level)

    server = create_server(settings)
    logging.getLogger(__name__).info(
        "Launching DevOps MCP server",
        extra={
            "version": __version__,
            "log_level": settings.log_level,
            "organization": settings.organization,
            "project": settings.project,
            "tools_enabled": getattr(server, "tool_handles", None) is not None,
        },
    )
    server.run()


if __name__ == "__main__":
    main()
