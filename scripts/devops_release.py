"""DevOps release analysis CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any

from devops_mcp.client import DevOpsClient, mask_secret
from devops_mcp.config import DevOpsSettings
from devops_mcp.release import ReleaseAnalyzer, ReleaseDataSource


def load_client(settings: DevOpsSettings) -> ReleaseDataSource:
    if not settings.is_configured:
        print(
            "Azure DevOps not configured: set MCP_DEVOPS_ORGANIZATION, "
            "MCP_DEVOPS_PROJECT and MCP_DEVOPS_PAT"
        )
        raise SystemExit(1)
    return DevOpsClient(settings)


async def _run_analysis(
    settings: DevOpsSettings,
    source: ReleaseDataSource,
    ids: str | None,
    wiql: str | None,
) -> dict[str, Any]:
    analyzer = ReleaseAnalyzer(
        source,
        max_work_items=settings.max_work_items,
        concurrency=settings.fetch_concurrency,
        timeout=settings.release_timeout,
    )
    try:
        return await analyzer.analyze_release(ids, wiql)
    finally:
        aclose = getattr(source, "aclose", None)
        if callable(aclose):
            await aclose()


def format_summary(payload: dict[str, Any]) -> str:
    lines = [
        f"Work items: {payload['totalWorkItems']}  Repositories: {payload['totalRepositories']}"
    ]
    for repo in payload["repositories"]:
        branches = ", ".join(repo["branches"]) or "-"
        types = ", ".join(repo["artifactTypes"])
        items = ", ".join(str(item) for item in repo["workItemIds"])
        lines.append(f"{repo['repoName']} [{types}] branches: {branches} <- {items}")
    unlinked = payload.get("workItemsWithoutLinks")
    if unlinked:
        lines.append("Without git links: " + ", ".join(str(item) for item in unlinked))
    return "\n".join(lines)


def cmd_analyze(args: argparse.Namespace) -> None:
    settings = DevOpsSettings()
    source = load_client(settings)
    payload = asyncio.run(_run_analysis(settings, source, args.ids, args.wiql))

    if "error" in payload:
        print(json.dumps(payload, indent=2) if args.json else f"Error: {payload['error']}")
        raise SystemExit(1)

    if args.json:
        print(json.dumps(payload, indent=2))
    else:
        print(format_summary(payload))


def cmd_config(args: argparse.Namespace) -> None:
    settings = DevOpsSettings()
    payload = settings.model_dump()
    payload["pat"] = mask_secret(settings.pat)
    payload["configured"] = settings.is_configured
    print(json.dumps(payload, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DevOps release impact analysis")
    sub = parser.add_subparsers(dest="cmd")

    p_analyze = sub.add_parser("analyze", help="List repositories to release for work items")
    source = p_analyze.add_mutually_exclusive_group(required=True)
    source.add_argument("--ids", help="Comma-separated work item ids, e.g. 123,456")
    source.add_argument("--wiql", help="WIQL query selecting the work items")
    p_analyze.add_argument("--json", action="store_true", help="Output JSON")
    p_analyze.set_defaults(func=cmd_analyze)

    p_config = sub.add_parser("config", help="Show effective settings (PAT masked)")
    p_config.set_defaults(func=cmd_config)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
