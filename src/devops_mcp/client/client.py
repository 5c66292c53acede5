"""Async client for the Azure DevOps REST endpoints used by release analysis."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import DevOpsSettings
from ..release.models import RepositoryInfo, WiqlResult, WorkItemRecord
from .errors import DevOpsRequestError
from .utils import build_auth_headers

logger = logging.getLogger(__name__)


class DevOpsClient:
    """Execute Azure DevOps REST calls asynchronously."""

    def __init__(
        self,
        settings: DevOpsSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._http = httpx.AsyncClient(
            headers=build_auth_headers(settings.pat),
            timeout=settings.request_timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._settings.base_url

    async def __aenter__(self) -> "DevOpsClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def query_work_item_ids(self, query: str) -> list[int]:
        """Run a WIQL query and return the matching work item ids in order."""

        data = await self._request("POST", "/_apis/wit/wiql", json={"query": query})
        result = self._validate(WiqlResult, data, "WIQL query")
        return result.ids

    async def get_work_item(self, work_item_id: int) -> WorkItemRecord:
        """Fetch a single work item with its relations expanded."""

        data = await self._request(
            "GET",
            f"/_apis/wit/workitems/{work_item_id}",
            params={"$expand": "Relations"},
        )
        return self._validate(WorkItemRecord, data, f"work item {work_item_id}")

    async def list_repositories(self) -> list[RepositoryInfo]:
        """List the git repositories of the configured project."""

        data = await self._request("GET", "/_apis/git/repositories")
        values = data.get("value") if isinstance(data, dict) else None
        return [self._validate(RepositoryInfo, item, "repository") for item in values or []]

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        query = {**(params or {}), "api-version": self._settings.api_version}
        url = f"{self.base_url}{path}"
        try:
            response = await self._http.request(method, url, params=query, json=json)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.debug("Azure DevOps request failed", extra={"method": method, "path": path})
            raise DevOpsRequestError(f"{method} {path} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise DevOpsRequestError(f"{method} {path} returned a non-JSON body") from exc

    @staticmethod
    def _validate(model, data: Any, label: str):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise DevOpsRequestError(f"Malformed {label} payload: {exc}") from exc


__all__ = ["DevOpsClient", "DevOpsRequestError"]
