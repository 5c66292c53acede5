"""Utility helpers for the Azure DevOps client."""

from __future__ import annotations

import base64


def build_auth_headers(pat: str | None) -> dict[str, str]:
    """Return default headers for Basic authentication with a personal access token."""

    headers = {"Accept": "application/json"}
    if pat:
        credentials = base64.b64encode(f":{pat}".encode("utf-8")).decode("ascii")
        headers["Authorization"] = f"Basic {credentials}"
    return headers


def mask_secret(value: str | None, *, visible: int = 4) -> str | None:
    """Mask all but the last few characters of a secret for display."""

    if not value:
        return value
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
