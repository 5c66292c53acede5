"""Decoding of Azure DevOps git artifact links.

Work items reference git objects through opaque ``vstfs`` URIs such as::

    vstfs:///Git/Ref/{projectId}%2F{repositoryId}%2Frefs%2Fheads%2Fmain

After percent-decoding, the part following the ``vstfs:///Git/`` marker is
``{type}/{projectId}/{repositoryId}[/{ref}]``.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import quote, unquote_plus

from .models import ArtifactType, GitArtifactReference

GIT_ARTIFACT_MARKER = "vstfs:///Git/"
BRANCH_REF_PREFIX = "refs/heads/"

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

logger = logging.getLogger(__name__)


def parse_artifact_link(url: str | None) -> GitArtifactReference | None:
    """Decode a git artifact link, returning ``None`` for anything unparseable."""

    if not url:
        return None

    try:
        if _BAD_ESCAPE.search(url):
            raise ValueError("malformed percent escape")
        decoded = unquote_plus(url, errors="strict")
        marker_at = decoded.find(GIT_ARTIFACT_MARKER)
        if marker_at < 0:
            return None
        parts = decoded[marker_at + len(GIT_ARTIFACT_MARKER):].split("/", 3)
    except ValueError as exc:
        logger.debug("Ignoring unparseable artifact link", extra={"url": url, "error": str(exc)})
        return None

    if len(parts) < 3:
        return None

    ref = parts[3] if len(parts) > 3 else ""
    if ref.startswith(BRANCH_REF_PREFIX):
        ref = ref[len(BRANCH_REF_PREFIX):]

    return GitArtifactReference(
        artifact_type=ArtifactType.from_token(parts[0]),
        type_token=parts[0],
        project_id=parts[1],
        repository_id=parts[2],
        ref=ref,
    )


def build_artifact_uri(
    type_token: str,
    project_id: str,
    repository_id: str,
    ref: str | None = None,
) -> str:
    """Build an artifact link in the encoded form Azure DevOps stores."""

    segments = [project_id, repository_id]
    if ref:
        segments.append(ref)
    return f"{GIT_ARTIFACT_MARKER}{type_token}/" + quote("/".join(segments), safe="")


__all__ = ["BRANCH_REF_PREFIX", "GIT_ARTIFACT_MARKER", "build_artifact_uri", "parse_artifact_link"]
