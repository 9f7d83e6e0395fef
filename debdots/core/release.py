# debdots/core/release.py
"""
Latest-version lookup for tools published as GitHub releases or behind a
plain-text version endpoint.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from http.client import HTTPException
from urllib.error import URLError

from debdots.core import http
from debdots.core.errors import ResolutionError
from debdots.core.logger import LoggerProxy

log = LoggerProxy(__name__)

GITHUB_API = "https://api.github.com"
_TAG_PREFIX = re.compile(r"^[^0-9]+")


@dataclass(frozen=True)
class RemoteRelease:
    version: str
    url: str

    @classmethod
    def from_template(cls, template: str, version: str, repo: str | None = None) -> "RemoteRelease":
        return cls(version=version, url=template.format(repo=repo or "", version=version))


def normalize_version(tag: str) -> str:
    """Strip any leading non-numeric prefix from a release tag ("v1.2.3" -> "1.2.3")."""
    version = _TAG_PREFIX.sub("", tag.strip())
    if not version:
        raise ResolutionError(f"Release tag {tag!r} contains no version number")
    return version


def _github_headers() -> dict[str, str]:
    headers = {"Accept": "application/vnd.github+json"}
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def resolve_latest(repo: str, api_base: str = GITHUB_API, timeout: float | None = None) -> str:
    """
    Return the bare version of the latest GitHub release of `repo` (owner/name).

    Raises:
        ResolutionError: on network failure, a malformed response, or a missing tag.
    """
    url = f"{api_base.rstrip('/')}/repos/{repo}/releases/latest"
    log.debug(f"Resolving latest release of {repo} via {url}")
    try:
        payload = http.fetch_json(url, timeout=timeout, headers=_github_headers())
    except (URLError, HTTPException, OSError) as e:
        raise ResolutionError(f"Could not reach release metadata for {repo}: {e}") from e
    except ValueError as e:
        raise ResolutionError(f"Malformed release metadata for {repo}: {e}") from e

    if not isinstance(payload, dict):
        raise ResolutionError(f"Malformed release metadata for {repo}: expected an object")
    tag = payload.get("tag_name")
    if not isinstance(tag, str) or not tag.strip():
        raise ResolutionError(f"Release metadata for {repo} has no tag_name")

    version = normalize_version(tag)
    log.info(f"Latest {repo} release: {version}")
    return version


def resolve_text_version(url: str, timeout: float | None = None) -> str:
    """
    Return the first non-empty line of a plain-text version endpoint, as-is
    (go.dev answers "go1.22.3" and its archive names keep that prefix).
    """
    try:
        body = http.fetch_text(url, timeout=timeout)
    except (URLError, HTTPException, OSError, ValueError) as e:
        raise ResolutionError(f"Could not fetch version from {url}: {e}") from e

    for line in body.splitlines():
        if line.strip():
            return line.strip()
    raise ResolutionError(f"Empty version response from {url}")
