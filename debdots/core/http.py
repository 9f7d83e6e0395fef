"""HTTPS helpers with certifi-backed certificate verification.

Debian minimal images do not always ship a usable CA store for Python,
so every request goes through an SSL context built from certifi's bundle.
"""

from __future__ import annotations

import json
import shutil
import ssl
from pathlib import Path
from typing import Any
from urllib.request import Request, urlopen

import certifi

USER_AGENT = "debdots"


def get_ssl_context() -> ssl.SSLContext:
    """Return an SSL context that trusts certifi's CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def secure_urlopen(
    url: str,
    timeout: float | None = None,
    headers: dict[str, str] | None = None,
):
    """Open an HTTPS URL with certificate verification.

    Args:
        url: The URL to open.
        timeout: Socket timeout in seconds; None blocks indefinitely.
        headers: Extra request headers.

    Raises:
        URLError: If the URL cannot be opened (HTTPError for 4xx/5xx).
        ValueError: If the URL is not HTTPS.
    """
    if not url.startswith("https://"):
        raise ValueError(f"Only HTTPS URLs are supported: {url}")

    request = Request(url, headers={"User-Agent": USER_AGENT, **(headers or {})})
    return urlopen(request, timeout=timeout, context=get_ssl_context())  # nosec B310


def fetch_text(
    url: str,
    timeout: float | None = None,
    headers: dict[str, str] | None = None,
) -> str:
    """Fetch a URL and decode the body as UTF-8."""
    with secure_urlopen(url, timeout=timeout, headers=headers) as response:
        return response.read().decode("utf-8")


def fetch_json(
    url: str,
    timeout: float | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    """Fetch a URL and parse the body as JSON.

    Raises:
        ValueError: If the body is not valid JSON.
    """
    return json.loads(fetch_text(url, timeout=timeout, headers=headers))


def download_file(url: str, dest_path: Path, timeout: float | None = None) -> None:
    """Stream a URL into dest_path."""
    with secure_urlopen(url, timeout=timeout) as response, dest_path.open("wb") as out:
        shutil.copyfileobj(response, out)
