"""
Upstream HTTP Clients

Thin wrappers over a shared httpx.AsyncClient for:
- The Discord user directory
- The GitHub user directory
- Image downloads from either CDN

Every failure (transport error, timeout, non-2xx) is raised as
UpstreamError so callers only deal with one exception type.
"""

import logging
from typing import Any, Dict, Tuple

import httpx

from .errors import UpstreamError

logger = logging.getLogger(__name__)

DIRECTORY_TIMEOUT = 5.0
IMAGE_TIMEOUT = 10.0

GITHUB_USER_AGENT = "Avatarcyan-API"


class DiscordClient:
    """Bot-authenticated access to the Discord REST API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        bot_token: str,
        api_base: str = "https://discord.com/api",
        timeout: float = DIRECTORY_TIMEOUT,
    ):
        self.http_client = http_client
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.headers = {"Authorization": f"Bot {bot_token}"}

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        """Fetch the raw user record for a snowflake id."""
        url = f"{self.api_base}/users/{user_id}"
        return await _get_json(self.http_client, url, self.headers, self.timeout, "Discord API")

    async def get_gateway(self) -> httpx.Response:
        """
        Lightweight liveness endpoint used by the health probe.

        Returns the raw response; the probe classifies it.
        """
        return await self.http_client.get(
            f"{self.api_base}/v10/gateway",
            headers=self.headers,
            timeout=self.timeout,
        )


class GitHubClient:
    """Token-authenticated access to the GitHub REST API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token: str,
        api_base: str = "https://api.github.com",
        timeout: float = DIRECTORY_TIMEOUT,
    ):
        self.http_client = http_client
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "User-Agent": GITHUB_USER_AGENT,
            "Authorization": f"token {token}",
        }

    async def get_user(self, username: str) -> Dict[str, Any]:
        url = f"{self.api_base}/users/{username}"
        return await _get_json(self.http_client, url, self.headers, self.timeout, "GitHub API")

    async def get_user_response(self, username: str) -> httpx.Response:
        """Raw response for the health probe."""
        return await self.http_client.get(
            f"{self.api_base}/users/{username}",
            headers=self.headers,
            timeout=self.timeout,
        )


class ImageClient:
    """Downloads image bytes for the proxy routes."""

    def __init__(self, http_client: httpx.AsyncClient, timeout: float = IMAGE_TIMEOUT):
        self.http_client = http_client
        self.timeout = timeout

    async def fetch(self, url: str) -> Tuple[bytes, str]:
        """
        Download an image.

        Returns:
            Tuple of (image_data, content_type)
        """
        try:
            response = await self.http_client.get(url, timeout=self.timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"[ImageClient] HTTP error {e.response.status_code}: {url[:80]}")
            raise UpstreamError(
                f"Image fetch failed: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"[ImageClient] Fetch error for {url[:80]}: {e}")
            raise UpstreamError(f"Image fetch failed: {e}") from e

        content_type = response.headers.get("content-type", "application/octet-stream")
        return response.content, content_type


async def _get_json(
    http_client: httpx.AsyncClient,
    url: str,
    headers: Dict[str, str],
    timeout: float,
    label: str,
) -> Dict[str, Any]:
    try:
        response = await http_client.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"[{label}] HTTP error {e.response.status_code}: {url}")
        raise UpstreamError(
            f"{label} error: {e.response.status_code}",
            status_code=e.response.status_code,
        ) from e
    except httpx.HTTPError as e:
        logger.error(f"[{label}] Request failed: {url}: {e}")
        raise UpstreamError(f"{label} request failed: {e}") from e
    except ValueError as e:
        logger.error(f"[{label}] Invalid JSON from {url}: {e}")
        raise UpstreamError(f"{label} returned invalid JSON") from e
