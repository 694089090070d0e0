"""
Health Probes

Four independent checks, each timed around its own body:
- Discord gateway reachability
- GitHub user endpoint reachability
- Image pipeline round-trip through this service's public avatar route
- Memory store self-test

A probe never raises; every failure is folded into a "down" result.
"""

import asyncio
import logging
import time
import uuid
from typing import Callable, Dict

import httpx

from avatar_proxy.clients import DiscordClient, GitHubClient
from cache import MemoryStore

from .models import (
    CACHE_SERVICE,
    DISCORD_SERVICE,
    GITHUB_SERVICE,
    IMAGE_SERVICE,
    ProbeResult,
    ProbeStatus,
)

logger = logging.getLogger(__name__)

DIRECTORY_SLOW_MS = 2000
IMAGE_SLOW_MS = 4000
IMAGE_PROBE_TIMEOUT = 8.0

IMAGE_PROBE_USER_ID = "773952016036790272"
GITHUB_PROBE_USERNAME = "octocat"

CACHE_PROBE_TTL = 5


class ProbeSet:
    """
    Runs the health probes.

    Usage:
        probes = ProbeSet(discord, github, http_client, cache, "https://example.com")
        results = await probes.run_all()
    """

    def __init__(
        self,
        discord: DiscordClient,
        github: GitHubClient,
        http_client: httpx.AsyncClient,
        cache: MemoryStore,
        public_base_url: str,
        test_user_id: str = IMAGE_PROBE_USER_ID,
        timer: Callable[[], float] = time.perf_counter,
    ):
        self.discord = discord
        self.github = github
        self.http_client = http_client
        self.cache = cache
        self.public_base_url = public_base_url.rstrip("/")
        self.test_user_id = test_user_id
        self._timer = timer

    def _elapsed_ms(self, start: float) -> int:
        return int(round((self._timer() - start) * 1000))

    async def run_all(self) -> Dict[str, ProbeResult]:
        """Run all four probes concurrently, keyed by service label."""
        discord, github, image, cache = await asyncio.gather(
            self.check_discord_api(),
            self.check_github_api(),
            self.check_image_processing(),
            self.check_cache_system(),
        )
        return {
            DISCORD_SERVICE: discord,
            GITHUB_SERVICE: github,
            IMAGE_SERVICE: image,
            CACHE_SERVICE: cache,
        }

    async def check_discord_api(self) -> ProbeResult:
        start = self._timer()
        try:
            response = await self.discord.get_gateway()
            elapsed = self._elapsed_ms(start)

            if not response.is_success:
                return ProbeResult(
                    ProbeStatus.DOWN,
                    elapsed,
                    f"Discord API error: {response.status_code} {response.reason_phrase}",
                )

            try:
                data = response.json()
            except ValueError:
                data = None
            if not isinstance(data, dict) or not data.get("url"):
                return ProbeResult(
                    ProbeStatus.DEGRADED,
                    elapsed,
                    "Discord API responding but gateway URL missing",
                )

            if elapsed > DIRECTORY_SLOW_MS:
                return ProbeResult(ProbeStatus.DEGRADED, elapsed, "Discord API slow response")
            return ProbeResult(ProbeStatus.OPERATIONAL, elapsed, "Discord API operational")
        except Exception as e:
            logger.warning(f"[StatusProbe] Discord probe failed: {e}")
            return ProbeResult(
                ProbeStatus.DOWN,
                self._elapsed_ms(start),
                f"Discord API connection failed: {e}",
            )

    async def check_github_api(self) -> ProbeResult:
        start = self._timer()
        try:
            response = await self.github.get_user_response(GITHUB_PROBE_USERNAME)
            elapsed = self._elapsed_ms(start)

            if not response.is_success:
                return ProbeResult(ProbeStatus.DOWN, elapsed, "GitHub error")
            if elapsed > DIRECTORY_SLOW_MS:
                return ProbeResult(ProbeStatus.DEGRADED, elapsed, "GitHub slow response")
            return ProbeResult(ProbeStatus.OPERATIONAL, elapsed, "GitHub OK")
        except Exception as e:
            logger.warning(f"[StatusProbe] GitHub probe failed: {e}")
            return ProbeResult(ProbeStatus.DOWN, self._elapsed_ms(start), str(e) or "GitHub error")

    async def check_image_processing(self) -> ProbeResult:
        """
        HEAD request through the public avatar route.

        Exercises resolve -> fetch -> proxy end to end, so a deployment
        without egress to its own public URL reports this probe as down.
        """
        url = f"{self.public_base_url}/api/pfp/{self.test_user_id}/smallimage"
        start = self._timer()
        try:
            response = await self.http_client.head(url, timeout=IMAGE_PROBE_TIMEOUT)
            elapsed = self._elapsed_ms(start)

            if not response.is_success:
                return ProbeResult(
                    ProbeStatus.DOWN,
                    elapsed,
                    f"Image processing failed: {response.status_code} {response.reason_phrase}",
                )

            content_type = response.headers.get("content-type")
            if not content_type or not content_type.startswith("image/"):
                return ProbeResult(
                    ProbeStatus.DEGRADED,
                    elapsed,
                    f"Image processing returned non-image content: {content_type}",
                )

            if elapsed > IMAGE_SLOW_MS:
                return ProbeResult(ProbeStatus.DEGRADED, elapsed, "Image processing slow")
            return ProbeResult(ProbeStatus.OPERATIONAL, elapsed, "Image processing operational")
        except Exception as e:
            logger.warning(f"[StatusProbe] Image pipeline probe failed: {e}")
            return ProbeResult(
                ProbeStatus.DOWN,
                self._elapsed_ms(start),
                f"Image processing system error: {e}",
            )

    async def check_cache_system(self) -> ProbeResult:
        start = self._timer()
        try:
            key = f"health_check_{uuid.uuid4().hex}"
            self.cache.set(key, True, ttl=CACHE_PROBE_TTL)
            value = self.cache.get(key)
            self.cache.delete(key)
            elapsed = self._elapsed_ms(start)

            if value is True:
                return ProbeResult(ProbeStatus.OPERATIONAL, elapsed, "Cache OK")
            return ProbeResult(ProbeStatus.DEGRADED, elapsed, "Cache failed")
        except Exception as e:
            logger.error(f"[StatusProbe] Cache self-test crashed: {e}")
            return ProbeResult(ProbeStatus.DOWN, self._elapsed_ms(start), str(e))
