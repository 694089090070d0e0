"""
Avatarcyan test configuration

Fixtures for the resolver, probes and routes. Upstream APIs are
replaced by an in-process FakeUpstream served through
httpx.MockTransport, so no test touches the network.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest

# Make the backend packages importable without installing
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from avatar_proxy.clients import DiscordClient, GitHubClient, ImageClient
from avatar_proxy.resolver import AvatarResolver
from cache import MemoryStore
from server.config import Settings
from status_monitor.history_store import HistoryStore, MemoryHistoryStore


PUBLIC_BASE_URL = "https://avatar-cyan.test"

USER_WITH_AVATAR = "123456789012345678"
USER_ANIMATED = "223456789012345678"
USER_DEFAULT = "323456789012345678"
USER_MIGRATED = "423456789012345678"
PROBE_USER = "773952016036790272"


# ============================================
# Clock
# ============================================

class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SteppingTimer:
    """Returns the given readings in order, then repeats the last one."""

    def __init__(self, *readings: float):
        self.readings = list(readings)

    def __call__(self) -> float:
        if len(self.readings) > 1:
            return self.readings.pop(0)
        return self.readings[0]


# ============================================
# Upstream double
# ============================================

def discord_users() -> Dict[str, Dict[str, Any]]:
    return {
        USER_WITH_AVATAR: {
            "id": USER_WITH_AVATAR,
            "username": "cyan",
            "global_name": "Cyan",
            "avatar": "abc123",
            "discriminator": "0",
            "banner": "bannerhash",
            "public_flags": 64,
        },
        USER_ANIMATED: {
            "id": USER_ANIMATED,
            "username": "sparkle",
            "global_name": None,
            "avatar": "a_deadbeef",
            "discriminator": "0",
            "banner": "a_anim",
        },
        USER_DEFAULT: {
            "id": USER_DEFAULT,
            "username": "legacy",
            "global_name": None,
            "avatar": None,
            "discriminator": "1337",
            "banner": None,
        },
        USER_MIGRATED: {
            "id": USER_MIGRATED,
            "username": "newstyle",
            "global_name": "New Style",
            "avatar": None,
            "discriminator": "0",
        },
        PROBE_USER: {
            "id": PROBE_USER,
            "username": "probe",
            "avatar": "probehash",
            "discriminator": "0",
        },
    }


class FakeUpstream:
    """
    Routes requests for Discord, GitHub, the CDNs and this service's
    public URL. Counters record how often each upstream was called.
    """

    def __init__(self):
        self.users = discord_users()
        self.github_users = {
            "octocat": {
                "id": 583231,
                "login": "octocat",
                "name": "The Octocat",
                "avatar_url": "https://avatars.githubusercontent.com/u/583231?v=4",
                "html_url": "https://github.com/octocat",
                "bio": None,
                "public_repos": 8,
                "followers": 100,
                "following": 9,
                "location": "San Francisco",
                "company": "@github",
                "blog": "https://github.blog",
            },
        }
        self.discord_user_calls = 0
        self.github_user_calls = 0
        self.requests: List[httpx.Request] = []

        self.discord_status = 200
        self.gateway_payload: Dict[str, Any] = {"url": "wss://gateway.discord.gg"}
        self.gateway_status = 200
        self.github_status = 200
        self.public_status = 200
        self.public_content_type = "image/png"
        self.fail_hosts: set = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        path = request.url.path

        if host in self.fail_hosts:
            raise httpx.ConnectError("connection refused", request=request)

        if host == "discord.com":
            if path == "/api/v10/gateway":
                return httpx.Response(self.gateway_status, json=self.gateway_payload)
            if path.startswith("/api/users/"):
                self.discord_user_calls += 1
                if self.discord_status != 200:
                    return httpx.Response(self.discord_status, json={"message": "error"})
                user = self.users.get(path.rsplit("/", 1)[-1])
                if user is None:
                    return httpx.Response(404, json={"message": "Unknown User"})
                return httpx.Response(200, json=user)

        if host == "api.github.com" and path.startswith("/users/"):
            self.github_user_calls += 1
            if self.github_status != 200:
                return httpx.Response(self.github_status, json={"message": "error"})
            user = self.github_users.get(path.rsplit("/", 1)[-1])
            if user is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json=user)

        if host in ("cdn.discordapp.com", "avatars.githubusercontent.com"):
            return httpx.Response(200, content=b"\x89PNG fake", headers={"content-type": "image/png"})

        if host == "avatar-cyan.test":
            return httpx.Response(
                self.public_status,
                headers={"content-type": self.public_content_type},
            )

        return httpx.Response(404)


# ============================================
# History store doubles
# ============================================

class FailingHistoryStore(HistoryStore):
    """Every call fails, as if the database were unreachable."""

    def __init__(self):
        self.save_calls = 0

    async def save_status_log(self, service_name, status, response_time, message):
        self.save_calls += 1
        raise ConnectionError("database unreachable")

    async def clean_old_logs(self, days_to_keep=90):
        raise ConnectionError("database unreachable")

    async def get_service_uptime(self, service_name, hours=24):
        raise ConnectionError("database unreachable")

    async def get_service_incidents(self, service_name, days=7):
        raise ConnectionError("database unreachable")

    async def get_uptime_summary(self):
        raise ConnectionError("database unreachable")

    async def get_all_service_statistics(self, days=30):
        raise ConnectionError("database unreachable")


class StaticHistoryStore(MemoryHistoryStore):
    """Memory store whose statistics/summary are fixed by the test."""

    def __init__(self, statistics: Optional[List[Dict[str, Any]]] = None,
                 summary: Optional[List[Dict[str, Any]]] = None):
        super().__init__()
        self.statistics = statistics or []
        self.summary = summary or []

    async def get_all_service_statistics(self, days=30):
        return self.statistics

    async def get_uptime_summary(self):
        return self.summary


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def memory_store(fake_clock):
    return MemoryStore(default_ttl=60, clock=fake_clock)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture
def discord_client(http_client):
    return DiscordClient(http_client, "test-discord-token")


@pytest.fixture
def github_client(http_client):
    return GitHubClient(http_client, "test-github-token")


@pytest.fixture
def resolver(discord_client, github_client, http_client, memory_store):
    return AvatarResolver(discord_client, github_client, ImageClient(http_client), memory_store)


@pytest.fixture
def settings():
    return Settings(
        discord_bot_token="test-discord-token",
        github_token="test-github-token",
        public_base_url=PUBLIC_BASE_URL,
        log_level="WARNING",
    )
