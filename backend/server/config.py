"""
Server Configuration

Settings are read from the environment (and a local .env file, if any).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


class ConfigError(Exception):
    """Required configuration is missing or malformed."""


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


@dataclass(frozen=True)
class Settings:
    discord_bot_token: str
    github_token: str
    cache_ttl: int = 60
    port: int = 3000
    environment: str = "development"
    public_base_url: str = "https://avatar-cyan.vercel.app"
    discord_api_base: str = "https://discord.com/api"
    github_api_base: str = "https://api.github.com"
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    rate_limit: str = "100 per 15 minutes"
    log_level: str = "INFO"

    @property
    def supabase_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ConfigError: DISCORD_BOT_TOKEN or GITHUB_TOKEN is missing
        """
        if dotenv:
            load_dotenv()

        discord_token = os.getenv("DISCORD_BOT_TOKEN")
        github_token = os.getenv("GITHUB_TOKEN")
        if not discord_token:
            raise ConfigError("Missing DISCORD_BOT_TOKEN in .env")
        if not github_token:
            raise ConfigError("Missing GITHUB_TOKEN in .env")

        return cls(
            discord_bot_token=discord_token,
            github_token=github_token,
            cache_ttl=_int_env("CACHE_TTL", 60),
            port=_int_env("PORT", 3000),
            environment=os.getenv("NODE_ENV") or os.getenv("APP_ENV") or "development",
            public_base_url=os.getenv("PUBLIC_BASE_URL", "https://avatar-cyan.vercel.app"),
            discord_api_base=os.getenv("DISCORD_API_BASE", "https://discord.com/api"),
            github_api_base=os.getenv("GITHUB_API_BASE", "https://api.github.com"),
            supabase_url=os.getenv("SUPABASE_URL") or None,
            supabase_service_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY") or None,
            rate_limit=os.getenv("RATE_LIMIT", "100 per 15 minutes"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
