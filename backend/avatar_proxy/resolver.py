"""
Avatar Resolver

Turns user identifiers into CDN image URLs:
1. Validates the identifier (no upstream call for malformed ids)
2. Reads the raw user record through the memory store
3. Applies size/format policies and the default-avatar fallback

Usage:
    resolver = AvatarResolver(discord, github, images, cache)
    info = await resolver.resolve_avatar("773952016036790272", size=128)
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple

from cache import MemoryStore

from . import policies
from .clients import DiscordClient, GitHubClient, ImageClient
from .errors import ResourceAbsentError

logger = logging.getLogger(__name__)

GITHUB_CACHE_PREFIX = "github_"

# Raw Discord fields passed through unchanged by get_raw_user
RAW_PASSTHROUGH_FIELDS = (
    "public_flags",
    "flags",
    "accent_color",
    "banner",
    "banner_color",
    "avatar_decoration_data",
    "collectibles",
    "clan",
    "primary_guild",
)


@dataclass(frozen=True)
class UserAvatarInfo:
    """Resolved avatar for a Discord user."""
    id: str
    username: str
    display_name: str
    avatar_url: str
    discriminator: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "display_name": self.display_name,
            "avatarUrl": self.avatar_url,
            "discriminator": self.discriminator,
        }


@dataclass(frozen=True)
class BannerInfo:
    id: str
    banner_url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "bannerUrl": self.banner_url}


@dataclass(frozen=True)
class GitHubUserInfo:
    """Projection of a GitHub user record."""
    id: int
    username: str
    display_name: str
    avatar_url: Optional[str]
    profile_url: Optional[str]
    bio: Optional[str] = None
    public_repos: Optional[int] = None
    followers: Optional[int] = None
    following: Optional[int] = None
    location: Optional[str] = None
    company: Optional[str] = None
    blog: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["avatarUrl"] = payload.pop("avatar_url")
        payload["profileUrl"] = payload.pop("profile_url")
        return payload


class AvatarResolver:
    """
    Resolves Discord avatars/banners and GitHub profiles.

    Upstream records are memoized in the injected MemoryStore, keyed by
    the Discord user id or "github_<username>".
    """

    def __init__(
        self,
        discord: DiscordClient,
        github: GitHubClient,
        images: ImageClient,
        cache: MemoryStore,
    ):
        self.discord = discord
        self.github = github
        self.images = images
        self.cache = cache

    # ============================================
    # Upstream records
    # ============================================

    async def get_user_data(self, user_id: str) -> Dict[str, Any]:
        """
        Raw Discord user record, served from cache while fresh.

        Raises:
            ClientInputError: malformed user id
            UpstreamError: Discord call failed
        """
        policies.require_user_id(user_id)

        cached = self.cache.get(user_id)
        if cached is not None:
            logger.debug(f"[AvatarResolver] Cache hit: {user_id}")
            return cached

        logger.info(f"[AvatarResolver] Fetching Discord user {user_id}")
        user = await self.discord.get_user(user_id)
        self.cache.set(user_id, user)
        return user

    async def get_github_data(self, username: str) -> Dict[str, Any]:
        key = f"{GITHUB_CACHE_PREFIX}{username}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        logger.info(f"[AvatarResolver] Fetching GitHub user {username}")
        user = await self.github.get_user(username)
        self.cache.set(key, user)
        return user

    # ============================================
    # Resolution
    # ============================================

    async def resolve_avatar(
        self,
        user_id: str,
        size: Any = policies.DEFAULT_SIZE,
        format: Optional[str] = None,
    ) -> UserAvatarInfo:
        """
        Resolve the avatar URL for a Discord user.

        Args:
            user_id: 17-20 digit snowflake
            size: Requested size; values outside the allowed set become 512
            format: Optional explicit extension (png, jpg, jpeg, webp, gif)

        Returns:
            UserAvatarInfo with the custom avatar URL, or the default
            avatar URL when the user has none.
        """
        policies.require_user_id(user_id)
        image_format = policies.normalize_format(format)
        numeric_size = policies.sanitize_size(size)

        user = await self.get_user_data(user_id)
        url = self._avatar_url_for(user_id, user, numeric_size, image_format)

        username = user.get("username")
        return UserAvatarInfo(
            id=user.get("id", user_id),
            username=username,
            display_name=user.get("global_name") or username,
            avatar_url=url,
            discriminator=user.get("discriminator"),
        )

    async def resolve_banner(
        self,
        user_id: str,
        size: Any = policies.DEFAULT_SIZE,
        format: Optional[str] = None,
    ) -> BannerInfo:
        """
        Resolve the banner URL for a Discord user.

        Raises:
            ResourceAbsentError: the user has no banner set
        """
        policies.require_user_id(user_id)
        image_format = policies.normalize_format(format)
        numeric_size = policies.sanitize_size(size)

        user = await self.get_user_data(user_id)
        banner_hash = user.get("banner")
        if not banner_hash:
            raise ResourceAbsentError("User has no banner")

        ext = policies.image_extension(banner_hash, image_format)
        return BannerInfo(
            id=user.get("id", user_id),
            banner_url=policies.banner_url(user_id, banner_hash, ext, numeric_size),
        )

    async def get_raw_user(self, user_id: str) -> Dict[str, Any]:
        """Raw Discord record plus resolved avatar/banner URLs at 512px."""
        user = await self.get_user_data(user_id)
        size = policies.DEFAULT_SIZE

        banner_hash = user.get("banner")
        banner = None
        if banner_hash:
            banner = policies.banner_url(
                user_id, banner_hash, policies.image_extension(banner_hash), size
            )

        username = user.get("username")
        payload = {
            "profileUrl": policies.profile_url(user_id),
            "id": user.get("id"),
            "username": username,
            "display_name": user.get("global_name") or username,
            "avatar": user.get("avatar"),
            "avatarUrl": self._avatar_url_for(user_id, user, size, None),
            "discriminator": user.get("discriminator"),
        }
        for field in RAW_PASSTHROUGH_FIELDS:
            payload[field] = user.get(field)
        payload["bannerUrl"] = banner
        return payload

    async def resolve_github_user(self, username: str) -> GitHubUserInfo:
        user = await self.get_github_data(username)
        login = user.get("login")
        return GitHubUserInfo(
            id=user.get("id"),
            username=login,
            display_name=user.get("name") or login,
            avatar_url=user.get("avatar_url"),
            profile_url=user.get("html_url"),
            bio=user.get("bio"),
            public_repos=user.get("public_repos"),
            followers=user.get("followers"),
            following=user.get("following"),
            location=user.get("location"),
            company=user.get("company"),
            blog=user.get("blog"),
        )

    async def fetch_image(self, url: str) -> Tuple[bytes, str]:
        return await self.images.fetch(url)

    @staticmethod
    def _avatar_url_for(
        user_id: str,
        user: Dict[str, Any],
        size: int,
        image_format: Optional[str],
    ) -> str:
        avatar_hash = user.get("avatar")
        if avatar_hash:
            ext = policies.image_extension(avatar_hash, image_format)
            return policies.avatar_url(user_id, avatar_hash, ext, size)
        index = policies.default_avatar_index(user.get("discriminator"))
        return policies.default_avatar_url(index)
