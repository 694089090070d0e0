"""
Avatar Proxy Module

Resolves Discord avatars/banners and GitHub profiles, and proxies the
images so browsers can load them without CORS trouble.

Features:
- Memoized upstream lookups (see cache.MemoryStore)
- Size/format policies with a deterministic default-avatar fallback
- Proxy routes answering GET and HEAD
"""

from .errors import AvatarProxyError, ClientInputError, ResourceAbsentError, UpstreamError
from .resolver import AvatarResolver, BannerInfo, GitHubUserInfo, UserAvatarInfo
from .routes_fastapi import router

__all__ = [
    "router",
    "AvatarResolver",
    "UserAvatarInfo",
    "BannerInfo",
    "GitHubUserInfo",
    "AvatarProxyError",
    "ClientInputError",
    "ResourceAbsentError",
    "UpstreamError",
]
