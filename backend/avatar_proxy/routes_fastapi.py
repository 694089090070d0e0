"""
Avatar Proxy API Routes

Provides endpoints for:
- Avatar/banner URL lookup (JSON)
- Proxied avatar/banner/GitHub images (bypasses CORS)
- Raw Discord and GitHub user projections
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response

from . import policies
from .errors import ClientInputError, ResourceAbsentError, UpstreamError
from .resolver import AvatarResolver
from .schemas import AvatarInfoResponse, BannerResponse, GitHubUserResponse

logger = logging.getLogger(__name__)

# ============================================
# Configuration
# ============================================

# Named avatar routes and the size each one serves
IMAGE_SIZES = {
    "image": 512,
    "smallimage": 128,
    "bigimage": 1024,
    "superbigimage": 4096,
}

IMAGE_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Cross-Origin-Resource-Policy": "cross-origin",
}

BANNER_NOT_AVAILABLE = "Banner not available"

# ============================================
# Router
# ============================================

router = APIRouter(prefix="/api", tags=["Avatar Proxy"])


def _resolver(request: Request) -> AvatarResolver:
    return request.app.state.resolver


def _http_error(error: Exception, failure_message: str) -> HTTPException:
    """
    Map resolver errors onto HTTP errors.

    Upstream details are logged, the client only sees failure_message.
    """
    if isinstance(error, ClientInputError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, ResourceAbsentError):
        return HTTPException(status_code=404, detail=str(error))
    logger.error(f"[AvatarProxy] {failure_message}: {error}")
    return HTTPException(status_code=500, detail=failure_message)


async def _proxy_image(resolver: AvatarResolver, url: str) -> Response:
    data, content_type = await resolver.fetch_image(url)
    return Response(content=data, media_type=content_type, headers=IMAGE_HEADERS)


# ============================================
# Discord avatars
# ============================================

def _register_named_image_route(endpoint: str, default_size: int) -> None:
    async def named_avatar_image(
        user_id: str,
        request: Request,
        image_format: Optional[str] = Query(None, alias="format"),
    ):
        resolver = _resolver(request)
        try:
            info = await resolver.resolve_avatar(user_id, size=default_size, format=image_format)
            return await _proxy_image(resolver, info.avatar_url)
        except (ClientInputError, UpstreamError) as e:
            raise _http_error(e, "Could not fetch avatar")

    named_avatar_image.__name__ = f"avatar_{endpoint}"
    router.add_api_route(
        f"/pfp/{{user_id}}/{endpoint}",
        named_avatar_image,
        methods=["GET", "HEAD"],
        summary=f"Proxy avatar at {default_size}px",
    )


for _endpoint, _size in IMAGE_SIZES.items():
    _register_named_image_route(_endpoint, _size)


@router.api_route("/pfp/{user_id}/{size}", methods=["GET", "HEAD"])
async def avatar_custom_size(
    user_id: str,
    size: str,
    request: Request,
    image_format: Optional[str] = Query(None, alias="format"),
):
    """Proxy avatar with a custom size; unsupported sizes fall back to 512."""
    resolver = _resolver(request)
    try:
        info = await resolver.resolve_avatar(user_id, size=size, format=image_format)
        return await _proxy_image(resolver, info.avatar_url)
    except (ClientInputError, UpstreamError) as e:
        raise _http_error(e, "Could not fetch avatar")


@router.get("/user/{user_id}/raw")
async def raw_user(user_id: str, request: Request):
    """Raw Discord user data with resolved avatar and banner URLs."""
    try:
        return await _resolver(request).get_raw_user(user_id)
    except (ClientInputError, UpstreamError) as e:
        raise _http_error(e, "Could not fetch user data")


# ============================================
# Discord banners
# ============================================

@router.get("/banner/{user_id}", response_model=BannerResponse)
async def banner_info(
    user_id: str,
    request: Request,
    size: str = Query(str(policies.DEFAULT_SIZE)),
    image_format: Optional[str] = Query(None, alias="format"),
):
    try:
        info = await _resolver(request).resolve_banner(user_id, size=size, format=image_format)
        return info.to_dict()
    except ResourceAbsentError:
        raise HTTPException(status_code=404, detail=BANNER_NOT_AVAILABLE)
    except (ClientInputError, UpstreamError) as e:
        raise _http_error(e, "Could not fetch banner")


@router.api_route("/banner/{user_id}/image", methods=["GET", "HEAD"])
async def banner_image(
    user_id: str,
    request: Request,
    size: str = Query(str(policies.DEFAULT_SIZE)),
    image_format: Optional[str] = Query(None, alias="format"),
):
    resolver = _resolver(request)
    try:
        info = await resolver.resolve_banner(user_id, size=size, format=image_format)
        return await _proxy_image(resolver, info.banner_url)
    except ResourceAbsentError:
        raise HTTPException(status_code=404, detail=BANNER_NOT_AVAILABLE)
    except (ClientInputError, UpstreamError) as e:
        raise _http_error(e, "Could not fetch banner")


# ============================================
# GitHub
# ============================================

@router.get("/github/{username}", response_model=GitHubUserResponse)
async def github_user(username: str, request: Request):
    try:
        info = await _resolver(request).resolve_github_user(username)
        return info.to_dict()
    except UpstreamError as e:
        raise _http_error(e, "Could not fetch GitHub user data")


@router.api_route("/github/{username}/pfp", methods=["GET", "HEAD"])
async def github_avatar(username: str, request: Request):
    resolver = _resolver(request)
    try:
        info = await resolver.resolve_github_user(username)
        if not info.avatar_url:
            raise UpstreamError("GitHub user has no avatar_url")
        return await _proxy_image(resolver, info.avatar_url)
    except UpstreamError as e:
        raise _http_error(e, "Could not fetch GitHub avatar")


# ============================================
# Avatar JSON (registered last: matches any /api/<segment>)
# ============================================

@router.get("/{user_id}", response_model=AvatarInfoResponse)
async def avatar_info(user_id: str, request: Request):
    """
    Avatar JSON info for a Discord user.

    Example:
        GET /api/773952016036790272
    """
    try:
        info = await _resolver(request).resolve_avatar(user_id)
    except (ClientInputError, UpstreamError) as e:
        raise _http_error(e, "Could not fetch avatar")
    return {"profileUrl": policies.profile_url(user_id), **info.to_dict()}
