"""
Avatar Proxy Response Models
"""

from typing import Optional

from pydantic import BaseModel


class AvatarInfoResponse(BaseModel):
    """Response model for GET /api/{user_id}"""
    profileUrl: str
    id: str
    username: Optional[str] = None
    display_name: Optional[str] = None
    avatarUrl: str
    discriminator: Optional[str] = None


class BannerResponse(BaseModel):
    """Response model for GET /api/banner/{user_id}"""
    id: str
    bannerUrl: str


class GitHubUserResponse(BaseModel):
    """Response model for GET /api/github/{username}"""
    id: Optional[int] = None
    username: Optional[str] = None
    display_name: Optional[str] = None
    avatarUrl: Optional[str] = None
    profileUrl: Optional[str] = None
    bio: Optional[str] = None
    public_repos: Optional[int] = None
    followers: Optional[int] = None
    following: Optional[int] = None
    location: Optional[str] = None
    company: Optional[str] = None
    blog: Optional[str] = None
