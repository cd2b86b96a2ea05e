"""
OAuth identity providers, looked up by name.
"""
from typing import Dict

from ..config import Settings
from .base import AuthRequest, IdentityProvider, OAuthError, OAuthTokens, OAuthUser
from .github import GitHubProvider
from .google import GoogleProvider
from .vkid import VKIDProvider


def build_providers(settings: Settings) -> Dict[str, IdentityProvider]:
    """Registry of every enabled and configured provider, keyed by name."""
    def callback(name: str) -> str:
        return f"{settings.oauth_base_url}/auth/{name}/callback"

    candidates = []
    if settings.google_enabled:
        candidates.append(GoogleProvider(settings.google_client_id, settings.google_client_secret, callback("google")))
    if settings.github_enabled:
        candidates.append(GitHubProvider(settings.github_client_id, settings.github_client_secret, callback("github")))
    if settings.vk_enabled:
        candidates.append(VKIDProvider(settings.vk_client_id, settings.vk_client_secret, callback("vk")))

    return {p.name: p for p in candidates if p.is_configured()}


__all__ = [
    "AuthRequest",
    "IdentityProvider",
    "OAuthError",
    "OAuthTokens",
    "OAuthUser",
    "GitHubProvider",
    "GoogleProvider",
    "VKIDProvider",
    "build_providers",
]
