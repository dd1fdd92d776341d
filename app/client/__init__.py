"""
CraftHub 客户端
"""
from .api_client import CraftHubClient, CraftHubAPIError, LoginState, Notice, translate_error
from .session import FileStorage, SessionHolder, PROTECTED_ROUTES, resolve_route

__all__ = [
    "CraftHubClient",
    "CraftHubAPIError",
    "LoginState",
    "Notice",
    "translate_error",
    "FileStorage",
    "SessionHolder",
    "PROTECTED_ROUTES",
    "resolve_route"
]
