"""CodePush service client and records."""

from .client import ApiError, CodePushClient, HttpCodePushClient, MockCodePushClient
from .models import App, Channel, Patch, Release

__all__ = [
    "ApiError",
    "App",
    "Channel",
    "CodePushClient",
    "HttpCodePushClient",
    "MockCodePushClient",
    "Patch",
    "Release",
]
