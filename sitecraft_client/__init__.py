"""Async client for the SiteCraft API."""

from .api_client import SiteCraftAPIError, SiteCraftClient
from .sync_loop import DEFAULT_POLL_INTERVAL, ProjectSyncLoop

__all__ = [
    "SiteCraftAPIError",
    "SiteCraftClient",
    "ProjectSyncLoop",
    "DEFAULT_POLL_INTERVAL",
]
