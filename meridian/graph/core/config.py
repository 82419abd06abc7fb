"""Client configuration and shared Graph constants.

This module centralizes national-cloud endpoints and the retry budget used by
the request executor so the client itself can stay small and focused.
"""

from __future__ import annotations

from dataclasses import dataclass

from .enums import ApiVersion

# National cloud endpoints
GRAPH_GLOBAL = "https://graph.microsoft.com"
GRAPH_CHINA = "https://microsoftgraph.chinacloudapi.cn"
GRAPH_USGOV_L4 = "https://graph.microsoft.us"
GRAPH_USGOV_L5 = "https://dod-graph.microsoft.us"
GRAPH_GERMANY = "https://graph.microsoft.de"

ENDPOINTS = {
    "global": GRAPH_GLOBAL,
    "china": GRAPH_CHINA,
    "usgov_l4": GRAPH_USGOV_L4,
    "usgov_l5": GRAPH_USGOV_L5,
    "germany": GRAPH_GERMANY,
}

DEFAULT_USER_AGENT = "meridian-graph (aiohttp)"

# Retry budget
RETRY_BACKOFF_INITIAL_DELAY = 1.0  # seconds
RETRY_BACKOFF_DELAY_CAP = 64.0  # seconds
REQUEST_ATTEMPTS_FOR_RATE_LIMITING = 10
REQUEST_ATTEMPTS_FOR_CONSISTENCY = 6


def get_endpoint(name: str) -> str:
    """Get a national cloud endpoint by name.

    Args:
        name: Cloud name ("global", "china", "usgov_l4", "usgov_l5", "germany")

    Returns:
        Base endpoint URL

    Raises:
        ValueError: If the cloud name is unknown

    Examples:
        >>> get_endpoint("global")
        'https://graph.microsoft.com'
    """
    try:
        return ENDPOINTS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown Graph cloud: {name}") from None


@dataclass(frozen=True)
class ClientConfig:
    """Immutable per-client settings shared by every call.

    Treated as read-only value data: concurrent calls on one client share it
    without coordination.
    """

    api_version: ApiVersion | str
    tenant_id: str = ""
    endpoint: str = GRAPH_GLOBAL
    user_agent: str = DEFAULT_USER_AGENT
    # Consistency retries only; rate-limit retries always happen.
    disable_retries: bool = False

    @property
    def version(self) -> str:
        """Version path segment as a plain string."""
        if isinstance(self.api_version, ApiVersion):
            return self.api_version.value
        return str(self.api_version)
