"""OktaHound: Okta identity graph collector."""

__version__ = "0.1.0"

from .client import APIClient, create_api_client
from .collector import collect
from .config import Settings, get_settings
from .jobstate import JobState

__all__ = [
    "APIClient",
    "JobState",
    "Settings",
    "collect",
    "create_api_client",
    "get_settings",
    "__version__",
]
