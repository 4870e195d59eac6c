"""
Environment configuration for Cloud Client.

Example:
    >>> from cloud_client.core.env_config import load_from_env
    >>> config = load_from_env()
"""

from .loader import load_from_env
from .validator import CloudSettings

__all__ = [
    "load_from_env",
    "CloudSettings",
]
