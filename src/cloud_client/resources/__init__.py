"""Resource facades over the compute, image and network services."""

from .base import (
    Resource,
    ResourceQuery,
    ResourceType,
    create_resource,
    get_resource,
)
from .types import (
    ALL_TYPES,
    FLAVOR,
    FLOATING_IP,
    IMAGE,
    KEYPAIR,
    NETWORK,
    PORT,
    SERVER,
    SUBNET,
)

__all__ = [
    'Resource',
    'ResourceQuery',
    'ResourceType',
    'create_resource',
    'get_resource',
    'ALL_TYPES',
    'SERVER',
    'FLAVOR',
    'KEYPAIR',
    'IMAGE',
    'NETWORK',
    'SUBNET',
    'PORT',
    'FLOATING_IP',
]
