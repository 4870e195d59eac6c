"""Known resource types of compute, image and network services."""

from .base import ResourceType

# Compute (Nova)

SERVER = ResourceType(
    name="server",
    service_type="compute",
    path="servers",
    list_path="servers/detail",
    collection_key="servers",
    resource_key="server",
    fault_field="fault",
)

FLAVOR = ResourceType(
    name="flavor",
    service_type="compute",
    path="flavors",
    list_path="flavors/detail",
    collection_key="flavors",
    resource_key="flavor",
    status_field=None,
    name_filter=None,
)

# Keypairs are addressed by name and wrapped one level deeper in lists
KEYPAIR = ResourceType(
    name="keypair",
    service_type="compute",
    path="os-keypairs",
    collection_key="keypairs",
    resource_key="keypair",
    item_key="keypair",
    id_field="name",
    status_field=None,
    name_filter=None,
    paginated=False,
)

# Image (Glance v2): single image bodies are not wrapped

IMAGE = ResourceType(
    name="image",
    service_type="image",
    path="v2/images",
    collection_key="images",
    error_statuses=("killed",),
)

# Network (Neutron)

NETWORK = ResourceType(
    name="network",
    service_type="network",
    path="v2.0/networks",
    collection_key="networks",
    resource_key="network",
)

SUBNET = ResourceType(
    name="subnet",
    service_type="network",
    path="v2.0/subnets",
    collection_key="subnets",
    resource_key="subnet",
    status_field=None,
)

PORT = ResourceType(
    name="port",
    service_type="network",
    path="v2.0/ports",
    collection_key="ports",
    resource_key="port",
)

FLOATING_IP = ResourceType(
    name="floating IP",
    service_type="network",
    path="v2.0/floatingips",
    collection_key="floatingips",
    resource_key="floatingip",
    name_filter="floating_ip_address",
)

ALL_TYPES = (SERVER, FLAVOR, KEYPAIR, IMAGE, NETWORK, SUBNET, PORT, FLOATING_IP)
