"""
Environment Configuration Example

Loads CloudConfig from OS_* variables or a .env file.
"""

import os

from cloud_client import Cloud
from cloud_client.core.env_config import load_from_env


def load_from_dotenv():
    """Load from a .env file."""
    print("\n" + "="*60)
    print("Load from .env")
    print("="*60 + "\n")

    with open('.env', 'w') as f:
        f.write("OS_TOKEN=gAAAA-example\n")
        f.write("OS_COMPUTE_ENDPOINT=https://nova.example.com/v2.1\n")
        f.write("OS_NETWORK_ENDPOINT=https://neutron.example.com\n")
        f.write("OS_WAIT_TIMEOUT=900\n")
        f.write("OS_LOG_LEVEL=DEBUG\n")

    try:
        config = load_from_env()
        print(f"Endpoints: {dict(config.endpoints)}")
        print(f"Interface: {config.endpoint_interface}")
        print(f"Wait: {config.wait}")
    finally:
        os.remove('.env')


def switch_interface():
    """Same cloud, internal endpoints."""
    print("\n" + "="*60)
    print("Internal interface")
    print("="*60 + "\n")

    cloud = Cloud.from_env(
        compute_endpoint="https://nova.example.com/v2.1",
        token="gAAAA-example",
    )
    internal = cloud.with_endpoint_interface("internal")
    print(f"public:   {cloud.config.endpoint_interface}")
    print(f"internal: {internal.config.endpoint_interface}")
    internal.close()
    cloud.close()


if __name__ == "__main__":
    load_from_dotenv()
    switch_interface()
