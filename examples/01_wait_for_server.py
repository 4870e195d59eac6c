"""
Server Lifecycle Example

Boots a server, waits for ACTIVE, then deletes it and waits for it to disappear.

Requires OS_TOKEN, OS_COMPUTE_ENDPOINT and OS_IMAGE_ENDPOINT
(see 03_environment_config.py).
"""

from cloud_client import Cloud, WaitSpec
from cloud_client.core.waiter import Failed, Ready, TimedOut
from cloud_client.resources import SERVER


def boot_and_wait(cloud: Cloud, image_id: str, flavor_id: str):
    """Create a server and inspect the wait outcome explicitly."""
    print("\n=== Boot Server ===")

    server = cloud.create(SERVER, {
        "name": "example-web-1",
        "imageRef": image_id,
        "flavorRef": flavor_id,
    })
    print(f"Requested: {server!r}")

    outcome = server.wait_for_status("ACTIVE", spec=WaitSpec(poll_interval=5, timeout=600))

    if isinstance(outcome, Ready):
        print(f"Server is ACTIVE: {server.id}")
    elif isinstance(outcome, Failed):
        print(f"Build failed ({outcome.kind.value}): {outcome.context}")
    elif isinstance(outcome, TimedOut):
        print(f"Still building after {outcome.elapsed:.0f}s ({outcome.polls} polls)")

    return server


def delete_and_wait(server):
    """Delete and wait, raising on failure."""
    print("\n=== Delete Server ===")

    server.delete()
    server.wait_for_deletion(spec=WaitSpec(poll_interval=2, timeout=300)).unwrap()
    print(f"Deleted: {server.id}")


if __name__ == "__main__":
    with Cloud.from_env() as cloud:
        image = cloud.get_image("cirros-0.6.2-x86_64-disk")
        flavor = cloud.get_flavor("1")
        server = boot_and_wait(cloud, image.id, flavor.id)
        delete_and_wait(server)
