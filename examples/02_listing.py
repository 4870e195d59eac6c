"""
Listing Examples

Demonstrates lazy paginated listing, filters and recovery from a failed page.
"""

from cloud_client import Cloud, CloudClientException


def list_active_servers(cloud: Cloud):
    """Iterate lazily: pages are fetched only as needed."""
    print("\n=== Active Servers ===")

    query = cloud.find_servers().filter(status="ACTIVE").sort_by("created_at", "desc").with_page_size(50)
    for server in query:
        print(f"{server.id}  {server.name}")


def first_five_networks(cloud: Cloud):
    """with_limit stops without fetching extra pages."""
    print("\n=== First 5 Networks ===")

    for network in cloud.find_networks().with_limit(5).all():
        print(f"{network.id}  {network.name}  {network.status}")


def resilient_listing(cloud: Cloud, attempts: int = 3):
    """Retry the same page on transient errors; the iterator keeps its place."""
    print("\n=== Ports (with retry) ===")

    iterator = cloud.find_ports().with_page_size(100).iterator()
    failures = 0
    while True:
        try:
            port = iterator.fetch_next()
        except CloudClientException as e:
            failures += 1
            if not e.retryable or failures >= attempts:
                raise
            print(f"Page fetch failed ({e.kind.value}), retrying")
            continue
        if port is None:
            break
        print(f"{port.id}  {port.get('mac_address')}")

    print(f"Fetched {iterator.pages_fetched} page(s)")


if __name__ == "__main__":
    with Cloud.from_env() as cloud:
        list_active_servers(cloud)
        first_five_networks(cloud)
        resilient_listing(cloud)
