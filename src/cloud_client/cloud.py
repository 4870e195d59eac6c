# src/cloud_client/cloud.py
import logging
from typing import Any, List, Mapping, Optional

from .core.config import CloudConfig
from .core.session import Session
from .resources import types
from .resources.base import (
    Resource,
    ResourceQuery,
    ResourceType,
    create_resource,
    get_resource,
)

logger = logging.getLogger(__name__)


class Cloud:
    """
    Точка входа: Session + фасады ресурсов.

    Example:
        >>> with Cloud.from_env() as cloud:
        ...     server = cloud.create(SERVER, {
        ...         "name": "web-1",
        ...         "imageRef": image.id,
        ...         "flavorRef": flavor.id,
        ...     })
        ...     server.wait_for_status("ACTIVE").unwrap()
        ...     for network in cloud.find_networks().filter(shared=True):
        ...         print(network.name)
    """

    def __init__(self, config: Optional[CloudConfig] = None, session: Optional[Session] = None):
        """
        Args:
            config: CloudConfig (ignored when session is given)
            session: Готовая Session
        """
        if session is None:
            session = Session(config or CloudConfig())
        self._session = session

    @classmethod
    def from_config(cls, config: CloudConfig) -> 'Cloud':
        return cls(config=config)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides: Any) -> 'Cloud':
        """
        Конфигурация из переменных окружения OS_* (и .env файла).

        Args:
            env_file: Путь к .env файлу
            **overrides: Поля CloudSettings с приоритетом над окружением
        """
        from .core.env_config import load_from_env
        return cls(config=load_from_env(env_file=env_file, **overrides))

    def with_endpoint_interface(self, interface: str) -> 'Cloud':
        """
        Новый Cloud с другим интерфейсом endpoints.

        Исходный Cloud не меняется и продолжает работать.
        """
        logger.debug("Switching endpoint interface to %s", interface)
        return Cloud(config=self.config.with_endpoint_interface(interface))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        self._session.close()

    @property
    def config(self) -> CloudConfig:
        return self._session.config

    @property
    def session(self) -> Session:
        return self._session

    # ==================== Generic ====================

    def find(self, resource_type: ResourceType) -> ResourceQuery:
        """Query builder for resource_type."""
        return ResourceQuery(self._session, resource_type)

    def get(self, resource_type: ResourceType, id_or_name: str) -> Resource:
        """Resource by ID, falling back to a unique name match."""
        return get_resource(self._session, resource_type, id_or_name)

    def list(self, resource_type: ResourceType, **filters: Any) -> List[Resource]:
        return self.find(resource_type).filter(**filters).all()

    def create(self, resource_type: ResourceType, fields: Mapping[str, Any]) -> Resource:
        return create_resource(self._session, resource_type, fields)

    # ==================== Compute ====================

    def find_servers(self) -> ResourceQuery:
        return self.find(types.SERVER)

    def get_server(self, id_or_name: str) -> Resource:
        return self.get(types.SERVER, id_or_name)

    def list_servers(self, **filters: Any) -> List[Resource]:
        return self.list(types.SERVER, **filters)

    def find_flavors(self) -> ResourceQuery:
        return self.find(types.FLAVOR)

    def get_flavor(self, flavor_id: str) -> Resource:
        return self.get(types.FLAVOR, flavor_id)

    def list_flavors(self, **filters: Any) -> List[Resource]:
        return self.list(types.FLAVOR, **filters)

    def find_keypairs(self) -> ResourceQuery:
        return self.find(types.KEYPAIR)

    def get_keypair(self, name: str) -> Resource:
        return self.get(types.KEYPAIR, name)

    def list_keypairs(self) -> List[Resource]:
        return self.list(types.KEYPAIR)

    # ==================== Image ====================

    def find_images(self) -> ResourceQuery:
        return self.find(types.IMAGE)

    def get_image(self, id_or_name: str) -> Resource:
        return self.get(types.IMAGE, id_or_name)

    def list_images(self, **filters: Any) -> List[Resource]:
        return self.list(types.IMAGE, **filters)

    # ==================== Network ====================

    def find_networks(self) -> ResourceQuery:
        return self.find(types.NETWORK)

    def get_network(self, id_or_name: str) -> Resource:
        return self.get(types.NETWORK, id_or_name)

    def list_networks(self, **filters: Any) -> List[Resource]:
        return self.list(types.NETWORK, **filters)

    def find_subnets(self) -> ResourceQuery:
        return self.find(types.SUBNET)

    def get_subnet(self, id_or_name: str) -> Resource:
        return self.get(types.SUBNET, id_or_name)

    def list_subnets(self, **filters: Any) -> List[Resource]:
        return self.list(types.SUBNET, **filters)

    def find_ports(self) -> ResourceQuery:
        return self.find(types.PORT)

    def get_port(self, id_or_name: str) -> Resource:
        return self.get(types.PORT, id_or_name)

    def list_ports(self, **filters: Any) -> List[Resource]:
        return self.list(types.PORT, **filters)

    def find_floating_ips(self) -> ResourceQuery:
        return self.find(types.FLOATING_IP)

    def get_floating_ip(self, id_or_address: str) -> Resource:
        return self.get(types.FLOATING_IP, id_or_address)

    def list_floating_ips(self, **filters: Any) -> List[Resource]:
        return self.list(types.FLOATING_IP, **filters)
