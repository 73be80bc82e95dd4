"""Base transport abstraction for RouterOS structured APIs."""
import os
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from ..schema import DeviceItem

logger = logging.getLogger(__name__)


class Transport(str, Enum):
    """Structured API dialects a device can be reached over."""
    REST = "rest"
    API = "api"


@dataclass
class DeviceConfig:
    """Connection settings for one router."""
    name: str
    host: str
    username: str
    transport: str = "rest"
    port: Optional[int] = None  # None = transport default
    password: Optional[str] = None
    password_env: str = "ROUTEROS_PASSWORD"
    use_ssl: bool = True
    verify_ssl: bool = True
    timeout: float = 30
    retries: int = 3
    # Command channel (SSH)
    ssh_port: int = 22
    host_key_policy: str = "reject"
    known_hosts: Optional[str] = None

    def get_password(self) -> str:
        """Get password from config or environment variable."""
        if self.password:
            return self.password
        return os.environ.get(self.password_env, "")


def build_query(filter: Mapping[str, str]) -> list[str]:
    """Render a filter as ``key=value`` query clauses."""
    return [f"{key}={value}" for key, value in filter.items()]


class Client(ABC):
    """Abstract client for one structured RouterOS API."""

    transport: Transport

    def __init__(self, config: DeviceConfig):
        self.config = config

    @property
    def host(self) -> str:
        return self.config.host

    @abstractmethod
    async def get(self, path: str, filter: Optional[Mapping[str, str]] = None) -> list[DeviceItem]:
        """Return all items under ``path`` matching every filter clause."""
        pass

    @abstractmethod
    async def add(self, path: str, item: DeviceItem) -> Optional[str]:
        """Create a collection entry and return its ``.id``."""
        pass

    @abstractmethod
    async def set(self, path: str, item: DeviceItem) -> None:
        """Update the collection entry named by ``item['.id']``."""
        pass

    @abstractmethod
    async def post(self, path: str, item: DeviceItem) -> None:
        """Submit a ``set`` action addressed by path rather than by id."""
        pass

    @abstractmethod
    async def remove(self, path: str, item_id: str) -> None:
        """Remove an entry.

        Raises:
            NotFoundError: If the device has no such item
        """
        pass

    @abstractmethod
    async def get_version(self) -> str:
        """Firmware version as reported by ``/system/resource``."""
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
