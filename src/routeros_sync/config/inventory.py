"""Router inventory management from YAML configuration."""
import logging
from pathlib import Path
from typing import Optional

import yaml

from ..channel import CommandChannel
from ..synchronizer import SyncContext
from ..transport import Client, DeviceConfig, create_client

logger = logging.getLogger(__name__)


class DeviceInventory:
    """Manages the router inventory loaded from YAML config.

    ```yaml
    defaults:
      username: admin
      password_env: ROUTEROS_PASSWORD
      transport: rest
      host_key_policy: reject

    devices:
      core-router:
        name: "Core router"
        host: 192.168.88.1
      branch-router:
        name: "Branch router"
        host: 10.1.0.1
        transport: api
        use_ssl: false
    ```
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._find_config()
        self._config: dict = {}
        self._load_config()

    def _find_config(self) -> str:
        """Find the routers.yaml config file."""
        search_paths = [
            Path.cwd() / "configs" / "routers.yaml",
            Path.cwd() / "routers.yaml",
            Path.home() / ".config" / "routeros-sync" / "routers.yaml",
            Path("/etc/routeros-sync/routers.yaml"),
        ]

        for path in search_paths:
            if path.exists():
                return str(path)

        raise FileNotFoundError(
            "Could not find routers.yaml. Create one in ./configs/routers.yaml"
        )

    def _load_config(self) -> None:
        """Load the YAML configuration."""
        with open(self.config_path) as f:
            self._config = yaml.safe_load(f) or {}

        # Merge defaults
        defaults = self._config.get("defaults", {})
        for device_id, device_config in self._config.get("devices", {}).items():
            for key, value in defaults.items():
                if key not in device_config:
                    device_config[key] = value
            device_config.setdefault("name", device_id)

        logger.debug(
            f"Loaded {len(self.get_device_ids())} routers from {self.config_path}"
        )

    def get_device_ids(self) -> list[str]:
        """Get all device IDs."""
        return list(self._config.get("devices", {}).keys())

    def get_device_config(self, device_id: str) -> dict:
        """Get raw config for a device."""
        devices = self._config.get("devices", {})
        if device_id not in devices:
            raise KeyError(f"Unknown device: {device_id}")
        return devices[device_id]

    def get_config(self, device_id: str) -> DeviceConfig:
        """Get typed config for a device."""
        return DeviceConfig(**self.get_device_config(device_id))

    def create_client(self, device_id: str) -> Client:
        """Create a structured API client for a device."""
        return create_client(self.get_config(device_id))

    async def open_channel(self, device_id: str) -> CommandChannel:
        """Open a command channel to a device."""
        config = self.get_config(device_id)
        return await CommandChannel.open(
            config.host,
            config.username,
            config.get_password(),
            port=config.ssh_port,
            host_key_policy=config.host_key_policy,
            known_hosts=config.known_hosts,
            timeout=config.timeout,
            retries=config.retries,
        )

    async def connect(self, device_id: str) -> SyncContext:
        """Create a client and a ready synchronization context for a device.

        The context opens a fresh command channel whenever a lookup needs one.
        """
        client = self.create_client(device_id)

        async def channel_factory() -> CommandChannel:
            return await self.open_channel(device_id)

        try:
            return await SyncContext.connect(client, channel_factory)
        except Exception:
            await client.close()
            raise
