"""Router inventory configuration."""
from .inventory import DeviceInventory

__all__ = ["DeviceInventory"]
