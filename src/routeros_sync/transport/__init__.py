"""Structured API transports for RouterOS devices."""
from .base import Client, DeviceConfig, Transport, build_query
from .api import ApiClient
from .rest import RestClient

__all__ = [
    "Client",
    "DeviceConfig",
    "Transport",
    "build_query",
    "ApiClient",
    "RestClient",
    "TRANSPORTS",
    "create_client",
]

# Transport registry
TRANSPORTS = {
    Transport.REST.value: RestClient,
    Transport.API.value: ApiClient,
}


def create_client(config: DeviceConfig) -> Client:
    """Factory function to create a client for the configured transport."""
    transport = (config.transport or "").lower()
    if transport not in TRANSPORTS:
        raise ValueError(f"Unknown transport: {transport}")

    return TRANSPORTS[transport](config)
