"""RouterOS legacy binary API client (ports 8728/8729) via routeros_api.

routeros_api is blocking, so every call runs in the default executor the
same way the SSH handlers do.
"""
import asyncio
import logging
from typing import Any, Callable, Mapping, Optional, TypeVar

from routeros_api import RouterOsApiPool
from routeros_api.exceptions import (
    RouterOsApiCommunicationError,
    RouterOsApiConnectionError,
    RouterOsApiError,
)

from ..errors import AuthError, ConnectError, NotFoundError, TransportError
from ..schema import DeviceItem
from ..utils.connection import run_blocking, with_retry
from .base import Client, DeviceConfig, Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

AUTH_FAILURES = ("invalid user name or password", "cannot log in")
MISSING_ITEM = "no such item"


def _outgoing(item: Mapping[str, str]) -> dict[str, str]:
    """routeros_api addresses the ``.id`` attribute as ``id``."""
    return {("id" if key == ".id" else key): value for key, value in item.items()}


def _incoming(item: Mapping[str, Any]) -> DeviceItem:
    result: DeviceItem = {}
    for key, value in item.items():
        if key == "id":
            key = ".id"
        else:
            key = key.replace("_", "-")
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="ignore")
        result[key] = value
    return result


class ApiClient(Client):
    """Binary API transport over a routeros_api connection pool."""

    transport = Transport.API

    def __init__(self, config: DeviceConfig, pool: Optional[RouterOsApiPool] = None):
        super().__init__(config)
        self._pool = pool
        self._api: Any = None

    def _connect(self) -> Any:
        if self._api is None:
            if self._pool is None:
                self._pool = RouterOsApiPool(
                    self.config.host,
                    username=self.config.username,
                    password=self.config.get_password(),
                    port=self.config.port or (8729 if self.config.use_ssl else 8728),
                    plaintext_login=True,
                    use_ssl=self.config.use_ssl,
                    ssl_verify=self.config.verify_ssl,
                    ssl_verify_hostname=self.config.verify_ssl,
                )
            connect = with_retry(
                max_attempts=self.config.retries,
                min_wait=1,
                max_wait=10,
                exceptions=(RouterOsApiConnectionError,),
            )(self._pool.get_api)
            self._api = connect()
            logger.info(f"Connected to {self.host} over the binary API")
        return self._api

    async def _call(self, description: str, func: Callable[[Any], T]) -> T:
        logger.debug(f"[{self.host}] {description}")
        try:
            return await run_blocking(lambda: func(self._connect()), self.config.timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"{description} on {self.host} timed out after {self.config.timeout}s"
            ) from e
        except RouterOsApiConnectionError as e:
            self._api = None
            raise ConnectError(f"Failed to reach {self.host}: {e}") from e
        except RouterOsApiCommunicationError as e:
            message = str(e)
            lowered = message.lower()
            if any(marker in lowered for marker in AUTH_FAILURES):
                raise AuthError(f"Authentication to {self.host} failed: {message}") from e
            if MISSING_ITEM in lowered:
                raise NotFoundError(f"{description}: {message}") from e
            raise TransportError(f"{description} failed: {message}") from e
        except RouterOsApiError as e:
            raise TransportError(f"{description} failed: {e}") from e

    async def get(self, path: str, filter: Optional[Mapping[str, str]] = None) -> list[DeviceItem]:
        query = _outgoing(filter or {})
        rows = await self._call(
            f"{path}/print {query}",
            lambda api: api.get_resource(path).get(**query),
        )
        return [_incoming(row) for row in rows]

    async def add(self, path: str, item: DeviceItem) -> Optional[str]:
        result = await self._call(
            f"{path}/add",
            lambda api: api.get_resource(path).add(**_outgoing(item)),
        )
        done = getattr(result, "done_message", None) or {}
        return done.get("ret")

    async def set(self, path: str, item: DeviceItem) -> None:
        await self._call(
            f"{path}/set {item.get('.id')}",
            lambda api: api.get_resource(path).set(**_outgoing(item)),
        )

    async def post(self, path: str, item: DeviceItem) -> None:
        await self._call(
            f"{path}/set",
            lambda api: api.get_resource(path).call("set", _outgoing(item)),
        )

    async def remove(self, path: str, item_id: str) -> None:
        await self._call(
            f"{path}/remove {item_id}",
            lambda api: api.get_resource(path).remove(id=item_id),
        )

    async def get_version(self) -> str:
        rows = await self._call(
            "/system/resource/print",
            lambda api: api.get_resource("/system/resource").get(),
        )
        return _incoming(rows[0])["version"]

    async def close(self) -> None:
        if self._pool is not None:
            pool = self._pool
            self._pool = None
            self._api = None
            await run_blocking(pool.disconnect)
