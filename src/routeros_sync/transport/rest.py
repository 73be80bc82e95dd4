"""RouterOS REST API client (RouterOS 7.1+).

Method mapping:
    print   POST   /rest/<path>/print   {".query": [...]}
    add     PUT    /rest/<path>
    set     PATCH  /rest/<path>/<id>
    action  POST   /rest/<path>          e.g. /rest/ip/service/set
    remove  DELETE /rest/<path>/<id>
"""
import asyncio
import logging
from typing import Any, Mapping, Optional

import httpx

from ..errors import AuthError, ConnectError, NotFoundError, TransportError
from ..schema import DeviceItem
from ..utils.connection import with_retry
from .base import Client, DeviceConfig, Transport, build_query

logger = logging.getLogger(__name__)


class RestClient(Client):
    """REST transport over httpx."""

    transport = Transport.REST

    def __init__(self, config: DeviceConfig, http: Optional[httpx.AsyncClient] = None):
        super().__init__(config)
        scheme = "https" if config.use_ssl else "http"
        port = config.port or (443 if config.use_ssl else 80)
        self._base_url = f"{scheme}://{config.host}:{port}/rest"
        self._http = http

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self._base_url,
                auth=(self.config.username, self.config.get_password()),
                verify=self.config.verify_ssl,
                timeout=httpx.Timeout(self.config.timeout),
            )
        return self._http

    async def _request(self, method: str, path: str, payload: Optional[Any] = None) -> Any:
        http = self._client()

        # A refused connection never reached the device, so retrying is safe
        @with_retry(
            max_attempts=self.config.retries,
            min_wait=1,
            max_wait=10,
            exceptions=(httpx.ConnectError,),
        )
        async def _send() -> httpx.Response:
            return await http.request(method, path, json=payload)

        logger.debug(f"[{self.host}] {method} {path} {payload or ''}")
        try:
            response = await asyncio.wait_for(_send(), self.config.timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"{method} {path} on {self.host} timed out after {self.config.timeout}s"
            ) from e
        except httpx.TransportError as e:
            raise ConnectError(f"Failed to reach {self.host}: {e}") from e

        if response.status_code == 401:
            raise AuthError(f"Authentication to {self.host} failed")
        if response.status_code == 404:
            raise NotFoundError(f"{path}: {self._error_message(response)}")
        if response.status_code >= 400:
            raise TransportError(
                f"{method} {path} failed: {self._error_message(response)}",
                status=response.status_code,
            )

        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Extract RouterOS' ``{"error", "message", "detail"}`` error body."""
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            return body.get("detail") or body.get("message") or str(body)
        return str(body)

    async def get(self, path: str, filter: Optional[Mapping[str, str]] = None) -> list[DeviceItem]:
        if filter:
            data = await self._request("POST", f"{path}/print", {".query": build_query(filter)})
        else:
            data = await self._request("GET", path)
        if data is None:
            return []
        # Singletons such as /system/identity come back as a bare object
        if isinstance(data, dict):
            return [data]
        return data

    async def add(self, path: str, item: DeviceItem) -> Optional[str]:
        data = await self._request("PUT", path, item)
        if isinstance(data, dict):
            return data.get(".id")
        return None

    async def set(self, path: str, item: DeviceItem) -> None:
        payload = dict(item)
        item_id = payload.pop(".id")
        await self._request("PATCH", f"{path}/{item_id}", payload)

    async def post(self, path: str, item: DeviceItem) -> None:
        await self._request("POST", path, item)

    async def remove(self, path: str, item_id: str) -> None:
        await self._request("DELETE", f"{path}/{item_id}")

    async def get_version(self) -> str:
        data = await self._request("GET", "/system/resource")
        return data["version"]

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None
