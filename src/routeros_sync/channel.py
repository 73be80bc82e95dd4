"""SSH command channel to a RouterOS device.

Used as a fallback for lookups the structured APIs cannot answer. Every
``run`` opens its own exec session, so nothing (working directory, script
variables) carries over between commands.

Host keys are checked according to an explicit ``HostKeyPolicy``. The
``auto-add`` policy accepts any key and is only meant for a private
management network.
"""
import asyncio
import logging
import time
from enum import Enum
from typing import Optional

import paramiko

from .errors import AuthError, ConnectError, ExecError
from .utils.connection import run_blocking, with_retry

logger = logging.getLogger(__name__)

RECV_SIZE = 32768
POLL_INTERVAL = 0.01


class HostKeyPolicy(str, Enum):
    """How unknown SSH host keys are treated."""
    REJECT = "reject"       # Only keys already in known_hosts
    WARN = "warn"           # Log and accept
    AUTO_ADD = "auto-add"   # Accept silently (trusted management network)


_PARAMIKO_POLICIES = {
    HostKeyPolicy.REJECT: paramiko.RejectPolicy,
    HostKeyPolicy.WARN: paramiko.WarningPolicy,
    HostKeyPolicy.AUTO_ADD: paramiko.AutoAddPolicy,
}


class CommandChannel:
    """An authenticated SSH connection that runs one command per call.

    Not safe for concurrent use: concurrent ``run`` calls on the same channel
    are serialized. Open separate channels for parallel work.
    """

    def __init__(
        self,
        client: paramiko.SSHClient,
        host: str,
        timeout: Optional[float] = None,
    ):
        self._client: Optional[paramiko.SSHClient] = client
        self.host = host
        self.timeout = timeout
        self._lock = asyncio.Lock()

    @classmethod
    async def open(
        cls,
        host: str,
        username: str,
        secret: str,
        *,
        port: int = 22,
        host_key_policy: HostKeyPolicy | str = HostKeyPolicy.REJECT,
        known_hosts: Optional[str] = None,
        timeout: Optional[float] = None,
        retries: int = 3,
    ) -> "CommandChannel":
        """Dial and authenticate.

        Raises:
            ConnectError: Dial failure, host key rejected or deadline exceeded
            AuthError: Credentials rejected
        """
        policy = HostKeyPolicy(host_key_policy)
        if policy is HostKeyPolicy.AUTO_ADD:
            logger.warning(
                f"Accepting any SSH host key from {host}; "
                "assumes a private management network"
            )

        @with_retry(max_attempts=retries, min_wait=1, max_wait=10)
        def _dial() -> paramiko.SSHClient:
            ssh = paramiko.SSHClient()
            if policy is not HostKeyPolicy.AUTO_ADD:
                ssh.load_system_host_keys()
                if known_hosts:
                    ssh.load_host_keys(known_hosts)
            ssh.set_missing_host_key_policy(_PARAMIKO_POLICIES[policy]())
            try:
                ssh.connect(
                    hostname=host,
                    port=port,
                    username=username,
                    password=secret,
                    timeout=timeout,
                    allow_agent=False,
                    look_for_keys=False,
                )
            except Exception:
                ssh.close()
                raise
            return ssh

        logger.info(f"Opening command channel to {host}:{port}")
        try:
            client = await run_blocking(_dial, timeout)
        except paramiko.AuthenticationException as e:
            raise AuthError(f"Authentication to {host} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise ConnectError(f"Connecting to {host} timed out after {timeout}s") from e
        except (paramiko.SSHException, OSError) as e:
            raise ConnectError(f"Failed to dial {host}: {e}") from e

        return cls(client, host, timeout)

    @property
    def is_open(self) -> bool:
        return self._client is not None

    async def run(self, command: str) -> str:
        """Run one command and return its standard output.

        Raises:
            ExecError: Session could not be created, non-zero exit status,
                closed channel or deadline exceeded
        """
        async with self._lock:
            if self._client is None:
                raise ExecError(f"Command channel to {self.host} is closed")
            ssh = self._client

            def _exec():
                stdin, stdout, stderr = ssh.exec_command(command, timeout=self.timeout)
                chan = stdout.channel
                out = b""
                # Both streams share the session window, so stderr is
                # drained alongside stdout and discarded
                while True:
                    busy = False
                    if chan.recv_ready():
                        out += chan.recv(RECV_SIZE)
                        busy = True
                    if chan.recv_stderr_ready():
                        chan.recv_stderr(RECV_SIZE)
                        busy = True
                    if busy:
                        continue
                    # The exit status arrives after the last data packet
                    if chan.exit_status_ready() and not (chan.recv_ready() or chan.recv_stderr_ready()):
                        break
                    time.sleep(POLL_INTERVAL)
                exit_code = chan.recv_exit_status()
                return exit_code, out.decode("utf-8", errors="ignore")

            logger.debug(f"[{self.host}] $ {command}")
            try:
                exit_code, out = await run_blocking(_exec, self.timeout)
            except asyncio.TimeoutError as e:
                raise ExecError(
                    f"Command {command!r} on {self.host} timed out after {self.timeout}s"
                ) from e
            except (paramiko.SSHException, OSError) as e:
                raise ExecError(f"Failed to run {command!r} on {self.host}: {e}") from e

            if exit_code != 0:
                raise ExecError(
                    f"Command {command!r} on {self.host} exited with status {exit_code}"
                )
            return out

    async def close(self) -> None:
        """Close the underlying SSH connection. Closing twice is a no-op."""
        if self._client is None:
            return
        client, self._client = self._client, None
        await run_blocking(client.close)
        logger.info(f"Closed command channel to {self.host}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False


async def export_config(channel: CommandChannel, terse: bool = True) -> str:
    """Dump the device configuration as a RouterOS script."""
    return await channel.run("/export terse" if terse else "/export")
