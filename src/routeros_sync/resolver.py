"""Identifier resolution over the command channel.

Some objects only reveal their internal ``.id`` in console output. Each
candidate lookup is a strategy tried in order. Individual failures are
logged and skipped, and when several candidates succeed the last one wins.
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

from .channel import CommandChannel
from .errors import ExecError, IdentifierUnresolved

logger = logging.getLogger(__name__)

# Returned when no candidate produced an identifier
UNKNOWN_ID = "?"

# ``:put [... get [find ...]]`` prints ".id=*1A;address=;..."
ID_PATTERN = re.compile(r"\.id=(\*[0-9A-Fa-f]+)")


class ResolutionStrategy(ABC):
    """One way of finding an object's identifier."""

    @abstractmethod
    async def resolve(self) -> Optional[str]:
        """Return the identifier, or None if this strategy could not find it."""
        pass


class CommandProbe(ResolutionStrategy):
    """Look the object up with ``get [find <filter>]`` on the console."""

    def __init__(self, channel: CommandChannel, path: str, filter_expr: str):
        self.channel = channel
        self.path = path
        self.filter_expr = filter_expr

    @property
    def command(self) -> str:
        return f":put [{self.path} get [ find {self.filter_expr} ]]"

    async def resolve(self) -> Optional[str]:
        try:
            output = await self.channel.run(self.command)
        except ExecError as e:
            logger.warning(f"Lookup of {self.path} by {self.filter_expr} failed: {e}")
            return None

        match = ID_PATTERN.search(output)
        if not match:
            logger.warning(f"Id not found for {self.path} by {self.filter_expr}")
            return None
        return match.group(1)

    def __repr__(self) -> str:
        return f"CommandProbe({self.path!r}, {self.filter_expr!r})"


async def resolve_with(strategies: Iterable[ResolutionStrategy]) -> str:
    """Run every strategy in order and return the last identifier found.

    Never raises for a failed candidate; returns ``UNKNOWN_ID`` when none
    succeeded.
    """
    identifier = UNKNOWN_ID
    for strategy in strategies:
        found = await strategy.resolve()
        if found:
            # No early exit: a later candidate overrides an earlier one
            identifier = found

    if identifier == UNKNOWN_ID:
        logger.error("Id not found by any candidate lookup")
    return identifier


async def resolve(
    channel: CommandChannel,
    path: str,
    candidate_fields: Sequence[str],
) -> str:
    """Resolve the identifier of the object at ``path``.

    Args:
        channel: Open command channel to the device
        path: Device path, e.g. ``/ip/service``
        candidate_fields: ``find`` clauses to try, e.g. ``['name="ssh"']``

    Returns:
        The identifier, or ``UNKNOWN_ID``
    """
    return await resolve_with(
        CommandProbe(channel, path, field) for field in candidate_fields
    )


def lookup_filter(field: str, value: object) -> str:
    """Build a ``find`` clause matching ``field`` against ``value``."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'{field}="{escaped}"'


def require_resolved(identifier: str, path: str) -> str:
    """Turn the unknown sentinel into an ``IdentifierUnresolved`` failure."""
    if not identifier or identifier == UNKNOWN_ID:
        raise IdentifierUnresolved(path)
    return identifier
