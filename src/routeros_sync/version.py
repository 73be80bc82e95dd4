"""RouterOS firmware version parsing.

Versions are folded into a single integer so callers can gate behaviour on
``version >= threshold``:

    7.19      -> 7 << 16 | 19 << 8 | 0  = 463616
    7.16.2    -> 7 << 16 | 16 << 8 | 2  = 462850

Pre-release builds (``7.20beta3``, ``7.19rc1``) sort after every stable patch
of the previous minor release and before the release itself.
"""
import re
from dataclasses import dataclass, field

from .errors import ParseError

VERSION_RE = re.compile(
    r"^\s*(?P<major>\d+)\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?"
    r"(?:(?P<stage>alpha|beta|rc)(?P<build>\d+))?"
    r"(?:\s+\((?P<channel>[a-z-]+)\))?\s*$"
)

MAX_MINOR = 255
MAX_PATCH = 191
PRERELEASE_STAGES = {"alpha": 0, "beta": 1, "rc": 2}


def parse_version(version: str) -> int:
    """Parse a RouterOS version string into a comparable integer.

    Raises:
        ParseError: If the string is not a RouterOS version
    """
    if not isinstance(version, str):
        raise ParseError(f"Invalid RouterOS version: {version!r}")

    match = VERSION_RE.match(version)
    if not match:
        raise ParseError(f"Invalid RouterOS version: {version!r}")

    major = int(match.group("major"))
    minor = int(match.group("minor"))
    patch = int(match.group("patch") or 0)

    if minor > MAX_MINOR or patch > MAX_PATCH:
        raise ParseError(f"RouterOS version segment out of range: {version!r}")

    value = major << 16 | minor << 8 | patch

    stage = match.group("stage")
    if stage:
        if patch:
            raise ParseError(f"Pre-release tag on a patch release: {version!r}")
        build = min(int(match.group("build")), 15)
        value = value - 64 + PRERELEASE_STAGES[stage] * 16 + build

    return value


def version_at_least(version: str, threshold: str) -> bool:
    """Check ``version >= threshold``. Parse failures propagate."""
    return parse_version(version) >= parse_version(threshold)


@dataclass(frozen=True)
class DeviceVersion:
    """Firmware version reported by one device.

    Parsing happens on construction, so an unparseable version fails before
    any filter is built from it.
    """
    raw: str
    value: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "value", parse_version(self.raw))

    def at_least(self, threshold: str) -> bool:
        return self.value >= parse_version(threshold)

    def __str__(self) -> str:
        return self.raw
