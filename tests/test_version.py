"""Tests for RouterOS version parsing."""
import pytest
from routeros_sync.errors import ParseError
from routeros_sync.version import DeviceVersion, parse_version, version_at_least


class TestParseVersion:
    """Tests for parse_version."""

    def test_known_threshold(self):
        """7.19 folds to 463616."""
        assert parse_version("7.19") == 463616

    def test_patch_segment(self):
        """Patch goes into the low-order byte."""
        assert parse_version("7.16.2") == parse_version("7.16") + 2

    def test_numeric_not_lexical(self):
        """Segments compare numerically."""
        assert parse_version("7.19") > parse_version("7.16") > parse_version("7.9")
        assert parse_version("6.49.10") > parse_version("6.49.9")
        assert parse_version("7.1") > parse_version("6.49.10")

    def test_channel_suffix(self):
        """The ' (stable)' suffix from /system/resource is accepted."""
        assert parse_version("7.16.2 (stable)") == parse_version("7.16.2")
        assert parse_version("6.49.10 (long-term)") == parse_version("6.49.10")

    def test_prerelease_ordering(self):
        """Pre-releases sit between the previous minor's patches and the release."""
        assert parse_version("7.18.3") < parse_version("7.19beta2")
        assert parse_version("7.19beta2") < parse_version("7.19beta4")
        assert parse_version("7.19beta9") < parse_version("7.19rc1")
        assert parse_version("7.19rc1") < parse_version("7.19")

    def test_major_zero_minor_prerelease(self):
        """7.0beta sorts after every 6.x release."""
        assert parse_version("6.49.17") < parse_version("7.0beta5") < parse_version("7.0")

    @pytest.mark.parametrize("bad", ["", "7", "seven.19", "7.19.x", "v7.19", "7.300"])
    def test_invalid_raises(self, bad):
        """Malformed strings raise ParseError."""
        with pytest.raises(ParseError):
            parse_version(bad)

    def test_non_string_raises(self):
        """A non-string raises ParseError."""
        with pytest.raises(ParseError):
            parse_version(None)


class TestDeviceVersion:
    """Tests for the DeviceVersion value object."""

    def test_at_least(self):
        """Threshold comparison."""
        version = DeviceVersion("7.19")
        assert version.at_least("7.19")
        assert version.at_least("7.16")
        assert not DeviceVersion("7.16").at_least("7.19")

    def test_unparseable_fails_on_construction(self):
        """A bad version is rejected before any filter can use it."""
        with pytest.raises(ParseError):
            DeviceVersion("unknown")

    def test_version_at_least_helper(self):
        """Helper parses both sides."""
        assert version_at_least("7.20.1", "7.19")
        with pytest.raises(ParseError):
            version_at_least("7.19", "latest")
