"""Tests for drift calculation."""
from routeros_sync.diff import FieldChange, diff_record, summarize_changes
from routeros_sync.resources import IP_SERVICE


class TestDiffRecord:
    """Tests for diff_record."""

    def test_no_changes(self):
        """An empty change list reports nothing to do."""
        """Matching state yields no changes."""
        declared = {"numbers": "ssh", "port": 22}
        live = {"address": "", "port": 22, "tls_version": "any", "vrf": "main", "proto": "tcp"}
        assert diff_record(IP_SERVICE, declared, live) == []

    def test_port_change(self):
        """A differing read-write field is reported."""
        changes = diff_record(IP_SERVICE, {"numbers": "ssh", "port": 2222}, {"port": 22, "address": ""})
        assert changes == [FieldChange("port", 2222, 22)]

    def test_unset_address_equals_universal_default(self):
        """An unset address falls back to "" which matches 0.0.0.0/0."""
        changes = diff_record(IP_SERVICE, {"port": 22}, {"port": 22, "address": "0.0.0.0/0"})
        assert changes == []

    def test_empty_address_vs_network(self):
        """Declared "" against a real network is drift."""
        changes = diff_record(IP_SERVICE, {"address": "", "port": 22}, {"port": 22, "address": "10.0.0.0/24"})
        assert [c.field for c in changes] == ["address"]

    def test_computed_and_write_only_ignored(self):
        """Computed and write-only fields never produce drift."""
        changes = diff_record(
            IP_SERVICE,
            {"numbers": "ssh", "port": 22},
            {"port": 22, "address": "", "proto": "udp", "name": "telnet", "dynamic": True},
        )
        assert changes == []

    def test_user_supplied_always_present_field(self):
        """A user-supplied TLS version is compared."""
        changes = diff_record(
            IP_SERVICE,
            {"port": 443, "tls_version": "only-1.2"},
            {"port": 443, "address": "", "tls_version": "any"},
        )
        assert changes == [FieldChange("tls_version", "only-1.2", "any")]


class TestSummarize:
    """Tests for summarize_changes."""

    def test_no_changes(self):
        """An empty change list reports nothing to do."""
        assert "no changes needed" in summarize_changes(IP_SERVICE, [])

    def test_lists_changes(self):
        """Each change is listed as live -> declared."""
        summary = summarize_changes(IP_SERVICE, [FieldChange("port", 2222, 22)])
        assert "/ip/service: 1 field(s) differ" in summary
        assert "port: 22 -> 2222" in summary
