# tests/test_hosts.py
import pytest

from icmpsweep._hosts import parse_hosts, read_hosts


def test_first_field_only():
    lines = ["8.8.8.8,google,dns\n", "1.1.1.1,cloudflare\n"]
    assert parse_hosts(lines) == ["8.8.8.8", "1.1.1.1"]


def test_skips_comments_and_blank_lines():
    lines = ["# host,description\n", "\n", "   \n", "example.com\n", "  # indented comment\n", ",empty first\n"]
    assert parse_hosts(lines) == ["example.com"]


def test_strips_whitespace_around_host():
    assert parse_hosts(["  10.0.0.1 , lab\n"]) == ["10.0.0.1"]


def test_custom_delimiter_and_comment():
    lines = [";; ignored\n", "::1;loopback\n", "fe80::1;link\n"]
    assert parse_hosts(lines, delimiter=";", comment=";;") == ["::1", "fe80::1"]


def test_read_hosts_from_file(tmp_path):
    path = tmp_path / "hosts.csv"
    path.write_text("# targets\n192.0.2.1,a\n192.0.2.2,b\n", encoding="utf-8")
    assert read_hosts(path) == ["192.0.2.1", "192.0.2.2"]


def test_read_hosts_missing_file(tmp_path):
    with pytest.raises(OSError):
        read_hosts(tmp_path / "missing.csv")
