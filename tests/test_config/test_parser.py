"""Tests for SSH config alias resolution."""

from pathlib import Path

import pytest

from platform_spec.config.parser import SSHConfigParser, resolve_hostname


@pytest.fixture
def ssh_config(tmp_path: Path) -> Path:
    """Sample SSH config file."""
    config = tmp_path / "config"
    config.write_text(
        """
# bastions
Host bastion
    HostName 203.0.113.10
    User jump

Host web-* !web-legacy
    HostName %h.internal.example.com

Host db1 db2
    HostName=10.0.0.5

Match host special
    HostName 192.0.2.1

Host *
    ServerAliveInterval 30
"""
    )
    return config


class TestSSHConfigParser:
    """Tests for SSHConfigParser.get_hostname."""

    def test_exact_alias(self, ssh_config: Path) -> None:
        """Exact Host match returns its HostName."""
        assert SSHConfigParser(ssh_config).get_hostname("bastion") == "203.0.113.10"

    def test_wildcard_with_percent_h(self, ssh_config: Path) -> None:
        """Wildcards match and %h expands to the alias."""
        parser = SSHConfigParser(ssh_config)
        assert parser.get_hostname("web-1") == "web-1.internal.example.com"

    def test_negated_pattern(self, ssh_config: Path) -> None:
        """A matching negated pattern excludes the alias."""
        assert SSHConfigParser(ssh_config).get_hostname("web-legacy") is None

    def test_multiple_patterns_and_equals_syntax(self, ssh_config: Path) -> None:
        """Host lines with several names and Key=Value syntax are handled."""
        assert SSHConfigParser(ssh_config).get_hostname("db2") == "10.0.0.5"

    def test_match_block_ignored(self, ssh_config: Path) -> None:
        """Options inside Match blocks are not applied."""
        assert SSHConfigParser(ssh_config).get_hostname("special") is None

    def test_unknown_alias(self, ssh_config: Path) -> None:
        """Aliases without a HostName return None."""
        assert SSHConfigParser(ssh_config).get_hostname("other") is None

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing config file yields None."""
        assert SSHConfigParser(tmp_path / "nope").get_hostname("bastion") is None

    def test_file_reread_on_each_lookup(self, ssh_config: Path) -> None:
        """Edits are seen by the next lookup."""
        parser = SSHConfigParser(ssh_config)
        assert parser.get_hostname("bastion") == "203.0.113.10"

        ssh_config.write_text("Host bastion\n    HostName 198.51.100.7\n")
        assert parser.get_hostname("bastion") == "198.51.100.7"


class TestResolveHostname:
    """Tests for resolve_hostname."""

    def test_first_config_wins(self, tmp_path: Path, ssh_config: Path) -> None:
        """The first config that sets a HostName wins."""
        system = tmp_path / "ssh_config"
        system.write_text("Host bastion\n    HostName 10.9.9.9\n")

        assert resolve_hostname("bastion", [ssh_config, system]) == "203.0.113.10"

    def test_falls_through_to_later_config(self, tmp_path: Path, ssh_config: Path) -> None:
        """Later configs are consulted when earlier ones have no answer."""
        system = tmp_path / "ssh_config"
        system.write_text("Host mail\n    HostName 10.1.1.1\n")

        assert resolve_hostname("mail", [ssh_config, system]) == "10.1.1.1"

    def test_unresolved_returns_input(self, tmp_path: Path) -> None:
        """Unknown hosts are returned unchanged."""
        assert resolve_hostname("198.51.100.1", [tmp_path / "none"]) == "198.51.100.1"
