"""Tests for wpexport.core.ssh_config - host listing and path suggestions."""

from __future__ import annotations

import pytest

from wpexport.core.ssh_config import list_hosts, parse_ssh_config, suggest_wp_path

CONFIG = """\
Host *
    ServerAliveInterval 30

Host github.com
    User git

Host client.pressable
    HostName ssh.pressable.com
    User client

host acme.wpengine acme-alias
    HostName acme.ssh.wpengine.net

Host staging-?
    User deploy

Host !excluded
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "ssh_config"
    path.write_text(CONFIG)
    return path


class TestParseSshConfig:
    def test_concrete_hosts_only(self, config_file):
        assert parse_ssh_config(config_file) == ["client.pressable", "acme.wpengine", "acme-alias"]

    def test_missing_file(self, tmp_path):
        assert parse_ssh_config(tmp_path / "nope") == []


class TestSuggestWpPath:
    @pytest.mark.parametrize(
        "host, expected",
        [
            ("client.pressable", "/htdocs"),
            ("acme.wpengine", "/home/wpe-user/sites/acme"),
            ("user@acme.wpengine.net", "/home/wpe-user/sites/acme"),
            ("myserver", "~/public_html"),
        ],
    )
    def test_suggestions(self, host, expected):
        assert suggest_wp_path(host) == expected


def test_list_hosts(config_file):
    hosts = list_hosts(config_file)
    assert hosts[0].alias == "client.pressable"
    assert hosts[0].suggested_path == "/htdocs"
