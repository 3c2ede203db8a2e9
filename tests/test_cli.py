"""Tests for the command-line interface."""

import json

from click.testing import CliRunner

from cli import cli

from conftest import SOURCE_8554


def test_classify_source():
    result = CliRunner().invoke(cli, ['classify', '0x00101c440032'])

    assert result.exit_code == 0
    assert "SOURCE" in result.output
    assert "7236" in result.output


def test_classify_subelements():
    result = CliRunner().invoke(cli, ['classify', '--subelements', '000006' + SOURCE_8554[2:]])

    assert result.exit_code == 0
    assert "8554" in result.output


def test_classify_invalid():
    result = CliRunner().invoke(cli, ['classify', 'xyz'])

    assert result.exit_code == 0
    assert "Invalid WFD info" in result.output


def test_lookup(arp_table):
    result = CliRunner().invoke(cli, ['--arp-table', str(arp_table), 'lookup', 'p2p-wlan0-0'])

    assert result.exit_code == 0
    assert "Peer address: 192.168.49.5" in result.output


def test_lookup_missing_table(tmp_path):
    result = CliRunner().invoke(cli, ['--arp-table', str(tmp_path / "missing"), 'lookup', 'p2p-wlan0-0'])

    assert result.exit_code == 0
    assert "Cannot read ARP table" in result.output


def test_watch_finds_source(arp_table):
    result = CliRunner().invoke(cli, ['--arp-table', str(arp_table), 'watch', 'p2p-wlan0-0', '-p', '8554'])

    assert result.exit_code == 0
    assert "192.168.49.5" in result.output
    assert "8554" in result.output


def test_simulate_client(tmp_path):
    scenario = {
        "group": {"is_group_owner": False, "interface": "p2p-wlan0-0", "clients": []},
        "connection": {
            "group_formed": True,
            "is_group_owner": False,
            "group_owner_address": "192.168.49.1",
        },
        "events": ["state_changed", {"kind": "connection_changed", "connected": True}],
    }
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps(scenario))

    result = CliRunner().invoke(cli, ['simulate', str(path)])

    assert result.exit_code == 0
    assert "192.168.49.1" in result.output
    assert "7236" in result.output


def test_simulate_owner(tmp_path, arp_table):
    scenario = {
        "group": {
            "is_group_owner": True,
            "interface": "p2p-wlan0-0",
            "clients": [{"device_address": "aa:bb:cc:dd:ee:ff", "wfd_dev_info": SOURCE_8554}],
        },
        "arp_table_path": str(arp_table),
    }
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps(scenario))

    result = CliRunner().invoke(cli, ['simulate', str(path)])

    assert result.exit_code == 0
    assert "192.168.49.5" in result.output
    assert "8554" in result.output


def test_simulate_without_group(tmp_path):
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps({"events": ["connection_changed"]}))

    result = CliRunner().invoke(cli, ['simulate', str(path)])

    assert result.exit_code == 0
    assert "No Miracast source discovered" in result.output


def test_simulate_rejects_malformed_events(tmp_path):
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps({"events": [[1]]}))

    result = CliRunner().invoke(cli, ['simulate', str(path)])

    assert result.exit_code == 0
    assert "Invalid scenario" in result.output


def test_simulate_rejects_non_object_scenario(tmp_path):
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps(["connection_changed"]))

    result = CliRunner().invoke(cli, ['simulate', str(path)])

    assert result.exit_code == 0
    assert "Invalid scenario" in result.output
