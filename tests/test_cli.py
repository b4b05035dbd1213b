"""Tests for the command line interface.

Commands run through Click's CliRunner against the fake device from conftest.
"""

import copy
import json

import httpx
import pytest
from click.testing import CliRunner

from picoleaf import __version__
from picoleaf import cli as cli_module
from picoleaf.cli import ClientConfig, cli, parse_panel_colors
from picoleaf.client import NanoleafClient
from picoleaf.exceptions import ConfigFileNotFoundError
from picoleaf.protocol import PanelColor

from conftest import TEST_HOST, TEST_TOKEN
from device_data import FAKE_PANEL_INFO


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def invoke(runner, device, udp_listener, monkeypatch):
    """Run the CLI with its client wired to the fake device."""
    created = []

    def make_client(host, token, verbose=False, timeout=None):
        client = NanoleafClient(
            host,
            token,
            verbose=verbose,
            timeout=timeout,
            transport=httpx.MockTransport(device.handler),
            external_control_port=udp_listener.getsockname()[1],
        )
        created.append(client)
        return client

    monkeypatch.setattr(cli_module, "NanoleafClient", make_client)

    def run(*args):
        result = runner.invoke(cli, ["--host", TEST_HOST, "--token", TEST_TOKEN, *args])
        result.clients = created
        return result

    return run


def test_help(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("on", "off", "hsl", "rgb", "temp", "brightness", "effect", "panel", "pair"):
        assert command in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


@pytest.mark.parametrize(
    "args, body",
    [
        (["on"], {"on": {"value": True}}),
        (["off"], {"on": {"value": False}}),
        (["hsl", "360", "100", "0"], {"brightness": {"value": 0}, "hue": {"value": 360}, "sat": {"value": 100}}),
        (["rgb", "0", "0", "255"], {"brightness": {"value": 50}, "hue": {"value": 240}, "sat": {"value": 100}}),
        (["temp", "1200"], {"ct": {"value": 1200}}),
        (["brightness", "100"], {"brightness": {"value": 100}}),
        (["brightness", "40", "--duration", "20"], {"brightness": {"value": 40, "duration": 20}}),
        (["effect", "select", "Flames"], {"select": "Flames"}),
    ],
)
def test_state_commands(invoke, device, args, body):
    """Test that each command sends the expected request body."""
    result = invoke(*args)
    assert result.exit_code == 0, result.output
    assert device.bodies() == [body]


@pytest.mark.parametrize(
    "args",
    [
        ["hsl", "361", "0", "0"],
        ["hsl", "0", "101", "0"],
        ["rgb", "256", "0", "0"],
        ["temp", "1199"],
        ["temp", "6501"],
        ["brightness", "101"],
        ["brightness", "abc"],
        ["hsl", "1", "2"],
        ["effect", "custom", "1", "255", "0", "0"],
        ["effect", "custom", "1", "256", "0", "0", "0"],
        ["effect", "custom", "65536", "0", "0", "0", "0"],
    ],
)
def test_out_of_range_arguments(invoke, device, args):
    """Test that invalid arguments are usage errors and nothing is sent."""
    result = invoke(*args)
    assert result.exit_code == 2
    assert device.requests == []


def test_effect_list(invoke, device):
    device.routes[("GET", "effects/effectsList")] = (200, ["Flames", "Forest"])
    result = invoke("effect", "list")
    assert result.exit_code == 0
    assert result.output.splitlines() == ["Flames", "Forest"]


def test_effect_custom(invoke, device, udp_listener):
    """Test that custom colors arm external control and send a datagram."""
    result = invoke("effect", "custom", "1", "255", "0", "0", "0", "2", "0", "0", "255", "10")
    assert result.exit_code == 0, result.output
    assert device.bodies() == [
        {"write": {"command": "display", "animType": "extControl", "extControlVersion": "v2"}}
    ]
    assert udp_listener.recv(1024) == bytes.fromhex("0002 0001 ff0000 00 0000 0002 0000ff 00 000a")


def test_parse_panel_colors():
    assert parse_panel_colors((7, 1, 2, 3, 40)) == [PanelColor(7, 1, 2, 3, 0, 40)]
    assert parse_panel_colors(()) == []


@pytest.mark.parametrize(
    "command, expected",
    [
        ("model", "NL22"),
        ("name", "Nanoleaf Light Panels 52:33:1F"),
        ("version", "3.3.4"),
    ],
)
def test_panel_fields(invoke, device, command, expected):
    device.routes[("GET", "")] = (200, FAKE_PANEL_INFO)
    result = invoke("panel", command)
    assert result.exit_code == 0
    assert result.output.strip() == expected


def test_panel_info(invoke, device):
    device.routes[("GET", "")] = (200, FAKE_PANEL_INFO)
    result = invoke("panel", "info")
    assert result.exit_code == 0, result.output
    assert "NL22" in result.output
    assert "S19124C8036" in result.output
    assert "Northern Lights" in result.output
    assert "236" in result.output


def test_panel_info_shows_bracketed_names_verbatim(invoke, device):
    """Test that device strings are printed as text, not rich markup."""
    info = copy.deepcopy(FAKE_PANEL_INFO)
    info["name"] = "Den [/b]"
    info["effects"]["select"] = "[party] mode"
    info["rhythm"]["firmwareVersion"] = "[bold]2.4.3"
    device.routes[("GET", "")] = (200, info)

    result = invoke("panel", "info")
    assert result.exit_code == 0, result.output
    assert "Den [/b]" in result.output
    assert "[party] mode" in result.output
    assert "[bold]2.4.3" in result.output


def test_panel_state(invoke, device):
    device.routes[("GET", "")] = (200, FAKE_PANEL_INFO)
    result = invoke("panel", "state")
    assert result.exit_code == 0
    assert "4000K" in result.output
    assert "hs" in result.output


def test_panel_layout(invoke, device):
    device.routes[("GET", "")] = (200, FAKE_PANEL_INFO)
    result = invoke("panel", "layout")
    assert result.exit_code == 0
    for panel_id in ("107", "236", "61"):
        assert panel_id in result.output


def test_panel_info_json(invoke, device):
    device.routes[("GET", "")] = (200, FAKE_PANEL_INFO)
    result = invoke("panel", "info_json")
    assert result.exit_code == 0
    assert json.loads(result.output) == FAKE_PANEL_INFO


def test_panel_info_json_passes_through_invalid_json(invoke, device):
    """Test that the raw document is shown even if it isn't JSON."""
    device.routes[("GET", "")] = (200, "not json")
    result = invoke("panel", "info_json")
    assert result.exit_code == 0
    assert result.output.strip() == "not json"


def test_panel_info_decode_error(invoke, device):
    device.routes[("GET", "")] = (200, "not json")
    result = invoke("panel", "model")
    assert result.exit_code == 1
    assert "error" in result.output


def test_connection_error_exit_code(invoke, device):
    """Test that transport errors print a message and exit 1."""
    def refuse(request):
        raise httpx.ConnectError("Connection refused", request=request)

    device.routes[("PUT", "state")] = refuse
    result = invoke("on")
    assert result.exit_code == 1
    assert "Could not reach device" in result.output
    assert len(device.requests) == 1


def test_verbose_traces_requests(invoke):
    result = invoke("-v", "off")
    assert result.exit_code == 0
    assert result.clients[0].verbose is True
    assert "PUT state" in result.output


def test_missing_config(runner, monkeypatch, tmp_path):
    """Test that an unconfigured CLI explains how to pair."""
    monkeypatch.delenv("PICOLEAF_HOST", raising=False)
    monkeypatch.delenv("PICOLEAF_TOKEN", raising=False)
    result = runner.invoke(cli, ["--config", str(tmp_path / "missing.rc"), "on"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_client_config_resolves_endpoint(monkeypatch):
    monkeypatch.delenv("PICOLEAF_HOST", raising=False)
    monkeypatch.delenv("PICOLEAF_TOKEN", raising=False)
    client = ClientConfig(host="h:1", token="t", verbose=True, timeout=None).create_client()
    assert (client.host, client.token, client.verbose, client.timeout) == ("h:1", "t", True, None)


def test_client_config_without_endpoint(monkeypatch, tmp_path):
    monkeypatch.delenv("PICOLEAF_HOST", raising=False)
    monkeypatch.delenv("PICOLEAF_TOKEN", raising=False)
    with pytest.raises(ConfigFileNotFoundError):
        ClientConfig(config_file=tmp_path / "none.rc").create_client()


def test_pair_prints_token(runner, monkeypatch):
    monkeypatch.setattr(cli_module, "create_token", lambda host, timeout=None: "new-token")
    result = runner.invoke(cli, ["pair", TEST_HOST])
    assert result.exit_code == 0
    assert result.output.strip() == "new-token"


def test_pair_saves_rc_file(runner, monkeypatch, tmp_path):
    monkeypatch.setattr(cli_module, "create_token", lambda host, timeout=None: "new-token")
    rc_file = tmp_path / ".picoleafrc"
    result = runner.invoke(cli, ["--config", str(rc_file), "pair", TEST_HOST, "--save"])
    assert result.exit_code == 0, result.output
    assert rc_file.read_text() == f"host={TEST_HOST}\naccess_token=new-token\n"


def test_pair_saves_yaml_config(runner, monkeypatch, tmp_path):
    monkeypatch.setattr(cli_module, "create_token", lambda host, timeout=None: "new-token")
    config_file = tmp_path / "config.yaml"
    result = runner.invoke(cli, ["--config", str(config_file), "pair", TEST_HOST, "--save"])
    assert result.exit_code == 0, result.output

    monkeypatch.delenv("PICOLEAF_HOST", raising=False)
    monkeypatch.delenv("PICOLEAF_TOKEN", raising=False)
    client = ClientConfig(config_file=config_file).create_client()
    assert (client.host, client.token) == (TEST_HOST, "new-token")
