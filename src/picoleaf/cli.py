"""Command line interface for picoleaf."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from . import __version__
from .client import DEFAULT_TIMEOUT, NanoleafClient, create_token
from .config import (
    DEFAULT_RC_FILE,
    DeviceProfile,
    PicoleafConfig,
    resolve_device,
    save_rc_file,
)
from .exceptions import PicoleafError
from .output import render_layout, render_panel_info, render_raw_json, render_state
from .protocol import MAX_UINT16, PanelColor

logger = logging.getLogger(__name__)

HUE = click.IntRange(0, 360)
PERCENT = click.IntRange(0, 100)
COLOR_BYTE = click.IntRange(0, 255)
TEMPERATURE = click.IntRange(1200, 6500)
UINT16 = click.IntRange(0, MAX_UINT16)


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr through rich; DEBUG when verbose, else WARNING."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    # httpcore/httpx debug output would drown out the request trace
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


@dataclass
class ClientConfig:
    """Global options shared by all commands."""

    verbose: bool = False
    config_file: Optional[Path] = None
    host: Optional[str] = None
    token: Optional[str] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT

    def create_client(self) -> NanoleafClient:
        """Resolve the device endpoint and build a client for it."""
        profile = resolve_device(self.host, self.token, self.config_file)
        logger.debug("Host: %s", profile.host)
        return NanoleafClient(
            profile.host,
            profile.access_token,
            verbose=self.verbose,
            timeout=self.timeout,
        )


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Print picoleaf errors to stderr and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except PicoleafError as e:
            logger.debug(e.technical_message)
            Console(stderr=True).print(Text.assemble(("error:", "red"), " ", e.get_full_message()))
            click.get_current_context().exit(1)

    return wrapper


pass_config = click.make_pass_decorator(ClientConfig)


@click.group()
@click.version_option(version=__version__, prog_name="picoleaf")
@click.option("-v", "--verbose", is_flag=True, help="Log every request and response.")
@click.option(
    "--config",
    "config_file",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Config file (.yaml, or host=/access_token= lines). Defaults to ~/.picoleaf/config.yaml, then ~/.picoleafrc.",
)
@click.option("--host", help="Device address as host:port. Overrides config and PICOLEAF_HOST.")
@click.option("--token", help="Access token. Overrides config and PICOLEAF_TOKEN.")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Request timeout in seconds; 0 waits forever.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_file: Optional[Path],
    host: Optional[str],
    token: Optional[str],
    timeout: float,
) -> None:
    """Control a Nanoleaf device over its local API."""
    setup_logging(verbose)
    ctx.obj = ClientConfig(
        verbose=verbose,
        config_file=config_file,
        host=host,
        token=token,
        timeout=timeout or None,
    )


# Power and color


@cli.command()
@pass_config
@handle_errors
def on(config: ClientConfig) -> None:
    """Turn the device on."""
    config.create_client().set_power(True)


@cli.command()
@pass_config
@handle_errors
def off(config: ClientConfig) -> None:
    """Turn the device off."""
    config.create_client().set_power(False)


@cli.command()
@click.argument("hue", type=HUE)
@click.argument("saturation", type=PERCENT)
@click.argument("lightness", type=PERCENT)
@pass_config
@handle_errors
def hsl(config: ClientConfig, hue: int, saturation: int, lightness: int) -> None:
    """Set color by HUE (0-360), SATURATION (0-100) and LIGHTNESS (0-100)."""
    config.create_client().set_hsl(hue, saturation, lightness)


@cli.command()
@click.argument("red", type=COLOR_BYTE)
@click.argument("green", type=COLOR_BYTE)
@click.argument("blue", type=COLOR_BYTE)
@pass_config
@handle_errors
def rgb(config: ClientConfig, red: int, green: int, blue: int) -> None:
    """Set color by RED, GREEN and BLUE (0-255)."""
    config.create_client().set_rgb(red, green, blue)


@cli.command()
@click.argument("kelvin", type=TEMPERATURE)
@pass_config
@handle_errors
def temp(config: ClientConfig, kelvin: int) -> None:
    """Set color temperature in KELVIN (1200-6500)."""
    config.create_client().set_color_temperature(kelvin)


@cli.command()
@click.argument("brightness", type=PERCENT)
@click.option("--duration", type=UINT16, help="Transition time in tenths of a second.")
@pass_config
@handle_errors
def brightness(config: ClientConfig, brightness: int, duration: Optional[int]) -> None:
    """Set BRIGHTNESS (0-100)."""
    config.create_client().set_brightness(brightness, duration)


# Effects


@cli.group()
def effect() -> None:
    """List, select or stream effects."""
    pass


@effect.command(name="list")
@pass_config
@handle_errors
def effect_list(config: ClientConfig) -> None:
    """List installed effects."""
    for name in config.create_client().list_effects():
        click.echo(name)


@effect.command(name="select")
@click.argument("name")
@pass_config
@handle_errors
def effect_select(config: ClientConfig, name: str) -> None:
    """Activate the effect called NAME."""
    config.create_client().select_effect(name)


def parse_panel_colors(values: tuple[int, ...]) -> list[PanelColor]:
    """Group flat ``panel r g b transition`` values into panel colors."""
    if len(values) % 5 != 0:
        raise click.UsageError(
            "effect custom expects groups of <panel> <red> <green> <blue> <transition>"
        )

    limits = [
        ("panel", UINT16),
        ("red", COLOR_BYTE),
        ("green", COLOR_BYTE),
        ("blue", COLOR_BYTE),
        ("transition", UINT16),
    ]
    frames = []
    for i in range(0, len(values), 5):
        group = values[i:i + 5]
        for (name, limit), value in zip(limits, group):
            if not limit.min <= value <= limit.max:
                raise click.BadParameter(
                    f"{name} must be an integer {limit.min}-{limit.max}, got {value}",
                    param_hint="VALUES",
                )
        panel_id, red, green, blue, transition = group
        frames.append(PanelColor(panel_id, red, green, blue, 0, transition))
    return frames


@effect.command(name="custom")
@click.argument("values", nargs=-1, type=int)
@pass_config
@handle_errors
def effect_custom(config: ClientConfig, values: tuple[int, ...]) -> None:
    """Set individual panel colors.

    VALUES are repeated groups of PANEL RED GREEN BLUE TRANSITION, where
    TRANSITION is in tenths of a second.
    """
    frames = parse_panel_colors(values)
    config.create_client().set_custom_colors(frames)


# Panel info


@cli.group()
def panel() -> None:
    """Show panel information."""
    pass


@panel.command(name="info")
@pass_config
@handle_errors
def panel_info(config: ClientConfig) -> None:
    """Show a full report."""
    render_panel_info(Console(), config.create_client().get_panel_info())


@panel.command(name="info_json")
@pass_config
@handle_errors
def panel_info_json(config: ClientConfig) -> None:
    """Show the raw panel info document."""
    render_raw_json(Console(), config.create_client().get_panel_info_raw())


@panel.command(name="model")
@pass_config
@handle_errors
def panel_model(config: ClientConfig) -> None:
    """Show the model number."""
    click.echo(config.create_client().get_panel_info().model)


@panel.command(name="name")
@pass_config
@handle_errors
def panel_name(config: ClientConfig) -> None:
    """Show the device name."""
    click.echo(config.create_client().get_panel_info().name)


@panel.command(name="version")
@pass_config
@handle_errors
def panel_version(config: ClientConfig) -> None:
    """Show the firmware version."""
    click.echo(config.create_client().get_panel_info().firmware_version)


@panel.command(name="state")
@pass_config
@handle_errors
def panel_state(config: ClientConfig) -> None:
    """Show power, brightness and color state."""
    render_state(Console(), config.create_client().get_panel_info().state)


@panel.command(name="layout")
@pass_config
@handle_errors
def panel_layout(config: ClientConfig) -> None:
    """Show the panel layout."""
    render_layout(Console(), config.create_client().get_panel_info().panel_layout)


# Pairing


@cli.command()
@click.argument("host")
@click.option("--save", is_flag=True, help="Write the host and token to the config file.")
@pass_config
@handle_errors
def pair(config: ClientConfig, host: str, save: bool) -> None:
    """Request an access token from the device at HOST (host:port).

    Hold the device's power button for 5-7 seconds first, until the lights
    flash.
    """
    token = create_token(host, timeout=config.timeout)
    if not save:
        click.echo(token)
        return

    profile = DeviceProfile(name="default", host=host, access_token=token)
    target = config.config_file or DEFAULT_RC_FILE
    if target.suffix in (".yaml", ".yml"):
        settings = PicoleafConfig.load(target) if target.exists() else PicoleafConfig()
        settings.devices[profile.name] = profile
        settings.active_device = profile.name
        settings.save(target)
    else:
        save_rc_file(profile, target)
    click.echo(f"Saved access token for {host} to {target}")


def main() -> None:
    """Console script entry point."""
    cli(prog_name="picoleaf")


__all__ = ["ClientConfig", "cli", "main"]
