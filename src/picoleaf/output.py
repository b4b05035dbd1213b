"""Human-readable rendering of device data."""

from __future__ import annotations

import json

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import BoundedValue, DeviceState, PanelInfo, PanelLayout, Rhythm

# Shape type ids reported in positionData
SHAPE_TYPES = {
    0: "Triangle",
    1: "Rhythm",
    2: "Square",
    3: "Control Square Primary",
    4: "Control Square Passive",
    7: "Hexagon",
    8: "Triangle",
    9: "Mini Triangle",
    12: "Controller",
}


def format_bounded(prop: BoundedValue, unit: str = "") -> str:
    """Format a bounded value, e.g. ``'50 (0-100)'``."""
    text = f"{prop.value}{unit}"
    if prop.min is not None and prop.max is not None:
        text += f" [dim]({prop.min}-{prop.max})[/]"
    return text


def format_bool(value: bool) -> str:
    return "[green]yes[/]" if value else "[dim]no[/]"


def _key_value_table(title: str) -> Table:
    table = Table(
        title=Text(title, justify="center"),
        show_header=False,
        box=box.ROUNDED,
    )
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    return table


def render_state(console: Console, state: DeviceState) -> None:
    """Print the device state with its bounds."""
    table = _key_value_table("State")
    table.add_row("Power", "[green]on[/]" if state.on else "[red]off[/]")
    table.add_row("Brightness", format_bounded(state.brightness, "%"))
    table.add_row("Hue", format_bounded(state.hue, "°"))
    table.add_row("Saturation", format_bounded(state.sat, "%"))
    table.add_row("Color temperature", format_bounded(state.ct, "K"))
    table.add_row("Color mode", Text(state.color_mode) if state.color_mode else "[dim]-[/]")
    console.print(table)


def render_layout(console: Console, layout: PanelLayout) -> None:
    """Print the global orientation and one row per panel."""
    console.print(
        f"Panels: {layout.num_panels}  Side length: {layout.side_length}  "
        f"Orientation: {format_bounded(layout.global_orientation, '°')}"
    )
    table = Table(
        title=Text("Panel Layout", justify="center"),
        show_header=True,
        header_style="bold cyan",
        box=box.ROUNDED,
    )
    table.add_column("Panel ID", style="yellow", justify="right")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Rotation", justify="right")
    table.add_column("Shape", style="magenta")

    for position in layout.positions:
        shape = SHAPE_TYPES.get(position.shape_type, f"Type {position.shape_type}")
        table.add_row(
            str(position.panel_id),
            str(position.x),
            str(position.y),
            f"{position.o}°",
            shape,
        )
    console.print(table)


def render_rhythm(console: Console, rhythm: Rhythm) -> None:
    table = _key_value_table("Rhythm")
    table.add_row("Connected", format_bool(rhythm.connected))
    if rhythm.connected:
        table.add_row("Active", format_bool(rhythm.active))
        table.add_row("ID", str(rhythm.rhythm_id))
        table.add_row("Hardware version", Text(rhythm.hardware_version))
        table.add_row("Firmware version", Text(rhythm.firmware_version))
        table.add_row("Aux available", format_bool(rhythm.aux_available))
        table.add_row("Mode", str(rhythm.mode))
        pos = rhythm.position
        table.add_row("Position", f"x={pos.x:g} y={pos.y:g} o={pos.o:g}")
    console.print(table)


def render_panel_info(console: Console, info: PanelInfo) -> None:
    """Print the full panel info report."""
    table = _key_value_table(info.name or "Nanoleaf")
    table.add_row("Name", Text(info.name))
    table.add_row("Manufacturer", Text(info.manufacturer))
    table.add_row("Model", Text(info.model))
    table.add_row("Serial number", Text(info.serial_no))
    table.add_row("Firmware version", Text(info.firmware_version))
    table.add_row("Effect", Text(info.effects.selected) if info.effects.selected else "[dim]-[/]")
    table.add_row("Effects installed", str(len(info.effects.effects_list)))
    console.print(table)

    render_state(console, info.state)
    render_layout(console, info.panel_layout)
    render_rhythm(console, info.rhythm)


def render_raw_json(console: Console, raw: str) -> None:
    """Pretty-print a raw JSON document, or pass it through if it isn't JSON."""
    try:
        data = json.loads(raw)
    except ValueError:
        console.print(raw, markup=False, highlight=False)
        return
    console.print_json(data=data)
