"""REST wire model for the Nanoleaf local API.

Two distinct state shapes are used:

- ``StateUpdate`` is what we send. Every property is optional and only the
  properties that are set are serialized, so absent properties are left
  untouched on the device. A property object holding ``0`` is still present.
- ``DeviceState`` is what the device reports back, with each numeric property
  annotated with the device's ``min``/``max`` bounds.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional


def _object(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"expected object for '{what}', got {type(value).__name__}")
    return value


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    """Return a nested JSON object, or an empty one if the device omitted it."""
    value = data.get(key)
    if value is None:
        return {}
    return _object(value, key)


def _string_list(value: Any, what: str) -> list[str]:
    """Return a JSON array of strings, rejecting any other element type."""
    if not isinstance(value, list):
        raise TypeError(f"expected array for '{what}', got {type(value).__name__}")
    for item in value:
        if not isinstance(item, str):
            raise TypeError(f"expected string in '{what}', got {type(item).__name__}")
    return value


# Write shape


@dataclass(frozen=True)
class OnProperty:
    """Power state."""

    value: bool

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True)
class BrightnessProperty:
    """Brightness 0-100, with an optional transition in tenths of a second."""

    value: int
    duration: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"value": self.value}
        if self.duration is not None:
            data["duration"] = self.duration
        return data


@dataclass(frozen=True)
class HueProperty:
    """Hue 0-360 degrees."""

    value: int

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True)
class SaturationProperty:
    """Saturation 0-100."""

    value: int

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True)
class ColorTemperatureProperty:
    """Color temperature 1200-6500 K."""

    value: int

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True)
class StateUpdate:
    """Sparse state update sent with ``PUT state``."""

    on: Optional[OnProperty] = None
    brightness: Optional[BrightnessProperty] = None
    ct: Optional[ColorTemperatureProperty] = None
    hue: Optional[HueProperty] = None
    sat: Optional[SaturationProperty] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary holding only the properties that are set."""
        data: dict[str, Any] = {}
        if self.on is not None:
            data["on"] = self.on.to_dict()
        if self.brightness is not None:
            data["brightness"] = self.brightness.to_dict()
        if self.ct is not None:
            data["ct"] = self.ct.to_dict()
        if self.hue is not None:
            data["hue"] = self.hue.to_dict()
        if self.sat is not None:
            data["sat"] = self.sat.to_dict()
        return data

    def to_json(self) -> bytes:
        return encode_body(self.to_dict())


@dataclass(frozen=True)
class EffectSelect:
    """Body for ``PUT effects/select``."""

    select: str

    def to_dict(self) -> dict[str, Any]:
        return {"select": self.select}

    def to_json(self) -> bytes:
        return encode_body(self.to_dict())


# Fixed body that switches the active effect to UDP streaming mode
EXTERNAL_CONTROL_REQUEST: dict[str, Any] = {
    "write": {
        "command": "display",
        "animType": "extControl",
        "extControlVersion": "v2",
    }
}


def encode_body(data: Any) -> bytes:
    """Serialize a request body as compact JSON."""
    return json.dumps(data, separators=(",", ":")).encode("utf-8")


# Read shape


@dataclass(frozen=True)
class BoundedValue:
    """A numeric property as reported by the device, with its bounds."""

    value: int = 0
    min: Optional[int] = None
    max: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BoundedValue:
        minimum = data.get("min")
        maximum = data.get("max")
        return cls(
            value=int(data.get("value", 0)),
            min=int(minimum) if minimum is not None else None,
            max=int(maximum) if maximum is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"value": self.value}
        if self.min is not None:
            data["min"] = self.min
        if self.max is not None:
            data["max"] = self.max
        return data


@dataclass(frozen=True)
class DeviceState:
    """Current device state as returned by ``GET state`` or the root resource."""

    on: bool = False
    brightness: BoundedValue = field(default_factory=BoundedValue)
    hue: BoundedValue = field(default_factory=BoundedValue)
    sat: BoundedValue = field(default_factory=BoundedValue)
    ct: BoundedValue = field(default_factory=BoundedValue)
    color_mode: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeviceState:
        return cls(
            on=bool(_section(data, "on").get("value", False)),
            brightness=BoundedValue.from_dict(_section(data, "brightness")),
            hue=BoundedValue.from_dict(_section(data, "hue")),
            sat=BoundedValue.from_dict(_section(data, "sat")),
            ct=BoundedValue.from_dict(_section(data, "ct")),
            color_mode=str(data.get("colorMode") or ""),
        )


@dataclass(frozen=True)
class Effects:
    """Effects metadata: the selected effect and the installed effect names."""

    selected: str = ""
    effects_list: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Effects:
        return cls(
            selected=str(data.get("select") or ""),
            effects_list=_string_list(data.get("effectsList") or [], "effectsList"),
        )


@dataclass(frozen=True)
class PanelPosition:
    """One physical panel in the layout."""

    panel_id: int
    x: int
    y: int
    o: int
    shape_type: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PanelPosition:
        return cls(
            panel_id=int(data.get("panelId", 0)),
            x=int(data.get("x", 0)),
            y=int(data.get("y", 0)),
            o=int(data.get("o", 0)),
            shape_type=int(data.get("shapeType", 0)),
        )


@dataclass(frozen=True)
class PanelLayout:
    """Panel layout: panel positions and the global orientation."""

    num_panels: int = 0
    side_length: int = 0
    positions: list[PanelPosition] = field(default_factory=list)
    global_orientation: BoundedValue = field(default_factory=BoundedValue)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PanelLayout:
        layout = _section(data, "layout")
        positions = layout.get("positionData") or []
        if not isinstance(positions, list):
            raise TypeError("expected array for 'positionData'")
        return cls(
            num_panels=int(layout.get("numPanels", 0)),
            side_length=int(layout.get("sideLength", 0)),
            positions=[PanelPosition.from_dict(_object(p, "positionData")) for p in positions],
            global_orientation=BoundedValue.from_dict(_section(data, "globalOrientation")),
        )


@dataclass(frozen=True)
class RhythmPosition:
    x: float = 0.0
    y: float = 0.0
    o: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RhythmPosition:
        return cls(
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            o=float(data.get("o", 0.0)),
        )


@dataclass(frozen=True)
class Rhythm:
    """Status of the sound-reactive rhythm module."""

    connected: bool = False
    active: bool = False
    rhythm_id: int = 0
    hardware_version: str = ""
    firmware_version: str = ""
    aux_available: bool = False
    mode: int = 0
    position: RhythmPosition = field(default_factory=RhythmPosition)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Rhythm:
        return cls(
            connected=bool(data.get("rhythmConnected", False)),
            active=bool(data.get("rhythmActive", False)),
            rhythm_id=int(data.get("rhythmId") or 0),
            hardware_version=str(data.get("hardwareVersion") or ""),
            firmware_version=str(data.get("firmwareVersion") or ""),
            aux_available=bool(data.get("auxAvailable", False)),
            mode=int(data.get("rhythmMode") or 0),
            position=RhythmPosition.from_dict(_section(data, "rhythmPos")),
        )


@dataclass(frozen=True)
class PanelInfo:
    """Snapshot of the device returned by the root resource."""

    name: str = ""
    serial_no: str = ""
    manufacturer: str = ""
    firmware_version: str = ""
    model: str = ""
    state: DeviceState = field(default_factory=DeviceState)
    effects: Effects = field(default_factory=Effects)
    panel_layout: PanelLayout = field(default_factory=PanelLayout)
    rhythm: Rhythm = field(default_factory=Rhythm)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PanelInfo:
        if not isinstance(data, dict):
            raise TypeError(f"expected object, got {type(data).__name__}")
        return cls(
            name=str(data.get("name") or ""),
            serial_no=str(data.get("serialNo") or ""),
            manufacturer=str(data.get("manufacturer") or ""),
            firmware_version=str(data.get("firmwareVersion") or ""),
            model=str(data.get("model") or ""),
            state=DeviceState.from_dict(_section(data, "state")),
            effects=Effects.from_dict(_section(data, "effects")),
            panel_layout=PanelLayout.from_dict(_section(data, "panelLayout")),
            rhythm=Rhythm.from_dict(_section(data, "rhythm")),
        )
