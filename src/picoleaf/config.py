"""Configuration management for picoleaf."""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .exceptions import ConfigFileInvalidError, ConfigFileNotFoundError, ConfigurationError

# Default configuration locations
DEFAULT_CONFIG_DIR = Path.home() / ".picoleaf"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_RC_FILE = Path.home() / ".picoleafrc"

HOST_ENV = "PICOLEAF_HOST"
TOKEN_ENV = "PICOLEAF_TOKEN"


@dataclass
class DeviceProfile:
    """Device endpoint: address and access token."""

    name: str
    host: str
    access_token: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"name": self.name, "host": self.host, "access_token": self.access_token}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeviceProfile:
        """Create from dictionary."""
        return cls(
            name=data.get("name", "default"),
            host=str(data["host"]),
            access_token=str(data["access_token"]),
        )


@dataclass
class PicoleafConfig:
    """YAML configuration holding one or more device profiles."""

    devices: dict[str, DeviceProfile] = field(default_factory=dict)
    active_device: str = "default"

    def get_active_device(self) -> Optional[DeviceProfile]:
        """Get the currently active device profile."""
        return self.devices.get(self.active_device)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "devices": {name: profile.to_dict() for name, profile in self.devices.items()},
            "active_device": self.active_device,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PicoleafConfig:
        """Create from dictionary."""
        devices = {
            name: DeviceProfile.from_dict({"name": name, **profile_data})
            for name, profile_data in (data.get("devices") or {}).items()
        }
        return cls(
            devices=devices,
            active_device=data.get("active_device", "default"),
        )

    @classmethod
    def load(cls, config_file: Path = DEFAULT_CONFIG_FILE) -> PicoleafConfig:
        """Load configuration from a YAML file."""
        if not config_file.exists():
            raise ConfigFileNotFoundError(str(config_file))

        try:
            with open(config_file, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ConfigFileInvalidError(str(config_file), "top level must be a mapping")
            return cls.from_dict(data)
        except yaml.YAMLError as e:
            raise ConfigFileInvalidError(str(config_file), str(e)) from e
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigFileInvalidError(str(config_file), f"invalid device profile: {e}") from e

    def save(self, config_file: Path = DEFAULT_CONFIG_FILE) -> None:
        """Save configuration to a YAML file."""
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False, default_flow_style=False)


def load_rc_file(rc_file: Path = DEFAULT_RC_FILE) -> DeviceProfile:
    """Load a ``.picoleafrc`` file of ``host=`` and ``access_token=`` lines."""
    if not rc_file.exists():
        raise ConfigFileNotFoundError(str(rc_file))

    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read_string("[picoleaf]\n" + rc_file.read_text(), source=str(rc_file))
    except configparser.Error as e:
        raise ConfigFileInvalidError(str(rc_file), str(e)) from e

    section = parser["picoleaf"]
    return DeviceProfile(
        name="default",
        host=section.get("host", "").strip(),
        access_token=section.get("access_token", "").strip(),
    )


def save_rc_file(profile: DeviceProfile, rc_file: Path = DEFAULT_RC_FILE) -> None:
    """Write a ``.picoleafrc`` file for a device profile."""
    rc_file.parent.mkdir(parents=True, exist_ok=True)
    rc_file.write_text(f"host={profile.host}\naccess_token={profile.access_token}\n")


def load_profile(config_file: Path) -> DeviceProfile:
    """Load the device profile from a YAML config or a ``.picoleafrc`` file."""
    if config_file.suffix in (".yaml", ".yml"):
        config = PicoleafConfig.load(config_file)
        profile = config.get_active_device()
        if profile is None:
            raise ConfigurationError(
                f"Active device '{config.active_device}' is not defined",
                recovery_hint=f"Edit: {config_file}",
            )
        return profile
    return load_rc_file(config_file)


def resolve_device(
    host: Optional[str] = None,
    token: Optional[str] = None,
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DeviceProfile:
    """
    Resolve the device endpoint.

    Explicit arguments win, then the environment (PICOLEAF_HOST,
    PICOLEAF_TOKEN), then ``config_file`` if given, otherwise the YAML config
    and finally ``~/.picoleafrc``.

    Raises:
        ConfigurationError: If no host or no token can be found
    """
    env = os.environ if environ is None else environ
    host = host or env.get(HOST_ENV)
    token = token or env.get(TOKEN_ENV)

    if not (host and token):
        if config_file is not None:
            profile = load_profile(config_file)
        elif DEFAULT_CONFIG_FILE.exists():
            profile = load_profile(DEFAULT_CONFIG_FILE)
        else:
            profile = load_rc_file(DEFAULT_RC_FILE)
        host = host or profile.host
        token = token or profile.access_token

    if not host:
        raise ConfigurationError("No device host configured", recovery_hint="Set host=<address>:<port>")
    if not token:
        raise ConfigurationError(
            "No access token configured",
            recovery_hint="Run 'picoleaf pair <host:port> --save' to request one",
        )
    return DeviceProfile(name="default", host=host, access_token=token)
