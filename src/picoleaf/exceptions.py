"""
Exception hierarchy for picoleaf.

```
PicoleafError (base)
├── DeviceConnectionError
├── ResponseDecodeError
├── ProtocolLimitError
└── ConfigurationError
    ├── ConfigFileNotFoundError
    └── ConfigFileInvalidError
```

Every exception carries a ``user_message`` for display, a
``technical_message`` for logs and an optional ``recovery_hint``. The client
raises these; the command line catches ``PicoleafError`` and decides how to
present it.
"""

from __future__ import annotations

from typing import Optional


class PicoleafError(Exception):
    """
    Base exception for all picoleaf errors.

    Attributes:
        user_message: Human-friendly message for display
        technical_message: Detailed message for logging
        recovery_hint: Optional hint for how to fix the issue
    """

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """Get complete error message with recovery hint."""
        msg = self.user_message
        if self.recovery_hint:
            msg += f"\n\nSuggestion: {self.recovery_hint}"
        return msg


class DeviceConnectionError(PicoleafError):
    """The device could not be reached (refused, DNS, timeout, socket I/O)."""

    def __init__(self, host: str, reason: str):
        super().__init__(
            user_message=f"Could not reach device at {host}: {reason}",
            technical_message=f"Transport error talking to {host}: {reason}",
            recovery_hint="Check that the device is powered on and that the host and port are correct",
        )
        self.host = host
        self.reason = reason


class ResponseDecodeError(PicoleafError):
    """The device answered with a body that is not the expected JSON shape.

    The undecoded body is kept in ``raw`` so callers can still show it.
    """

    def __init__(self, path: str, reason: str, raw: str = ""):
        super().__init__(
            user_message=f"Unexpected response from device for '{path}': {reason}",
            technical_message=f"Failed to decode response for '{path}': {reason}; body={raw!r}",
            recovery_hint="Check that the access token is valid (an invalid token returns an empty body)",
        )
        self.path = path
        self.reason = reason
        self.raw = raw


class ProtocolLimitError(PicoleafError):
    """A custom color frame cannot be represented in the UDP wire format."""

    pass


class ConfigurationError(PicoleafError):
    """Configuration is missing or cannot be loaded."""

    pass


class ConfigFileNotFoundError(ConfigurationError):
    """No configuration file exists at the expected location."""

    def __init__(self, file_path: str):
        super().__init__(
            user_message=f"Configuration file not found: {file_path}",
            recovery_hint=(
                "Pair with the device using 'picoleaf pair <host:port> --save', "
                "or create the file with host=<host:port> and access_token=<token> lines"
            ),
        )
        self.file_path = file_path


class ConfigFileInvalidError(ConfigurationError):
    """Configuration file has invalid syntax."""

    def __init__(self, file_path: str, parse_error: str):
        super().__init__(
            user_message="Configuration file has invalid syntax",
            technical_message=f"Parse error in {file_path}: {parse_error}",
            recovery_hint=f"Edit: {file_path}",
        )
        self.file_path = file_path
        self.parse_error = parse_error
