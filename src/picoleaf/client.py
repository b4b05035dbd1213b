"""Nanoleaf local API client for picoleaf."""

from __future__ import annotations

import errno
import json
import logging
import socket
from typing import Any, Optional, Sequence
from urllib.parse import urlsplit

import httpx

from .colors import rgb_to_hsl
from .exceptions import (
    ConfigurationError,
    DeviceConnectionError,
    PicoleafError,
    ProtocolLimitError,
    ResponseDecodeError,
)
from .models import (
    EXTERNAL_CONTROL_REQUEST,
    BrightnessProperty,
    ColorTemperatureProperty,
    DeviceState,
    EffectSelect,
    HueProperty,
    OnProperty,
    PanelInfo,
    SaturationProperty,
    StateUpdate,
    encode_body,
)
from .protocol import EXTERNAL_CONTROL_PORT, PanelColor, encode_custom_colors

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _http_client(timeout: Optional[float], transport: Optional[httpx.BaseTransport]) -> httpx.Client:
    """Create a single-use HTTP client. Requests are never retried."""
    return httpx.Client(
        timeout=timeout,
        transport=transport or httpx.HTTPTransport(retries=0),
    )


def _decode(path: str, body: str) -> Any:
    try:
        return json.loads(body)
    except ValueError as e:
        raise ResponseDecodeError(path, str(e), raw=body) from e


class NanoleafClient:
    """Client for a single Nanoleaf device's local REST and UDP APIs.

    Every operation is one blocking round trip. An HTTP connection (or UDP
    socket) is opened per operation and closed before it returns, on error
    paths too. Non-2xx statuses are not treated as failures; only transport
    and decoding errors are.
    """

    def __init__(
        self,
        host: str,
        token: str,
        verbose: bool = False,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
        external_control_port: int = EXTERNAL_CONTROL_PORT,
    ):
        """
        Initialize the client.

        Args:
            host: Device address as ``host:port`` (e.g., 192.168.1.20:16021)
            token: Access token issued by the device when pairing
            verbose: Log every request and response
            timeout: Request timeout in seconds, or None to wait forever
            transport: Optional httpx transport (used by tests)
            external_control_port: UDP port for custom color frames
        """
        self.host = host
        self.token = token
        self.verbose = verbose
        self.timeout = timeout
        self.external_control_port = external_control_port
        self._transport = transport

    def endpoint(self, path: str) -> str:
        """Return the full URL for an API resource."""
        return f"http://{self.host}/api/v1/{self.token}/{path}"

    def _request(self, method: str, path: str, body: Optional[bytes] = None) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if body is not None:
            headers["Content-Type"] = "application/json"

        if self.verbose:
            logger.info("%s %s", method, path)
            if body is not None:
                logger.info("===> %s", body.decode("utf-8"))

        try:
            with _http_client(self.timeout, self._transport) as http:
                response = http.request(method, self.endpoint(path), headers=headers, content=body)
        except httpx.InvalidURL as e:
            raise ConfigurationError(
                f"Invalid device host '{self.host}': {e}",
                recovery_hint="The host must look like <address>:<port>",
            ) from e
        except httpx.TransportError as e:
            raise DeviceConnectionError(self.host, str(e) or type(e).__name__) from e

        if self.verbose:
            logger.info("<=== %s %s", response.status_code, response.reason_phrase)
            if response.text:
                logger.info("<=== %s", response.text)
        return response

    def get(self, path: str) -> str:
        """Perform a GET request and return the response body."""
        return self._request("GET", path).text

    def put(self, path: str, body: bytes) -> str:
        """Perform a PUT request with a JSON body and return the response body."""
        return self._request("PUT", path, body).text

    def _put_state(self, state: StateUpdate) -> None:
        self.put("state", state.to_json())

    # Panel info

    def get_panel_info_raw(self) -> str:
        """Get the undecoded panel info document."""
        return self.get("")

    def get_panel_info(self) -> PanelInfo:
        """Get device identity, state, effects, layout and rhythm status.

        Raises:
            ResponseDecodeError: If the document cannot be decoded; the raw
                body is available as ``raw`` on the exception
        """
        body = self.get_panel_info_raw()
        data = _decode("", body)
        try:
            return PanelInfo.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ResponseDecodeError("", str(e), raw=body) from e

    def get_state(self) -> DeviceState:
        """Get the current state with min/max bounds."""
        body = self.get("state")
        data = _decode("state", body)
        try:
            if not isinstance(data, dict):
                raise TypeError(f"expected object, got {type(data).__name__}")
            return DeviceState.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ResponseDecodeError("state", str(e), raw=body) from e

    # State

    def set_power(self, on: bool) -> None:
        """Turn the device on or off."""
        self._put_state(StateUpdate(on=OnProperty(on)))

    def on(self) -> None:
        self.set_power(True)

    def off(self) -> None:
        self.set_power(False)

    def set_brightness(self, brightness: int, duration: Optional[int] = None) -> None:
        """
        Set brightness.

        Args:
            brightness: Brightness (0-100)
            duration: Optional transition time in tenths of a second
        """
        self._put_state(StateUpdate(brightness=BrightnessProperty(brightness, duration)))

    def set_color_temperature(self, temperature: int) -> None:
        """Set color temperature in Kelvin (1200-6500)."""
        self._put_state(StateUpdate(ct=ColorTemperatureProperty(temperature)))

    def set_hsl(self, hue: int, saturation: int, lightness: int) -> None:
        """Set hue, saturation and lightness. Lightness is sent as brightness."""
        self._put_state(
            StateUpdate(
                brightness=BrightnessProperty(lightness),
                hue=HueProperty(hue),
                sat=SaturationProperty(saturation),
            )
        )

    def set_rgb(self, red: int, green: int, blue: int) -> None:
        """Set the color from RGB by converting it to HSL."""
        hue, saturation, lightness = rgb_to_hsl(red, green, blue)
        self.set_hsl(hue, saturation, lightness)

    # Effects

    def list_effects(self) -> list[str]:
        """List the names of the installed effects."""
        body = self.get("effects/effectsList")
        data = _decode("effects/effectsList", body)
        if not isinstance(data, list) or not all(isinstance(name, str) for name in data):
            raise ResponseDecodeError("effects/effectsList", "expected a JSON array of strings", raw=body)
        return data

    def select_effect(self, name: str) -> None:
        """Activate an installed effect by name."""
        self.put("effects/select", EffectSelect(name).to_json())

    # External control

    def enable_external_control(self) -> None:
        """Switch the device to accept UDP custom color frames. Idempotent."""
        self.put("effects", encode_body(EXTERNAL_CONTROL_REQUEST))

    def _external_control_address(self) -> tuple[int, Any]:
        hostname = urlsplit(f"//{self.host}").hostname
        if not hostname:
            raise ConfigurationError(f"Invalid device host '{self.host}'")
        try:
            family, _, _, _, sockaddr = socket.getaddrinfo(
                hostname, self.external_control_port, type=socket.SOCK_DGRAM
            )[0]
        except OSError as e:
            raise DeviceConnectionError(self.host, str(e)) from e
        return family, sockaddr

    def set_custom_colors(self, frames: Sequence[PanelColor]) -> None:
        """
        Set individual panel colors over UDP.

        External control is enabled first; if that fails, nothing is sent. The
        frames are written as exactly one datagram and no reply is read.

        Args:
            frames: Panel colors to apply

        Raises:
            ProtocolLimitError: If the frames cannot be encoded (checked before
                any network I/O), or the datagram is too large to send
            DeviceConnectionError: If the device cannot be reached
        """
        datagram = encode_custom_colors(frames)
        self.enable_external_control()

        family, sockaddr = self._external_control_address()
        if self.verbose:
            logger.info("UDP %s ===> %s", sockaddr, datagram.hex(" "))
        try:
            with socket.socket(family, socket.SOCK_DGRAM) as sock:
                sock.connect(sockaddr)
                sock.send(datagram)
        except OSError as e:
            if e.errno == errno.EMSGSIZE:
                raise ProtocolLimitError(
                    f"{len(frames)} panels do not fit in one datagram ({len(datagram)} bytes)",
                    technical_message=str(e),
                ) from e
            raise DeviceConnectionError(self.host, str(e)) from e


def create_token(
    host: str,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> str:
    """
    Request a new access token from a device in pairing mode.

    The device only issues tokens for 30 seconds after its power button has
    been held for 5-7 seconds; otherwise it answers 403.

    Args:
        host: Device address as ``host:port``
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)

    Returns:
        The new access token
    """
    path = "new"
    try:
        with _http_client(timeout, transport) as http:
            response = http.post(f"http://{host}/api/v1/{path}", headers={"Accept": "application/json"})
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"Invalid device host '{host}': {e}") from e
    except httpx.TransportError as e:
        raise DeviceConnectionError(host, str(e) or type(e).__name__) from e

    if response.status_code == 403:
        raise PicoleafError(
            "Device refused to issue a token",
            technical_message=f"POST {path} returned 403",
            recovery_hint="Hold the power button for 5-7 seconds until the lights flash, then retry within 30 seconds",
        )

    data = _decode(path, response.text)
    token = data.get("auth_token") if isinstance(data, dict) else None
    if not token:
        raise ResponseDecodeError(path, "missing 'auth_token'", raw=response.text)
    return str(token)
