"""picoleaf - Command line client for Nanoleaf devices.

This package talks to a single Nanoleaf device over its local REST API, and
streams per-panel colors over the UDP external control protocol.
"""

__version__ = "1.0.0"

from .client import NanoleafClient
from .colors import rgb_to_hsl
from .protocol import PanelColor

__all__ = ["NanoleafClient", "PanelColor", "rgb_to_hsl", "__version__"]
