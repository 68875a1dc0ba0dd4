"""Orientation source implementations.

``tk_panel`` needs a Tk display and is imported on demand by the app.
"""

from .udp_bridge import UdpBridgeOrientationSource

__all__ = [
    "UdpBridgeOrientationSource",
]
