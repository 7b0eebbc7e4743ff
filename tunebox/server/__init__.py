"""HTTP control surface for UI views."""

from .control_server import DEFAULT_HTTP_PORT, ControlServer

__all__ = [
    "ControlServer",
    "DEFAULT_HTTP_PORT",
]
