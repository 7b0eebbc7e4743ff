"""
Audio render module.

Provides the renderer interface, a simulated renderer and the bridge that
keeps a renderer in step with the playback controller.
"""

from .base import (
    AudioRenderer,
    PlaybackErrorCallback,
    PositionUpdateCallback,
    RenderState,
    StateChangeCallback,
)
from .bridge import RenderBridge
from .simulated import SimulatedRenderer

__all__ = [
    # Base class
    "AudioRenderer",
    "RenderState",
    # Callback types
    "PlaybackErrorCallback",
    "PositionUpdateCallback",
    "StateChangeCallback",
    # Implementations
    "RenderBridge",
    "SimulatedRenderer",
]
