"""
TuneBox - Music playback and queue controller.

Tracks what is playing and what comes next, drives an audio renderer and
exposes the command set to UI views over HTTP.
"""

__version__ = "0.1.0"

from .app import TuneBox
from .config import Config, ConfigError, load_config

__all__ = [
    "__version__",
    "TuneBox",
    "Config",
    "load_config",
    "ConfigError",
]
