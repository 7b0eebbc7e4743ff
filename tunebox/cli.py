"""
TuneBox CLI entry point.

Provides command-line interface for running TuneBox.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence, TextIO

from tunebox import __version__
from tunebox.app import TuneBox
from tunebox.config import Config, ConfigError, load_config
from tunebox.library import LibraryError, TrackLibrary, format_duration

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_LIBRARY_ERROR = 2
EXIT_NETWORK_ERROR = 3


def setup_logging(level: str = "info", stream: Optional[TextIO] = None) -> None:
    """Configure logging to stdout, or to the given stream."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=stream or sys.stdout,
        force=True,
    )


def _parse_unit(value: str) -> float:
    """Parse a 0.0-1.0 fraction argument."""
    try:
        v = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid volume: {value}. Use a number from 0.0 to 1.0")
    if not 0.0 <= v <= 1.0:
        raise argparse.ArgumentTypeError(f"Invalid volume: {v}. Use a number from 0.0 to 1.0")
    return v


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="tunebox",
        description="Music playback controller with an HTTP control API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tunebox --library library.yaml
  tunebox --library library.yaml --list --json
  tunebox --config config.yaml --http-port 9000
  tunebox --library library.yaml --volume 0.5 --shuffle-seed 7

Environment Variables:
  TUNEBOX_DEFAULT_VOLUME, TUNEBOX_HISTORY_LIMIT, TUNEBOX_AUTO_ADVANCE_DELAY
  TUNEBOX_PAUSE_ON_ERROR, TUNEBOX_SHUFFLE_SEED, TUNEBOX_RENDERER
  TUNEBOX_TICK_INTERVAL, TUNEBOX_SERVER_ENABLED, TUNEBOX_BIND
  TUNEBOX_HTTP_PORT, TUNEBOX_LIBRARY, TUNEBOX_LOG_LEVEL
""",
    )

    # General
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Listing mode
    parser.add_argument(
        "--list",
        action="store_true",
        dest="list_library",
        help="Print the library tracks and exit",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output as JSON (used with --list)",
    )

    # Configuration
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("./config.yaml"),
        metavar="PATH",
        help="Path to config file (default: ./config.yaml)",
    )
    parser.add_argument(
        "--library",
        metavar="PATH",
        help="Path to a YAML/JSON track library",
    )

    # Player
    player_group = parser.add_argument_group("Player")
    player_group.add_argument(
        "--volume",
        type=_parse_unit,
        metavar="FLOAT",
        help="Starting volume, 0.0-1.0 (default: 0.7)",
    )
    player_group.add_argument(
        "--history-limit",
        type=int,
        metavar="INT",
        help="Number of recently played tracks to keep (default: 50)",
    )
    player_group.add_argument(
        "--pause-on-error",
        action="store_true",
        help="Pause playback when a track fails to play",
    )
    player_group.add_argument(
        "--shuffle-seed",
        type=int,
        metavar="INT",
        help="Seed for shuffle order (random if omitted)",
    )

    # Server
    server_group = parser.add_argument_group("Server")
    server_group.add_argument(
        "--http-port",
        type=int,
        metavar="INT",
        help="Control API port (default: 8690)",
    )
    server_group.add_argument(
        "--bind",
        metavar="TEXT",
        help="Bind address (default: 127.0.0.1)",
    )
    server_group.add_argument(
        "--no-server",
        action="store_true",
        help="Do not start the control API",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        metavar="LEVEL",
        help="Log level: debug, info, warning, error",
    )

    return parser.parse_args(argv)


def _set_nested(d: dict, path: tuple, value: Any) -> None:
    """Set a nested dictionary value."""
    for key in path[:-1]:
        d = d.setdefault(key, {})
    d[path[-1]] = value


def args_to_dict(args: argparse.Namespace) -> dict:
    """Convert argparse namespace to nested config dict."""
    result: dict = {}

    # Map CLI args to config paths
    mappings = {
        "library": ("library", "path"),
        "volume": ("player", "default_volume"),
        "history_limit": ("player", "history_limit"),
        "pause_on_error": ("player", "pause_on_error"),
        "shuffle_seed": ("player", "shuffle_seed"),
        "http_port": ("server", "http_port"),
        "bind": ("server", "bind_address"),
        "log_level": ("logging", "level"),
    }

    for arg_name, path in mappings.items():
        value = getattr(args, arg_name, None)
        # Skip None values and False for flags (only set if explicitly True)
        if value is None:
            continue
        if arg_name == "pause_on_error" and not value:
            continue
        _set_nested(result, path, value)

    if getattr(args, "no_server", False):
        _set_nested(result, ("server", "enabled"), False)

    return result


def log_config(config: Config) -> None:
    """Log configuration summary."""
    player = config.player
    logger.info(f"Library: {config.library.path or '(empty)'}")
    logger.info(
        f"Player: volume={player.default_volume}, history={player.history_limit}, "
        f"auto-advance after {player.auto_advance_delay}s"
    )
    logger.info(f"Renderer: {config.renderer.type}")
    if config.server.enabled:
        logger.info(f"Control API: {config.server.bind_address}:{config.server.http_port}")
    if player.pause_on_error:
        logger.info("Playback errors pause the player (pause_on_error=true)")


def run_list(config: Config, json_output: bool) -> int:
    """
    Print the configured library.

    Returns:
        Exit code
    """
    if not config.library.path:
        print("No library configured. Use --library PATH.")
        return EXIT_CONFIG_ERROR

    try:
        library = TrackLibrary.from_file(Path(config.library.path))
    except LibraryError as e:
        logger.error(f"Library error: {e}")
        return EXIT_LIBRARY_ERROR

    if json_output:
        output = {
            "tracks": [track.to_dict() for track in library.tracks],
            "count": len(library),
        }
        print(json.dumps(output, indent=2))
        return EXIT_SUCCESS

    if not len(library):
        print("Library is empty.")
        return EXIT_SUCCESS

    print(f"{len(library)} track(s):\n")
    for i, track in enumerate(library.tracks, start=1):
        print(f"  {i:>3}. {track.artist} - {track.title} [{format_duration(track.duration)}]")
        print(f"       id: {track.id}")
    return EXIT_SUCCESS


def run_serve(config: Config) -> int:
    """
    Run the player until interrupted.

    Returns:
        Exit code
    """
    try:
        app = TuneBox(config)
        asyncio.run(app.run())
        return EXIT_SUCCESS

    except LibraryError as e:
        logger.error(f"Library error: {e}")
        return EXIT_LIBRARY_ERROR

    except (ConnectionError, OSError) as e:
        logger.error(f"Network error: {e}")
        return EXIT_NETWORK_ERROR

    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_SUCCESS


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code: 0=success, 1=config error, 2=library error, 3=network error
    """
    args = parse_args(argv)

    # --list owns stdout, so its logs go to stderr
    log_stream = sys.stderr if args.list_library else sys.stdout

    # Setup basic logging first (will be reconfigured after config load)
    setup_logging("info", log_stream)
    logger.info(f"TuneBox v{__version__}")

    try:
        config = load_config(args.config, args_to_dict(args))
        setup_logging(config.logging.level, log_stream)
        log_config(config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    if args.list_library:
        return run_list(config, args.json_output)
    return run_serve(config)


if __name__ == "__main__":
    sys.exit(main())
