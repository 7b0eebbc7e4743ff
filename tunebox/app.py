"""
TuneBox Application.

Main orchestrator that wires together all components and manages lifecycle.
"""

import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional

from tunebox.config import Config
from tunebox.library import TrackLibrary
from tunebox.notifications import QueuedNotificationSink
from tunebox.playback import PlaybackController, RandomIndexPicker
from tunebox.render import AudioRenderer, RenderBridge, SimulatedRenderer
from tunebox.server import ControlServer

logger = logging.getLogger(__name__)


class TuneBox:
    """
    Main TuneBox application.

    Orchestrates all components:
    - Track library (TrackLibrary)
    - Playback (PlaybackController)
    - Audio output (AudioRenderer, RenderBridge)
    - User notifications (QueuedNotificationSink)
    - UI surface (ControlServer)

    Usage:
        config = load_config(...)
        app = TuneBox(config)
        await app.run()
    """

    def __init__(self, config: Config):
        """
        Initialize TuneBox.

        Args:
            config: Validated configuration
        """
        self._config = config
        self._is_running = False
        self._shutdown_event = asyncio.Event()

        # Components (initialized in start())
        self._library: Optional[TrackLibrary] = None
        self._notifications: Optional[QueuedNotificationSink] = None
        self._controller: Optional[PlaybackController] = None
        self._renderer: Optional[AudioRenderer] = None
        self._bridge: Optional[RenderBridge] = None
        self._server: Optional[ControlServer] = None

    @property
    def controller(self) -> Optional[PlaybackController]:
        return self._controller

    @property
    def library(self) -> Optional[TrackLibrary]:
        return self._library

    @property
    def is_running(self) -> bool:
        return self._is_running

    async def start(self) -> None:
        """
        Start TuneBox and all components.

        Startup order:
        1. Track library
        2. Notification sink
        3. Playback controller
        4. Renderer and render bridge
        5. Control server

        Raises:
            LibraryError: If the configured library cannot be loaded
            OSError: If the control server cannot bind
        """
        logger.info("Starting TuneBox...")

        # 1. Library
        if self._config.library.path:
            self._library = TrackLibrary.from_file(Path(self._config.library.path))
        else:
            self._library = TrackLibrary()
            logger.info("No library configured, starting empty")

        # 2. Notifications
        self._notifications = QueuedNotificationSink()

        # 3. Controller
        player = self._config.player
        self._controller = PlaybackController(
            default_volume=player.default_volume,
            history_limit=player.history_limit,
            auto_advance_delay=player.auto_advance_delay,
            auto_advance_threshold=player.auto_advance_threshold,
            index_picker=RandomIndexPicker(seed=player.shuffle_seed),
        )

        # 4. Renderer
        logger.debug(f"Creating renderer: {self._config.renderer.type}")
        self._renderer = self._create_renderer()
        self._bridge = RenderBridge(
            controller=self._controller,
            renderer=self._renderer,
            notifier=self._notifications,
            pause_on_error=player.pause_on_error,
        )
        await self._bridge.start()

        # 5. Control server
        if self._config.server.enabled:
            self._server = ControlServer(
                controller=self._controller,
                library=self._library,
                notifications=self._notifications,
                host=self._config.server.bind_address,
                port=self._config.server.http_port,
            )
            await self._server.start()
        else:
            logger.info("Control server disabled")

        self._is_running = True
        logger.info(f"TuneBox ready ({len(self._library)} tracks in library)")

    def _create_renderer(self) -> AudioRenderer:
        # Config validation guarantees a known type
        return SimulatedRenderer(tick_interval=self._config.renderer.tick_interval)

    async def stop(self) -> None:
        """Stop all components in reverse order."""
        logger.info("Stopping TuneBox...")
        self._is_running = False

        if self._server:
            try:
                await self._server.stop()
            except Exception as e:
                logger.error(f"Error stopping control server: {e}")
            self._server = None

        if self._bridge:
            try:
                await self._bridge.stop()
            except Exception as e:
                logger.error(f"Error stopping render bridge: {e}")
            self._bridge = None

        if self._renderer:
            try:
                await self._renderer.disconnect()
            except Exception as e:
                logger.error(f"Error disconnecting renderer: {e}")
            self._renderer = None

        if self._controller:
            self._controller.dispose()

        logger.info("TuneBox stopped")

    def request_shutdown(self) -> None:
        """Ask run() to return."""
        self._shutdown_event.set()

    async def run(self) -> None:
        """Start, wait for a shutdown signal, then stop."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except NotImplementedError:
                # Signal handlers are unavailable on some platforms
                pass

        try:
            await self.start()
            await self._shutdown_event.wait()
        finally:
            await self.stop()
