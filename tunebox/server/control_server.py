"""
Control Server.

HTTP API through which UI views read playback state and send commands.
"""

import json
import logging
from typing import Any, Callable, Optional

from aiohttp import web

from tunebox.library import TrackLibrary
from tunebox.notifications import QueuedNotificationSink
from tunebox.playback.controller import PlaybackController
from tunebox.playback.types import QueueContext, Track

logger = logging.getLogger(__name__)

DEFAULT_HTTP_PORT = 8690


class ControlServer:
    """
    Local HTTP server exposing the controller's command set.

    Read endpoints:
        GET /state, /queue, /history, /library, /notifications

    Command endpoints (respond with the new state):
        POST /play, /pause, /resume, /toggle, /next, /previous,
             /loop, /shuffle, /mute, /volume, /progress, /seek

    Usage:
        server = ControlServer(controller, library, notifications, port=8690)
        await server.start()
    """

    def __init__(
        self,
        controller: PlaybackController,
        library: Optional[TrackLibrary] = None,
        notifications: Optional[QueuedNotificationSink] = None,
        host: str = "127.0.0.1",
        port: int = DEFAULT_HTTP_PORT,
    ):
        """
        Initialize control server.

        Args:
            controller: Controller that commands are forwarded to
            library: Library used to resolve {"trackId": ...} play requests
            notifications: Sink drained by GET /notifications
            host: Host to bind to
            port: Port to listen on
        """
        self._controller = controller
        self._library = library or TrackLibrary()
        self._notifications = notifications
        self._host = host
        self._port = port

        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    @property
    def base_url(self) -> str:
        return f"http://{self._host}:{self._port}"

    @property
    def is_running(self) -> bool:
        return self._site is not None

    def create_app(self) -> web.Application:
        """Build the aiohttp application with all routes."""
        app = web.Application()
        app.router.add_get("/state", self._handle_state)
        app.router.add_get("/queue", self._handle_queue)
        app.router.add_get("/history", self._handle_history)
        app.router.add_get("/library", self._handle_library)
        app.router.add_get("/notifications", self._handle_notifications)

        app.router.add_post("/play", self._handle_play)
        app.router.add_post("/volume", self._handle_volume)
        app.router.add_post("/progress", self._handle_progress)
        app.router.add_post("/seek", self._handle_seek)

        # Commands without a body
        simple_commands: dict[str, Callable[[], None]] = {
            "/pause": self._controller.pause_track,
            "/resume": self._controller.resume_track,
            "/toggle": self._controller.toggle_play_pause,
            "/next": self._controller.next_track,
            "/previous": self._controller.previous_track,
            "/loop": self._controller.toggle_loop,
            "/shuffle": self._controller.toggle_shuffle,
            "/mute": self._controller.toggle_mute,
        }
        for path, command in simple_commands.items():
            app.router.add_post(path, self._command_handler(command))

        return app

    async def start(self) -> None:
        """Start the control server."""
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()

        logger.info(f"Control server started on {self._host}:{self._port}")

    async def stop(self) -> None:
        """Stop the control server."""
        if self._site:
            await self._site.stop()
            self._site = None
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        logger.info("Control server stopped")

    # =========================================================================
    # Read Handlers
    # =========================================================================

    def _state_response(self) -> web.Response:
        return web.json_response(self._controller.snapshot().to_dict())

    async def _handle_state(self, request: web.Request) -> web.Response:
        return self._state_response()

    async def _handle_queue(self, request: web.Request) -> web.Response:
        queue = self._controller.current_playlist
        if queue is None:
            return web.json_response({"tracks": [], "currentIndex": None})
        return web.json_response(queue.to_dict())

    async def _handle_history(self, request: web.Request) -> web.Response:
        return web.json_response([t.to_dict() for t in self._controller.play_history])

    async def _handle_library(self, request: web.Request) -> web.Response:
        return web.json_response([t.to_dict() for t in self._library.tracks])

    async def _handle_notifications(self, request: web.Request) -> web.Response:
        if self._notifications is None:
            return web.json_response([])
        return web.json_response([n.to_dict() for n in self._notifications.drain()])

    # =========================================================================
    # Command Handlers
    # =========================================================================

    def _command_handler(self, command: Callable[[], None]):
        async def handler(request: web.Request) -> web.Response:
            logger.debug(f"Command {request.path}")
            command()
            return self._state_response()

        return handler

    async def _handle_play(self, request: web.Request) -> web.Response:
        """
        Play a track.

        Body is either {"track": {...}, "queue": {...}} with an optional
        queue, or {"trackId": "..."} resolved against the library (queued
        in library order).
        """
        body = await self._read_json(request)

        track: Optional[Track]
        queue: Optional[QueueContext] = None
        try:
            if "trackId" in body:
                track_id = str(body["trackId"])
                track = self._library.get(track_id)
                if track is None:
                    raise web.HTTPNotFound(
                        text=json.dumps({"error": f"Unknown track: {track_id}"}),
                        content_type="application/json",
                    )
                queue = self._library.context_for(track_id)
            elif "track" in body:
                track = Track.from_dict(body["track"])
                if body.get("queue") is not None:
                    queue = QueueContext.from_dict(body["queue"])
            else:
                raise ValueError("Body must contain 'track' or 'trackId'")
        except ValueError as e:
            raise self._bad_request(str(e))

        self._controller.play_track(track, queue)
        return self._state_response()

    async def _handle_volume(self, request: web.Request) -> web.Response:
        value = await self._read_number(request, "value")
        self._controller.set_volume(value)
        return self._state_response()

    async def _handle_progress(self, request: web.Request) -> web.Response:
        value = await self._read_number(request, "value")
        self._controller.set_progress(value)
        return self._state_response()

    async def _handle_seek(self, request: web.Request) -> web.Response:
        seconds = await self._read_number(request, "seconds")
        self._controller.seek(seconds)
        return self._state_response()

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _bad_request(message: str) -> web.HTTPBadRequest:
        logger.warning(f"Bad request: {message}")
        return web.HTTPBadRequest(
            text=json.dumps({"error": message}),
            content_type="application/json",
        )

    async def _read_json(self, request: web.Request) -> dict[str, Any]:
        try:
            body = await request.json()
        except ValueError:
            raise self._bad_request("Body must be valid JSON")
        if not isinstance(body, dict):
            raise self._bad_request("Body must be a JSON object")
        return body

    async def _read_number(self, request: web.Request, key: str) -> float:
        body = await self._read_json(request)
        value = body.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise self._bad_request(f"'{key}' must be a number")
        return float(value)
