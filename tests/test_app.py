"""Tests for application wiring and lifecycle."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from tunebox.app import TuneBox
from tunebox.config import Config
from tunebox.library import LibraryError
from tunebox.render.base import RenderState

LIBRARY_YAML = """\
tracks:
  - id: a
    title: Alpha
    artist: Band
    duration: 60
    url: https://example.com/a.mp3
  - id: b
    title: Beta
    artist: Band
    duration: 60
    url: https://example.com/b.mp3
"""


def _make_config(library_path: str = "") -> Config:
    config = Config()
    config.server.enabled = False
    config.library.path = library_path
    config.renderer.tick_interval = 0.02
    return config


class TestTuneBox:
    """Tests for TuneBox."""

    @pytest.mark.asyncio
    async def test_start_without_library(self) -> None:
        app = TuneBox(_make_config())
        await app.start()
        try:
            assert app.is_running is True
            assert app.library is not None and len(app.library) == 0
            assert app.controller is not None
            assert app.controller.volume == 0.7
        finally:
            await app.stop()
        assert app.is_running is False

    @pytest.mark.asyncio
    async def test_plays_from_library(self, tmp_path: Path) -> None:
        """Test a library track reaches the renderer."""
        path = tmp_path / "library.yaml"
        path.write_text(LIBRARY_YAML)
        app = TuneBox(_make_config(str(path)))
        await app.start()
        try:
            library = app.library
            controller = app.controller
            assert library is not None and controller is not None

            track = library.get("b")
            assert track is not None
            controller.play_track(track, library.context_for("b"))
            await asyncio.sleep(0.05)

            assert app._renderer is not None
            assert app._renderer.track is track
            assert app._renderer.state == RenderState.PLAYING
        finally:
            await app.stop()

    @pytest.mark.asyncio
    async def test_player_config_applied(self) -> None:
        config = _make_config()
        config.player.default_volume = 0.2
        config.player.history_limit = 3
        app = TuneBox(config)
        await app.start()
        try:
            assert app.controller is not None
            assert app.controller.volume == 0.2
        finally:
            await app.stop()

    @pytest.mark.asyncio
    async def test_bad_library_raises(self, tmp_path: Path) -> None:
        app = TuneBox(_make_config(str(tmp_path / "missing.yaml")))
        with pytest.raises(LibraryError):
            await app.start()

    @pytest.mark.asyncio
    async def test_server_started_when_enabled(self) -> None:
        config = _make_config()
        config.server.enabled = True
        with patch("tunebox.app.ControlServer") as server_class:
            server = server_class.return_value
            server.start = AsyncMock()
            server.stop = AsyncMock()

            app = TuneBox(config)
            await app.start()
            await app.stop()

        server.start.assert_awaited_once()
        server.stop.assert_awaited_once()
        kwargs = server_class.call_args.kwargs
        assert kwargs["port"] == 8690
        assert kwargs["host"] == "127.0.0.1"

    @pytest.mark.asyncio
    async def test_run_until_shutdown(self) -> None:
        app = TuneBox(_make_config())

        task = asyncio.create_task(app.run())
        await asyncio.sleep(0.05)
        assert app.is_running is True

        app.request_shutdown()
        await asyncio.wait_for(task, timeout=1.0)
        assert app.is_running is False
