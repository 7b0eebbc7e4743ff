"""Tests for the command-line interface."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from tunebox.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_LIBRARY_ERROR,
    EXIT_SUCCESS,
    args_to_dict,
    main,
    parse_args,
    run_list,
)
from tunebox.config import Config

LIBRARY_YAML = """\
- id: trk-001
  title: Opening
  artist: Quartet
  duration: 125
  url: https://example.com/1.mp3
"""


class TestArgsToDict:
    """Test CLI argument mapping."""

    def test_empty(self) -> None:
        assert args_to_dict(parse_args([])) == {}

    def test_mapping(self) -> None:
        args = parse_args(
            [
                "--library", "lib.yaml",
                "--volume", "0.5",
                "--history-limit", "10",
                "--shuffle-seed", "4",
                "--http-port", "9001",
                "--bind", "0.0.0.0",
                "--log-level", "debug",
                "--pause-on-error",
                "--no-server",
            ]
        )
        assert args_to_dict(args) == {
            "library": {"path": "lib.yaml"},
            "player": {
                "default_volume": 0.5,
                "history_limit": 10,
                "pause_on_error": True,
                "shuffle_seed": 4,
            },
            "server": {"http_port": 9001, "bind_address": "0.0.0.0", "enabled": False},
            "logging": {"level": "debug"},
        }

    def test_volume_out_of_range(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--volume", "2"])


class TestRunList:
    """Test library listing."""

    def _config(self, path: str) -> Config:
        config = Config()
        config.library.path = path
        return config

    def test_no_library(self, capsys: pytest.CaptureFixture) -> None:
        assert run_list(Config(), json_output=False) == EXIT_CONFIG_ERROR
        assert "No library configured" in capsys.readouterr().out

    def test_text_output(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        path = tmp_path / "library.yaml"
        path.write_text(LIBRARY_YAML)

        assert run_list(self._config(str(path)), json_output=False) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Quartet - Opening [2:05]" in out
        assert "id: trk-001" in out

    def test_json_output(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        path = tmp_path / "library.yaml"
        path.write_text(LIBRARY_YAML)

        assert run_list(self._config(str(path)), json_output=True) == EXIT_SUCCESS

        data = json.loads(capsys.readouterr().out)
        assert data["count"] == 1
        assert data["tracks"][0]["id"] == "trk-001"

    def test_bad_library(self, tmp_path: Path) -> None:
        path = tmp_path / "library.yaml"
        path.write_text("- id: x\n")
        assert run_list(self._config(str(path)), json_output=False) == EXIT_LIBRARY_ERROR


class TestMain:
    def test_config_error(self, tmp_path: Path) -> None:
        with patch.dict("os.environ", {}, clear=True):
            code = main(["--config", str(tmp_path / "none.yaml"), "--history-limit", "0", "--list"])
        assert code == EXIT_CONFIG_ERROR

    def test_list(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        path = tmp_path / "library.yaml"
        path.write_text(LIBRARY_YAML)
        with patch.dict("os.environ", {}, clear=True):
            code = main(
                ["--config", str(tmp_path / "none.yaml"), "--library", str(path), "--list", "--json"]
            )
        assert code == EXIT_SUCCESS
        captured = capsys.readouterr()
        data = json.loads(captured.out)
        assert data["count"] == 1
        assert data["tracks"][0]["id"] == "trk-001"
        assert "TuneBox v" in captured.err

    def test_list_text_keeps_logs_off_stdout(
        self, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        """Test list mode logs to stderr so stdout holds only the listing."""
        path = tmp_path / "library.yaml"
        path.write_text(LIBRARY_YAML)
        with patch.dict("os.environ", {}, clear=True):
            code = main(["--config", str(tmp_path / "none.yaml"), "--library", str(path), "--list"])
        assert code == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert out.startswith("1 track(s):")
        assert " - INFO - " not in out

    def test_bad_config_file(self, tmp_path: Path) -> None:
        """Test malformed config values exit with the config error code."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("player:\n  default_volume: loud\n")
        with patch.dict("os.environ", {}, clear=True):
            assert main(["--config", str(config_path), "--list"]) == EXIT_CONFIG_ERROR

    def test_empty_config_section(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.yaml"
        config_path.write_text("player:\nserver:\n  http_port: 9000\n")
        with patch.dict("os.environ", {}, clear=True):
            assert main(["--config", str(config_path), "--list"]) == EXIT_CONFIG_ERROR

    def test_serve_dispatch(self, tmp_path: Path) -> None:
        with (
            patch.dict("os.environ", {}, clear=True),
            patch("tunebox.cli.run_serve", return_value=EXIT_SUCCESS) as run_serve,
        ):
            code = main(["--config", str(tmp_path / "none.yaml"), "--no-server"])
        assert code == EXIT_SUCCESS
        config = run_serve.call_args.args[0]
        assert config.server.enabled is False
