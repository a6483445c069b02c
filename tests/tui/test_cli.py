"""Tests for the CLI entry point."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from tasktab.config import Config
from tasktab.core.stores import JsonFileStore, MemoryStore
from tasktab.tui import cli


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Keep logging configuration from leaking between tests."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestJSONFormatter:
    """Tests for structured log lines."""

    def test_format_includes_context(self) -> None:
        record = logging.LogRecord(
            name="tasktab.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="Saved %s",
            args=("state",),
            exc_info=None,
        )
        record.extra_context = {"store": "sync"}

        data = json.loads(cli.JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["event"] == "Saved state"
        assert data["context"]["store"] == "sync"
        assert data["context"]["line"] == 10


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self) -> None:
        args = cli._parse_args([])

        assert args.config == cli.DEFAULT_CONFIG_PATH
        assert args.debug is False
        assert args.data_dir is None

    def test_flags(self, tmp_path: Path) -> None:
        args = cli._parse_args(["--config", "c.json", "--debug", "--data-dir", str(tmp_path)])

        assert args.config == Path("c.json")
        assert args.debug is True
        assert args.data_dir == tmp_path


class TestBuildPersister:
    """Tests for store wiring."""

    def test_store_order(self, config: Config) -> None:
        persister = cli.build_persister(config)

        assert [s.name for s in persister.stores] == ["sync", "local", "memory"]
        assert isinstance(persister.stores[0], JsonFileStore)
        assert persister.stores[0].path == config.sync_store_path
        assert isinstance(persister.stores[2], MemoryStore)
        assert persister.mirror_failed_writes is True


class TestMain:
    """Tests for main()."""

    def test_invalid_config_exits_1(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text("{broken", encoding="utf-8")

        assert cli.main(["--config", str(config_path)]) == 1

    def test_runs_app_with_overridden_data_dir(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text(
            json.dumps({"log_file": str(tmp_path / "logs" / "tasktab.log")}), encoding="utf-8"
        )

        with patch.object(cli, "_run", new=AsyncMock(return_value=0)) as run:
            exit_code = cli.main(["--config", str(config_path), "--data-dir", str(tmp_path / "d")])

        assert exit_code == 0
        config = run.call_args.args[0]
        assert config.data_dir == (tmp_path / "d").resolve()
        assert (tmp_path / "logs" / "tasktab.log").exists()

    def test_crash_exits_1(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text(
            json.dumps({"log_file": str(tmp_path / "tasktab.log")}), encoding="utf-8"
        )

        with patch.object(cli, "_run", new=AsyncMock(side_effect=RuntimeError("boom"))):
            assert cli.main(["--config", str(config_path)]) == 1
