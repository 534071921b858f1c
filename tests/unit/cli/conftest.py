"""Fixtures for CLI tests."""

import logging
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from transcode_planner.cli import main


@pytest.fixture(autouse=True)
def _isolated_cli_environment(monkeypatch, tmp_path: Path):
    """Keep the user's config file and TPLAN_* variables out of CLI tests."""
    for var in (
        "TPLAN_LOG_LEVEL",
        "TPLAN_LOG_FILE",
        "TPLAN_LOG_FORMAT",
        "TPLAN_LOG_INCLUDE_STDERR",
        "TPLAN_STRICT_RESIZE",
        "TPLAN_DEFAULT_POLICY",
        "TPLAN_OUTPUT_FORMAT",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("TPLAN_CONFIG_PATH", str(tmp_path / "no-config.toml"))


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo the handlers the main group installs on the root logger."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def invoke(runner: CliRunner, tmp_path: Path) -> Callable[..., Result]:
    """Invoke the CLI with logs sent to a file so output holds only results."""

    def _invoke(*args: str) -> Result:
        return runner.invoke(main, ["--log-file", str(tmp_path / "tplan.log"), *args])

    return _invoke


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes text to a file under tmp_path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write
