"""Shared test fixtures for the transcode planner."""

import json
from collections.abc import Callable
from fractions import Fraction
from pathlib import Path
from typing import Any

import pytest

from transcode_planner.config import clear_config_cache
from transcode_planner.domain.enums import StreamKind
from transcode_planner.domain.models import ProbeResult, StreamDescriptor

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _isolate_config_cache():
    """Drop cached config files between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def make_video_stream() -> Callable[..., StreamDescriptor]:
    """Return a factory for 1080p H.264 video streams with overridable fields."""

    def _make(index: int = 0, **overrides: Any) -> StreamDescriptor:
        fields: dict[str, Any] = {
            "index": index,
            "kind": StreamKind.VIDEO,
            "codec_name": "h264",
            "profile": "High",
            "codec_tag": "avc1",
            "is_default": True,
            "width": 1920,
            "height": 1080,
            "frame_rate": Fraction(30),
            "pixel_format": "yuv420p",
            "bit_depth": 8,
            "chroma_subsampling": 420,
            "byte_size": 10_000_000,
            "duration_seconds": 120.0,
        }
        fields.update(overrides)
        return StreamDescriptor(**fields)

    return _make


@pytest.fixture
def make_audio_stream() -> Callable[..., StreamDescriptor]:
    """Return a factory for stereo AAC audio streams with overridable fields."""

    def _make(index: int = 1, **overrides: Any) -> StreamDescriptor:
        fields: dict[str, Any] = {
            "index": index,
            "kind": StreamKind.AUDIO,
            "codec_name": "aac",
            "profile": "LC",
            "is_default": True,
            "channels": 2,
            "sample_rate": 48000,
            "byte_size": 1_000_000,
            "duration_seconds": 120.0,
        }
        fields.update(overrides)
        return StreamDescriptor(**fields)

    return _make


@pytest.fixture
def make_probe() -> Callable[..., ProbeResult]:
    """Return a factory that wraps streams in a ProbeResult."""

    def _make(
        *streams: StreamDescriptor,
        path: Path = Path("/media/movie.mkv"),
        duration: float | None = 120.0,
    ) -> ProbeResult:
        return ProbeResult(
            path=path,
            container_format="matroska,webm",
            streams=tuple(streams),
            duration_seconds=duration,
        )

    return _make


@pytest.fixture
def ffprobe_fixtures_dir() -> Path:
    """Return the path to the ffprobe fixtures directory."""
    return FIXTURES_DIR / "ffprobe"


@pytest.fixture
def load_ffprobe_fixture(ffprobe_fixtures_dir: Path) -> Callable[[str], dict]:
    """Return a loader for ffprobe JSON fixtures by name (without .json)."""

    def _load(name: str) -> dict:
        return json.loads((ffprobe_fixtures_dir / f"{name}.json").read_text())

    return _load
