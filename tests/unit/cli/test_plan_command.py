"""Unit tests for the plan command."""

import json
from pathlib import Path

import pytest

from transcode_planner.cli.exit_codes import ExitCode


@pytest.fixture
def movie_probe(ffprobe_fixtures_dir: Path) -> str:
    return str(ffprobe_fixtures_dir / "h264_aac_1080p.json")


@pytest.fixture
def uhd_probe(ffprobe_fixtures_dir: Path) -> str:
    return str(ffprobe_fixtures_dir / "hevc_10bit_4k.json")


@pytest.fixture
def recording_probe(ffprobe_fixtures_dir: Path) -> str:
    return str(ffprobe_fixtures_dir / "hevc_hdr_interlaced.json")


class TestPlanText:
    """Tests for the text listing."""

    def test_default_options_need_no_encoding(self, invoke, movie_probe: str) -> None:
        result = invoke("plan", movie_probe)

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0] == "Plan for /media/movies/feature.mkv -> mp4"
        assert lines[1] == "  #0 video h264 1920x1080 23.976 fps: passthrough"
        assert lines[-1] == "No encoding required."

    def test_preset_listing(self, invoke, movie_probe: str) -> None:
        result = invoke("plan", movie_probe, "--preset", "standardized_h264_aac_mp4")

        assert result.exit_code == 0, result.output
        output = result.output
        assert "Strip metadata: thumbnail_only" in output
        assert "  #0 video h264 1920x1080 23.976 fps: reencode" in output
        assert "target: h264 high 8-bit yuv420p, crf 23, preset medium" in output
        assert "fps: 24000/1001 (23.976)" in output
        assert "  #1 audio aac 6ch 48000 Hz: reencode (channels)" in output
        assert "target: aac LC, 2ch, 48000 Hz, 256 kb/s" in output
        assert "  #2 subtitle subrip: remove (other_streams_removed)" in output
        assert (
            "  #3 video mjpeg 600x900 90000.000 fps: remove (thumbnail_stripped)"
            in output
        )
        assert "No encoding required." not in output

    def test_resize_and_compare_lines(self, invoke, write_file, uhd_probe: str) -> None:
        policy = write_file(
            "policy.yaml",
            """
schema_version: 1
video:
  codecs: [h265_any_tag]
  reencode: if_smaller
  resize: {width: 1920, height: 1080}
""",
        )

        result = invoke("plan", uhd_probe, "--policy", str(policy))

        assert result.exit_code == 0, result.output
        assert (
            "  #0 video hevc 3840x2160 60.000 fps: reencode (geometry)"
            in result.output
        )
        assert "scale: 1920x1080" in result.output

    def test_keep_smaller_line(self, invoke, write_file, uhd_probe: str) -> None:
        policy = write_file(
            "policy.yaml",
            "schema_version: 1\nvideo:\n"
            "  codecs: [h265_any_tag]\n  reencode: if_smaller\n",
        )

        result = invoke("plan", uhd_probe, "--policy", str(policy))

        assert result.exit_code == 0, result.output
        assert "reencode_then_compare" in result.output
        assert "keep smaller than original (286.1 MiB)" in result.output

    def test_conversion_line(self, invoke, recording_probe: str) -> None:
        result = invoke(
            "plan", recording_probe, "--preset", "standardized_h264_aac_mp4"
        )

        assert result.exit_code == 0, result.output
        assert "(codec, profile, hdr, sar, interlaced)" in result.output
        assert "convert: tone map, deinterlace, square pixels" in result.output


class TestPlanJson:
    """Tests for JSON output."""

    def test_json_output(self, invoke, uhd_probe: str) -> None:
        result = invoke(
            "plan", uhd_probe, "--preset", "standardized_hevc_aac_mp4", "--json"
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["source"] == "/media/clips/uhd.mp4"
        assert data["container"] == "mp4"
        assert data["requires_encoding"] is True
        video = data["streams"][0]
        assert video["action"] == "reencode"
        assert video["video_target"]["codec"] == "hevc"
        assert video["video_target"]["profile"] == "main"
        assert video["video_target"]["codec_tag"] == "hvc1"
        assert video["frame_rate"] == "60"

    def test_json_from_config(self, invoke, write_file, uhd_probe: str) -> None:
        config = write_file("config.toml", '[planning]\noutput_format = "json"\n')

        result = invoke("--config", str(config), "plan", uhd_probe)

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["container"] == "mp4"

    def test_json_error(self, invoke, tmp_path: Path) -> None:
        result = invoke("plan", str(tmp_path / "missing.json"), "--json")

        assert result.exit_code == ExitCode.TARGET_NOT_FOUND
        data = json.loads(result.output)
        assert data["status"] == "failed"
        assert data["error"]["code"] == "TARGET_NOT_FOUND"


class TestPlanErrors:
    """Tests for error exit codes."""

    def test_missing_probe(self, invoke, tmp_path: Path) -> None:
        result = invoke("plan", str(tmp_path / "missing.json"))

        assert result.exit_code == ExitCode.TARGET_NOT_FOUND
        assert "Error: File not found" in result.output

    def test_invalid_probe(self, invoke, write_file) -> None:
        probe = write_file("probe.json", "{broken")

        result = invoke("plan", str(probe))

        assert result.exit_code == ExitCode.PARSE_ERROR
        assert "Invalid JSON" in result.output

    def test_non_utf8_probe(self, invoke, tmp_path: Path) -> None:
        probe = tmp_path / "probe.json"
        probe.write_bytes(b'{"format": {"filename": "\xff\xfe"}}')

        result = invoke("plan", str(probe))

        assert result.exit_code == ExitCode.PARSE_ERROR
        assert "is not UTF-8 text" in result.output

    def test_missing_policy(self, invoke, tmp_path: Path, movie_probe: str) -> None:
        result = invoke("plan", movie_probe, "--policy", str(tmp_path / "none.yaml"))

        assert result.exit_code == ExitCode.TARGET_NOT_FOUND
        assert "Policy file not found" in result.output

    def test_invalid_policy(self, invoke, write_file, movie_probe: str) -> None:
        policy = write_file(
            "policy.yaml", "schema_version: 1\nvideo:\n  codecs: [hevc]\n"
        )

        result = invoke("plan", movie_probe, "--policy", str(policy))

        assert result.exit_code == ExitCode.POLICY_VALIDATION_ERROR
        assert "Unknown video codec 'hevc'" in result.output

    def test_incompatible_codec(self, invoke, write_file, movie_probe: str) -> None:
        policy = write_file("policy.yaml", "schema_version: 1\ncontainer: webm\n")

        result = invoke("plan", movie_probe, "--policy", str(policy))

        assert result.exit_code == ExitCode.INCOMPATIBLE_CODEC
        assert "stream #0: cannot use h264" in result.output

    def test_source_rejected(self, invoke, write_file, recording_probe: str) -> None:
        policy = write_file(
            "policy.yaml",
            "schema_version: 1\nvideo:\n  validation:\n    max_duration: 600\n",
        )

        result = invoke("plan", recording_probe, "--policy", str(policy))

        assert result.exit_code == ExitCode.SOURCE_REJECTED
        assert "stream #0: duration 1800 exceeds maximum 600" in result.output

    def test_source_rejected_json(
        self, invoke, write_file, recording_probe: str
    ) -> None:
        policy = write_file(
            "policy.yaml",
            "schema_version: 1\naudio:\n  validation:\n    min_streams: 2\n",
        )

        result = invoke("plan", recording_probe, "--policy", str(policy), "--json")

        assert result.exit_code == ExitCode.SOURCE_REJECTED
        data = json.loads(result.output)
        assert data["error"]["code"] == "SOURCE_REJECTED"
        assert "1 audio streams is below minimum 2" in data["error"]["message"]

    def test_strict_resize(self, invoke, write_file, movie_probe: str) -> None:
        policy = write_file(
            "policy.yaml",
            "schema_version: 1\nvideo:\n  resize: {width: 3840, height: 2160}\n",
        )

        relaxed = invoke("plan", movie_probe, "--policy", str(policy))
        strict = invoke("plan", movie_probe, "--policy", str(policy), "--strict-resize")

        assert relaxed.exit_code == 0, relaxed.output
        assert strict.exit_code == ExitCode.RESIZE_SKIPPED
        assert "has no effect on 1920x1080 source" in strict.output

    def test_default_policy_from_environment(
        self, invoke, write_file, monkeypatch, movie_probe: str
    ) -> None:
        policy = write_file("policy.yaml", "schema_version: 1\ncontainer: mkv\n")
        monkeypatch.setenv("TPLAN_DEFAULT_POLICY", str(policy))

        result = invoke("plan", movie_probe)

        assert result.exit_code == 0, result.output
        assert "-> mkv" in result.output.splitlines()[0]


class TestMainGroup:
    """Tests for global options."""

    def test_missing_config_file(
        self, invoke, tmp_path: Path, movie_probe: str
    ) -> None:
        result = invoke("--config", str(tmp_path / "none.toml"), "plan", movie_probe)

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "Config file not found" in result.output

    def test_invalid_config_file(self, invoke, write_file, movie_probe: str) -> None:
        config = write_file("config.toml", "[logging\n")

        result = invoke("--config", str(config), "plan", movie_probe)

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "Failed to load config file" in result.output

    def test_logs_written_to_file(
        self, invoke, tmp_path: Path, movie_probe: str
    ) -> None:
        result = invoke("--log-level", "debug", "plan", movie_probe)

        assert result.exit_code == 0, result.output
        assert "Planned 4 streams" in (tmp_path / "tplan.log").read_text()
