"""Unit tests for ffprobe JSON parsing."""

import json
import logging
from fractions import Fraction
from pathlib import Path

import pytest

from transcode_planner.domain.enums import StreamKind
from transcode_planner.introspector import (
    MediaProbeError,
    load_probe_file,
    parse_ffprobe_output,
)
from transcode_planner.introspector.parsers import (
    is_interlaced,
    is_known_sdr,
    map_stream_kind,
    parse_byte_size,
    parse_duration,
    parse_sample_aspect_ratio,
    parse_stream,
    pixel_format_characteristics,
    validate_positive_int,
)


class TestValidatePositiveInt:
    """Tests for validate_positive_int."""

    @pytest.mark.parametrize(
        ("value", "expected"), [(5, 5), ("48000", 48000), (None, None)]
    )
    def test_valid_values(self, value, expected) -> None:
        assert validate_positive_int(value, "field") == expected

    def test_non_positive_warns(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            assert validate_positive_int(-640, "width", "/media/a.avi") is None

        assert "Invalid non-positive width: -640 in /media/a.avi" in caplog.text

    @pytest.mark.parametrize("value", ["tall", 1.5, True])
    def test_non_int_warns(self, value, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            assert validate_positive_int(value, "height") is None

        assert "Expected int for height" in caplog.text


class TestSmallParsers:
    """Tests for duration, kind and pixel format helpers."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("120.5", 120.5),
            ("0", 0.0),
            ("-1", None),
            ("N/A", None),
            ("inf", None),
            ("nan", None),
            (None, None),
        ],
    )
    def test_parse_duration(self, value, expected) -> None:
        assert parse_duration(value) == expected

    def test_non_finite_duration_warns(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            assert parse_duration("inf", "/media/live.ts") is None

        assert "Invalid non-finite duration: inf in /media/live.ts" in caplog.text

    @pytest.mark.parametrize(
        ("codec_type", "kind"),
        [
            ("video", StreamKind.VIDEO),
            ("AUDIO", StreamKind.AUDIO),
            ("subtitle", StreamKind.SUBTITLE),
            ("data", StreamKind.OTHER),
            ("attachment", StreamKind.OTHER),
            (None, StreamKind.OTHER),
        ],
    )
    def test_map_stream_kind(self, codec_type, kind: StreamKind) -> None:
        assert map_stream_kind(codec_type) is kind

    @pytest.mark.parametrize(
        ("pix_fmt", "expected"),
        [
            ("yuv420p", (8, 420)),
            ("p010le", (10, 420)),
            ("yuv422p10le", (10, 422)),
            ("yuv440p", (8, 440)),
            ("yuv410p", None),
            (None, None),
        ],
    )
    def test_pixel_format_characteristics(self, pix_fmt, expected) -> None:
        assert pixel_format_characteristics(pix_fmt) == expected

    @pytest.mark.parametrize(
        ("transfer", "primaries", "space", "expected"),
        [
            (None, None, None, True),
            ("bt709", "bt709", "bt709", True),
            ("smpte170m", "smpte170m", "smpte170m", True),
            ("iec61966-2-1", None, "gbr", True),
            ("unknown", "unknown", "unknown", True),
            ("smpte2084", "bt2020", "bt2020nc", False),
            ("arib-std-b67", "bt2020", "bt2020nc", False),
            ("bt709", "bt2020", "bt709", False),
            ("BT709", None, None, True),
        ],
    )
    def test_is_known_sdr(self, transfer, primaries, space, expected: bool) -> None:
        assert is_known_sdr(transfer, primaries, space) is expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1:1", Fraction(1)),
            ("4:3", Fraction(4, 3)),
            ("32:27", Fraction(32, 27)),
            ("0:1", None),
            ("N/A", None),
            ("a:b", None),
            (None, None),
        ],
    )
    def test_parse_sample_aspect_ratio(self, value, expected) -> None:
        assert parse_sample_aspect_ratio(value) == expected

    @pytest.mark.parametrize(
        ("field_order", "expected"),
        [
            ("progressive", False),
            ("unknown", False),
            (None, False),
            ("tt", True),
            ("bb", True),
            ("tb", True),
            ("bt", True),
        ],
    )
    def test_is_interlaced(self, field_order, expected: bool) -> None:
        assert is_interlaced(field_order) is expected


class TestParseByteSize:
    """Tests for parse_byte_size."""

    def test_statistics_tag_wins(self) -> None:
        stream = {"tags": {"NUMBER_OF_BYTES-eng": "1234"}, "bit_rate": "8000"}

        assert parse_byte_size(stream, 10.0) == 1234

    def test_estimated_from_bit_rate(self) -> None:
        assert parse_byte_size({"bit_rate": "8000"}, 10.0) == 10_000

    def test_unknown_without_duration(self) -> None:
        assert parse_byte_size({"bit_rate": "8000"}, None) is None

    def test_unknown_without_any_source(self) -> None:
        assert parse_byte_size({}, 10.0) is None


class TestParseStream:
    """Tests for parse_stream."""

    def test_video_fields(self) -> None:
        stream = parse_stream(
            {
                "index": 0,
                "codec_type": "video",
                "codec_name": "h264",
                "width": 1280,
                "height": 720,
                "r_frame_rate": "30000/1001",
                "pix_fmt": "yuv444p10le",
                "disposition": {"default": 1},
            }
        )

        assert stream.kind is StreamKind.VIDEO
        assert (stream.width, stream.height) == (1280, 720)
        assert stream.frame_rate == Fraction(30000, 1001)
        assert (stream.bit_depth, stream.chroma_subsampling) == (10, 444)
        assert stream.is_default is True
        assert stream.is_still_image is False
        assert stream.is_hdr is False
        assert stream.sample_aspect_ratio is None
        assert stream.is_interlaced is False

    def test_image_codec_is_still(self) -> None:
        stream = parse_stream({"index": 4, "codec_type": "video", "codec_name": "png"})

        assert stream.is_still_image is True

    def test_still_image_disposition(self) -> None:
        stream = parse_stream(
            {
                "index": 4,
                "codec_type": "video",
                "codec_name": "h264",
                "disposition": {"still_image": 1},
            }
        )

        assert stream.is_still_image is True

    def test_timed_thumbnails(self) -> None:
        stream = parse_stream(
            {
                "index": 2,
                "codec_type": "video",
                "codec_name": "mjpeg",
                "disposition": {"timed_thumbnails": 1},
            }
        )

        assert stream.is_timed_thumbnails is True
        assert stream.is_thumbnail_stream is True

    def test_container_duration_fallback(self) -> None:
        stream = parse_stream(
            {"index": 1, "codec_type": "audio"}, container_duration=42.0
        )

        assert stream.duration_seconds == 42.0


class TestParseFfprobeOutput:
    """Tests for parse_ffprobe_output against fixture documents."""

    def test_h264_movie(self, load_ffprobe_fixture) -> None:
        result = parse_ffprobe_output(
            Path("/media/movies/feature.mkv"), load_ffprobe_fixture("h264_aac_1080p")
        )

        assert result.container_format == "matroska,webm"
        assert result.duration_seconds == pytest.approx(120.12)
        assert [s.kind for s in result.streams] == [
            StreamKind.VIDEO,
            StreamKind.AUDIO,
            StreamKind.SUBTITLE,
            StreamKind.VIDEO,
        ]
        assert result.warnings == ()

        video = result.streams[0]
        assert video.frame_rate == Fraction(24000, 1001)
        assert video.byte_size == 150_000_000
        assert video.codec_tag == "avc1"

        audio = result.streams[1]
        assert audio.channels == 6
        assert audio.sample_rate == 48000
        assert audio.duration_seconds == pytest.approx(120.12)
        assert audio.byte_size == pytest.approx(5_765_760, abs=1)

        cover = result.streams[3]
        assert cover.is_attached_pic is True
        assert cover.is_still_image is True

    def test_hevc_clip(self, load_ffprobe_fixture) -> None:
        result = parse_ffprobe_output(
            Path("/media/clips/uhd.mp4"), load_ffprobe_fixture("hevc_10bit_4k")
        )

        video = result.streams[0]
        assert (video.bit_depth, video.chroma_subsampling) == (10, 420)
        assert video.byte_size == 300_000_000
        assert video.frame_rate == Fraction(60)
        assert result.streams[2].sample_rate == 44100
        assert len(result.audio_streams) == 2

    def test_hdr_interlaced_recording(self, load_ffprobe_fixture) -> None:
        result = parse_ffprobe_output(
            Path("/media/broadcast/recording.mkv"),
            load_ffprobe_fixture("hevc_hdr_interlaced"),
        )

        video = result.streams[0]
        assert video.is_hdr is True
        assert video.sample_aspect_ratio == Fraction(4, 3)
        assert video.has_square_pixels is False
        assert video.is_interlaced is True
        assert result.streams[1].is_hdr is False

    def test_malformed_streams(self, load_ffprobe_fixture, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            result = parse_ffprobe_output(
                Path("/media/old.avi"), load_ffprobe_fixture("malformed_streams")
            )

        assert result.duration_seconds is None
        assert result.warnings == ("Duplicate stream index 0, skipping",)
        assert [s.index for s in result.streams] == [0, 1, 2]

        video = result.streams[0]
        assert video.width is None
        assert video.height is None
        assert video.frame_rate == Fraction(25)
        assert video.bit_depth == 8
        assert video.chroma_subsampling is None
        assert video.is_bad_thumbnail_candidate is True

        audio = result.streams[1]
        assert audio.channels is None
        assert audio.sample_rate == 44100

        assert result.streams[2].kind is StreamKind.OTHER
        assert "Invalid non-positive width" in caplog.text

    def test_infinite_duration_leaves_size_unknown(self) -> None:
        data = {
            "streams": [
                {
                    "index": 0,
                    "codec_type": "audio",
                    "codec_name": "aac",
                    "bit_rate": "128000",
                }
            ],
            "format": {"duration": "inf"},
        }

        result = parse_ffprobe_output(Path("/media/live.ts"), data)

        assert result.duration_seconds is None
        assert result.streams[0].duration_seconds is None
        assert result.streams[0].byte_size is None

    def test_no_streams_warns(self) -> None:
        result = parse_ffprobe_output(Path("/media/empty.mkv"), {"format": {}})

        assert result.streams == ()
        assert result.warnings == ("No streams found in file",)


class TestLoadProbeFile:
    """Tests for load_probe_file."""

    def test_media_path_from_document(self, ffprobe_fixtures_dir: Path) -> None:
        result = load_probe_file(ffprobe_fixtures_dir / "h264_aac_1080p.json")

        assert result.path == Path("/media/movies/feature.mkv")

    def test_explicit_media_path(self, ffprobe_fixtures_dir: Path) -> None:
        result = load_probe_file(
            ffprobe_fixtures_dir / "h264_aac_1080p.json", Path("/other.mkv")
        )

        assert result.path == Path("/other.mkv")

    def test_probe_path_fallback(self, ffprobe_fixtures_dir: Path) -> None:
        probe_path = ffprobe_fixtures_dir / "malformed_streams.json"

        assert load_probe_file(probe_path).path == probe_path

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(MediaProbeError, match="Cannot read probe file"):
            load_probe_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(MediaProbeError, match="Invalid JSON"):
            load_probe_file(path)

    def test_non_utf8_file(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"format": {"filename": "\xff\xfe"}}')

        with pytest.raises(MediaProbeError, match="is not UTF-8 text"):
            load_probe_file(path)

    def test_non_object_document(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text(json.dumps([1, 2]))

        with pytest.raises(MediaProbeError, match="must contain a JSON object"):
            load_probe_file(path)
