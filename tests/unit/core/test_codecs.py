"""Unit tests for the codec registry."""

import pytest

from transcode_planner.core.codecs import (
    ALL_SOURCE_VIDEO_CODECS,
    AUDIO_CODEC_ALIASES,
    VIDEO_CODEC_ALIASES,
    AudioCodec,
    ContainerFormat,
    VideoCodec,
    canonical_codec_name,
    identify_audio_codec,
    identify_video_codec,
    match_video_codec,
    parse_audio_codec,
    parse_video_codec,
)


class TestCanonicalCodecName:
    """Tests for canonical_codec_name."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("HEVC", "hevc"),
            ("x265", "hevc"),
            ("avc1", "h264"),
            ("vp09", "vp9"),
            ("prores", "prores"),
        ],
    )
    def test_video_aliases(self, name: str, expected: str) -> None:
        assert canonical_codec_name(name, VIDEO_CODEC_ALIASES) == expected

    def test_audio_alias(self) -> None:
        assert canonical_codec_name("mp3float", AUDIO_CODEC_ALIASES) == "mp3"

    @pytest.mark.parametrize("name", [None, ""])
    def test_empty_name(self, name) -> None:
        assert canonical_codec_name(name, VIDEO_CODEC_ALIASES) == ""


class TestVideoCodecMatching:
    """Tests for VideoCodec.matches and the match helpers."""

    def test_h264_matches_any_tag(self, make_video_stream) -> None:
        assert VideoCodec.H264.matches(make_video_stream(codec_tag="x264"))

    def test_h265_requires_hvc1(self, make_video_stream) -> None:
        hev1 = make_video_stream(codec_name="hevc", codec_tag="hev1")
        hvc1 = make_video_stream(codec_name="hevc", codec_tag="HVC1")

        assert VideoCodec.H265.matches(hev1) is False
        assert VideoCodec.H265.matches(hvc1) is True
        assert VideoCodec.H265_ANY_TAG.matches(hev1) is True

    def test_match_returns_first_in_order(self, make_video_stream) -> None:
        stream = make_video_stream(codec_name="hevc", codec_tag="hvc1")
        codecs = (VideoCodec.H265_ANY_TAG, VideoCodec.H265)

        assert match_video_codec(codecs, stream) is VideoCodec.H265_ANY_TAG

    def test_no_match(self, make_video_stream) -> None:
        assert match_video_codec((VideoCodec.VP9,), make_video_stream()) is None

    def test_identify_unknown_codec(self, make_video_stream) -> None:
        assert identify_video_codec(make_video_stream(codec_name="prores")) is None

    def test_identify_av1(self, make_video_stream) -> None:
        stream = make_video_stream(codec_name="av1")

        assert identify_video_codec(stream) is VideoCodec.AV1

    def test_encodable_codecs_first(self) -> None:
        assert ALL_SOURCE_VIDEO_CODECS[0] is VideoCodec.H264
        assert VideoCodec.H264.supports_encoding
        assert not VideoCodec.VP9.supports_encoding


class TestAudioCodecMatching:
    """Tests for AudioCodec.matches."""

    def test_aac_profile_must_match(self, make_audio_stream) -> None:
        he = make_audio_stream(profile="HE-AAC")

        assert AudioCodec.AAC.matches(he) is False
        assert AudioCodec.HE_AAC.matches(he) is True

    def test_identify_mp3(self, make_audio_stream) -> None:
        stream = make_audio_stream(codec_name="mp3", profile=None)

        assert identify_audio_codec(stream) is AudioCodec.MP3


class TestContainerFormat:
    """Tests for container capability checks."""

    @pytest.mark.parametrize(
        ("container", "codec", "accepted"),
        [
            (ContainerFormat.MP4, VideoCodec.H264, True),
            (ContainerFormat.MP4, VideoCodec.VP8, False),
            (ContainerFormat.MOV, VideoCodec.H263, False),
            (ContainerFormat.MKV, VideoCodec.VP8, True),
            (ContainerFormat.WEBM, VideoCodec.VP9, True),
            (ContainerFormat.WEBM, VideoCodec.H264, False),
        ],
    )
    def test_accepts_video(self, container, codec, accepted: bool) -> None:
        assert container.accepts_video(codec) is accepted

    @pytest.mark.parametrize(
        ("container", "codec", "accepted"),
        [
            (ContainerFormat.MP4, AudioCodec.AAC, True),
            (ContainerFormat.WEBM, AudioCodec.OPUS, True),
            (ContainerFormat.WEBM, AudioCodec.AAC, False),
        ],
    )
    def test_accepts_audio(self, container, codec, accepted: bool) -> None:
        assert container.accepts_audio(codec) is accepted


class TestParseCodecNames:
    """Tests for policy codec name lookup."""

    def test_video_names(self) -> None:
        assert parse_video_codec("H265") is VideoCodec.H265
        assert parse_video_codec("h265_any_tag") is VideoCodec.H265_ANY_TAG

    def test_audio_names(self) -> None:
        assert parse_audio_codec("he_aac") is AudioCodec.HE_AAC

    def test_unknown_video_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown video codec 'hevc'"):
            parse_video_codec("hevc")

    def test_unknown_audio_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown audio codec 'flac'"):
            parse_audio_codec("flac")
