"""Pure parsing functions for ffprobe JSON output.

These functions turn the output of
``ffprobe -show_streams -show_format -of json`` into StreamDescriptor and
ProbeResult objects. All functions are pure (no I/O, no side effects) apart
from load_probe_file(), which reads a saved probe.
"""

import json
import logging
import math
from fractions import Fraction
from pathlib import Path
from typing import Any

from transcode_planner.domain.enums import StreamKind
from transcode_planner.domain.models import ProbeResult, StreamDescriptor
from transcode_planner.introspector.interface import MediaProbeError
from transcode_planner.policy.framerate import parse_frame_rate

logger = logging.getLogger(__name__)

# pix_fmt -> (bits per sample, chroma subsampling)
PIXEL_FORMATS: dict[str, tuple[int, int]] = {
    "yuv420p": (8, 420),
    "yuvj420p": (8, 420),
    "nv12": (8, 420),
    "yuv422p": (8, 422),
    "yuvj422p": (8, 422),
    "yuv444p": (8, 444),
    "yuvj444p": (8, 444),
    "yuv420p10le": (10, 420),
    "p010le": (10, 420),
    "yuv422p10le": (10, 422),
    "yuv444p10le": (10, 444),
    "gbrp": (8, 444),
    "gbrp10le": (10, 444),
    "yuv420p12le": (12, 420),
    "yuv422p12le": (12, 422),
    "yuv444p12le": (12, 444),
    "gbrp12le": (12, 444),
    "yuv440p": (8, 440),
    "yuv440p10le": (10, 440),
    "yuv440p12le": (12, 440),
}

# Image codecs that only ever carry still pictures
STILL_IMAGE_CODECS: frozenset[str] = frozenset(
    {"mjpeg", "png", "bmp", "gif", "webp", "tiff", "jpegls"}
)

# Dispositions that make a video stream a poor thumbnail source
_BAD_THUMBNAIL_DISPOSITIONS: tuple[str, ...] = (
    "dub",
    "comment",
    "lyrics",
    "karaoke",
    "forced",
    "hearing_impaired",
    "visual_impaired",
    "clean_effects",
    "non_diegetic",
    "captions",
    "descriptions",
    "metadata",
    "dependent",
    "multilayer",
)

# Matroska muxers write per-stream statistics tags such as NUMBER_OF_BYTES-eng
_BYTE_COUNT_TAG = "number_of_bytes"

# Colour metadata values of common SDR profiles; a missing value counts as SDR
SDR_COLOR_TRANSFERS: frozenset[str] = frozenset(
    {"bt709", "bt601", "bt470", "bt470bg", "smpte170m", "smpte240m", "iec61966-2-1"}
)
SDR_COLOR_PRIMARIES: frozenset[str] = frozenset(
    {"bt709", "bt470m", "bt470bg", "smpte170m", "smpte240m"}
)
SDR_COLOR_SPACES: frozenset[str] = frozenset(
    {
        "bt709",
        "bt470m",
        "bt470bg",
        "smpte170m",
        "smpte240m",
        "srgb",
        "iec61966-2-1",
        "gbr",
    }
)

_UNSET_VALUES: frozenset[str] = frozenset({"unknown", "unspecified"})

# field_order values that mean the frames are not interlaced
_PROGRESSIVE_FIELD_ORDERS: frozenset[str] = frozenset({"progressive", "unknown"})


def _log_validation_warning(
    message: str,
    field_name: str,
    file_path: str | None,
    *args: object,
) -> None:
    """Log a validation warning with optional file context."""
    context = f" in {file_path}" if file_path else ""
    logger.warning(f"{message}{context}", field_name, *args)


def _coerce_int(value: Any) -> Any:
    # ffprobe reports some integers as strings ("sample_rate", "bit_rate")
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return value
    return value


def validate_positive_int(
    value: Any,
    field_name: str,
    file_path: str | None = None,
) -> int | None:
    """Validate that a value is a positive integer or None.

    Numeric strings are accepted, since ffprobe reports several integer
    fields as strings.

    Args:
        value: Value to validate.
        field_name: Field name for warning messages.
        file_path: File path context for warnings.

    Returns:
        Validated value or None if invalid.
    """
    if value is None:
        return None
    value = _coerce_int(value)
    if not isinstance(value, int) or isinstance(value, bool):
        _log_validation_warning(
            "Expected int for %s, got %s", field_name, file_path, type(value).__name__
        )
        return None
    if value <= 0:
        _log_validation_warning(
            "Invalid non-positive %s: %d", field_name, file_path, value
        )
        return None
    return value


def parse_duration(value: Any, file_path: str | None = None) -> float | None:
    """Parse duration string from ffprobe into seconds.

    Args:
        value: Duration string from ffprobe (e.g., "3600.000") or None.
        file_path: File path context for warnings.

    Returns:
        Duration in seconds as float, or None if missing, unparseable,
        negative or not finite.
    """
    if value is None:
        return None
    try:
        duration = float(value)
    except (ValueError, TypeError):
        return None
    if not math.isfinite(duration):
        _log_validation_warning(
            "Invalid non-finite %s: %s", "duration", file_path, value
        )
        return None
    return duration if duration >= 0 else None


def map_stream_kind(codec_type: str | None) -> StreamKind:
    """Map an ffprobe codec_type to a StreamKind."""
    try:
        return StreamKind((codec_type or "").casefold())
    except ValueError:
        return StreamKind.OTHER


def pixel_format_characteristics(pixel_format: str | None) -> tuple[int, int] | None:
    """Return (bit depth, chroma subsampling) for a known pixel format."""
    if not pixel_format:
        return None
    return PIXEL_FORMATS.get(pixel_format.casefold())


def is_known_sdr(
    color_transfer: str | None,
    color_primaries: str | None,
    color_space: str | None,
) -> bool:
    """Return True if every reported colour property belongs to an SDR profile.

    Anything else, PQ (smpte2084) and HLG (arib-std-b67) included, counts
    as HDR. ``unknown`` and ``unspecified`` are treated as missing.
    """
    checks = (
        (color_transfer, SDR_COLOR_TRANSFERS),
        (color_primaries, SDR_COLOR_PRIMARIES),
        (color_space, SDR_COLOR_SPACES),
    )
    return all(
        value is None or value.casefold() in known or value.casefold() in _UNSET_VALUES
        for value, known in checks
    )


def parse_sample_aspect_ratio(value: Any) -> Fraction | None:
    """Parse an ffprobe sample_aspect_ratio such as ``"4:3"``.

    Returns None for a missing, malformed or unset (``"0:1"``) ratio.
    """
    if not isinstance(value, str) or ":" not in value:
        return None
    num, _, den = value.partition(":")
    try:
        num_value, den_value = int(num), int(den)
    except ValueError:
        return None
    if num_value <= 0 or den_value <= 0:
        return None
    return Fraction(num_value, den_value)


def is_interlaced(field_order: str | None) -> bool:
    """Return True if ffprobe reports interlaced or telecined field order."""
    if not field_order:
        return False
    return field_order.casefold() not in _PROGRESSIVE_FIELD_ORDERS


def parse_byte_size(
    stream: dict,
    duration: float | None,
    file_path: str | None = None,
) -> int | None:
    """Determine the byte size of a stream.

    Uses a NUMBER_OF_BYTES statistics tag when present, otherwise estimates
    from the stream bit rate and duration.
    """
    for key, value in (stream.get("tags") or {}).items():
        if key.casefold().startswith(_BYTE_COUNT_TAG):
            size = validate_positive_int(value, "NUMBER_OF_BYTES", file_path)
            if size is not None:
                return size

    bit_rate = validate_positive_int(stream.get("bit_rate"), "bit_rate", file_path)
    if bit_rate is not None and duration:
        return int(bit_rate * duration / 8)
    return None


def parse_stream(
    stream: dict,
    container_duration: float | None = None,
    file_path: str | None = None,
) -> StreamDescriptor:
    """Parse a single ffprobe stream dict into a StreamDescriptor.

    Args:
        stream: Stream dictionary from ffprobe JSON.
        container_duration: Fallback duration from container format.
        file_path: Optional file path for context in warning messages.

    Returns:
        StreamDescriptor domain object.
    """
    kind = map_stream_kind(stream.get("codec_type"))
    disposition = stream.get("disposition") or {}

    duration = parse_duration(stream.get("duration"), file_path)
    if duration is None:
        duration = container_duration

    fields: dict[str, Any] = {
        "index": stream.get("index", 0),
        "kind": kind,
        "codec_name": stream.get("codec_name"),
        "profile": stream.get("profile"),
        "codec_tag": stream.get("codec_tag_string"),
        "is_default": disposition.get("default", 0) == 1,
        "duration_seconds": duration,
        "byte_size": parse_byte_size(stream, duration, file_path),
    }

    if kind is StreamKind.VIDEO:
        fields["width"] = validate_positive_int(stream.get("width"), "width", file_path)
        fields["height"] = validate_positive_int(
            stream.get("height"), "height", file_path
        )
        # Prefer r_frame_rate, fall back to avg_frame_rate
        fields["frame_rate"] = parse_frame_rate(
            stream.get("r_frame_rate")
        ) or parse_frame_rate(stream.get("avg_frame_rate"))

        pixel_format = stream.get("pix_fmt")
        fields["pixel_format"] = pixel_format
        characteristics = pixel_format_characteristics(pixel_format)
        if characteristics is not None:
            fields["bit_depth"], fields["chroma_subsampling"] = characteristics
        else:
            fields["bit_depth"] = validate_positive_int(
                stream.get("bits_per_raw_sample"), "bits_per_raw_sample", file_path
            )
            if pixel_format:
                logger.debug("Unrecognized pixel format %s", pixel_format)

        fields["is_attached_pic"] = disposition.get("attached_pic", 0) == 1
        fields["is_timed_thumbnails"] = disposition.get("timed_thumbnails", 0) == 1
        fields["is_still_image"] = disposition.get("still_image", 0) == 1 or (
            (stream.get("codec_name") or "").casefold() in STILL_IMAGE_CODECS
        )
        fields["is_bad_thumbnail_candidate"] = any(
            disposition.get(name, 0) == 1 for name in _BAD_THUMBNAIL_DISPOSITIONS
        )
        fields["is_hdr"] = not is_known_sdr(
            stream.get("color_transfer"),
            stream.get("color_primaries"),
            stream.get("color_space"),
        )
        fields["sample_aspect_ratio"] = parse_sample_aspect_ratio(
            stream.get("sample_aspect_ratio")
        )
        fields["is_interlaced"] = is_interlaced(stream.get("field_order"))

    elif kind is StreamKind.AUDIO:
        fields["channels"] = validate_positive_int(
            stream.get("channels"), "channels", file_path
        )
        fields["sample_rate"] = validate_positive_int(
            stream.get("sample_rate"), "sample_rate", file_path
        )

    return StreamDescriptor(**fields)


def parse_streams(
    streams: list[dict],
    container_duration: float | None = None,
    file_path: str | None = None,
) -> tuple[list[StreamDescriptor], list[str]]:
    """Parse stream data into StreamDescriptor objects.

    Args:
        streams: List of stream dictionaries from ffprobe.
        container_duration: Container-level duration as fallback.
        file_path: Optional file path for context in warning messages.

    Returns:
        Tuple of (streams list, warnings list).
    """
    descriptors: list[StreamDescriptor] = []
    warnings: list[str] = []
    seen_indices: set[int] = set()

    for stream in streams:
        index = stream.get("index", 0)
        if index in seen_indices:
            warnings.append(f"Duplicate stream index {index}, skipping")
            continue
        seen_indices.add(index)
        descriptors.append(parse_stream(stream, container_duration, file_path))

    return descriptors, warnings


def parse_ffprobe_output(path: Path, data: dict) -> ProbeResult:
    """Parse ffprobe JSON output into a ProbeResult.

    Args:
        path: Path to the media file.
        data: Parsed ffprobe JSON output.

    Returns:
        ProbeResult with streams and warnings.
    """
    format_info = data.get("format") or {}
    container_format = format_info.get("format_name")
    container_duration = parse_duration(format_info.get("duration"), str(path))

    streams, warnings = parse_streams(
        data.get("streams") or [], container_duration, str(path)
    )
    if not streams:
        warnings.append("No streams found in file")

    return ProbeResult(
        path=path,
        container_format=container_format,
        streams=tuple(streams),
        duration_seconds=container_duration,
        warnings=tuple(warnings),
    )


def load_probe_file(probe_path: Path, media_path: Path | None = None) -> ProbeResult:
    """Load a saved ffprobe JSON document.

    Args:
        probe_path: Path to the JSON file.
        media_path: Path of the media file it describes. Defaults to
            ``format.filename`` from the document, then to ``probe_path``.

    Raises:
        MediaProbeError: If the file cannot be read or is not valid JSON.
    """
    try:
        data = json.loads(Path(probe_path).read_text(encoding="utf-8"))
    except OSError as e:
        raise MediaProbeError(f"Cannot read probe file {probe_path}: {e}") from e
    except UnicodeDecodeError as e:
        raise MediaProbeError(f"Probe file {probe_path} is not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise MediaProbeError(f"Invalid JSON in probe file {probe_path}: {e}") from e
    if not isinstance(data, dict):
        raise MediaProbeError(f"Probe file {probe_path} must contain a JSON object")

    if media_path is None:
        filename = (data.get("format") or {}).get("filename")
        media_path = Path(filename) if filename else Path(probe_path)
    return parse_ffprobe_output(media_path, data)
