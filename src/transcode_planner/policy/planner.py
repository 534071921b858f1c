"""Transcode plan assembly.

Validates the source, then composes stream selection, geometry, frame-rate,
codec compatibility and re-encode policy into one immutable TranscodePlan
per source file.
"""

import logging
from collections.abc import Callable, Sequence

from transcode_planner.core.codecs import (
    identify_video_codec,
    match_audio_codec,
    match_video_codec,
)
from transcode_planner.domain.enums import StreamKind
from transcode_planner.domain.models import ProbeResult, StreamDescriptor
from transcode_planner.logging.context import plan_context, stream_context
from transcode_planner.policy.compatibility import (
    channels_exceed_limit,
    resolve_audio_target,
    resolve_video_target,
    sample_rate_exceeds_limit,
    video_exceeds_limits,
)
from transcode_planner.policy.framerate import frame_rate_changed, resolve_frame_rate
from transcode_planner.policy.geometry import resolve_geometry
from transcode_planner.policy.reencode import StreamChanges, resolve_reencode_action
from transcode_planner.policy.types.enums import (
    StreamAction,
    StreamSelection,
    StripMetadataMode,
)
from transcode_planner.policy.types.options import TranscodeOptions
from transcode_planner.policy.types.plan import ResolvedStreamPlan, TranscodePlan
from transcode_planner.policy.validation import validate_source

logger = logging.getLogger(__name__)

REASON_NOT_SELECTED = "not_selected"
REASON_THUMBNAIL_STRIPPED = "thumbnail_stripped"
REASON_OTHER_REMOVED = "other_streams_removed"


def _video_rank(stream: StreamDescriptor) -> tuple[int, bool, int]:
    return (stream.pixel_area, stream.is_default, -stream.index)


def _audio_rank(stream: StreamDescriptor) -> tuple[int, bool, int]:
    return (stream.channels or 0, stream.is_default, -stream.index)


def select_streams(
    streams: Sequence[StreamDescriptor],
    selection: StreamSelection,
    rank: Callable[[StreamDescriptor], tuple[int, bool, int]],
) -> frozenset[int]:
    """Return the indices of the streams that survive a selection behavior.

    KEEP_BEST keeps the highest-ranked stream; ties go to the default stream,
    then to the earliest one.
    """
    if not streams or selection is StreamSelection.REMOVE_ALL:
        return frozenset()
    if selection is StreamSelection.KEEP_FIRST:
        return frozenset({streams[0].index})
    if selection is StreamSelection.KEEP_BEST:
        return frozenset({max(streams, key=rank).index})
    return frozenset(s.index for s in streams)


class TranscodePlanner:
    """Builds transcode plans from a fixed set of options."""

    def __init__(
        self, options: TranscodeOptions, *, strict_resize: bool | None = None
    ) -> None:
        """Initialize the planner.

        Args:
            options: Desired output properties.
            strict_resize: Overrides ``options.strict_resize`` when given.
        """
        self.options = options
        if strict_resize is None:
            strict_resize = options.strict_resize
        self.strict_resize = strict_resize

    def plan(self, probe: ProbeResult) -> TranscodePlan:
        """Resolve a per-stream plan for a probed file.

        Raises:
            SourceValidationError: If the source is outside the validation
                limits.
            IncompatibleCodecError: If a stream must be encoded into a codec,
                profile or container that cannot carry it.
            ResizeSkippedError: If strict resizing is on and a resize is a no-op.
        """
        with plan_context(probe.path):
            validate_source(probe, self.options)
            strip_thumbnails = self.options.strip_metadata in (
                StripMetadataMode.THUMBNAIL_ONLY,
                StripMetadataMode.ALL,
            )
            video = [s for s in probe.video_streams if not s.is_thumbnail_stream]
            audio = list(probe.audio_streams)
            kept_video = select_streams(
                video, self.options.video.selection, _video_rank
            )
            kept_audio = select_streams(
                audio, self.options.audio.selection, _audio_rank
            )

            plans: list[ResolvedStreamPlan] = []
            for stream in probe.streams:
                with stream_context(stream.index):
                    if stream.kind is StreamKind.VIDEO and stream.is_thumbnail_stream:
                        if strip_thumbnails:
                            plan = self._remove(stream, REASON_THUMBNAIL_STRIPPED)
                        else:
                            plan = self._passthrough(stream)
                    elif stream.kind is StreamKind.VIDEO:
                        if stream.index in kept_video:
                            plan = self._plan_video(stream)
                        else:
                            plan = self._remove(stream, REASON_NOT_SELECTED)
                    elif stream.kind is StreamKind.AUDIO:
                        if stream.index in kept_audio:
                            plan = self._plan_audio(stream)
                        else:
                            plan = self._remove(stream, REASON_NOT_SELECTED)
                    elif self.options.preserve_other_streams:
                        plan = self._passthrough(stream)
                    else:
                        plan = self._remove(stream, REASON_OTHER_REMOVED)

                    logger.debug(
                        "%s stream: %s (%s)",
                        stream.kind.value.capitalize(),
                        plan.action.value,
                        ", ".join(plan.reasons) or "no changes",
                    )
                    plans.append(plan)

            result = TranscodePlan(
                source_path=probe.path,
                container=self.options.container,
                streams=tuple(plans),
                strip_metadata=self.options.strip_metadata,
            )
            logger.info(
                "Planned %d streams: %d kept, %d to encode, %d deferred",
                len(result.streams),
                len(result.kept_streams),
                sum(1 for s in result.streams if s.action is StreamAction.REENCODE),
                len(result.deferred_streams),
            )
            return result

    def _strip_stream_metadata(self, per_kind: bool) -> bool:
        return self.options.strip_metadata is StripMetadataMode.ALL or per_kind

    def _remove(self, stream: StreamDescriptor, reason: str) -> ResolvedStreamPlan:
        return ResolvedStreamPlan(
            stream=stream, action=StreamAction.REMOVE, reasons=(reason,)
        )

    def _passthrough(self, stream: StreamDescriptor) -> ResolvedStreamPlan:
        return ResolvedStreamPlan(
            stream=stream,
            action=StreamAction.PASSTHROUGH,
            strip_metadata=self.options.strip_metadata is StripMetadataMode.ALL,
        )

    def _plan_video(self, stream: StreamDescriptor) -> ResolvedStreamPlan:
        options = self.options.video
        container = self.options.container

        geometry = None
        if options.resize is not None:
            if stream.width and stream.height:
                geometry = resolve_geometry(
                    stream.width,
                    stream.height,
                    options.resize,
                    strict=self.strict_resize,
                )
            else:
                logger.warning("Unknown dimensions, resize request ignored")

        frame_rate = None
        fps_changed = False
        if options.fps is not None:
            frame_rate = resolve_frame_rate(stream.frame_rate, options.fps)
            fps_changed = frame_rate_changed(stream.frame_rate, frame_rate)

        matched = match_video_codec(options.result_codecs, stream)
        source_codec = matched or identify_video_codec(stream)
        changes = StreamChanges(
            geometry=geometry is not None and geometry.changed,
            codec=matched is None,
            fps=fps_changed,
            profile=video_exceeds_limits(stream, options),
            hdr=options.remap_hdr_to_sdr and stream.is_hdr,
            sar=options.force_square_pixels and not stream.has_square_pixels,
            interlaced=options.force_progressive_frames and stream.is_interlaced,
            container=(
                source_codec is not None and not container.accepts_video(source_codec)
            ),
        )
        action = resolve_reencode_action(options.reencode, changes)
        strip = self._strip_stream_metadata(options.strip_metadata)

        if action is StreamAction.PASSTHROUGH:
            return ResolvedStreamPlan(
                stream=stream,
                action=action,
                strip_metadata=strip,
                reasons=changes.reasons,
            )

        return ResolvedStreamPlan(
            stream=stream,
            action=action,
            video_target=resolve_video_target(stream, options, container),
            geometry=geometry if geometry is not None and geometry.changed else None,
            frame_rate=frame_rate,
            original_size=self._original_size(stream, action),
            strip_metadata=strip,
            reasons=changes.reasons,
        )

    def _plan_audio(self, stream: StreamDescriptor) -> ResolvedStreamPlan:
        options = self.options.audio
        container = self.options.container

        matched = match_audio_codec(options.result_codecs, stream)
        changes = StreamChanges(
            codec=matched is None,
            channels=channels_exceed_limit(stream, options),
            sample_rate=sample_rate_exceeds_limit(stream, options),
            container=matched is not None and not container.accepts_audio(matched),
        )
        action = resolve_reencode_action(options.reencode, changes)
        strip = self._strip_stream_metadata(options.strip_metadata)

        if action is StreamAction.PASSTHROUGH:
            return ResolvedStreamPlan(
                stream=stream,
                action=action,
                strip_metadata=strip,
                reasons=changes.reasons,
            )

        return ResolvedStreamPlan(
            stream=stream,
            action=action,
            audio_target=resolve_audio_target(stream, options, container),
            original_size=self._original_size(stream, action),
            strip_metadata=strip,
            reasons=changes.reasons,
        )

    def _original_size(
        self, stream: StreamDescriptor, action: StreamAction
    ) -> int | None:
        if action is not StreamAction.REENCODE_THEN_COMPARE:
            return None
        if stream.byte_size is None:
            logger.warning("Stream size unknown, size comparison will fail")
        return stream.byte_size


def plan_transcode(
    probe: ProbeResult, options: TranscodeOptions, *, strict_resize: bool | None = None
) -> TranscodePlan:
    """Convenience wrapper around TranscodePlanner.plan()."""
    return TranscodePlanner(options, strict_resize=strict_resize).plan(probe)
