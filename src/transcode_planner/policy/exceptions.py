"""Custom exceptions for transcode planning.

Configuration errors in option records are plain ``ValueError`` raised at
construction time. Everything raised by the resolvers derives from
``PolicyError`` so callers can catch planning failures as a group.
"""


class PolicyError(Exception):
    """Base class for policy-related errors."""

    pass


class PolicyValidationError(PolicyError):
    """Raised when a policy file fails validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable description of the problem.
            field: Dotted path of the offending field, when known.
        """
        self.message = message
        self.field = field
        super().__init__(message)


class IncompatibleCodecError(PolicyError):
    """Raised when a codec, profile or bit depth cannot satisfy the request.

    This covers a decode-only target codec asked to encode, a profile that
    cannot carry the requested bit depth or chroma subsampling, and a codec
    the output container cannot carry.
    """

    def __init__(
        self,
        codec: str,
        reason: str,
        stream_index: int | None = None,
        container: str | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            codec: Name of the codec that could not be used.
            reason: Why the combination is invalid.
            stream_index: Index of the stream being resolved, if any.
            container: Output container, when the container is the constraint.
        """
        self.codec = codec
        self.reason = reason
        self.stream_index = stream_index
        self.container = container
        where = f"stream #{stream_index}: " if stream_index is not None else ""
        super().__init__(f"{where}cannot use {codec}: {reason}")


class ResizeSkippedError(PolicyError):
    """Raised in strict mode when a resize request would change nothing."""

    def __init__(
        self, width: int, height: int, box_width: int, box_height: int
    ) -> None:
        self.width = width
        self.height = height
        self.box_width = box_width
        self.box_height = box_height
        super().__init__(
            f"Resize to {box_width}x{box_height} has no effect on "
            f"{width}x{height} source"
        )


class ThumbnailSelectingError(PolicyError):
    """Raised when no acceptable thumbnail can be chosen.

    This is terminal for the thumbnail request and is not retried.
    """

    def __init__(
        self, message: str = "No suitable thumbnail could be selected from the video."
    ) -> None:
        super().__init__(message)


class ComparisonStateError(PolicyError):
    """Raised on an illegal transition of a deferred size comparison."""

    def __init__(self, stream_index: int, current: str, requested: str) -> None:
        self.stream_index = stream_index
        self.current = current
        self.requested = requested
        super().__init__(
            f"stream #{stream_index}: cannot move size comparison "
            f"from {current} to {requested}"
        )


class SizeComparisonError(PolicyError):
    """Raised when a size comparison is finalized without both sizes."""

    def __init__(self, stream_index: int, missing: str) -> None:
        self.stream_index = stream_index
        self.missing = missing
        super().__init__(
            f"stream #{stream_index}: cannot compare sizes, {missing} size unknown"
        )


class SourceValidationError(PolicyError):
    """Raised when a source file falls outside the configured limits.

    Also raised when a limit is configured but the property it checks,
    such as the width or duration, is unknown for the stream.
    """

    def __init__(self, message: str, stream_index: int | None = None) -> None:
        self.stream_index = stream_index
        where = f"stream #{stream_index}: " if stream_index is not None else ""
        super().__init__(f"{where}{message}")
