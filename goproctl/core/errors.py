"""Domain-specific errors for goproctl."""

from __future__ import annotations


class GoproctlError(Exception):
    """Base error for goproctl."""


class StatusTableLoadError(GoproctlError):
    """Raised when reading a status table source fails."""


class StatusTableValidationError(GoproctlError):
    """Raised when a status table does not conform to schema or semantics."""


class ActionError(GoproctlError):
    """Raised when an action cannot be resolved or encoded."""


class FieldWidthError(GoproctlError, ValueError):
    """Raised when a field has more bytes than the target integer width."""


class DecodeError(GoproctlError):
    """Base error for inbound frame and record decoding."""


class TooShortError(DecodeError):
    """Raised when a frame, record or nested field is shorter than its header claims."""

    def __init__(self, message: str, *, offset: int | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.offset = offset
        self.field = field


class LengthMismatchError(DecodeError):
    """Raised when a declared length disagrees with the bytes present."""


class InvalidValueError(DecodeError):
    """Raised when a field's raw value cannot be represented in its type."""


class InvalidBooleanError(InvalidValueError):
    """Raised when a boolean field is neither 0 nor 1."""


class UnknownTagError(DecodeError):
    """Raised when a tag has no registered decoding rule."""

    def __init__(self, message: str, *, tag: int) -> None:
        super().__init__(message)
        self.tag = tag


class UnsupportedTagError(DecodeError):
    """Raised for a known tag whose value encoding is not implemented."""

    def __init__(self, message: str, *, tag: int) -> None:
        super().__init__(message)
        self.tag = tag


class NilBufferError(DecodeError):
    """Raised when a decoder is handed no buffer at all."""


class TransportError(GoproctlError):
    """Base transport error."""


class TransportConnectError(TransportError):
    """Raised on BLE connect failures."""


class TransportSendError(TransportError):
    """Raised when writing a frame fails."""


class TransportTimeoutError(TransportError):
    """Raised when no response notification arrives in time."""
