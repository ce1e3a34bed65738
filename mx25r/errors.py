"""Errors raised by the MX25R driver."""

from __future__ import annotations

from enum import Enum


class NorFlashErrorKind(Enum):
    """Generic classification of NOR flash errors."""

    NOT_ALIGNED = "not_aligned"
    OUT_OF_BOUNDS = "out_of_bounds"
    OTHER = "other"


class FlashError(Exception):
    """Base class of every error the driver raises."""

    _kind = NorFlashErrorKind.OTHER
    _default_message = "flash error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self._default_message)

    def kind(self) -> NorFlashErrorKind:
        """The generic NOR flash classification of this error."""
        return self._kind


class SpiError(FlashError):
    """The underlying SPI device failed."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"SPI error: {cause}")


class InvalidValueError(FlashError):
    """An invalid value was passed."""

    _default_message = "invalid value"


class OutOfBoundsError(FlashError):
    """The address lies outside the memory."""

    _kind = NorFlashErrorKind.OUT_OF_BOUNDS
    _default_message = "address out of bounds"


class NotAlignedError(FlashError):
    """The address is not aligned as required."""

    _kind = NorFlashErrorKind.NOT_ALIGNED
    _default_message = "address not aligned"


class BusyError(FlashError):
    """The device is busy with a write or erase."""

    _default_message = "device busy"