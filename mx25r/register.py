"""Register and identification values read from the MX25R."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


def _check_byte(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"register value must be an integer, got {type(value).__name__}")
    if not 0 <= value <= 0xFF:
        raise ValueError(f"register value must fit in a byte, got {value}")
    return value


def _bit(value: int, index: int) -> bool:
    return bool((value >> index) & 1)


@dataclass(frozen=True, order=True)
class _ByteId:
    value: int

    def __post_init__(self) -> None:
        _check_byte(self.value)


class ManufacturerId(_ByteId):
    """Manufacturer identification byte."""


class MemoryType(_ByteId):
    """Memory type byte of the JEDEC identification."""


class MemoryDensity(_ByteId):
    """Memory density byte of the JEDEC identification."""


class ElectronicId(_ByteId):
    """Electronic signature byte."""


class DeviceId(_ByteId):
    """Device identification byte."""


class ProtectedArea(Enum):
    """Which end of the array the block protection covers."""

    TOP = "top"
    BOTTOM = "bottom"

    @classmethod
    def from_bit(cls, bit: bool) -> ProtectedArea:
        return cls.BOTTOM if bit else cls.TOP

    @property
    def bit(self) -> bool:
        return self is ProtectedArea.BOTTOM


class PowerMode(Enum):
    """Operating power mode of the chip."""

    ULTRA_LOW_POWER = "ultra_low_power"
    HIGH_PERFORMANCE = "high_performance"

    @classmethod
    def from_bit(cls, bit: bool) -> PowerMode:
        return cls.HIGH_PERFORMANCE if bit else cls.ULTRA_LOW_POWER

    @property
    def bit(self) -> bool:
        return self is PowerMode.HIGH_PERFORMANCE


@dataclass(frozen=True)
class StatusRegister:
    """Decoded status register."""

    write_protect_disable: bool
    quad_enable: bool
    protected_block: int
    write_enable_latch: bool
    wip_bit: bool

    @classmethod
    def from_byte(cls, value: int) -> StatusRegister:
        _check_byte(value)
        return cls(
            write_protect_disable=_bit(value, 7),
            quad_enable=_bit(value, 6),
            protected_block=(value >> 2) & 0x0F,
            write_enable_latch=_bit(value, 1),
            wip_bit=_bit(value, 0),
        )


@dataclass(frozen=True)
class ConfigurationRegister:
    """Decoded configuration register."""

    dummy_cycle: bool
    protected_section: ProtectedArea
    power_mode: PowerMode

    @classmethod
    def from_bytes(cls, first: int, second: int) -> ConfigurationRegister:
        _check_byte(first)
        _check_byte(second)
        return cls(
            dummy_cycle=_bit(first, 6),
            protected_section=ProtectedArea.from_bit(_bit(first, 3)),
            power_mode=PowerMode.from_bit(_bit(second, 1)),
        )


@dataclass(frozen=True)
class SecurityRegister:
    """Decoded security register."""

    erase_failed: bool
    program_failed: bool
    erase_suspended: bool
    program_suspended: bool
    locked_down: bool
    secured_otp: bool

    @classmethod
    def from_byte(cls, value: int) -> SecurityRegister:
        _check_byte(value)
        return cls(
            erase_failed=_bit(value, 6),
            program_failed=_bit(value, 5),
            erase_suspended=_bit(value, 3),
            program_suspended=_bit(value, 2),
            locked_down=_bit(value, 1),
            secured_otp=_bit(value, 0),
        )