"""Addressing units of the MX25R memory array: blocks, sectors, pages and raw addresses."""

from __future__ import annotations

from dataclasses import dataclass

BLOCK64_SIZE = 0x010000
BLOCK32_SIZE = BLOCK64_SIZE // 2
SECTOR_SIZE = 0x1000
PAGE_SIZE = 0x100

_U8_MAX = 0xFF
_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFF_FFFF


def _check_range(name: str, value: int, maximum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
    if not 0 <= value <= maximum:
        raise ValueError(f"{name} must be within 0..{maximum:#x}, got {value}")


@dataclass(frozen=True, order=True)
class Block32:
    """A 32kB block id, containing 8 sectors."""

    index: int

    def __post_init__(self) -> None:
        _check_range("block index", self.index, _U16_MAX)


@dataclass(frozen=True, order=True)
class Block64:
    """A 64kB block id, containing 16 sectors."""

    index: int

    def __post_init__(self) -> None:
        _check_range("block index", self.index, _U16_MAX)


@dataclass(frozen=True, order=True)
class Sector:
    """A sector id, containing 16 pages for a total of 4kB."""

    index: int

    def __post_init__(self) -> None:
        _check_range("sector index", self.index, _U16_MAX)


@dataclass(frozen=True, order=True)
class Page:
    """A page id within a sector, each page holding 256 bytes."""

    index: int

    def __post_init__(self) -> None:
        _check_range("page index", self.index, _U8_MAX)


@dataclass(frozen=True)
class Address:
    """An address on the memory chip."""

    value: int

    def __post_init__(self) -> None:
        _check_range("address", self.value, _U32_MAX)

    @classmethod
    def from_addr(cls, sector: Sector, page: Page, offset: int) -> Address:
        """Any address in memory, given as sector, page and byte offset."""
        _check_range("offset", offset, _U8_MAX)
        return cls(sector.index * SECTOR_SIZE + page.index * PAGE_SIZE + offset)

    @classmethod
    def from_page(cls, sector: Sector, page: Page) -> Address:
        """The start of a specific page."""
        return cls.from_addr(sector, page, 0)

    @classmethod
    def from_sector(cls, sector: Sector) -> Address:
        """The start of a specific sector."""
        return cls.from_addr(sector, Page(0), 0)

    @classmethod
    def from_block32(cls, block: Block32) -> Address:
        """The address the driver uses for a 32kB block."""
        return cls(block.index * BLOCK32_SIZE // SECTOR_SIZE)

    @classmethod
    def from_block64(cls, block: Block64) -> Address:
        """The address the driver uses for a 64kB block."""
        return cls(block.index * BLOCK64_SIZE // SECTOR_SIZE)

    def __int__(self) -> int:
        return self.value