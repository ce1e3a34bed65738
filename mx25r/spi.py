"""SPI device interfaces the driver talks through."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Write:
    """Clock out the given bytes, discarding what comes in."""

    data: bytes

    def __post_init__(self) -> None:
        if isinstance(self.data, int):
            raise TypeError("write data must be bytes-like, not an integer")
        object.__setattr__(self, "data", bytes(self.data))


@dataclass(frozen=True)
class Read:
    """Clock in the given number of bytes."""

    length: int

    def __post_init__(self) -> None:
        if isinstance(self.length, bool) or not isinstance(self.length, int):
            raise TypeError("read length must be an integer")
        if self.length < 0:
            raise ValueError(f"read length must not be negative, got {self.length}")


Operation = Union[Write, Read]


class SpiDevice(ABC):
    """A chip on an SPI bus; each call is one chip-select cycle."""

    @abstractmethod
    def transaction(self, operations: Sequence[Operation]) -> list[bytes]:
        """Run the operations under one chip select; return the bytes of each Read in order."""

    @abstractmethod
    def transfer_in_place(self, buffer: bytes) -> bytes:
        """Clock out buffer and return the bytes clocked in at the same time."""

    def write(self, data: bytes) -> None:
        """Clock out data under one chip select."""
        self.transaction([Write(data)])


class AsyncSpiDevice(ABC):
    """Asynchronous counterpart of SpiDevice."""

    @abstractmethod
    async def transaction(self, operations: Sequence[Operation]) -> list[bytes]:
        """Run the operations under one chip select; return the bytes of each Read in order."""

    @abstractmethod
    async def transfer_in_place(self, buffer: bytes) -> bytes:
        """Clock out buffer and return the bytes clocked in at the same time."""

    async def write(self, data: bytes) -> None:
        """Clock out data under one chip select."""
        await self.transaction([Write(data)])