"""Asynchronous driver for the MX25R NOR flash family."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import ClassVar, Optional

from .address import PAGE_SIZE, Address, Block32, Block64, Page, Sector
from .command import Command
from .errors import (
    BusyError,
    FlashError,
    InvalidValueError,
    NotAlignedError,
    OutOfBoundsError,
    SpiError,
)
from .register import (
    ConfigurationRegister,
    DeviceId,
    ElectronicId,
    ManufacturerId,
    MemoryDensity,
    MemoryType,
    PowerMode,
    ProtectedArea,
    SecurityRegister,
    StatusRegister,
)
from .spi import AsyncSpiDevice, Operation, Read, Write

_U32_MAX = 0xFFFF_FFFF
_U16_MAX = 0xFFFF


class AsyncMX25R:
    """Low level asynchronous MX25R driver.

    Concrete chips are subclasses declaring their highest address with the
    ``size`` class keyword, e.g. ``class Chip(AsyncMX25R, size=0x7FFFFF)``.
    """

    SIZE: ClassVar[Optional[int]] = None
    READ_SIZE: ClassVar[int] = 1
    WRITE_SIZE: ClassVar[int] = 1
    ERASE_SIZE: ClassVar[int] = 4096

    def __init_subclass__(cls, *, size: Optional[int] = None, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if size is not None:
            if isinstance(size, bool) or not isinstance(size, int) or not 0 <= size < _U32_MAX:
                raise ValueError(f"invalid chip size {size!r}")
            cls.SIZE = size

    def __init__(self, spi: AsyncSpiDevice) -> None:
        if self.SIZE is None:
            raise TypeError(f"{type(self).__name__} does not declare a chip size")
        self._spi = spi

    def capacity(self) -> int:
        """Number of bytes in the memory array."""
        return self.SIZE + 1

    def verify_addr(self, addr: Address) -> int:
        """Return the numeric address, raising OutOfBoundsError past the chip's end."""
        value = int(addr)
        if value > self.SIZE:
            raise OutOfBoundsError()
        return value

    # -- SPI plumbing -------------------------------------------------------

    async def _transaction(self, operations: Sequence[Operation]) -> list[bytes]:
        try:
            return await self._spi.transaction(operations)
        except FlashError:
            raise
        except Exception as exc:
            raise SpiError(exc) from exc

    async def _command_write(self, data: bytes) -> None:
        try:
            await self._spi.write(data)
        except FlashError:
            raise
        except Exception as exc:
            raise SpiError(exc) from exc

    async def _command_transfer(self, data: bytes) -> bytes:
        try:
            return bytes(await self._spi.transfer_in_place(data))
        except FlashError:
            raise
        except Exception as exc:
            raise SpiError(exc) from exc

    def _addr_header(self, cmd: Command, addr: Address) -> bytes:
        value = self.verify_addr(addr)
        return bytes([cmd, (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF])

    async def _addr_command(self, addr: Address, cmd: Command) -> None:
        await self._command_write(self._addr_header(cmd, addr))

    async def _write_read(self, header: bytes, length: int) -> bytes:
        results = await self._transaction([Write(header), Read(length)])
        return bytes(results[0])

    async def _read_base(self, addr: Address, cmd: Command, length: int) -> bytes:
        await self.wait_wip()
        return await self._write_read(self._addr_header(cmd, addr), length)

    async def _read_base_dummy(self, addr: Address, cmd: Command, length: int) -> bytes:
        header = self._addr_header(cmd, addr) + bytes([Command.DUMMY])
        return await self._write_read(header, length)

    async def _write_base(self, addr: Address, cmd: Command, data: bytes) -> None:
        header = self._addr_header(cmd, addr)
        await self._transaction([Write(header), Write(data)])

    async def _prepare_write(self) -> None:
        await self.poll_wip()
        await self._write_enable()

    async def _write_enable(self) -> None:
        await self._command_write(bytes([Command.WRITE_ENABLE]))

    # -- public commands ----------------------------------------------------

    async def wait_wip(self) -> None:
        """Wait until no write or erase is in progress."""
        while True:
            try:
                await self.poll_wip()
            except BusyError:
                await asyncio.sleep(0)
            else:
                return

    async def read(self, addr: Address, length: int) -> bytes:
        """Read bytes from an address, waiting for the chip to be idle first."""
        return await self._read_base(addr, Command.READ, length)

    async def read_fast(self, addr: Address, length: int) -> bytes:
        """Read bytes from an address with the fast read instruction."""
        return await self._read_base_dummy(addr, Command.READ_F, length)

    async def write_page(self, sector: Sector, page: Page, data: bytes) -> None:
        """Program bytes at the start of a page; write enable is sent first."""
        addr = Address.from_page(sector, page)
        await self._prepare_write()
        await self._write_base(addr, Command.PROGRAM_PAGE, data)

    async def erase_sector(self, sector: Sector) -> None:
        """Erase a 4kB sector."""
        addr = Address.from_sector(sector)
        await self._prepare_write()
        await self._addr_command(addr, Command.SECTOR_ERASE)

    async def erase_block64(self, block: Block64) -> None:
        """Erase a 64kB block."""
        addr = Address.from_block64(block)
        await self._prepare_write()
        await self._addr_command(addr, Command.BLOCK_ERASE)

    async def erase_block32(self, block: Block32) -> None:
        """Erase a 32kB block."""
        addr = Address.from_block32(block)
        await self._prepare_write()
        await self._addr_command(addr, Command.BLOCK_ERASE_32)

    async def erase_chip(self) -> None:
        """Erase the whole chip."""
        await self._prepare_write()
        await self._command_write(bytes([Command.CHIP_ERASE]))

    async def read_sfdp(self, addr: Address, length: int) -> bytes:
        """Read the Serial Flash Discoverable Parameters."""
        return await self._read_base_dummy(addr, Command.READ_SFDP, length)

    async def write_disable(self) -> None:
        """Clear the write enable latch."""
        await self._command_write(bytes([Command.WRITE_DISABLE]))

    async def read_status(self) -> StatusRegister:
        """Read the status register."""
        response = await self._command_transfer(bytes([Command.READ_STATUS, 0]))
        return StatusRegister.from_byte(response[1])

    async def poll_wip(self) -> None:
        """Raise BusyError while a write or erase is in progress."""
        if (await self.read_status()).wip_bit:
            raise BusyError()

    async def read_configuration(self) -> ConfigurationRegister:
        """Read the configuration register."""
        response = await self._command_transfer(bytes([Command.READ_CONFIG, 0, 0]))
        return ConfigurationRegister.from_bytes(response[1], response[2])

    async def write_configuration(
        self,
        block_protected: int,
        quad_enable: bool,
        status_write_disable: bool,
        dummy_cycle: bool,
        protected_section: ProtectedArea,
        power_mode: PowerMode,
    ) -> None:
        """Write the status and configuration registers."""
        if isinstance(block_protected, bool) or not isinstance(block_protected, int):
            raise InvalidValueError("block protection must be an integer")
        if not 0 <= block_protected <= 0x0F:
            raise InvalidValueError(f"block protection out of range: {block_protected}")
        await self._prepare_write()
        status = (block_protected << 2) | (int(bool(quad_enable)) << 6)
        status |= int(bool(status_write_disable)) << 7
        config1 = (int(protected_section.bit) << 3) | (int(bool(dummy_cycle)) << 6)
        config2 = int(power_mode.bit) << 1
        await self._command_write(bytes([Command.WRITE_STATUS, status, config1, config2]))

    async def suspend_program_erase(self) -> None:
        """Suspend the running program or erase."""
        await self._command_write(bytes([Command.PROGRAM_ERASE_SUSPEND]))

    async def resume_program_erase(self) -> None:
        """Resume a suspended program or erase."""
        await self._command_write(bytes([Command.PROGRAM_ERASE_RESUME]))

    async def deep_power_down(self) -> None:
        """Put the chip into deep power down."""
        await self._command_write(bytes([Command.DEEP_POWER_DOWN]))

    async def set_burst_length(self, burst_length: int) -> None:
        """Set the wrap-around burst length."""
        await self._command_write(bytes([Command.SET_BURST_LENGTH, burst_length]))

    async def read_identification(self) -> tuple[ManufacturerId, MemoryType, MemoryDensity]:
        """Read the JEDEC identification."""
        response = await self._command_transfer(
            bytes([Command.READ_IDENTIFICATION, 0, 0, 0])
        )
        return (
            ManufacturerId(response[1]),
            MemoryType(response[2]),
            MemoryDensity(response[3]),
        )

    async def read_electronic_id(self) -> ElectronicId:
        """Read the electronic signature."""
        dummy = Command.DUMMY
        response = await self._command_transfer(
            bytes([Command.READ_ELECTRONIC_ID, dummy, dummy, dummy, 0])
        )
        return ElectronicId(response[4])

    async def read_manufacturer_id(self) -> tuple[ManufacturerId, DeviceId]:
        """Read the manufacturer and device ids."""
        dummy = Command.DUMMY
        response = await self._command_transfer(
            bytes([Command.READ_MANUFACTURER_ID, dummy, dummy, 0x00, 0, 0])
        )
        return ManufacturerId(response[4]), DeviceId(response[5])

    async def enter_secure_otp(self) -> None:
        """Enter the secured OTP area, independent of the main array."""
        await self._command_write(bytes([Command.ENTER_SECURE_OTP]))

    async def exit_secure_otp(self) -> None:
        """Leave the secured OTP area."""
        await self._command_write(bytes([Command.EXIT_SECURE_OTP]))

    async def read_security_register(self) -> SecurityRegister:
        """Read the security register."""
        response = await self._command_transfer(
            bytes([Command.READ_SECURITY_REGISTER, 0])
        )
        return SecurityRegister.from_byte(response[1])

    async def write_security_register(self) -> None:
        """Lock down the secured OTP area. This cannot be undone."""
        await self._command_write(bytes([Command.WRITE_SECURITY_REGISTER]))

    async def nop(self) -> None:
        """No operation; cancels a pending reset enable."""
        await self._command_write(bytes([Command.NOP]))

    async def reset_enable(self) -> None:
        """Arm the reset instruction."""
        await self._command_write(bytes([Command.RESET_ENABLE]))

    async def reset(self) -> None:
        """Reset the chip; reset enable is sent first."""
        await self.reset_enable()
        await self._command_write(bytes([Command.RESET_MEMORY]))

    # -- NOR flash storage interface ----------------------------------------

    async def flash_read(self, offset: int, length: int) -> bytes:
        """Read bytes at a byte offset."""
        if not 0 <= offset <= _U32_MAX:
            raise OutOfBoundsError()
        return await self.read_fast(Address(offset), length)

    async def flash_erase(self, start: int, end: int) -> None:
        """Erase the sector-aligned range [start, end), waiting for each sector."""
        erase_size = self.ERASE_SIZE
        if start < 0 or start >= end:
            raise OutOfBoundsError()
        if start % erase_size:
            raise NotAlignedError()
        if (end - start) % erase_size:
            raise NotAlignedError()

        await self.wait_wip()
        for idx in range(start, end, erase_size):
            sector = idx // erase_size
            if sector > _U16_MAX:
                raise OutOfBoundsError()
            await self.erase_sector(Sector(sector))
            await self.wait_wip()

    async def flash_write(self, offset: int, data: bytes) -> None:
        """Program bytes at a byte offset, split at page boundaries."""
        data = bytes(data)
        if offset < 0:
            raise OutOfBoundsError()
        end = offset + len(data)
        if end > _U32_MAX or end > self.capacity():
            raise OutOfBoundsError()

        await self.wait_wip()
        cursor = offset
        remaining = memoryview(data)
        while remaining:
            room = PAGE_SIZE - cursor % PAGE_SIZE
            chunk, remaining = remaining[:room], remaining[room:]
            address = Address(cursor)
            cursor += len(chunk)
            await self._prepare_write()
            await self._write_base(address, Command.PROGRAM_PAGE, bytes(chunk))
            await self.wait_wip()


class AsyncMX25R512F(AsyncMX25R, size=0x00FFFF):
    """MX25R512F."""


class AsyncMX25R1035F(AsyncMX25R, size=0x01FFFF):
    """MX25R1035F."""


class AsyncMX25R2035F(AsyncMX25R, size=0x03FFFF):
    """MX25R2035F."""


class AsyncMX25R4035F(AsyncMX25R, size=0x07FFFF):
    """MX25R4035F."""


class AsyncMX25R8035F(AsyncMX25R, size=0x0FFFFF):
    """MX25R8035F."""


class AsyncMX25R1635F(AsyncMX25R, size=0x1FFFFF):
    """MX25R1635F."""


class AsyncMX25R3235F(AsyncMX25R, size=0x3FFFFF):
    """MX25R3235F."""


class AsyncMX25R6435F(AsyncMX25R, size=0x7FFFFF):
    """MX25R6435F."""