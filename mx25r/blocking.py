"""Blocking driver for the MX25R NOR flash family."""

from __future__ import annotations

from collections.abc import Sequence
from typing import ClassVar, Optional

from .address import (
    BLOCK32_SIZE,
    BLOCK64_SIZE,
    PAGE_SIZE,
    SECTOR_SIZE,
    Address,
    Block32,
    Block64,
    Page,
    Sector,
)
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
from .spi import Operation, Read, SpiDevice, Write

_U32_MAX = 0xFFFF_FFFF


def _check_int(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")


class MX25R:
    """Low level blocking MX25R driver.

    Concrete chips are subclasses declaring their highest address with the
    ``size`` class keyword, e.g. ``class Chip(MX25R, size=0x7FFFFF)``.
    """

    SIZE: ClassVar[Optional[int]] = None
    READ_SIZE: ClassVar[int] = 1
    WRITE_SIZE: ClassVar[int] = PAGE_SIZE
    ERASE_SIZE: ClassVar[int] = SECTOR_SIZE

    def __init_subclass__(cls, *, size: Optional[int] = None, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if size is not None:
            if isinstance(size, bool) or not isinstance(size, int) or not 0 <= size < _U32_MAX:
                raise ValueError(f"invalid chip size {size!r}")
            cls.SIZE = size

    def __init__(self, spi: SpiDevice) -> None:
        if self.SIZE is None:
            raise TypeError(f"{type(self).__name__} does not declare a chip size")
        self._spi = spi

    def capacity(self) -> int:
        """Capacity reported by the storage interface: the highest address."""
        return self.SIZE

    def verify_addr(self, addr: Address) -> int:
        """Return the numeric address, raising OutOfBoundsError past the chip's end."""
        value = int(addr)
        if value > self.SIZE:
            raise OutOfBoundsError()
        return value

    # -- SPI plumbing -------------------------------------------------------

    def _transaction(self, operations: Sequence[Operation]) -> list[bytes]:
        try:
            return self._spi.transaction(operations)
        except FlashError:
            raise
        except Exception as exc:
            raise SpiError(exc) from exc

    def _command_write(self, data: bytes) -> None:
        try:
            self._spi.write(data)
        except FlashError:
            raise
        except Exception as exc:
            raise SpiError(exc) from exc

    def _command_transfer(self, data: bytes) -> bytes:
        try:
            return bytes(self._spi.transfer_in_place(data))
        except FlashError:
            raise
        except Exception as exc:
            raise SpiError(exc) from exc

    def _addr_header(self, cmd: Command, addr: Address) -> bytes:
        value = self.verify_addr(addr)
        return bytes([cmd, (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF])

    def _addr_command(self, addr: Address, cmd: Command) -> None:
        self._command_write(self._addr_header(cmd, addr))

    def _write_read(self, header: bytes, length: int) -> bytes:
        results = self._transaction([Write(header), Read(length)])
        return bytes(results[0])

    def _read_base(self, addr: Address, cmd: Command, length: int) -> bytes:
        return self._write_read(self._addr_header(cmd, addr), length)

    def _read_base_dummy(self, addr: Address, cmd: Command, length: int) -> bytes:
        header = self._addr_header(cmd, addr) + bytes([Command.DUMMY])
        return self._write_read(header, length)

    def _write_base(self, addr: Address, cmd: Command, data: bytes) -> None:
        header = self._addr_header(cmd, addr)
        self._transaction([Write(header), Write(data)])

    def _prepare_write(self) -> None:
        self.poll_wip()
        self._write_enable()

    def _write_enable(self) -> None:
        self._command_write(bytes([Command.WRITE_ENABLE]))

    def _check_slice(self, align: int, offset: int, length: int) -> None:
        capacity = self.capacity()
        if offset < 0 or length > capacity or offset > capacity - length:
            raise OutOfBoundsError()
        if offset % align or length % align:
            raise NotAlignedError()

    # -- public commands ----------------------------------------------------

    def read(self, addr: Address, length: int) -> bytes:
        """Read bytes from an address with the normal read instruction."""
        return self._read_base(addr, Command.READ, length)

    def read_fast(self, addr: Address, length: int) -> bytes:
        """Read bytes from an address with the fast read instruction."""
        return self._read_base_dummy(addr, Command.READ_F, length)

    def write_page(self, sector: Sector, page: Page, data: bytes) -> None:
        """Program bytes at the start of a page; write enable is sent first."""
        addr = Address.from_page(sector, page)
        self._prepare_write()
        self._write_base(addr, Command.PROGRAM_PAGE, bytes(data))

    def erase_sector(self, sector: Sector) -> None:
        """Erase a 4kB sector."""
        addr = Address.from_sector(sector)
        self._prepare_write()
        self._addr_command(addr, Command.SECTOR_ERASE)

    def erase_block64(self, block: Block64) -> None:
        """Erase a 64kB block."""
        addr = Address.from_block64(block)
        self._prepare_write()
        self._addr_command(addr, Command.BLOCK_ERASE)

    def erase_block32(self, block: Block32) -> None:
        """Erase a 32kB block."""
        addr = Address.from_block32(block)
        self._prepare_write()
        self._addr_command(addr, Command.BLOCK_ERASE_32)

    def erase_chip(self) -> None:
        """Erase the whole chip."""
        self._prepare_write()
        self._command_write(bytes([Command.CHIP_ERASE]))

    def read_sfdp(self, addr: Address, length: int) -> bytes:
        """Read the Serial Flash Discoverable Parameters."""
        return self._read_base_dummy(addr, Command.READ_SFDP, length)

    def write_disable(self) -> None:
        """Clear the write enable latch."""
        self._command_write(bytes([Command.WRITE_DISABLE]))

    def read_status(self) -> StatusRegister:
        """Read the status register."""
        response = self._command_transfer(bytes([Command.READ_STATUS, 0]))
        return StatusRegister.from_byte(response[1])

    def poll_wip(self) -> None:
        """Raise BusyError while a write or erase is in progress."""
        if self.read_status().wip_bit:
            raise BusyError()

    def read_configuration(self) -> ConfigurationRegister:
        """Read the configuration register."""
        response = self._command_transfer(bytes([Command.READ_CONFIG, 0, 0]))
        return ConfigurationRegister.from_bytes(response[1], response[2])

    def write_configuration(
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
        self._prepare_write()
        status = (block_protected << 2) | (int(bool(quad_enable)) << 6)
        status |= int(bool(status_write_disable)) << 7
        config1 = (int(protected_section.bit) << 3) | (int(bool(dummy_cycle)) << 6)
        config2 = int(power_mode.bit) << 1
        self._command_write(bytes([Command.WRITE_STATUS, status, config1, config2]))

    def suspend_program_erase(self) -> None:
        """Suspend the running program or erase."""
        self._command_write(bytes([Command.PROGRAM_ERASE_SUSPEND]))

    def resume_program_erase(self) -> None:
        """Resume a suspended program or erase."""
        self._command_write(bytes([Command.PROGRAM_ERASE_RESUME]))

    def deep_power_down(self) -> None:
        """Put the chip into deep power down."""
        self._command_write(bytes([Command.DEEP_POWER_DOWN]))

    def set_burst_length(self, burst_length: int) -> None:
        """Set the wrap-around burst length."""
        self._command_write(bytes([Command.SET_BURST_LENGTH, burst_length]))

    def read_identification(self) -> tuple[ManufacturerId, MemoryType, MemoryDensity]:
        """Read the JEDEC identification."""
        response = self._command_transfer(bytes([Command.READ_IDENTIFICATION, 0, 0, 0]))
        return (
            ManufacturerId(response[1]),
            MemoryType(response[2]),
            MemoryDensity(response[3]),
        )

    def read_electronic_id(self) -> ElectronicId:
        """Read the electronic signature."""
        dummy = Command.DUMMY
        response = self._command_transfer(
            bytes([Command.READ_ELECTRONIC_ID, dummy, dummy, dummy, 0])
        )
        return ElectronicId(response[4])

    def read_manufacturer_id(self) -> tuple[ManufacturerId, DeviceId]:
        """Read the manufacturer and device ids."""
        dummy = Command.DUMMY
        response = self._command_transfer(
            bytes([Command.READ_MANUFACTURER_ID, dummy, dummy, 0x00, 0, 0])
        )
        return ManufacturerId(response[4]), DeviceId(response[5])

    def enter_secure_otp(self) -> None:
        """Enter the secured OTP area, independent of the main array."""
        self._command_write(bytes([Command.ENTER_SECURE_OTP]))

    def exit_secure_otp(self) -> None:
        """Leave the secured OTP area."""
        self._command_write(bytes([Command.EXIT_SECURE_OTP]))

    def read_security_register(self) -> SecurityRegister:
        """Read the security register."""
        response = self._command_transfer(bytes([Command.READ_SECURITY_REGISTER, 0]))
        return SecurityRegister.from_byte(response[1])

    def write_security_register(self) -> None:
        """Lock down the secured OTP area. This cannot be undone."""
        self._command_write(bytes([Command.WRITE_SECURITY_REGISTER]))

    def nop(self) -> None:
        """No operation; cancels a pending reset enable."""
        self._command_write(bytes([Command.NOP]))

    def reset_enable(self) -> None:
        """Arm the reset instruction."""
        self._command_write(bytes([Command.RESET_ENABLE]))

    def reset(self) -> None:
        """Reset the chip; reset enable is sent first."""
        self.reset_enable()
        self._command_write(bytes([Command.RESET_MEMORY]))

    # -- NOR flash storage interface ----------------------------------------

    def flash_read(self, offset: int, length: int) -> bytes:
        """Read bytes at a byte offset."""
        _check_int("offset", offset)
        _check_int("length", length)
        self._check_slice(self.READ_SIZE, offset, length)
        if offset > self.SIZE:
            raise OutOfBoundsError()
        return self.read_fast(Address(offset), length)

    def flash_erase(self, start: int, end: int) -> None:
        """Erase [start, end), which must span exactly one sector, 32kB or 64kB block."""
        _check_int("start", start)
        _check_int("end", end)
        if start < 0 or start > end or end > self.capacity():
            raise OutOfBoundsError()
        if start % self.ERASE_SIZE or end % self.ERASE_SIZE:
            raise NotAlignedError()
        span = end - start
        if span == SECTOR_SIZE:
            self.erase_sector(Sector(start // SECTOR_SIZE))
        elif span == BLOCK32_SIZE:
            self.erase_block32(Block32(start // BLOCK32_SIZE))
        elif span == BLOCK64_SIZE:
            self.erase_block64(Block64(start // BLOCK64_SIZE))
        else:
            raise NotAlignedError()

    def flash_write(self, offset: int, data: bytes) -> None:
        """Program page-aligned bytes at a page-aligned byte offset."""
        _check_int("offset", offset)
        data = bytes(data)
        self._check_slice(self.WRITE_SIZE, offset, len(data))
        sector = Sector(offset // SECTOR_SIZE)
        page = Page((offset % SECTOR_SIZE) // PAGE_SIZE)
        self.write_page(sector, page, data)


class MX25R512F(MX25R, size=0x00FFFF):
    """MX25R512F."""


class MX25R1035F(MX25R, size=0x01FFFF):
    """MX25R1035F."""


class MX25R2035F(MX25R, size=0x03FFFF):
    """MX25R2035F."""


class MX25R4035F(MX25R, size=0x07FFFF):
    """MX25R4035F."""


class MX25R8035F(MX25R, size=0x0FFFFF):
    """MX25R8035F."""


class MX25R1635F(MX25R, size=0x1FFFFF):
    """MX25R1635F."""


class MX25R3235F(MX25R, size=0x3FFFFF):
    """MX25R3235F."""


class MX25R6435F(MX25R, size=0x7FFFFF):
    """MX25R6435F."""