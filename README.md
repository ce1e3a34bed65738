# mx25r

A driver for the Macronix MX25R family of SPI NOR flash chips. It does not
depend on any particular platform. You supply an object that talks SPI, and
the driver builds the command frames, checks addresses against the chip's
size and decodes the registers.

It has no dependencies outside the standard library.

## Chips

Each chip in the series has its own class, in a blocking flavour
(`mx25r.blocking`) and an asyncio flavour (`mx25r.asynchronous`):

| Chip       | Highest address | Blocking     | Asynchronous      |
|------------|-----------------|--------------|-------------------|
| MX25R512F  | `0x00FFFF`      | `MX25R512F`  | `AsyncMX25R512F`  |
| MX25R1035F | `0x01FFFF`      | `MX25R1035F` | `AsyncMX25R1035F` |
| MX25R2035F | `0x03FFFF`      | `MX25R2035F` | `AsyncMX25R2035F` |
| MX25R4035F | `0x07FFFF`      | `MX25R4035F` | `AsyncMX25R4035F` |
| MX25R8035F | `0x0FFFFF`      | `MX25R8035F` | `AsyncMX25R8035F` |
| MX25R1635F | `0x1FFFFF`      | `MX25R1635F` | `AsyncMX25R1635F` |
| MX25R3235F | `0x3FFFFF`      | `MX25R3235F` | `AsyncMX25R3235F` |
| MX25R6435F | `0x7FFFFF`      | `MX25R6435F` | `AsyncMX25R6435F` |

The base classes `MX25R` and `AsyncMX25R` declare no size and cannot be
instantiated. Another size is declared with a class keyword:

```python
class MyChip(MX25R, size=0x7FFFFF):
    pass
```

## Installation

```
pip install mx25r
```

## The SPI device

`mx25r.spi` defines the interface the driver talks through.

A blocking driver takes a `SpiDevice`. It is an abstract class with these
methods:

- `transaction(operations)` runs a sequence of `Write(data)` and
  `Read(length)` operations under one chip select. It returns a list with the
  bytes of each `Read`, in order. This method is abstract.
- `transfer_in_place(buffer)` clocks out `buffer` and returns the bytes
  clocked in at the same time. This method is abstract.
- `write(data)` runs a single `Write` through `transaction`.

An asynchronous driver takes an `AsyncSpiDevice`, which has the same three
methods as coroutines.

Any exception your device raises is wrapped in `mx25r.errors.SpiError`,
unless it is already a `FlashError`.

## Usage

```python
from mx25r.address import Address, Page, Sector
from mx25r.blocking import MX25R6435F
from mx25r.errors import BusyError

flash = MX25R6435F(spi)          # spi: your SpiDevice implementation

sector, page = Sector(0), Page(0)
addr = Address.from_page(sector, page)

flash.erase_sector(sector)
while True:
    try:
        flash.poll_wip()
        break
    except BusyError:
        pass                     # sleep here if you like

flash.write_page(sector, page, b"\x2a")
print(flash.read(addr, 1))
```

The asynchronous driver works the same way. Its `wait_wip()` coroutine polls
the status register, yielding to the event loop between polls, until the chip
is idle:

```python
from mx25r.address import Address, Sector
from mx25r.asynchronous import AsyncMX25R6435F

flash = AsyncMX25R6435F(spi)     # spi: your AsyncSpiDevice implementation
await flash.erase_sector(Sector(0))
await flash.wait_wip()
data = await flash.read_fast(Address(0), 16)
```

The two flavours differ in a few places:

- The asynchronous `read` waits for the chip to be idle before reading. The
  blocking `read` does not wait.
- The asynchronous `capacity()` returns the number of bytes, which is the
  highest address plus one. The blocking `capacity()` returns the highest
  address.

Write and erase commands (`write_page`, `erase_sector`, `erase_block32`,
`erase_block64`, `erase_chip`, `write_configuration`) first check the status
register and raise `BusyError` if a write or erase is still running. If the
chip is idle, they send write enable before the command.

### Addresses

`mx25r.address` provides `Sector`, `Page`, `Block32`, `Block64` and `Address`
as frozen dataclasses. Each one checks that its value fits the field width:
16 bits for sectors and blocks, 8 bits for pages, 32 bits for addresses.

`Address.from_addr(sector, page, offset)`, `Address.from_page(sector, page)`
and `Address.from_sector(sector)` compute a byte address from a sector of
4 kB and a page of 256 bytes. `int(address)` gives the numeric value. The
constants `SECTOR_SIZE`, `PAGE_SIZE`, `BLOCK32_SIZE` and `BLOCK64_SIZE` are
also defined there.

### NOR-flash style access

Both drivers also offer an offset-based interface:

- `flash_read(offset, length)` reads with the fast read instruction.
- `flash_write(offset, data)`
  - asynchronous: writes any range within the chip. It splits the data at
    256-byte page boundaries and waits for each page to finish.
  - blocking: needs an offset and a length that are multiples of 256. It
    sends the data as a single page program.
- `flash_erase(start, end)`
  - asynchronous: erases every 4 kB sector in `[start, end)` and waits for
    each erase to finish. Both bounds must be sector-aligned.
  - blocking: the range must span exactly one 4 kB sector, one 32 kB block
    or one 64 kB block. Any other span raises `NotAlignedError`.

## Registers and identification

These methods decode a register into a frozen dataclass from
`mx25r.register`:

- `read_status()` returns a `StatusRegister`.
- `read_configuration()` returns a `ConfigurationRegister`.
- `read_security_register()` returns a `SecurityRegister`.

Each class can also be built from raw bytes with `StatusRegister.from_byte`,
`ConfigurationRegister.from_bytes` or `SecurityRegister.from_byte`.

`write_configuration(block_protected, quad_enable, status_write_disable,
dummy_cycle, protected_section, power_mode)` takes a `ProtectedArea` and a
`PowerMode`. It raises `InvalidValueError` unless `block_protected` is in the
range 0 to 15.

The identification methods return these types:

- `read_identification()` returns `(ManufacturerId, MemoryType, MemoryDensity)`.
- `read_electronic_id()` returns an `ElectronicId`.
- `read_manufacturer_id()` returns `(ManufacturerId, DeviceId)`.

Other commands:

- `read_sfdp`
- `write_disable`
- `suspend_program_erase`
- `resume_program_erase`
- `deep_power_down`
- `set_burst_length`
- `enter_secure_otp`
- `exit_secure_otp`
- `write_security_register`: this locks the OTP area and cannot be undone.
- `nop`
- `reset_enable`
- `reset`

The instruction bytes are listed in the `mx25r.command.Command` enum.

## Errors

Every error the driver raises derives from `mx25r.errors.FlashError`:

| Error               | Raised when                                     | `kind()`        |
|---------------------|-------------------------------------------------|-----------------|
| `SpiError`          | the SPI device raised (original in `.cause`)    | `OTHER`         |
| `InvalidValueError` | a value was invalid                             | `OTHER`         |
| `OutOfBoundsError`  | an address or range lay outside the chip        | `OUT_OF_BOUNDS` |
| `NotAlignedError`   | an address or range was misaligned              | `NOT_ALIGNED`   |
| `BusyError`         | a write or erase is still in progress           | `OTHER`         |

`FlashError.kind()` returns a `NorFlashErrorKind`.

## What this package does not do

- It contains no SPI backend. You must provide a `SpiDevice` or
  `AsyncSpiDevice` that reaches real hardware.
- It has no command-line tool.
- The only read modes are the single-line read and the fast read. Dual and
  quad read and program modes are not supported.