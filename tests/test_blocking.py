import pytest

from mx25r.address import PAGE_SIZE, SECTOR_SIZE, Address, Block64, Page, Sector
from mx25r.blocking import MX25R, MX25R512F, MX25R6435F
from mx25r.command import Command
from mx25r.errors import (
    BusyError,
    InvalidValueError,
    NotAlignedError,
    OutOfBoundsError,
    SpiError,
)
from mx25r.register import (
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
from mx25r.spi import Read, SpiDevice, Write


class FakeSpi(SpiDevice):
    def __init__(self, status=0, replies=None, read_data=b""):
        self.status = status
        self.replies = replies or {}
        self.read_data = read_data
        self.transactions = []
        self.transfers = []

    def transaction(self, operations):
        ops = list(operations)
        self.transactions.append(ops)
        return [
            self.read_data[: op.length].ljust(op.length, b"\x00")
            for op in ops
            if isinstance(op, Read)
        ]

    def transfer_in_place(self, buffer):
        buffer = bytes(buffer)
        self.transfers.append(buffer)
        if buffer[0] == Command.READ_STATUS:
            return bytes([buffer[0], self.status])
        return self.replies.get(buffer[0], bytes(len(buffer)))

    def written(self):
        return [
            op.data for ops in self.transactions for op in ops if isinstance(op, Write)
        ]


class BrokenSpi(SpiDevice):
    def transaction(self, operations):
        raise OSError("bus fault")

    def transfer_in_place(self, buffer):
        raise OSError("bus fault")


def test_capacity_is_highest_address():
    assert MX25R6435F(FakeSpi()).capacity() == 0x7FFFFF


def test_base_class_needs_size():
    with pytest.raises(TypeError):
        MX25R(FakeSpi())


def test_read_sends_header_without_polling():
    spi = FakeSpi(read_data=b"\x01\x02\x03\x04")
    chip = MX25R6435F(spi)
    data = chip.read(Address(0x001234), 4)
    assert data == b"\x01\x02\x03\x04"
    assert spi.transfers == []
    assert spi.transactions == [[Write(bytes([Command.READ, 0x00, 0x12, 0x34])), Read(4)]]


def test_read_fast_appends_dummy_byte():
    spi = FakeSpi(read_data=b"\xaa")
    chip = MX25R6435F(spi)
    assert chip.read_fast(Address(0x010203), 1) == b"\xaa"
    header = spi.transactions[0][0].data
    assert header == bytes([Command.READ_F, 0x01, 0x02, 0x03, Command.DUMMY])


def test_read_sfdp_uses_sfdp_instruction():
    spi = FakeSpi()
    MX25R6435F(spi).read_sfdp(Address(0), 2)
    assert spi.transactions[0][0].data[0] == Command.READ_SFDP
    assert spi.transactions[0][1] == Read(2)


def test_read_out_of_bounds():
    spi = FakeSpi()
    chip = MX25R512F(spi)
    with pytest.raises(OutOfBoundsError):
        chip.read(Address(0x10000), 1)
    assert spi.transactions == []


def test_write_page_sequence():
    spi = FakeSpi()
    chip = MX25R6435F(spi)
    chip.write_page(Sector(0), Page(1), b"\x2a")
    assert spi.transfers == [bytes([Command.READ_STATUS, 0])]
    assert spi.transactions == [
        [Write(bytes([Command.WRITE_ENABLE]))],
        [Write(bytes([Command.PROGRAM_PAGE, 0x00, 0x01, 0x00])), Write(b"\x2a")],
    ]


def test_write_page_when_busy():
    spi = FakeSpi(status=0x01)
    with pytest.raises(BusyError):
        MX25R6435F(spi).write_page(Sector(0), Page(0), b"\x00")
    assert spi.transactions == []


def test_erase_sector_header():
    spi = FakeSpi()
    MX25R6435F(spi).erase_sector(Sector(1))
    assert spi.written()[-1] == bytes([Command.SECTOR_ERASE, 0x00, 0x10, 0x00])


def test_erase_chip():
    spi = FakeSpi()
    MX25R6435F(spi).erase_chip()
    assert spi.written() == [bytes([Command.WRITE_ENABLE]), bytes([Command.CHIP_ERASE])]


def test_reset_sends_enable_then_reset():
    spi = FakeSpi()
    MX25R6435F(spi).reset()
    assert spi.written() == [bytes([Command.RESET_ENABLE]), bytes([Command.RESET_MEMORY])]


def test_set_burst_length():
    spi = FakeSpi()
    MX25R6435F(spi).set_burst_length(0x10)
    assert spi.written() == [bytes([Command.SET_BURST_LENGTH, 0x10])]


def test_read_status_decodes():
    spi = FakeSpi(status=0b0100_0011)
    status = MX25R6435F(spi).read_status()
    assert status == StatusRegister.from_byte(0b0100_0011)
    assert status.wip_bit is True


def test_poll_wip_idle_returns():
    spi = FakeSpi(status=0)
    MX25R6435F(spi).poll_wip()
    assert spi.transfers == [bytes([Command.READ_STATUS, 0])]


def test_write_configuration_round_trip():
    spi = FakeSpi()
    MX25R6435F(spi).write_configuration(
        0x0F, True, False, True, ProtectedArea.BOTTOM, PowerMode.HIGH_PERFORMANCE
    )
    payload = spi.written()[-1]
    assert payload[0] == Command.WRITE_STATUS
    status = StatusRegister.from_byte(payload[1])
    assert (status.protected_block, status.quad_enable, status.write_protect_disable) == (
        0x0F,
        True,
        False,
    )
    config = ConfigurationRegister.from_bytes(payload[2], payload[3])
    assert config == ConfigurationRegister(
        dummy_cycle=True,
        protected_section=ProtectedArea.BOTTOM,
        power_mode=PowerMode.HIGH_PERFORMANCE,
    )


def test_write_configuration_rejects_large_protection():
    spi = FakeSpi()
    with pytest.raises(InvalidValueError):
        MX25R6435F(spi).write_configuration(
            0x10, False, False, False, ProtectedArea.TOP, PowerMode.ULTRA_LOW_POWER
        )
    assert spi.transfers == []


def test_read_configuration():
    spi = FakeSpi(replies={Command.READ_CONFIG: bytes([0, 0b0100_1000, 0b10])})
    config = MX25R6435F(spi).read_configuration()
    assert config == ConfigurationRegister.from_bytes(0b0100_1000, 0b10)
    assert config.power_mode is PowerMode.HIGH_PERFORMANCE


def test_read_identification():
    spi = FakeSpi(replies={Command.READ_IDENTIFICATION: bytes([0, 0xC2, 0x28, 0x17])})
    assert MX25R6435F(spi).read_identification() == (
        ManufacturerId(0xC2),
        MemoryType(0x28),
        MemoryDensity(0x17),
    )


def test_read_electronic_id():
    spi = FakeSpi(replies={Command.READ_ELECTRONIC_ID: bytes([0, 0, 0, 0, 0x17])})
    assert MX25R6435F(spi).read_electronic_id() == ElectronicId(0x17)
    assert spi.transfers[0][1:4] == bytes([Command.DUMMY] * 3)


def test_read_manufacturer_id():
    spi = FakeSpi(replies={Command.READ_MANUFACTURER_ID: bytes([0, 0, 0, 0, 0xC2, 0x17])})
    assert MX25R6435F(spi).read_manufacturer_id() == (ManufacturerId(0xC2), DeviceId(0x17))


def test_read_security_register():
    spi = FakeSpi(replies={Command.READ_SECURITY_REGISTER: bytes([0, 0b0110_0001])})
    reg = MX25R6435F(spi).read_security_register()
    assert reg == SecurityRegister.from_byte(0b0110_0001)
    assert reg.erase_failed and reg.secured_otp and not reg.locked_down


def test_spi_failure_is_wrapped():
    chip = MX25R6435F(BrokenSpi())
    with pytest.raises(SpiError) as info:
        chip.nop()
    assert isinstance(info.value.cause, OSError)
    with pytest.raises(SpiError):
        chip.read_status()


def test_flash_read_uses_fast_read():
    spi = FakeSpi(read_data=b"\x05\x06")
    assert MX25R6435F(spi).flash_read(0x20, 2) == b"\x05\x06"
    assert spi.transactions[0][0].data[0] == Command.READ_F


def test_flash_read_out_of_bounds():
    chip = MX25R512F(FakeSpi())
    with pytest.raises(OutOfBoundsError):
        chip.flash_read(chip.capacity(), 1)
    with pytest.raises(OutOfBoundsError):
        chip.flash_read(-1, 1)


def test_flash_erase_sector():
    spi = FakeSpi()
    MX25R6435F(spi).flash_erase(SECTOR_SIZE, 2 * SECTOR_SIZE)
    assert spi.written()[-1] == bytes([Command.SECTOR_ERASE, 0x00, 0x10, 0x00])


def test_flash_erase_block64():
    spi = FakeSpi()
    MX25R6435F(spi).flash_erase(0x10000, 0x20000)
    assert spi.written()[-1][0] == Command.BLOCK_ERASE


@pytest.mark.parametrize(
    "start,end",
    [(0, 0), (0, 2 * SECTOR_SIZE), (1, SECTOR_SIZE + 1)],
)
def test_flash_erase_not_aligned(start, end):
    spi = FakeSpi()
    with pytest.raises(NotAlignedError):
        MX25R6435F(spi).flash_erase(start, end)
    assert spi.transactions == []


def test_flash_erase_out_of_bounds():
    chip = MX25R512F(FakeSpi())
    with pytest.raises(OutOfBoundsError):
        chip.flash_erase(SECTOR_SIZE, 0)
    with pytest.raises(OutOfBoundsError):
        chip.flash_erase(0, 0x20000)


def test_flash_write_aligned_page():
    spi = FakeSpi()
    data = bytes(range(PAGE_SIZE))
    MX25R6435F(spi).flash_write(SECTOR_SIZE + PAGE_SIZE, data)
    last = spi.transactions[-1]
    assert last[0].data == bytes([Command.PROGRAM_PAGE, 0x00, 0x11, 0x00])
    assert last[1].data == data


def test_flash_write_matches_write_page():
    first, second = FakeSpi(), FakeSpi()
    data = b"\x11" * PAGE_SIZE
    MX25R6435F(first).flash_write(3 * SECTOR_SIZE + 2 * PAGE_SIZE, data)
    MX25R6435F(second).write_page(Sector(3), Page(2), data)
    assert first.transactions == second.transactions


def test_flash_write_not_aligned():
    spi = FakeSpi()
    with pytest.raises(NotAlignedError):
        MX25R6435F(spi).flash_write(1, b"\x00" * PAGE_SIZE)
    with pytest.raises(NotAlignedError):
        MX25R6435F(spi).flash_write(0, b"\x00")
    assert spi.transactions == []


def test_flash_write_out_of_bounds():
    chip = MX25R512F(FakeSpi())
    with pytest.raises(OutOfBoundsError):
        chip.flash_write(0x10000, b"\x00" * PAGE_SIZE)


def test_erase_block64_header_uses_block_address():
    spi = FakeSpi()
    MX25R6435F(spi).erase_block64(Block64(0))
    assert spi.written()[-1] == bytes([Command.BLOCK_ERASE, 0, 0, 0])