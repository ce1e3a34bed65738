"""Instruction codes understood by the MX25R."""

from enum import IntEnum, unique


@unique
class Command(IntEnum):
    """Instruction bytes sent as the first byte of each transaction."""

    READ = 0x03
    READ_F = 0x0B
    PROGRAM_PAGE = 0x02
    SECTOR_ERASE = 0x20
    BLOCK_ERASE_32 = 0x52
    BLOCK_ERASE = 0xD8
    CHIP_ERASE = 0x60
    READ_SFDP = 0x5A
    WRITE_ENABLE = 0x06
    WRITE_DISABLE = 0x04
    READ_STATUS = 0x05
    READ_CONFIG = 0x15
    WRITE_STATUS = 0x01
    PROGRAM_ERASE_SUSPEND = 0xB0
    PROGRAM_ERASE_RESUME = 0x30
    DEEP_POWER_DOWN = 0xB9
    SET_BURST_LENGTH = 0xC0
    READ_IDENTIFICATION = 0x9F
    READ_MANUFACTURER_ID = 0x90
    READ_ELECTRONIC_ID = 0xAB
    ENTER_SECURE_OTP = 0xB1
    EXIT_SECURE_OTP = 0xC1
    READ_SECURITY_REGISTER = 0x2B
    WRITE_SECURITY_REGISTER = 0x2F
    NOP = 0x00
    RESET_ENABLE = 0x66
    RESET_MEMORY = 0x99
    DUMMY = 0xFF