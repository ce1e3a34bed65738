"""Platform-agnostic driver for the Macronix MX25R series of SPI NOR flash chips."""

__version__ = "0.1.0"

__all__ = ["address", "asynchronous", "blocking", "command", "errors", "register", "spi"]