[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mx25r"
version = "0.1.0"
description = "Platform-agnostic driver for the Macronix MX25R series of SPI NOR flash chips."
requires-python = ">=3.10"
dependencies = []
keywords = ["nor-flash", "spi", "driver", "flash", "mx25r", "macronix"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: System :: Hardware :: Hardware Drivers",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["mx25r"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
