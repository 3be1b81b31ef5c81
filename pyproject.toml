[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "multiboot2"
version = "0.1.0"
description = "Parsing and construction of Multiboot2 boot information tags"
requires-python = ">=3.10"
dependencies = []
keywords = ["multiboot2", "boot", "bootloader", "kernel", "grub", "elf", "acpi", "vbe", "uefi"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: System :: Boot",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["multiboot2"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
