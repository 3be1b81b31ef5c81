"""Multiboot2 information tag types and conversion between them and raw ids."""

from __future__ import annotations

from enum import IntEnum

_U32_MAX = 0xFFFF_FFFF


class TagType(IntEnum):
    """Tag types defined by the Multiboot2 specification.

    Values not listed here are custom tag types and are represented as
    plain integers by :func:`parse_tag_type`.
    """

    END = 0
    CMDLINE = 1
    BOOT_LOADER_NAME = 2
    MODULE = 3
    BASIC_MEMINFO = 4
    BOOTDEV = 5
    MMAP = 6
    VBE = 7
    FRAMEBUFFER = 8
    ELF_SECTIONS = 9
    APM = 10
    EFI32 = 11
    EFI64 = 12
    SMBIOS = 13
    ACPI_V1 = 14
    ACPI_V2 = 15
    NETWORK = 16
    EFI_MMAP = 17
    EFI_BS = 18
    EFI32_IH = 19
    EFI64_IH = 20
    LOAD_BASE_ADDR = 21


def _check_u32(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"tag type must be an integer, not {type(value).__name__}")
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"tag type {value} does not fit into 32 bits")
    return int(value)


def parse_tag_type(value: int) -> TagType | int:
    """Return the :class:`TagType` for ``value``, or ``value`` itself if it is custom."""
    raw = _check_u32(value)
    try:
        return TagType(raw)
    except ValueError:
        return raw


def tag_type_value(tag_type: TagType | int) -> int:
    """Return the raw 32-bit id of a tag type or custom id."""
    return _check_u32(tag_type)