"""The SMBIOS tag: a copy of the SMBIOS tables together with their version."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

from multiboot2.header import TagHeader, _read_header
from multiboot2.tag_type import TagType

_VERSION = struct.Struct("<BB6x")


@dataclass(frozen=True)
class SmbiosTag:
    """SMBIOS tables and the major and minor version they follow."""

    major: int
    minor: int
    tables: bytes = b""

    BASE_SIZE: ClassVar[int] = TagHeader.SIZE + _VERSION.size

    def __post_init__(self) -> None:
        for name in ("major", "minor"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an integer, not {type(value).__name__}")
            if not 0 <= value <= 0xFF:
                raise ValueError(f"{name} {value} does not fit into 8 bits")
        object.__setattr__(self, "tables", bytes(self.tables))

    @property
    def header(self) -> TagHeader:
        return TagHeader(TagType.SMBIOS, self.BASE_SIZE + len(self.tables))

    @classmethod
    def from_bytes(cls, data: bytes) -> SmbiosTag:
        """Parse an SMBIOS tag from the start of ``data``."""
        header = _read_header(data, TagType.SMBIOS, cls.BASE_SIZE)
        major, minor = _VERSION.unpack_from(data, TagHeader.SIZE)
        return cls(major, minor, bytes(data[cls.BASE_SIZE : header.size]))

    def to_bytes(self) -> bytes:
        """Serialize the tag; the result is exactly ``header.size`` bytes long."""
        return self.header.to_bytes() + _VERSION.pack(self.major, self.minor) + self.tables