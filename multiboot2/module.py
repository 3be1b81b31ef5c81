"""Boot module tags: memory blobs handed over together with a command line."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

from multiboot2.header import TagHeader, _read_header, parse_slice_as_string
from multiboot2.tag_type import TagType

_BOUNDS = struct.Struct("<II")
_U32_MAX = 0xFFFF_FFFF


@dataclass(frozen=True)
class ModuleTag:
    """A boot module: its physical memory range and its command line.

    ``raw_cmdline`` holds the NUL-terminated bytes as stored in the tag. When a
    ``str`` is given instead, it is encoded as UTF-8 and a terminating NUL is
    added unless it already ends with one; the module must then have a
    non-zero size.
    """

    start_address: int
    end_address: int
    raw_cmdline: bytes | str = b"\0"

    BASE_SIZE: ClassVar[int] = TagHeader.SIZE + _BOUNDS.size

    def __post_init__(self) -> None:
        for field_name in ("start_address", "end_address"):
            value = getattr(self, field_name)
            if not 0 <= value <= _U32_MAX:
                raise ValueError(f"{field_name} {value:#x} does not fit into 32 bits")
        if isinstance(self.raw_cmdline, str):
            if self.end_address <= self.start_address:
                raise ValueError("module must have a size")
            data = self.raw_cmdline.encode("utf-8")
            if not data.endswith(b"\0"):
                data += b"\0"
        else:
            data = bytes(self.raw_cmdline)
        object.__setattr__(self, "raw_cmdline", data)

    @property
    def header(self) -> TagHeader:
        return TagHeader(TagType.MODULE, self.BASE_SIZE + len(self.raw_cmdline))

    @classmethod
    def from_bytes(cls, data: bytes) -> ModuleTag:
        """Parse a module tag from the start of ``data``."""
        header = _read_header(data, TagType.MODULE, cls.BASE_SIZE)
        start, end = _BOUNDS.unpack_from(data, TagHeader.SIZE)
        return cls(start, end, bytes(data[cls.BASE_SIZE : header.size]))

    def to_bytes(self) -> bytes:
        """Serialize the tag; the result is exactly ``header.size`` bytes long."""
        return (
            self.header.to_bytes()
            + _BOUNDS.pack(self.start_address, self.end_address)
            + self.raw_cmdline
        )

    def cmdline(self) -> str:
        """The module's command line without the terminating NUL byte."""
        return parse_slice_as_string(self.raw_cmdline)

    def module_size(self) -> int:
        """Size of the module in memory."""
        if self.end_address < self.start_address:
            raise ValueError("module end address lies before its start address")
        return self.end_address - self.start_address