"""Common tag header, simple fixed-size tags and Multiboot2 string parsing."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

from multiboot2.tag_type import TagType, parse_tag_type, tag_type_value

_HEADER = struct.Struct("<II")
_U32 = struct.Struct("<I")


@dataclass(frozen=True)
class TagHeader:
    """The type and total size that every boot information tag starts with."""

    typ: int
    size: int

    SIZE: ClassVar[int] = _HEADER.size

    def __post_init__(self) -> None:
        object.__setattr__(self, "typ", tag_type_value(self.typ))
        if not 0 <= self.size <= 0xFFFF_FFFF:
            raise ValueError(f"tag size {self.size} does not fit into 32 bits")

    @property
    def tag_type(self) -> TagType | int:
        """The tag type, or the raw id for custom tags."""
        return parse_tag_type(self.typ)

    @classmethod
    def from_bytes(cls, data: bytes) -> TagHeader:
        """Read a header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(f"need {cls.SIZE} bytes for a tag header, got {len(data)}")
        typ, size = _HEADER.unpack_from(data)
        return cls(typ, size)

    def to_bytes(self) -> bytes:
        return _HEADER.pack(self.typ, self.size)

    def payload_len(self) -> int:
        """Number of bytes following the header that belong to the tag."""
        if self.size < self.SIZE:
            raise ValueError(f"tag size {self.size} is smaller than the header")
        return self.size - self.SIZE


def _read_header(data: bytes, expected: TagType, min_size: int) -> TagHeader:
    header = TagHeader.from_bytes(data)
    if header.typ != expected:
        raise ValueError(f"expected tag type {expected.name}, got {header.typ}")
    if header.size < min_size:
        raise ValueError(f"tag size {header.size} is smaller than {min_size}")
    if len(data) < header.size:
        raise ValueError(f"tag claims {header.size} bytes but only {len(data)} given")
    return header


@dataclass(frozen=True)
class EndTag:
    """The tag that terminates the boot information."""

    typ: int = int(TagType.END)
    size: int = 8

    SIZE: ClassVar[int] = 8

    @classmethod
    def from_bytes(cls, data: bytes) -> EndTag:
        header = TagHeader.from_bytes(data)
        if header.typ != TagType.END:
            raise ValueError(f"expected end tag, got tag type {header.typ}")
        if header.size != cls.SIZE:
            raise ValueError(f"end tag must have size {cls.SIZE}, got {header.size}")
        return cls(header.typ, header.size)

    def to_bytes(self) -> bytes:
        return _HEADER.pack(self.typ, self.size)


@dataclass(frozen=True)
class ImageLoadPhysAddrTag:
    """The physical address the image was loaded to."""

    load_base_addr: int

    SIZE: ClassVar[int] = TagHeader.SIZE + _U32.size

    def __post_init__(self) -> None:
        if not 0 <= self.load_base_addr <= 0xFFFF_FFFF:
            raise ValueError("load base address does not fit into 32 bits")

    @property
    def header(self) -> TagHeader:
        return TagHeader(TagType.LOAD_BASE_ADDR, self.SIZE)

    @classmethod
    def from_bytes(cls, data: bytes) -> ImageLoadPhysAddrTag:
        _read_header(data, TagType.LOAD_BASE_ADDR, cls.SIZE)
        (addr,) = _U32.unpack_from(data, TagHeader.SIZE)
        return cls(addr)

    def to_bytes(self) -> bytes:
        return self.header.to_bytes() + _U32.pack(self.load_base_addr)


class StringError(ValueError):
    """A Multiboot2 string could not be parsed."""


class MissingNulError(StringError):
    """The string has no terminating NUL byte."""


class InvalidUtf8Error(StringError):
    """The bytes before the first NUL byte are not valid UTF-8."""


def parse_slice_as_string(data: bytes) -> str:
    """Decode a NUL-terminated UTF-8 string, ignoring everything after the first NUL."""
    end = bytes(data).find(b"\0")
    if end < 0:
        raise MissingNulError("string has no terminating NUL byte")
    try:
        return bytes(data[:end]).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidUtf8Error(str(exc)) from exc