"""The framebuffer information tag and the colour layouts it can describe."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import ClassVar, Union

from multiboot2.header import TagHeader, _read_header
from multiboot2.tag_type import TagType

_FIXED = struct.Struct("<QIIIBBH")
_U16 = struct.Struct("<H")
_COLOR_SIZE = 3
_RGB_SIZE = 6


def _check_range(name: str, value: int, bits: int) -> None:
    if not 0 <= value < (1 << bits):
        raise ValueError(f"{name} {value} does not fit into {bits} bits")


class FramebufferTypeId(enum.IntEnum):
    """Raw framebuffer type ids as stored in the tag."""

    INDEXED = 0
    RGB = 1
    TEXT = 2


class UnknownFramebufferType(ValueError):
    """The tag holds a framebuffer type id that is not known."""

    def __init__(self, value: int) -> None:
        super().__init__(f"Unknown framebuffer type {value}")
        self.value = value


@dataclass(frozen=True, order=True)
class FramebufferField:
    """Position and size of one colour channel in an RGB pixel."""

    position: int
    size: int

    def __post_init__(self) -> None:
        _check_range("position", self.position, 8)
        _check_range("size", self.size, 8)


@dataclass(frozen=True, order=True)
class FramebufferColor:
    """One palette entry of an indexed framebuffer."""

    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        _check_range("red", self.red, 8)
        _check_range("green", self.green, 8)
        _check_range("blue", self.blue, 8)


@dataclass(frozen=True)
class IndexedFramebuffer:
    """Indexed colour with a palette."""

    palette: tuple[FramebufferColor, ...] = ()

    type_id: ClassVar[FramebufferTypeId] = FramebufferTypeId.INDEXED

    def __post_init__(self) -> None:
        palette = tuple(self.palette)
        if len(palette) > 0xFFFF:
            raise ValueError("palette holds more than 65535 colours")
        object.__setattr__(self, "palette", palette)

    def _serialize(self) -> bytes:
        colors = b"".join(bytes((c.red, c.green, c.blue)) for c in self.palette)
        return _U16.pack(len(self.palette)) + colors


@dataclass(frozen=True)
class RgbFramebuffer:
    """Direct RGB colour."""

    red: FramebufferField
    green: FramebufferField
    blue: FramebufferField

    type_id: ClassVar[FramebufferTypeId] = FramebufferTypeId.RGB

    def _serialize(self) -> bytes:
        return bytes(
            (
                self.red.position,
                self.red.size,
                self.green.position,
                self.green.size,
                self.blue.position,
                self.blue.size,
            )
        )


@dataclass(frozen=True)
class TextFramebuffer:
    """EGA text mode: width and height are in characters, pitch in bytes per line."""

    type_id: ClassVar[FramebufferTypeId] = FramebufferTypeId.TEXT

    def _serialize(self) -> bytes:
        return b""


FramebufferKind = Union[IndexedFramebuffer, RgbFramebuffer, TextFramebuffer]


@dataclass(frozen=True)
class FramebufferTag:
    """The framebuffer information tag.

    ``framebuffer_type`` may be given as one of the layout classes, in which
    case the raw id and the colour information in ``buffer`` are derived from
    it; otherwise it is the raw type id and ``buffer`` the raw colour data.
    """

    address: int
    pitch: int
    width: int
    height: int
    bpp: int
    framebuffer_type: FramebufferKind | int = TextFramebuffer()
    buffer: bytes = b""

    BASE_SIZE: ClassVar[int] = TagHeader.SIZE + _FIXED.size

    def __post_init__(self) -> None:
        _check_range("address", self.address, 64)
        _check_range("pitch", self.pitch, 32)
        _check_range("width", self.width, 32)
        _check_range("height", self.height, 32)
        _check_range("bpp", self.bpp, 8)
        kind = self.framebuffer_type
        if isinstance(kind, (IndexedFramebuffer, RgbFramebuffer, TextFramebuffer)):
            object.__setattr__(self, "framebuffer_type", int(kind.type_id))
            object.__setattr__(self, "buffer", kind._serialize())
        else:
            _check_range("framebuffer type", kind, 8)
            object.__setattr__(self, "framebuffer_type", int(kind))
            object.__setattr__(self, "buffer", bytes(self.buffer))

    @property
    def header(self) -> TagHeader:
        return TagHeader(TagType.FRAMEBUFFER, self.BASE_SIZE + len(self.buffer))

    @classmethod
    def from_bytes(cls, data: bytes) -> FramebufferTag:
        """Parse a framebuffer tag from the start of ``data``."""
        header = _read_header(data, TagType.FRAMEBUFFER, cls.BASE_SIZE)
        address, pitch, width, height, bpp, fb_type, _padding = _FIXED.unpack_from(
            data, TagHeader.SIZE
        )
        return cls(address, pitch, width, height, bpp, fb_type, bytes(data[cls.BASE_SIZE : header.size]))

    def to_bytes(self) -> bytes:
        """Serialize the tag; the result is exactly ``header.size`` bytes long."""
        fixed = _FIXED.pack(
            self.address, self.pitch, self.width, self.height, self.bpp, self.framebuffer_type, 0
        )
        return self.header.to_bytes() + fixed + self.buffer

    def buffer_type(self) -> FramebufferKind:
        """Decode the colour layout described by the tag."""
        try:
            type_id = FramebufferTypeId(self.framebuffer_type)
        except ValueError:
            raise UnknownFramebufferType(self.framebuffer_type) from None

        if type_id is FramebufferTypeId.INDEXED:
            if len(self.buffer) < _U16.size:
                raise ValueError("framebuffer palette length is missing")
            (count,) = _U16.unpack_from(self.buffer)
            start = _U16.size
            end = start + count * _COLOR_SIZE
            if len(self.buffer) < end:
                raise ValueError(f"framebuffer palette of {count} colours is truncated")
            raw = self.buffer[start:end]
            palette = tuple(
                FramebufferColor(*raw[pos : pos + _COLOR_SIZE])
                for pos in range(0, len(raw), _COLOR_SIZE)
            )
            return IndexedFramebuffer(palette)

        if type_id is FramebufferTypeId.RGB:
            if len(self.buffer) < _RGB_SIZE:
                raise ValueError("framebuffer RGB colour information is truncated")
            r_pos, r_size, g_pos, g_size, b_pos, b_size = self.buffer[:_RGB_SIZE]
            return RgbFramebuffer(
                FramebufferField(r_pos, r_size),
                FramebufferField(g_pos, g_size),
                FramebufferField(b_pos, b_size),
            )

        return TextFramebuffer()