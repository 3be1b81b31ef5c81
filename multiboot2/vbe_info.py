"""The VBE information tag with VBE controller and mode information."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import ClassVar

from multiboot2.header import TagHeader, _read_header
from multiboot2.tag_type import TagType

_CONTROL = struct.Struct("<4sHIIIHHIII222s256s")
_MODE = struct.Struct("<HBBHHHHI" + "HHH" + "B" * 18 + "IIH206s")
_TAG_FIELDS = struct.Struct("<HHHH")


def _check(name: str, value: int, bits: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, not {type(value).__name__}")
    if not 0 <= value < (1 << bits):
        raise ValueError(f"{name} {value} does not fit into {bits} bits")


def _check_bytes(name: str, value: bytes, length: int) -> bytes:
    value = bytes(value)
    if len(value) != length:
        raise ValueError(f"{name} must be {length} bytes long, got {len(value)}")
    return value


class VBECapabilities(enum.IntFlag):
    """Features supported by the graphics controller."""

    SWITCHABLE_DAC = 0x1
    NOT_VGA_COMPATIBLE = 0x2
    RAMDAC_FIX = 0x4


class VBEModeAttributes(enum.IntFlag):
    """Attributes of a VBE display mode."""

    SUPPORTED = 0x1
    TTY_SUPPORTED = 0x4
    COLOR = 0x8
    GRAPHICS = 0x10
    NOT_VGA_COMPATIBLE = 0x20
    NO_VGA_WINDOW = 0x40
    LINEAR_FRAMEBUFFER = 0x80


class VBEWindowAttributes(enum.IntFlag):
    """Characteristics of a CPU window."""

    RELOCATABLE = 0x1
    READABLE = 0x2
    WRITEABLE = 0x4


class VBEDirectColorAttributes(enum.IntFlag):
    """Characteristics of direct colour modes."""

    PROGRAMMABLE = 0x1
    RESERVED_USABLE = 0x2


class VBEMemoryModel(enum.IntEnum):
    """General type of memory organisation used by a mode."""

    TEXT = 0x00
    CGA_GRAPHICS = 0x01
    HERCULES_GRAPHICS = 0x02
    PLANAR = 0x03
    PACKED_PIXEL = 0x04
    UNCHAINED = 0x05
    DIRECT_COLOR = 0x06
    YUV = 0x07


@dataclass(frozen=True, order=True)
class VBEField:
    """Size in bits and position of the least significant bit of a colour component."""

    size: int = 0
    position: int = 0

    def __post_init__(self) -> None:
        _check("size", self.size, 8)
        _check("position", self.position, 8)


@dataclass(frozen=True)
class VBEControlInfo:
    """VBE controller information as returned by VBE function 00h."""

    signature: bytes = b"\0\0\0\0"
    version: int = 0
    oem_string_ptr: int = 0
    capabilities: VBECapabilities | int = VBECapabilities(0)
    mode_list_ptr: int = 0
    total_memory: int = 0
    oem_software_revision: int = 0
    oem_vendor_name_ptr: int = 0
    oem_product_name_ptr: int = 0
    oem_product_revision_ptr: int = 0
    reserved: bytes = field(default=bytes(222), repr=False)
    oem_data: bytes = field(default=bytes(256), repr=False)

    SIZE: ClassVar[int] = _CONTROL.size

    def __post_init__(self) -> None:
        object.__setattr__(self, "signature", _check_bytes("signature", self.signature, 4))
        _check("version", self.version, 16)
        _check("OEM string pointer", self.oem_string_ptr, 32)
        _check("capabilities", self.capabilities, 32)
        object.__setattr__(self, "capabilities", VBECapabilities(self.capabilities))
        _check("mode list pointer", self.mode_list_ptr, 32)
        _check("total memory", self.total_memory, 16)
        _check("OEM software revision", self.oem_software_revision, 16)
        _check("OEM vendor name pointer", self.oem_vendor_name_ptr, 32)
        _check("OEM product name pointer", self.oem_product_name_ptr, 32)
        _check("OEM product revision pointer", self.oem_product_revision_ptr, 32)
        object.__setattr__(self, "reserved", _check_bytes("reserved", self.reserved, 222))
        object.__setattr__(self, "oem_data", _check_bytes("OEM data", self.oem_data, 256))

    @classmethod
    def from_bytes(cls, data: bytes) -> VBEControlInfo:
        """Read controller information from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(f"need {cls.SIZE} bytes for VBE control info, got {len(data)}")
        return cls(*_CONTROL.unpack_from(data))

    def to_bytes(self) -> bytes:
        return _CONTROL.pack(
            self.signature,
            self.version,
            self.oem_string_ptr,
            int(self.capabilities),
            self.mode_list_ptr,
            self.total_memory,
            self.oem_software_revision,
            self.oem_vendor_name_ptr,
            self.oem_product_name_ptr,
            self.oem_product_revision_ptr,
            self.reserved,
            self.oem_data,
        )


@dataclass(frozen=True)
class VBEModeInfo:
    """Information about a VBE display mode as returned by VBE function 01h."""

    mode_attributes: VBEModeAttributes | int = VBEModeAttributes(0)
    window_a_attributes: VBEWindowAttributes | int = VBEWindowAttributes(0)
    window_b_attributes: VBEWindowAttributes | int = VBEWindowAttributes(0)
    window_granularity: int = 0
    window_size: int = 0
    window_a_segment: int = 0
    window_b_segment: int = 0
    window_function_ptr: int = 0
    pitch: int = 0
    resolution: tuple[int, int] = (0, 0)
    character_size: tuple[int, int] = (0, 0)
    number_of_planes: int = 0
    bpp: int = 0
    number_of_banks: int = 0
    memory_model: VBEMemoryModel | int = VBEMemoryModel.TEXT
    bank_size: int = 0
    number_of_image_pages: int = 0
    reserved0: int = field(default=0, repr=False)
    red_field: VBEField = VBEField()
    green_field: VBEField = VBEField()
    blue_field: VBEField = VBEField()
    reserved_field: VBEField = VBEField()
    direct_color_attributes: VBEDirectColorAttributes | int = VBEDirectColorAttributes(0)
    framebuffer_base_ptr: int = 0
    offscreen_memory_offset: int = 0
    offscreen_memory_size: int = 0
    reserved1: bytes = field(default=bytes(206), repr=False)

    SIZE: ClassVar[int] = _MODE.size

    def __post_init__(self) -> None:
        _check("mode attributes", self.mode_attributes, 16)
        object.__setattr__(self, "mode_attributes", VBEModeAttributes(self.mode_attributes))
        for name in ("window_a_attributes", "window_b_attributes"):
            value = getattr(self, name)
            _check(name, value, 8)
            object.__setattr__(self, name, VBEWindowAttributes(value))
        for name in (
            "window_granularity",
            "window_size",
            "window_a_segment",
            "window_b_segment",
            "pitch",
            "offscreen_memory_size",
        ):
            _check(name, getattr(self, name), 16)
        for name in ("window_function_ptr", "framebuffer_base_ptr", "offscreen_memory_offset"):
            _check(name, getattr(self, name), 32)
        resolution = tuple(self.resolution)
        character_size = tuple(self.character_size)
        if len(resolution) != 2 or len(character_size) != 2:
            raise ValueError("resolution and character size must be pairs")
        for value in resolution:
            _check("resolution", value, 16)
        for value in character_size:
            _check("character size", value, 8)
        object.__setattr__(self, "resolution", resolution)
        object.__setattr__(self, "character_size", character_size)
        for name in (
            "number_of_planes",
            "bpp",
            "number_of_banks",
            "bank_size",
            "number_of_image_pages",
            "reserved0",
        ):
            _check(name, getattr(self, name), 8)
        _check("memory model", self.memory_model, 8)
        object.__setattr__(self, "memory_model", VBEMemoryModel(self.memory_model))
        _check("direct colour attributes", self.direct_color_attributes, 8)
        object.__setattr__(
            self, "direct_color_attributes", VBEDirectColorAttributes(self.direct_color_attributes)
        )
        object.__setattr__(self, "reserved1", _check_bytes("reserved", self.reserved1, 206))

    @classmethod
    def from_bytes(cls, data: bytes) -> VBEModeInfo:
        """Read mode information from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(f"need {cls.SIZE} bytes for VBE mode info, got {len(data)}")
        (
            mode_attributes,
            win_a,
            win_b,
            granularity,
            window_size,
            seg_a,
            seg_b,
            function_ptr,
            pitch,
            x_res,
            y_res,
            char_w,
            char_h,
            planes,
            bpp,
            banks,
            memory_model,
            bank_size,
            image_pages,
            reserved0,
            red_size,
            red_pos,
            green_size,
            green_pos,
            blue_size,
            blue_pos,
            rsvd_size,
            rsvd_pos,
            direct_color,
            fb_ptr,
            off_offset,
            off_size,
            reserved1,
        ) = _MODE.unpack_from(data)
        return cls(
            mode_attributes,
            win_a,
            win_b,
            granularity,
            window_size,
            seg_a,
            seg_b,
            function_ptr,
            pitch,
            (x_res, y_res),
            (char_w, char_h),
            planes,
            bpp,
            banks,
            memory_model,
            bank_size,
            image_pages,
            reserved0,
            VBEField(red_size, red_pos),
            VBEField(green_size, green_pos),
            VBEField(blue_size, blue_pos),
            VBEField(rsvd_size, rsvd_pos),
            direct_color,
            fb_ptr,
            off_offset,
            off_size,
            reserved1,
        )

    def to_bytes(self) -> bytes:
        return _MODE.pack(
            int(self.mode_attributes),
            int(self.window_a_attributes),
            int(self.window_b_attributes),
            self.window_granularity,
            self.window_size,
            self.window_a_segment,
            self.window_b_segment,
            self.window_function_ptr,
            self.pitch,
            *self.resolution,
            *self.character_size,
            self.number_of_planes,
            self.bpp,
            self.number_of_banks,
            int(self.memory_model),
            self.bank_size,
            self.number_of_image_pages,
            self.reserved0,
            self.red_field.size,
            self.red_field.position,
            self.green_field.size,
            self.green_field.position,
            self.blue_field.size,
            self.blue_field.position,
            self.reserved_field.size,
            self.reserved_field.position,
            int(self.direct_color_attributes),
            self.framebuffer_base_ptr,
            self.offscreen_memory_offset,
            self.offscreen_memory_size,
            self.reserved1,
        )


@dataclass(frozen=True)
class VBEInfoTag:
    """VBE metadata together with controller and mode information."""

    mode: int = 0
    interface_segment: int = 0
    interface_offset: int = 0
    interface_length: int = 0
    control_info: VBEControlInfo = field(default_factory=VBEControlInfo)
    mode_info: VBEModeInfo = field(default_factory=VBEModeInfo)

    SIZE: ClassVar[int] = TagHeader.SIZE + _TAG_FIELDS.size + _CONTROL.size + _MODE.size

    def __post_init__(self) -> None:
        for name in ("mode", "interface_segment", "interface_offset", "interface_length"):
            _check(name, getattr(self, name), 16)

    @property
    def header(self) -> TagHeader:
        return TagHeader(TagType.VBE, self.SIZE)

    @classmethod
    def from_bytes(cls, data: bytes) -> VBEInfoTag:
        """Parse a VBE information tag from the start of ``data``."""
        _read_header(data, TagType.VBE, cls.SIZE)
        offset = TagHeader.SIZE
        fields = _TAG_FIELDS.unpack_from(data, offset)
        offset += _TAG_FIELDS.size
        control = VBEControlInfo.from_bytes(data[offset : offset + _CONTROL.size])
        offset += _CONTROL.size
        mode = VBEModeInfo.from_bytes(data[offset : offset + _MODE.size])
        return cls(*fields, control, mode)

    def to_bytes(self) -> bytes:
        """Serialize the tag; the result is exactly ``header.size`` bytes long."""
        return (
            self.header.to_bytes()
            + _TAG_FIELDS.pack(
                self.mode, self.interface_segment, self.interface_offset, self.interface_length
            )
            + self.control_info.to_bytes()
            + self.mode_info.to_bytes()
        )