"""Memory map tags: the legacy memory map, basic memory info and the EFI memory map."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import ClassVar, Iterable

from multiboot2.header import TagHeader, _read_header
from multiboot2.tag_type import TagType

_U32_MAX = 0xFFFF_FFFF
_U64_MAX = 0xFFFF_FFFF_FFFF_FFFF

_PAIR = struct.Struct("<II")
_AREA = struct.Struct("<QQII")
_EFI_DESC = struct.Struct("<I4xQQQQ")


def _check(name: str, value: int, maximum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, not {type(value).__name__}")
    if not 0 <= value <= maximum:
        raise ValueError(f"{name} {value} is out of range")


class MemoryAreaType(enum.IntEnum):
    """Memory area types defined by the Multiboot2 specification (e820 types)."""

    AVAILABLE = 1
    RESERVED = 2
    ACPI_AVAILABLE = 3
    RESERVED_HIBERNATE = 4
    DEFECTIVE = 5


def parse_memory_area_type(value: int) -> MemoryAreaType | int:
    """Return the :class:`MemoryAreaType` for ``value``, or ``value`` itself if custom."""
    _check("memory area type", value, _U32_MAX)
    try:
        return MemoryAreaType(value)
    except ValueError:
        return int(value)


@dataclass(frozen=True)
class MemoryArea:
    """An available or taken area of physical memory."""

    start_address: int
    size: int
    typ: MemoryAreaType | int = MemoryAreaType.AVAILABLE

    SIZE: ClassVar[int] = _AREA.size

    def __post_init__(self) -> None:
        _check("start address", self.start_address, _U64_MAX)
        _check("size", self.size, _U64_MAX)
        object.__setattr__(self, "typ", parse_memory_area_type(self.typ))

    def end_address(self) -> int:
        """The address just past the end of the area."""
        return self.start_address + self.size

    @classmethod
    def _from_bytes(cls, data: bytes, offset: int = 0) -> MemoryArea:
        base, length, typ, _reserved = _AREA.unpack_from(data, offset)
        return cls(base, length, typ)

    def _to_bytes(self) -> bytes:
        return _AREA.pack(self.start_address, self.size, int(self.typ), 0)


@dataclass(frozen=True)
class MemoryMapTag:
    """The legacy (non-UEFI) memory map."""

    areas: tuple[MemoryArea, ...] = ()
    entry_version: int = 0

    BASE_SIZE: ClassVar[int] = TagHeader.SIZE + _PAIR.size
    entry_size: ClassVar[int] = MemoryArea.SIZE

    def __post_init__(self) -> None:
        object.__setattr__(self, "areas", tuple(self.areas))
        _check("entry version", self.entry_version, _U32_MAX)

    @property
    def header(self) -> TagHeader:
        return TagHeader(TagType.MMAP, self.BASE_SIZE + len(self.areas) * self.entry_size)

    @classmethod
    def from_bytes(cls, data: bytes) -> MemoryMapTag:
        """Parse a memory map tag from the start of ``data``."""
        header = _read_header(data, TagType.MMAP, cls.BASE_SIZE)
        entry_size, entry_version = _PAIR.unpack_from(data, TagHeader.SIZE)
        if entry_size != cls.entry_size:
            raise ValueError(f"unsupported memory map entry size {entry_size}")
        payload = header.size - cls.BASE_SIZE
        if payload % cls.entry_size:
            raise ValueError(f"memory map of {payload} bytes is not a multiple of the entry size")
        areas = tuple(
            MemoryArea._from_bytes(data, offset)
            for offset in range(cls.BASE_SIZE, header.size, cls.entry_size)
        )
        return cls(areas, entry_version)

    def to_bytes(self) -> bytes:
        """Serialize the tag; the result is exactly ``header.size`` bytes long."""
        body = b"".join(area._to_bytes() for area in self.areas)
        return self.header.to_bytes() + _PAIR.pack(self.entry_size, self.entry_version) + body


@dataclass(frozen=True)
class BasicMemoryInfoTag:
    """Amount of lower and upper memory in kilobytes."""

    memory_lower: int
    memory_upper: int

    SIZE: ClassVar[int] = TagHeader.SIZE + _PAIR.size

    def __post_init__(self) -> None:
        _check("memory lower", self.memory_lower, _U32_MAX)
        _check("memory upper", self.memory_upper, _U32_MAX)

    @property
    def header(self) -> TagHeader:
        return TagHeader(TagType.BASIC_MEMINFO, self.SIZE)

    @classmethod
    def from_bytes(cls, data: bytes) -> BasicMemoryInfoTag:
        _read_header(data, TagType.BASIC_MEMINFO, cls.SIZE)
        lower, upper = _PAIR.unpack_from(data, TagHeader.SIZE)
        return cls(lower, upper)

    def to_bytes(self) -> bytes:
        return self.header.to_bytes() + _PAIR.pack(self.memory_lower, self.memory_upper)


class EFIMemoryAreaType(enum.IntEnum):
    """UEFI memory types."""

    RESERVED = 0
    LOADER_CODE = 1
    LOADER_DATA = 2
    BOOT_SERVICES_CODE = 3
    BOOT_SERVICES_DATA = 4
    RUNTIME_SERVICES_CODE = 5
    RUNTIME_SERVICES_DATA = 6
    CONVENTIONAL = 7
    UNUSABLE = 8
    ACPI_RECLAIM = 9
    ACPI_NON_VOLATILE = 10
    MMIO = 11
    MMIO_PORT_SPACE = 12
    PAL_CODE = 13
    PERSISTENT_MEMORY = 14
    UNACCEPTED = 15


class EFIMemoryAttribute(enum.IntFlag):
    """UEFI memory range attributes."""

    UNCACHEABLE = 0x1
    WRITE_COMBINE = 0x2
    WRITE_THROUGH = 0x4
    WRITE_BACK = 0x8
    UNCACHABLE_EXPORTED = 0x10
    WRITE_PROTECT = 0x1000
    READ_PROTECT = 0x2000
    EXECUTE_PROTECT = 0x4000
    NON_VOLATILE = 0x8000
    MORE_RELIABLE = 0x10000
    READ_ONLY = 0x20000
    SPECIAL_PURPOSE = 0x40000
    CPU_CRYPTO = 0x80000
    ISA_MASK = 0x0FFF_F000_0000_0000
    ISA_VALID = 0x4000_0000_0000_0000
    RUNTIME = 0x8000_0000_0000_0000


@dataclass(frozen=True)
class EFIMemoryDesc:
    """A UEFI memory descriptor."""

    ty: EFIMemoryAreaType | int = EFIMemoryAreaType.RESERVED
    phys_start: int = 0
    virt_start: int = 0
    page_count: int = 0
    att: EFIMemoryAttribute | int = EFIMemoryAttribute(0)

    SIZE: ClassVar[int] = _EFI_DESC.size
    VERSION: ClassVar[int] = 1

    def __post_init__(self) -> None:
        _check("memory type", self.ty, _U32_MAX)
        _check("physical start", self.phys_start, _U64_MAX)
        _check("virtual start", self.virt_start, _U64_MAX)
        _check("page count", self.page_count, _U64_MAX)
        _check("attributes", self.att, _U64_MAX)
        try:
            ty: EFIMemoryAreaType | int = EFIMemoryAreaType(self.ty)
        except ValueError:
            ty = int(self.ty)
        object.__setattr__(self, "ty", ty)
        object.__setattr__(self, "att", EFIMemoryAttribute(self.att))

    @classmethod
    def from_bytes(cls, data: bytes) -> EFIMemoryDesc:
        """Read a descriptor from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(f"need {cls.SIZE} bytes for an EFI memory descriptor, got {len(data)}")
        return cls(*_EFI_DESC.unpack_from(data))

    def to_bytes(self) -> bytes:
        return _EFI_DESC.pack(
            int(self.ty), self.phys_start, self.virt_start, self.page_count, int(self.att)
        )


@dataclass(frozen=True)
class EFIMemoryMapTag:
    """The UEFI memory map; entries are ``desc_size`` bytes apart."""

    desc_size: int
    desc_version: int
    memory_map: bytes = b""

    BASE_SIZE: ClassVar[int] = TagHeader.SIZE + _PAIR.size

    def __post_init__(self) -> None:
        _check("descriptor size", self.desc_size, _U32_MAX)
        _check("descriptor version", self.desc_version, _U32_MAX)
        if self.desc_size == 0:
            raise ValueError("descriptor size must not be zero")
        object.__setattr__(self, "memory_map", bytes(self.memory_map))

    @property
    def header(self) -> TagHeader:
        return TagHeader(TagType.EFI_MMAP, self.BASE_SIZE + len(self.memory_map))

    @classmethod
    def from_descs(cls, descs: Iterable[EFIMemoryDesc]) -> EFIMemoryMapTag:
        """Build a tag holding the given descriptors back to back."""
        data = b"".join(desc.to_bytes() for desc in descs)
        return cls(EFIMemoryDesc.SIZE, EFIMemoryDesc.VERSION, data)

    @classmethod
    def from_bytes(cls, data: bytes) -> EFIMemoryMapTag:
        """Parse an EFI memory map tag from the start of ``data``."""
        header = _read_header(data, TagType.EFI_MMAP, cls.BASE_SIZE)
        desc_size, desc_version = _PAIR.unpack_from(data, TagHeader.SIZE)
        return cls(desc_size, desc_version, bytes(data[cls.BASE_SIZE : header.size]))

    def to_bytes(self) -> bytes:
        """Serialize the tag; the result is exactly ``header.size`` bytes long."""
        return (
            self.header.to_bytes()
            + _PAIR.pack(self.desc_size, self.desc_version)
            + self.memory_map
        )

    def memory_areas(self) -> list[EFIMemoryDesc]:
        """The memory descriptors held by the map."""
        if self.desc_version != EFIMemoryDesc.VERSION:
            raise ValueError(f"unsupported descriptor version {self.desc_version}")
        if self.desc_size < EFIMemoryDesc.SIZE:
            raise ValueError(f"descriptor size {self.desc_size} is smaller than a descriptor")
        if len(self.memory_map) % self.desc_size:
            raise ValueError(
                "memory map length must be a multiple of the descriptor size; "
                "the boot information seems to be corrupt"
            )
        return [
            EFIMemoryDesc.from_bytes(self.memory_map[offset : offset + self.desc_size])
            for offset in range(0, len(self.memory_map), self.desc_size)
        ]