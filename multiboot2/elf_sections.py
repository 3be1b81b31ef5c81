"""The ELF sections tag and the section headers it carries."""

from __future__ import annotations

import enum
import logging
import struct
from dataclasses import dataclass
from typing import ClassVar, Iterator

from multiboot2.header import TagHeader, _read_header, parse_slice_as_string
from multiboot2.tag_type import TagType

_log = logging.getLogger(__name__)

_COUNTS = struct.Struct("<III")
_ENTRY32 = struct.Struct("<10I")
_ENTRY64 = struct.Struct("<IIQQQQIIQQ")
_LAYOUTS = {_ENTRY32.size: _ENTRY32, _ENTRY64.size: _ENTRY64}
_U32_MAX = 0xFFFF_FFFF


def _layout(entry_size: int) -> struct.Struct:
    try:
        return _LAYOUTS[entry_size]
    except KeyError:
        raise ValueError(f"unexpected entry size: {entry_size}") from None


class ElfSectionType(enum.IntEnum):
    """Abstraction over raw ELF section types."""

    UNUSED = 0
    PROGRAM_SECTION = 1
    LINKER_SYMBOL_TABLE = 2
    STRING_TABLE = 3
    RELA_RELOCATION = 4
    SYMBOL_HASH_TABLE = 5
    DYNAMIC_LINKING_TABLE = 6
    NOTE = 7
    UNINITIALIZED = 8
    REL_RELOCATION = 9
    RESERVED = 10
    DYNAMIC_LOADER_SYMBOL_TABLE = 11
    ENVIRONMENT_SPECIFIC = 0x6000_0000
    PROCESSOR_SPECIFIC = 0x7000_0000


class ElfSectionFlags(enum.IntFlag):
    """ELF section flags known to this package."""

    WRITABLE = 0x1
    ALLOCATED = 0x2
    EXECUTABLE = 0x4


_KNOWN_FLAGS = ElfSectionFlags.WRITABLE | ElfSectionFlags.ALLOCATED | ElfSectionFlags.EXECUTABLE


@dataclass(frozen=True)
class ElfSection:
    """A single ELF section header, in its 32- or 64-bit form widened to ints."""

    name_index: int
    section_type_raw: int
    raw_flags: int
    start_address: int
    offset: int
    size: int
    link: int
    info: int
    addralign: int
    entsize: int

    def section_type(self) -> ElfSectionType:
        """The section type; unknown types are treated as unused."""
        raw = self.section_type_raw
        if 0x6000_0000 <= raw <= 0x6FFF_FFFF:
            return ElfSectionType.ENVIRONMENT_SPECIFIC
        if 0x7000_0000 <= raw <= 0x7FFF_FFFF:
            return ElfSectionType.PROCESSOR_SPECIFIC
        try:
            return ElfSectionType(raw)
        except ValueError:
            _log.warning("Unknown section type %x. Treating as ElfSectionType.UNUSED", raw)
            return ElfSectionType.UNUSED

    @property
    def flags(self) -> ElfSectionFlags:
        """The known flags; bits reserved for other uses are dropped."""
        return ElfSectionFlags(self.raw_flags & _KNOWN_FLAGS)

    def end_address(self) -> int:
        """Physical end address, i.e. start address plus size."""
        return self.start_address + self.size

    def is_allocated(self) -> bool:
        return ElfSectionFlags.ALLOCATED in self.flags

    def name(self, string_table: bytes) -> str:
        """Read this section's name from the section header string table contents."""
        return parse_slice_as_string(bytes(string_table[self.name_index :]))


@dataclass(frozen=True)
class ElfSectionsTag:
    """The section header table of the ELF kernel image."""

    number_of_sections: int
    entry_size: int
    shndx: int
    sections_data: bytes = b""

    BASE_SIZE: ClassVar[int] = TagHeader.SIZE + _COUNTS.size

    def __post_init__(self) -> None:
        for field_name in ("number_of_sections", "entry_size", "shndx"):
            value = getattr(self, field_name)
            if not 0 <= value <= _U32_MAX:
                raise ValueError(f"{field_name} {value} does not fit into 32 bits")
        object.__setattr__(self, "sections_data", bytes(self.sections_data))

    @property
    def header(self) -> TagHeader:
        return TagHeader(TagType.ELF_SECTIONS, self.BASE_SIZE + len(self.sections_data))

    @classmethod
    def from_bytes(cls, data: bytes) -> ElfSectionsTag:
        """Parse an ELF sections tag from the start of ``data``."""
        header = _read_header(data, TagType.ELF_SECTIONS, cls.BASE_SIZE)
        count, entry_size, shndx = _COUNTS.unpack_from(data, TagHeader.SIZE)
        return cls(count, entry_size, shndx, bytes(data[cls.BASE_SIZE : header.size]))

    def to_bytes(self) -> bytes:
        """Serialize the tag; the result is exactly ``header.size`` bytes long."""
        return (
            self.header.to_bytes()
            + _COUNTS.pack(self.number_of_sections, self.entry_size, self.shndx)
            + self.sections_data
        )

    def _section_at(self, index: int) -> ElfSection:
        layout = _layout(self.entry_size)
        offset = index * self.entry_size
        if offset + layout.size > len(self.sections_data):
            raise ValueError(f"section {index} lies beyond the end of the section table")
        return ElfSection(*layout.unpack_from(self.sections_data, offset))

    def sections(self) -> Iterator[ElfSection]:
        """Yield all sections whose type is not unused, in table order."""
        for index in range(self.number_of_sections):
            section = self._section_at(index)
            if section.section_type() is not ElfSectionType.UNUSED:
                yield section

    def string_table_address(self) -> int:
        """Physical address of the section header string table."""
        return self._section_at(self.shndx).start_address