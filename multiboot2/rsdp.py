"""Tags carrying a copy of the ACPI Root System Description Pointer."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

from multiboot2.header import TagHeader, _read_header
from multiboot2.tag_type import TagType

RSDP_SIGNATURE = b"RSD PTR "
_RSDPV1_LENGTH = 20

_V1 = struct.Struct("<8sB6sBI")
_V2 = struct.Struct("<8sB6sBIIQB3x")


def _check_common(tag: RsdpV1Tag | RsdpV2Tag) -> None:
    if len(tag.signature) != 8:
        raise ValueError("signature must be 8 bytes long")
    if len(tag.oem_id) != 6:
        raise ValueError("OEM id must be 6 bytes long")
    for name in ("checksum", "revision"):
        if not 0 <= getattr(tag, name) <= 0xFF:
            raise ValueError(f"{name} does not fit into 8 bits")
    if not 0 <= tag.rsdt_address <= 0xFFFF_FFFF:
        raise ValueError("RSDT address does not fit into 32 bits")


def _checksum_ok(data: bytes) -> bool:
    return sum(data) % 256 == 0


@dataclass(frozen=True)
class RsdpV1Tag:
    """A copy of the RSDP as defined by ACPI 1.0."""

    checksum: int
    oem_id: bytes
    revision: int
    rsdt_address: int
    signature: bytes = RSDP_SIGNATURE

    SIZE: ClassVar[int] = TagHeader.SIZE + _V1.size

    def __post_init__(self) -> None:
        object.__setattr__(self, "oem_id", bytes(self.oem_id))
        object.__setattr__(self, "signature", bytes(self.signature))
        _check_common(self)

    @property
    def header(self) -> TagHeader:
        return TagHeader(TagType.ACPI_V1, self.SIZE)

    @classmethod
    def from_bytes(cls, data: bytes) -> RsdpV1Tag:
        _read_header(data, TagType.ACPI_V1, cls.SIZE)
        signature, checksum, oem_id, revision, rsdt = _V1.unpack_from(data, TagHeader.SIZE)
        return cls(checksum, oem_id, revision, rsdt, signature)

    def to_bytes(self) -> bytes:
        body = _V1.pack(self.signature, self.checksum, self.oem_id, self.revision, self.rsdt_address)
        return self.header.to_bytes() + body

    def signature_str(self) -> str:
        """The signature as text; raises ``UnicodeDecodeError`` if not UTF-8."""
        return self.signature.decode("utf-8")

    def oem_id_str(self) -> str:
        """The OEM id as text; raises ``UnicodeDecodeError`` if not UTF-8."""
        return self.oem_id.decode("utf-8")

    def checksum_is_valid(self) -> bool:
        """Whether the 20 bytes of the ACPI 1.0 structure sum to zero."""
        body = self.to_bytes()[TagHeader.SIZE : TagHeader.SIZE + _RSDPV1_LENGTH]
        return _checksum_ok(body)


@dataclass(frozen=True)
class RsdpV2Tag:
    """A copy of the RSDP as defined by ACPI 2.0 or later."""

    checksum: int
    oem_id: bytes
    revision: int
    rsdt_address: int
    length: int
    xsdt_address: int
    ext_checksum: int
    signature: bytes = RSDP_SIGNATURE

    SIZE: ClassVar[int] = TagHeader.SIZE + _V2.size

    def __post_init__(self) -> None:
        object.__setattr__(self, "oem_id", bytes(self.oem_id))
        object.__setattr__(self, "signature", bytes(self.signature))
        _check_common(self)
        if not 0 <= self.length <= 0xFFFF_FFFF:
            raise ValueError("length does not fit into 32 bits")
        if not 0 <= self.xsdt_address <= 0xFFFF_FFFF_FFFF_FFFF:
            raise ValueError("XSDT address does not fit into 64 bits")
        if not 0 <= self.ext_checksum <= 0xFF:
            raise ValueError("extended checksum does not fit into 8 bits")

    @property
    def header(self) -> TagHeader:
        return TagHeader(TagType.ACPI_V2, self.SIZE)

    @classmethod
    def from_bytes(cls, data: bytes) -> RsdpV2Tag:
        _read_header(data, TagType.ACPI_V2, cls.SIZE)
        (signature, checksum, oem_id, revision, rsdt, length, xsdt, ext) = _V2.unpack_from(
            data, TagHeader.SIZE
        )
        return cls(checksum, oem_id, revision, rsdt, length, xsdt, ext, signature)

    def to_bytes(self) -> bytes:
        body = _V2.pack(
            self.signature,
            self.checksum,
            self.oem_id,
            self.revision,
            self.rsdt_address,
            self.length,
            self.xsdt_address,
            self.ext_checksum,
        )
        return self.header.to_bytes() + body

    def signature_str(self) -> str:
        """The signature as text; raises ``UnicodeDecodeError`` if not UTF-8."""
        return self.signature.decode("utf-8")

    def oem_id_str(self) -> str:
        """The OEM id as text; raises ``UnicodeDecodeError`` if not UTF-8."""
        return self.oem_id.decode("utf-8")

    def checksum_is_valid(self) -> bool:
        """Whether the first ``length`` bytes of the structure sum to zero."""
        available = _V2.size
        if self.length > available:
            raise ValueError(f"RSDP length {self.length} exceeds the {available} bytes in the tag")
        body = self.to_bytes()[TagHeader.SIZE : TagHeader.SIZE + self.length]
        return _checksum_ok(body)