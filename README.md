# multiboot2

Read and build the individual tags of a Multiboot2 boot information
structure in pure Python. Each tag class parses its little-endian byte form
with `from_bytes(data)` and writes it back with `to_bytes()`. The tag classes
are frozen dataclasses. Their `header` property gives the `TagHeader` (type
and total size) that `to_bytes()` writes in front of the body.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `multiboot2.tag_type`: the `TagType` enum of the specified tag ids.
  `parse_tag_type(value)` returns a `TagType` or, for a custom id, the plain
  integer. `tag_type_value(tag_type)` returns the raw 32-bit id.
- `multiboot2.header`: `TagHeader`, with `from_bytes`, `to_bytes` and
  `payload_len`. This module also holds `EndTag`, `ImageLoadPhysAddrTag` and
  `parse_slice_as_string`. The string errors are `StringError`, with its
  subclasses `MissingNulError` and `InvalidUtf8Error`. `StringError` is a
  `ValueError`.
- `multiboot2.module`: `ModuleTag`. It has `start_address`, `end_address`,
  `cmdline()` and `module_size()`.
- `multiboot2.elf_sections`: `ElfSectionsTag`, `ElfSection`,
  `ElfSectionType` and `ElfSectionFlags`.
- `multiboot2.framebuffer`: `FramebufferTag`. Its `buffer_type()` returns an
  `IndexedFramebuffer`, an `RgbFramebuffer` or a `TextFramebuffer`. The
  supporting types are `FramebufferField`, `FramebufferColor`,
  `FramebufferTypeId` and `UnknownFramebufferType`.
- `multiboot2.rsdp`: `RsdpV1Tag` and `RsdpV2Tag`. Both have `signature_str()`,
  `oem_id_str()` and `checksum_is_valid()`.
- `multiboot2.memory_map`: the tags `MemoryMapTag`, `BasicMemoryInfoTag` and
  `EFIMemoryMapTag`. The entry types are `MemoryArea` and `EFIMemoryDesc`, and
  `parse_memory_area_type` converts raw area types. `MemoryAreaType`,
  `EFIMemoryAreaType` and `EFIMemoryAttribute` name the type and attribute
  values.
- `multiboot2.smbios`: `SmbiosTag`.
- `multiboot2.vbe_info`: `VBEInfoTag`, `VBEControlInfo`, `VBEModeInfo` and
  `VBEField`. The flag and enum types are `VBECapabilities`,
  `VBEModeAttributes`, `VBEWindowAttributes`, `VBEDirectColorAttributes` and
  `VBEMemoryModel`.

## Example

```python
from multiboot2.header import parse_slice_as_string
from multiboot2.module import ModuleTag
from multiboot2.smbios import SmbiosTag

raw = bytes([
    3, 0, 0, 0,          # tag type: module
    22, 0, 0, 0,         # tag size
    0x00, 0xFF, 0, 0,    # module start
    0xFF, 0xFF, 0, 0,    # module end
]) + b"hello\0"

tag = ModuleTag.from_bytes(raw)
print(tag.cmdline())       # "hello"
print(tag.module_size())   # 255
assert tag.to_bytes() == raw

smbios = SmbiosTag(7, 42, bytes(range(9)))
print(smbios.header.size)  # 25

print(parse_slice_as_string(b"hello\0foo"))  # "hello"
```

## Behaviour

### Parsing

`from_bytes` checks the following and raises `ValueError` when any check
fails:

- the tag type is the expected one;
- the declared size is at least the tag's minimum size;
- the data is at least as long as the declared size.

### Serializing

`to_bytes()` writes exactly `header.size` bytes. It does not add padding to
an 8-byte boundary.

### Strings

String fields end with a NUL byte, and anything after the first NUL is
ignored. If the terminator is missing, `MissingNulError` is raised. If the
bytes are not valid UTF-8, `InvalidUtf8Error` is raised.

### ELF sections

`ElfSectionsTag.sections()` yields the sections whose type is not unused.
Entries may be 40 bytes (32-bit) or 64 bytes (64-bit); any other entry size
raises `ValueError`.

A section name lives in a string table somewhere in memory. Read that table
yourself, starting at `ElfSectionsTag.string_table_address()`, and pass its
bytes to `ElfSection.name(string_table)`.

### EFI memory map

`EFIMemoryMapTag.memory_areas()` returns a list of descriptors, read
`desc_size` bytes apart. It raises `ValueError` in any of these cases:

- the descriptor version is not 1;
- the descriptor size is smaller than a descriptor;
- the map length is not a multiple of the descriptor size.

## What this package does not do

The package works on single tags, handed to it as bytes. It does not:

- load a whole boot information structure from an address;
- walk the list of tags;
- find tags by type.

It has no classes for these tags:

- the command line tag;
- the boot loader name tag;
- the APM tag;
- the BIOS boot device tag;
- the network tag;
- the EFI system table and image handle tags;
- the EFI boot services tag.