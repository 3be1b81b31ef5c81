import string

import pytest
from hypothesis import given
from hypothesis import strategies as st

from multiboot2.header import InvalidUtf8Error, MissingNulError
from multiboot2.module import ModuleTag
from multiboot2.tag_type import TagType


def get_bytes() -> bytes:
    return bytes(
        [
            int(TagType.MODULE), 0, 0, 0,
            22, 0, 0, 0,
            0x00, 0xFF, 0, 0,
            0xFF, 0xFF, 0, 0,
            ord("h"), ord("e"), ord("l"), ord("l"), ord("o"), 0,
            0, 0,
        ]
    )


def test_parse_str():
    tag = ModuleTag.from_bytes(get_bytes())
    assert tag.header.typ == TagType.MODULE
    assert tag.header.size == 22
    assert tag.cmdline() == "hello"
    assert tag.start_address == 0xFF00
    assert tag.end_address == 0xFFFF
    assert tag.module_size() == 0xFF


def test_build_str():
    tag = ModuleTag(0xFF00, 0xFFFF, "hello")
    assert tag.to_bytes() == get_bytes()[: tag.header.size]
    assert tag.cmdline() == "hello"


def test_build_str_with_terminating_null():
    tag = ModuleTag(0xFF00, 0xFFFF, "hello\0")
    assert tag.to_bytes() == get_bytes()[: tag.header.size]
    assert tag.cmdline() == "hello"


def test_build_bigger_messages():
    tag = ModuleTag(0, 1, "AbCdEfGhUjK YEAH")
    assert tag.cmdline() == "AbCdEfGhUjK YEAH"
    long_text = "AbCdEfGhUjK YEAH" * 42
    tag = ModuleTag(0, 1, long_text)
    assert tag.cmdline() == long_text
    assert ModuleTag.from_bytes(tag.to_bytes()).cmdline() == long_text


def test_build_requires_size():
    with pytest.raises(ValueError):
        ModuleTag(0x1000, 0x1000, "x")
    with pytest.raises(ValueError):
        ModuleTag(0x2000, 0x1000, "x")


def test_address_out_of_range():
    with pytest.raises(ValueError):
        ModuleTag(0, 0x1_0000_0000, "x")


def test_missing_nul_in_parsed_tag():
    data = bytearray(get_bytes())
    data[4] = 21  # drop the NUL byte from the tag
    tag = ModuleTag.from_bytes(bytes(data))
    assert tag.raw_cmdline == b"hello"
    with pytest.raises(MissingNulError):
        tag.cmdline()


def test_invalid_utf8():
    tag = ModuleTag(0, 1, b"\xff\0")
    with pytest.raises(InvalidUtf8Error):
        tag.cmdline()


def test_wrong_tag_type_rejected():
    data = bytearray(get_bytes())
    data[0] = int(TagType.CMDLINE)
    with pytest.raises(ValueError):
        ModuleTag.from_bytes(bytes(data))


def test_truncated_data_rejected():
    with pytest.raises(ValueError):
        ModuleTag.from_bytes(get_bytes()[:18])


def test_unicode_round_trip():
    tag = ModuleTag(0x10, 0x20, "grüße")
    parsed = ModuleTag.from_bytes(tag.to_bytes())
    assert parsed == tag
    assert parsed.cmdline() == "grüße"


def test_default_cmdline_is_empty():
    tag = ModuleTag(0, 1)
    assert tag.cmdline() == ""
    assert tag.header.size == 17


def test_module_size_negative_raises():
    tag = ModuleTag(0x2000, 0x1000, b"\0")
    with pytest.raises(ValueError):
        tag.module_size()


@given(
    start=st.integers(min_value=0, max_value=0xFFFF_FFFE),
    length=st.integers(min_value=1, max_value=0xFFFF),
    text=st.text(alphabet=string.ascii_letters + string.digits + " -=/", max_size=64),
)
def test_round_trip(start, length, text):
    end = min(start + length, 0xFFFF_FFFF)
    tag = ModuleTag(start, end, text)
    parsed = ModuleTag.from_bytes(tag.to_bytes())
    assert parsed == tag
    assert parsed.cmdline() == text
    assert parsed.module_size() == end - start