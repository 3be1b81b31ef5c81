import pytest
from hypothesis import given, strategies as st

from multiboot2.header import (
    EndTag,
    ImageLoadPhysAddrTag,
    InvalidUtf8Error,
    MissingNulError,
    StringError,
    TagHeader,
    parse_slice_as_string,
)
from multiboot2.tag_type import TagType

ADDR = 0xABCDEF


def test_parse_slice_as_string():
    with pytest.raises(MissingNulError):
        parse_slice_as_string(b"")
    assert parse_slice_as_string(b"\x00") == ""
    with pytest.raises(InvalidUtf8Error):
        parse_slice_as_string(b"\xff\x00")
    with pytest.raises(MissingNulError):
        parse_slice_as_string(b"hello")
    assert parse_slice_as_string(b"hello\0") == "hello"
    assert parse_slice_as_string(b"hello\0\0") == "hello"
    assert parse_slice_as_string(b"hello\0foo") == "hello"


def test_string_errors_share_base():
    with pytest.raises(StringError):
        parse_slice_as_string(b"abc")
    with pytest.raises(ValueError):
        parse_slice_as_string(b"\xff\x00")


def test_build_load_addr():
    tag = ImageLoadPhysAddrTag(ADDR)
    assert tag.load_base_addr == ADDR
    assert tag.header == TagHeader(TagType.LOAD_BASE_ADDR, 12)


def test_load_addr_bytes():
    tag = ImageLoadPhysAddrTag(ADDR)
    assert tag.to_bytes() == bytes([21, 0, 0, 0, 12, 0, 0, 0, 0xEF, 0xCD, 0xAB, 0])
    assert ImageLoadPhysAddrTag.from_bytes(tag.to_bytes()) == tag


def test_load_addr_wrong_type():
    data = bytes([1, 0, 0, 0, 12, 0, 0, 0, 0, 0, 0, 0])
    with pytest.raises(ValueError):
        ImageLoadPhysAddrTag.from_bytes(data)


def test_load_addr_truncated():
    with pytest.raises(ValueError):
        ImageLoadPhysAddrTag.from_bytes(bytes([21, 0, 0, 0, 12, 0, 0, 0, 1]))


def test_end_tag_default():
    tag = EndTag()
    assert tag.to_bytes() == bytes([0, 0, 0, 0, 8, 0, 0, 0])
    assert EndTag.from_bytes(tag.to_bytes()) == tag


def test_invalid_end_tag_size():
    with pytest.raises(ValueError):
        EndTag.from_bytes(bytes([0, 0, 0, 0, 9, 0, 0, 0]))


def test_end_tag_wrong_type():
    with pytest.raises(ValueError):
        EndTag.from_bytes(bytes([1, 0, 0, 0, 8, 0, 0, 0]))


def test_header_parse_and_payload():
    header = TagHeader.from_bytes(bytes([2, 0, 0, 0, 13, 0, 0, 0, 110]))
    assert header.typ == 2
    assert header.tag_type is TagType.BOOT_LOADER_NAME
    assert header.size == 13
    assert header.payload_len() == 5


def test_header_custom_type():
    header = TagHeader(0x1337, 8)
    assert header.tag_type == 0x1337
    assert header.to_bytes() == bytes([0x37, 0x13, 0, 0, 8, 0, 0, 0])


def test_header_too_small_payload():
    with pytest.raises(ValueError):
        TagHeader(1, 7).payload_len()


def test_header_short_data():
    with pytest.raises(ValueError):
        TagHeader.from_bytes(b"\x00\x00\x00")


@given(
    st.integers(min_value=0, max_value=0xFFFF_FFFF),
    st.integers(min_value=8, max_value=0xFFFF_FFFF),
)
def test_header_round_trip(typ, size):
    header = TagHeader(typ, size)
    parsed = TagHeader.from_bytes(header.to_bytes())
    assert parsed == header
    assert parsed.payload_len() == size - 8


@given(st.integers(min_value=0, max_value=0xFFFF_FFFF))
def test_load_addr_round_trip(addr):
    tag = ImageLoadPhysAddrTag(addr)
    assert ImageLoadPhysAddrTag.from_bytes(tag.to_bytes()).load_base_addr == addr


@given(st.text(alphabet=st.characters(blacklist_characters="\0", blacklist_categories=("Cs",))))
def test_string_round_trip(text):
    assert parse_slice_as_string(text.encode("utf-8") + b"\0trailing") == text