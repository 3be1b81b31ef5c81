import struct

import pytest
from hypothesis import given
from hypothesis import strategies as st

from multiboot2.tag_type import TagType
from multiboot2.vbe_info import (
    VBECapabilities,
    VBEControlInfo,
    VBEDirectColorAttributes,
    VBEField,
    VBEInfoTag,
    VBEMemoryModel,
    VBEModeAttributes,
    VBEModeInfo,
    VBEWindowAttributes,
)


def _pad(data: bytes, length: int) -> bytes:
    assert len(data) <= length
    return data + bytes(length - len(data))


def grub_vbe_tag_bytes() -> bytes:
    """The VBE tag taken from GRUB2 running in QEMU."""
    header = bytes([7, 0, 0, 0, 16, 3, 0, 0])
    tag_fields = bytes([122, 65, 255, 255, 0, 96, 79, 0])
    control_fixed = bytes(
        [
            86, 69, 83, 65,
            0, 3,
            220, 87, 0, 192,
            1, 0, 0, 0,
            34, 128, 0, 96,
            0, 1,
            0, 0,
            240, 87, 0, 192,
            3, 88, 0, 192,
            23, 88, 0, 192,
        ]
    )
    modes = (
        list(range(0x100, 0x108))
        + list(range(0x10D, 0x120))
        + list(range(0x140, 0x14D))
        + list(range(0x175, 0x193))
        + list(range(0, 8))
        + list(range(13, 20))
        + [106, 0xFFFF]
    )
    control_rest = _pad(struct.pack(f"<{len(modes)}H", *modes), 478)
    mode_fixed = bytes(
        [
            187, 0, 7, 0,
            64, 0, 64, 0,
            0, 160, 0, 0,
            186, 84, 0, 192,
            0, 20, 0, 5,
            32, 3, 8, 16,
            1, 32, 1, 6,
            0, 3, 1, 8,
            16, 8, 8, 8,
            0, 8, 24, 2,
            0, 0, 0, 253,
            0, 0, 0, 0,
            0, 0,
        ]
    )
    mode_rest = _pad(bytes([0, 20, 0, 0, 8, 16, 8, 8, 8, 0, 8, 24]), 206)
    return header + tag_fields + control_fixed + control_rest + mode_fixed + mode_rest


def test_vbe_info_tag_size():
    data = grub_vbe_tag_bytes()
    assert len(data) == 784
    assert VBEInfoTag.SIZE == 784
    assert VBEControlInfo.SIZE == 512
    assert VBEModeInfo.SIZE == 256
    assert len(VBEInfoTag().to_bytes()) == 784


def test_vbe_info_tag():
    vbe = VBEInfoTag.from_bytes(grub_vbe_tag_bytes())
    assert vbe.header.typ == TagType.VBE
    assert vbe.mode == 16762
    assert vbe.interface_segment == 65535
    assert vbe.interface_offset == 24576
    assert vbe.interface_length == 79

    control = vbe.control_info
    assert control.signature == bytes([86, 69, 83, 65])
    assert control.version == 768
    assert control.oem_string_ptr == 3221247964
    assert control.capabilities == VBECapabilities.SWITCHABLE_DAC
    assert control.mode_list_ptr == 1610645538
    assert control.total_memory == 256
    assert control.oem_software_revision == 0
    assert control.oem_vendor_name_ptr == 3221247984
    assert control.oem_product_name_ptr == 3221248003
    assert control.oem_product_revision_ptr == 3221248023

    mode = vbe.mode_info
    expected_attrs = (
        VBEModeAttributes.SUPPORTED
        | VBEModeAttributes.COLOR
        | VBEModeAttributes.GRAPHICS
        | VBEModeAttributes.NOT_VGA_COMPATIBLE
        | VBEModeAttributes.LINEAR_FRAMEBUFFER
    )
    assert mode.mode_attributes & expected_attrs == expected_attrs
    window_attrs = (
        VBEWindowAttributes.RELOCATABLE
        | VBEWindowAttributes.READABLE
        | VBEWindowAttributes.WRITEABLE
    )
    assert mode.window_a_attributes & window_attrs == window_attrs
    assert mode.window_granularity == 64
    assert mode.window_size == 64
    assert mode.window_a_segment == 40960
    assert mode.window_function_ptr == 3221247162
    assert mode.pitch == 5120
    assert mode.resolution == (1280, 800)
    assert mode.character_size == (8, 16)
    assert mode.number_of_planes == 1
    assert mode.bpp == 32
    assert mode.number_of_banks == 1
    assert mode.memory_model == VBEMemoryModel.DIRECT_COLOR
    assert mode.bank_size == 0
    assert mode.number_of_image_pages == 3
    assert mode.red_field == VBEField(position=16, size=8)
    assert mode.green_field == VBEField(position=8, size=8)
    assert mode.blue_field == VBEField(position=0, size=8)
    assert mode.reserved_field == VBEField(position=24, size=8)
    assert mode.direct_color_attributes == VBEDirectColorAttributes.RESERVED_USABLE
    assert mode.framebuffer_base_ptr == 4244635648
    assert mode.offscreen_memory_offset == 0
    assert mode.offscreen_memory_size == 0


def test_grub_tag_round_trip():
    data = grub_vbe_tag_bytes()
    assert VBEInfoTag.from_bytes(data).to_bytes() == data


def test_wrong_tag_type_rejected():
    data = bytearray(grub_vbe_tag_bytes())
    data[0] = int(TagType.FRAMEBUFFER)
    with pytest.raises(ValueError):
        VBEInfoTag.from_bytes(bytes(data))


def test_truncated_tag_rejected():
    with pytest.raises(ValueError):
        VBEInfoTag.from_bytes(grub_vbe_tag_bytes()[:500])


def test_unknown_memory_model_rejected():
    data = bytearray(VBEModeInfo().to_bytes())
    data[27] = 0x42
    with pytest.raises(ValueError):
        VBEModeInfo.from_bytes(bytes(data))


def test_memory_model_offset():
    data = VBEModeInfo(memory_model=VBEMemoryModel.YUV).to_bytes()
    assert data[27] == 7


def test_field_out_of_range():
    with pytest.raises(ValueError):
        VBEField(size=256, position=0)


def test_control_info_signature_length():
    with pytest.raises(ValueError):
        VBEControlInfo(signature=b"VES")


def test_default_tag_values():
    tag = VBEInfoTag()
    assert tag.mode_info.memory_model is VBEMemoryModel.TEXT
    assert tag.control_info.capabilities == 0
    assert tag.header.size == 784


@given(
    st.integers(0, 0xFFFF),
    st.integers(0, 0xFFFF),
    st.tuples(st.integers(0, 0xFFFF), st.integers(0, 0xFFFF)),
    st.sampled_from(list(VBEMemoryModel)),
    st.integers(0, 0xFFFF_FFFF),
    st.integers(0, 0xFF),
)
def test_round_trip(mode, pitch, resolution, model, fb_ptr, red_size):
    tag = VBEInfoTag(
        mode=mode,
        control_info=VBEControlInfo(signature=b"VESA", version=0x300),
        mode_info=VBEModeInfo(
            pitch=pitch,
            resolution=resolution,
            memory_model=model,
            framebuffer_base_ptr=fb_ptr,
            red_field=VBEField(size=red_size, position=16),
        ),
    )
    assert VBEInfoTag.from_bytes(tag.to_bytes()) == tag