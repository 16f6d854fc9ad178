import pytest

from vmss_core.protocol import (
    TAG_NAMELEN_MASK,
    TAG_NAMELEN_SHIFT,
    TAG_NINDX_MASK,
    TAG_NINDX_SHIFT,
    TAG_VALSIZE_MASK,
    TAG_VALSIZE_SHIFT,
)
from vmss_core.tags import TagHeader, decode_tag, encode_tag, is_terminator


def test_field_masks_do_not_overlap():
    masks = [
        TAG_NAMELEN_MASK << TAG_NAMELEN_SHIFT,
        TAG_NINDX_MASK << TAG_NINDX_SHIFT,
        TAG_VALSIZE_MASK << TAG_VALSIZE_SHIFT,
    ]
    assert masks == [0xFF00, 0x00C0, 0x003F]
    assert masks[0] | masks[1] | masks[2] == 0xFFFF
    assert masks[0] & masks[1] == 0
    assert masks[0] & masks[2] == 0
    assert masks[1] & masks[2] == 0


def test_decode_pending_nmi_tag():
    # "pendingNMI": 10-byte name, one index, one-byte value
    tag = decode_tag(0x0A41)
    assert tag == TagHeader(10, 1, 1)
    assert not tag.is_block


def test_decode_all_ones():
    tag = decode_tag(0xFFFF)
    assert tag == TagHeader(255, 3, 63)
    assert tag.is_block
    assert not tag.is_compressed


def test_decode_compressed_block():
    tag = decode_tag(0x0BBE)
    assert tag == TagHeader(11, 2, 62)
    assert tag.is_block
    assert tag.is_compressed


def test_literal_size_61_is_not_a_block():
    assert not decode_tag(encode_tag(3, 0, 61)).is_block


@pytest.mark.parametrize("field", ["name_len", "index_count", "value_size"])
def test_fields_decode_independently(field):
    # Saturating one field must leave the others at zero.
    full = {"name_len": 255, "index_count": 3, "value_size": 63}
    args = {k: (full[k] if k == field else 0) for k in full}
    tag = decode_tag(encode_tag(**args))
    assert tag._asdict() == args


@pytest.mark.parametrize("args", [(256, 0, 0), (0, 4, 0), (0, 0, 64), (-1, 0, 0)])
def test_encode_rejects_out_of_range(args):
    with pytest.raises(ValueError):
        encode_tag(*args)


def test_terminator():
    assert is_terminator(0)
    assert not is_terminator(0x0100)
