import pytest

from blorbgen.packing.codec import pack_id, pack_u32, unpack_id, unpack_u32
from blorbgen.packing.errors import BinaryFormatError


def test_pack_id_pads_short_tags():
    assert pack_id("Snd") == b"Snd "
    assert pack_id("") == b"    "


def test_pack_id_truncates_long_tags():
    assert pack_id("PICTURE") == b"PICT"


def test_pack_id_rejects_non_ascii():
    with pytest.raises(BinaryFormatError):
        pack_id("Sé")


def test_unpack_id_at_offset():
    assert unpack_id(b"xxFORMyy", 2) == "FORM"
    with pytest.raises(BinaryFormatError):
        unpack_id(b"FOR")


def test_u32_is_big_endian():
    assert pack_u32(0x01020304) == b"\x01\x02\x03\x04"
    assert unpack_u32(b"\x00\x00\x00\x00\x00\x00\x01\x00", 4) == 256


@pytest.mark.parametrize("value", [-1, 1 << 32])
def test_pack_u32_range(value):
    with pytest.raises(BinaryFormatError):
        pack_u32(value)


def test_unpack_u32_short_read():
    with pytest.raises(BinaryFormatError):
        unpack_u32(b"\x00\x00\x01")
