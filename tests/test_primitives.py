import datetime

import pytest
from pyasn1.codec.der import encoder as der_encoder
from pyasn1.type import univ

from pyvds.cursor import ByteCursor
from pyvds.exceptions import DateUndecodable, InvalidLength
from pyvds.primitives import (
    decode_c40,
    decode_der_length,
    decode_packed_date,
    decode_text,
    decode_text_with_codec,
    encode_c40,
    is_undecodable_date,
    parse_packed_date,
)

from conftest import pack_date


@pytest.mark.parametrize("value", [0x00, 0x01, 0x03, 0x7F])
def test_der_short_form(value):
    """Tests that a short-form length is the octet itself and consumes one byte."""
    cursor = ByteCursor(bytes([value]) + b"\x00" * value)

    assert decode_der_length(cursor) == value
    assert cursor.offset == 1

@pytest.mark.parametrize("prefix, expected", [
    (b"\x81\x80", 0x80),
    (b"\x82\x01\x00", 0x100),
    (b"\x83\x01\x00\x00", 0x10000),
    (b"\x84\x00\x00\x00\x05", 5),
])
def test_der_long_form(prefix, expected):
    """Tests that long-form lengths combine the following octets big-endian."""
    cursor = ByteCursor(prefix + b"\x00" * expected)

    assert decode_der_length(cursor) == expected
    assert cursor.offset == len(prefix)

@pytest.mark.parametrize("data", [
    b"",                          # no length octet
    b"\x80\x00",                  # indefinite form
    b"\x85\x00\x00\x00\x00\x01",  # more than four length octets
    b"\x82\x01",                  # length octets cut short
    b"\x05abc",                   # declared length overruns the buffer
    b"\x81\xff" + b"\x00" * 10,
])
def test_der_invalid_lengths(data):
    with pytest.raises(InvalidLength):
        decode_der_length(ByteCursor(data))

@pytest.mark.parametrize("size", [0, 5, 127, 128, 300, 70000])
def test_der_length_matches_pyasn1(size):
    """Tests the decoder against lengths produced by a reference DER encoder."""
    encoded = der_encoder.encode(univ.OctetString(b"x" * size))
    cursor = ByteCursor(encoded, offset=1)  # skip the OCTET STRING tag

    assert decode_der_length(cursor) == size
    assert cursor.remaining() == size

def test_c40_encode_decode_country():
    encoded = encode_c40("ES")

    assert encoded == b"\x75\x81"
    assert decode_c40(encoded) == "ES"

def test_c40_decode_padded_country():
    """Tests that filler spaces are trimmed unless asked to keep them."""
    assert decode_c40(b"\x6A\xBC") == "D"
    assert decode_c40(b"\x6A\xBC", strip=False) == "D  "

def test_c40_drops_shift_codes():
    word = 0 * 1600 + 18 * 40 + 32 + 1  # shift 1, E, S
    assert decode_c40(word.to_bytes(2, "big")) == "ES"

def test_c40_zero_word_stops():
    assert decode_c40(b"\x75\x81\x00\x00\x75\x81") == "ES"

def test_c40_ignores_odd_trailing_byte():
    assert decode_c40(b"\x75\x81\x42") == "ES"

def test_c40_single_trailing_character():
    assert encode_c40("D") == b"\xFE\x45"
    assert decode_c40(b"\x75\x81\xFE\x45", strip=False) == "ESD"

def test_c40_signer_block_round_trip():
    text = "ESPE05A1B2C"
    assert decode_c40(encode_c40(text), strip=False) == text

def test_c40_encode_rejects_unsupported_characters():
    with pytest.raises(ValueError):
        encode_c40("D<<")

def test_c40_encode_uppercases():
    assert encode_c40("es") == encode_c40("ES")

def test_packed_date():
    """Tests a date stored as the integer 07221977 (MMDDYYYY)."""
    raw = bytes([0x6E, 0x32, 0xD9])

    assert int.from_bytes(raw, "big") == 7221977
    assert decode_packed_date(raw) == "22-07-1977"
    assert parse_packed_date(raw) == datetime.date(1977, 7, 22)

@pytest.mark.parametrize("raw", [
    (13011990).to_bytes(3, "big"),   # month 13
    (2302000).to_bytes(3, "big"),    # 30 February
    (1011899).to_bytes(3, "big"),    # year before 1900
    b"\x00\x00\x00",
    b"\x01\x02",
])
def test_packed_date_undecodable(raw):
    """Tests that invalid dates raise in strict mode and become a marker otherwise."""
    with pytest.raises(DateUndecodable) as excinfo:
        parse_packed_date(raw)
    assert excinfo.value.raw_hex == raw.hex().upper()

    text = decode_packed_date(raw)
    assert is_undecodable_date(text)
    assert text == "undecodable:" + raw.hex().upper()

def test_packed_date_leap_day():
    assert decode_packed_date(pack_date(29, 2, 2000)) == "29-02-2000"

@pytest.mark.parametrize("raw, expected, codec", [
    ("Ñúñez".encode("utf-8"), "Ñúñez", "utf-8"),
    (b"Jos\xe9", "José", "utf-8-walk"),
    (b"Mu\xc3\xb1oz \xe9", "Muñoz é", "utf-8-walk"),
    ("JOSÉ\u00a0MARÍA".encode("utf-8"), "JOSÉ\u00a0MARÍA", "utf-8"),
    ("GARCÍA\u00adLÓPEZ".encode("utf-8"), "GARCÍA\u00adLÓPEZ", "utf-8"),
    (b"\xef\xbb\xbfABC", "\ufeffABC", "utf-8"),
    (b"ABC\x00\x00", "ABC\x00\x00", "utf-8"),
    (b"AB\x81", "AB.", "ascii"),
    (b"\x81\x01", "8101", "hex"),
    (b"", "", "empty"),
])
def test_text_fallback_chain(raw, expected, codec):
    assert decode_text_with_codec(raw) == (expected, codec)

def test_decode_text_returns_text_only():
    assert decode_text(b"ABC") == "ABC"
