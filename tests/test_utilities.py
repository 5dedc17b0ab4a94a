import pytest

from pyvds.diagnostics import DecodeStage, DiagnosticLog
from pyvds.utilities import (
    FORMAT_ICAO_SEAL,
    FORMAT_UNKNOWN,
    byte_array_string,
    bytes_from_qr_text,
    detect_format,
    hex_dump,
    to_hex,
)

def test_to_hex():
    assert to_hex(b"\xdc\x03\x0a") == "DC030A"
    assert to_hex(b"") == ""

def test_byte_array_string():
    assert byte_array_string(b"\xdc\x03") == "[0xDC, 0x03]"
    assert byte_array_string(b"") == "[]"

def test_hex_dump_rows():
    """Tests the dump layout: full rows, a padded last row, and the ASCII gutter."""
    data = bytes(range(0x41, 0x51)) + b"\xdc\x00A"

    lines = hex_dump(data).splitlines()

    assert lines[0] == "Offset | 00 01 02 03 04 05 06 07 08 09 0A 0B 0C 0D 0E 0F | ASCII"
    assert lines[1].startswith("-------|")
    assert lines[2] == "000000 | 41 42 43 44 45 46 47 48 49 4A 4B 4C 4D 4E 4F 50 | ABCDEFGHIJKLMNOP"
    assert lines[3] == "000010 | DC 00 41" + "   " * 13 + " | ..A" + " " * 13
    assert len(lines) == 4

def test_hex_dump_empty():
    assert len(hex_dump(b"").splitlines()) == 2

@pytest.mark.parametrize("data, expected", [
    (b"\xdc\x03", FORMAT_ICAO_SEAL),
    (b"\x00\xdc", FORMAT_UNKNOWN),
    (b"", FORMAT_UNKNOWN),
])
def test_detect_format(data, expected):
    assert detect_format(data) == expected

def test_bytes_from_qr_text():
    """Tests that one character per byte maps back to the original bytes."""
    assert bytes_from_qr_text("\xdc\x03ES\xff") == b"\xdc\x03ES\xff"

def test_bytes_from_qr_text_rejects_wide_characters():
    with pytest.raises(ValueError) as excinfo:
        bytes_from_qr_text("AB€")
    assert "position 2" in str(excinfo.value)

def test_diagnostic_log_tracks_stage():
    log = DiagnosticLog()
    log.emit("first")
    log.enter(DecodeStage.READING_PAYLOAD)
    log.emit("second", "name", "latin-1")

    assert len(log) == 2
    assert log.events[0].stage is DecodeStage.READING_HEADER
    assert log.events[1].as_dict() == {
        "stage": "reading-payload",
        "event": "second",
        "field": "name",
        "detail": "latin-1",
    }
