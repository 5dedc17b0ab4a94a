"""
This module provides helpers for presenting and preparing seal bytes: hex
rendering, a hex dump table, format detection and QR text conversion.
"""
from typing import List

from .constants import MAGIC_CONSTANT

FORMAT_ICAO_SEAL = "ICAO 9303 SDV"
FORMAT_UNKNOWN = "Unknown"


def to_hex(data: bytes) -> str:
    """
    Renders bytes as uppercase hex without separators.
    """
    return bytes(data).hex().upper()


def byte_array_string(data: bytes) -> str:
    """
    Renders bytes as a bracketed list, e.g. ``[0xDC, 0x03]``.
    """
    return "[" + ", ".join(f"0x{b:02X}" for b in data) + "]"


def hex_dump(data: bytes) -> str:
    """
    Formats bytes as a table of 16-byte rows with an offset column and an
    ASCII gutter in which non-printable bytes show as ``.``.

    Args:
        data: The bytes to format.

    Returns:
        The table as a string, one row per line, including a heading.
    """
    lines: List[str] = [
        "Offset | 00 01 02 03 04 05 06 07 08 09 0A 0B 0C 0D 0E 0F | ASCII",
        "-------|-------------------------------------------------|----------------",
    ]
    for i in range(0, len(data), 16):
        row = data[i:i + 16]
        hex_cells = [f"{b:02X}" for b in row] + ["  "] * (16 - len(row))
        ascii_cells = [chr(b) if 32 <= b <= 126 else "." for b in row] + [" "] * (16 - len(row))
        lines.append(f"{i:06X} | {' '.join(hex_cells)} | {''.join(ascii_cells)}")
    return "\n".join(lines) + "\n"


def detect_format(data: bytes) -> str:
    """
    Guesses the payload format from its first byte.
    """
    if data and data[0] == MAGIC_CONSTANT:
        return FORMAT_ICAO_SEAL
    return FORMAT_UNKNOWN


def bytes_from_qr_text(text: str) -> bytes:
    """
    Converts QR reader text whose code points stand for raw bytes back into
    bytes.

    Many QR libraries hand binary payloads over as a string with one character
    per byte. Decoding a seal needs those bytes, not the text.

    Raises:
        ValueError: If a character is above U+00FF and so cannot be a byte.
    """
    try:
        return text.encode("latin-1")
    except UnicodeEncodeError as e:
        raise ValueError(f"Character at position {e.start} is not a byte value") from e
