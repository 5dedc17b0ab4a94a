"""
This module provides the low-level field codecs used by the header and payload
parsers: DER lengths, C40 text, packed dates and free text.
"""
import datetime
import logging
import unicodedata
from typing import List, Tuple

from .constants import (
    C40_ALPHABET,
    C40_FIRST_CHAR,
    C40_SINGLE_CHAR_MARKER,
    DATE_UNDECODABLE_PREFIX,
    DATE_YEAR_MAX,
    DATE_YEAR_MIN,
    DER_MAX_LENGTH_OCTETS,
)
from .cursor import ByteCursor
from .exceptions import DateUndecodable, InvalidLength


logger = logging.getLogger(__name__)


def decode_der_length(cursor: ByteCursor) -> int:
    """
    Decodes a DER short- or long-form length at the cursor.

    Args:
        cursor: A cursor positioned at the first length octet.

    Returns:
        The decoded length. The cursor is advanced past the length octets.

    Raises:
        InvalidLength: If the encoding uses the indefinite form, more than four
                       length octets, is cut short, or declares more bytes than
                       remain in the buffer.
    """
    start = cursor.offset
    if cursor.remaining() < 1:
        raise InvalidLength("Missing length octet", start)

    first = cursor.read_byte()
    if first < 0x80:
        length = first
    else:
        num_len_bytes = first & 0x7F
        if num_len_bytes == 0:
            raise InvalidLength("Indefinite length form is not supported", start)
        if num_len_bytes > DER_MAX_LENGTH_OCTETS:
            raise InvalidLength(f"Length uses {num_len_bytes} octets (max {DER_MAX_LENGTH_OCTETS})", start)
        if cursor.remaining() < num_len_bytes:
            raise InvalidLength(f"Length declares {num_len_bytes} octets but only {cursor.remaining()} remain", start)
        length = int.from_bytes(cursor.read_bytes(num_len_bytes), "big")

    if length > cursor.remaining():
        raise InvalidLength(f"Declared length {length} exceeds the {cursor.remaining()} remaining bytes", start)
    return length


def decode_c40(data: bytes, strip: bool = True) -> str:
    """
    Decodes C40 packed text (three characters per two bytes).

    Shift codes are dropped. A zero word ends the text, as does the
    ``FE xx`` form that carries one final ASCII character. An unpaired
    trailing byte is ignored.

    Args:
        data: The packed bytes.
        strip: Whether to trim surrounding whitespace from the result.
    """
    chars: List[str] = []
    for i in range(0, len(data) - 1, 2):
        if data[i] == C40_SINGLE_CHAR_MARKER:
            code = data[i + 1] - 1
            if 0x20 <= code <= 0x7E:
                chars.append(chr(code))
            break

        word = (data[i] << 8) | data[i + 1]
        if word == 0:
            break

        value = word - 1
        for u in (value // 1600, (value % 1600) // 40, value % 40):
            if C40_FIRST_CHAR <= u < len(C40_ALPHABET):
                chars.append(C40_ALPHABET[u])

    text = "".join(chars)
    return text.strip() if strip else text


def encode_c40(text: str) -> bytes:
    """
    Packs text from the C40 basic set (space, digits, A-Z).

    Raises:
        ValueError: If the text contains a character outside the basic set.
    """
    values = []
    for char in text.upper():
        index = C40_ALPHABET.find(char, C40_FIRST_CHAR)
        if index < 0:
            raise ValueError(f"Character {char!r} cannot be C40 encoded")
        values.append(index)

    out = bytearray()
    for i in range(0, len(values), 3):
        group = values[i:i + 3]
        if len(group) == 1:
            out += bytes([C40_SINGLE_CHAR_MARKER, ord(C40_ALPHABET[group[0]]) + 1])
            continue
        if len(group) == 2:
            group.append(0)  # shift 1 pads the last triple
        word = group[0] * 1600 + group[1] * 40 + group[2] + 1
        out += word.to_bytes(2, "big")
    return bytes(out)


def parse_packed_date(raw: bytes) -> datetime.date:
    """
    Parses a 3-byte date whose big-endian value spells MMDDYYYY in decimal.

    Raises:
        DateUndecodable: If the bytes are not a valid date.
    """
    if len(raw) != 3:
        raise DateUndecodable(raw)

    digits = f"{int.from_bytes(raw, 'big'):08d}"
    month, day, year = int(digits[0:2]), int(digits[2:4]), int(digits[4:8])
    if not (1 <= month <= 12 and 1 <= day <= 31 and DATE_YEAR_MIN <= year <= DATE_YEAR_MAX):
        raise DateUndecodable(raw)
    try:
        return datetime.date(year, month, day)
    except ValueError as e:
        raise DateUndecodable(raw) from e


def decode_packed_date(raw: bytes) -> str:
    """
    Renders a packed date as DD-MM-YYYY.

    An invalid date is returned as the undecodable marker followed by the raw
    bytes in hex, so the caller always gets a string.
    """
    try:
        return parse_packed_date(raw).strftime("%d-%m-%Y")
    except DateUndecodable as e:
        logger.debug("Packed date fallback: %s", e)
        return DATE_UNDECODABLE_PREFIX + e.raw_hex


def is_undecodable_date(text: str) -> bool:
    return text.startswith(DATE_UNDECODABLE_PREFIX)


def _is_usable(text: str) -> bool:
    return bool(text) and "\ufffd" not in text


def _is_clean(text: str) -> bool:
    if not _is_usable(text):
        return False
    return not any(unicodedata.category(c) == "Cc" and c not in "\t\r\n" for c in text)


def _utf8_walk(raw: bytes) -> str:
    """Decodes valid UTF-8 sequences and maps every other byte as Latin-1."""
    chars = []
    i = 0
    while i < len(raw):
        lead = raw[i]
        if lead < 0x80:
            size = 1
        elif 0xC2 <= lead <= 0xDF:
            size = 2
        elif 0xE0 <= lead <= 0xEF:
            size = 3
        elif 0xF0 <= lead <= 0xF4:
            size = 4
        else:
            size = 0

        if size:
            try:
                chars.append(raw[i:i + size].decode("utf-8"))
                i += size
                continue
            except UnicodeDecodeError:
                pass
        chars.append(chr(lead))
        i += 1
    return "".join(chars)


def _printable_ascii(raw: bytes) -> str:
    return "".join(chr(b) if 0x20 <= b <= 0x7E else "." for b in raw)


def decode_text_with_codec(raw: bytes) -> Tuple[str, str]:
    """
    Decodes free text through an ordered fallback chain.

    Strict UTF-8 is taken whenever it decodes. The repair and Latin-1 stages
    are only taken when the result has no control characters besides tab,
    CR and LF.

    Returns:
        A ``(text, codec)`` tuple. ``codec`` is one of ``"utf-8"``,
        ``"utf-8-walk"``, ``"latin-1"``, ``"ascii"``, ``"hex"`` or ``"empty"``.
    """
    if not raw:
        return "", "empty"

    try:
        text = raw.decode("utf-8")
        if _is_usable(text):
            return text, "utf-8"
    except UnicodeDecodeError:
        pass

    text = _utf8_walk(raw)
    if _is_clean(text):
        return text, "utf-8-walk"

    text = raw.decode("latin-1")
    if _is_clean(text):
        return text, "latin-1"

    text = _printable_ascii(raw)
    if text.strip("."):
        return text, "ascii"

    return raw.hex().upper(), "hex"


def decode_text(raw: bytes) -> str:
    return decode_text_with_codec(raw)[0]
