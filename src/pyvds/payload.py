"""
This module reads the TLV records that follow the header and turns them into
the document fields.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .constants import (
    IMAGE_SIGNATURES,
    IMAGE_UNKNOWN,
    SIGNATURE_TAG,
    TAG_ADDRESS_LINE_1,
    TAG_ADDRESS_LINE_2,
    TAG_ADDRESS_LINE_3,
    TAG_BIRTH_PLACE,
    TAG_DATE_OF_BIRTH,
    TAG_DOCUMENT_NUMBER,
    TAG_EXPIRY_DATE,
    TAG_IS_ADULT,
    TAG_NAME,
    TAG_NATIONALITY,
    TAG_PARENTAGE,
    TAG_PORTRAIT,
    TAG_SEX,
    TAG_SURNAMES,
)
from .cursor import ByteCursor
from .diagnostics import DiagnosticLog
from .exceptions import InvalidLength
from .primitives import decode_der_length, decode_packed_date, decode_text_with_codec, is_undecodable_date


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TlvRecord:
    tag: int
    length: int
    value: bytes


@dataclass(frozen=True)
class UnknownField:
    """
    A record whose tag has no known meaning, kept so nothing is lost.
    """
    tag: str
    length: int
    value: str

    @classmethod
    def from_record(cls, record: TlvRecord) -> "UnknownField":
        return cls(tag=f"0x{record.tag:02x}", length=record.length, value=record.value.hex().upper())

    def as_dict(self) -> dict:
        return {"tag": self.tag, "length": self.length, "value": self.value}


@dataclass(frozen=True)
class PortraitImage:
    format: str
    length: int
    data: bytes

    @property
    def description(self) -> str:
        return f"{self.format} Image ({self.length} bytes)"

    def as_dict(self) -> dict:
        return {
            "format": self.format,
            "length": self.length,
            "description": self.description,
            "data": self.data.hex().upper(),
        }


@dataclass(frozen=True)
class Payload:
    """
    The document fields carried in the seal.

    Every field is optional; absent tags leave the field as None. Records
    with unrecognised tags are listed in ``unknown``.
    """
    document_number: Optional[str] = None
    name: Optional[str] = None
    surnames: Optional[str] = None
    sex: Optional[str] = None
    date_of_birth: Optional[str] = None
    expiry_date: Optional[str] = None
    nationality: Optional[str] = None
    birth_place: Optional[str] = None
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    address_line_3: Optional[str] = None
    parentage: Optional[str] = None
    is_adult: Optional[bool] = None
    portrait: Optional[PortraitImage] = None
    unknown: Tuple[UnknownField, ...] = field(default_factory=tuple)

    @property
    def address_lines(self) -> List[str]:
        lines = (self.address_line_1, self.address_line_2, self.address_line_3)
        return [line for line in lines if line is not None]

    def as_dict(self) -> dict:
        data = {}
        for name in _FIELD_NAMES:
            value = getattr(self, name)
            if value is None:
                continue
            data[name] = value.as_dict() if isinstance(value, PortraitImage) else value
        if self.unknown:
            data["unknown"] = [item.as_dict() for item in self.unknown]
        return data


def sniff_image_format(data: bytes) -> str:
    """
    Labels image bytes by their container signature without decoding them.
    """
    for label, signature in IMAGE_SIGNATURES:
        if data.startswith(signature):
            return label
    if data[0:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "WebP"
    return IMAGE_UNKNOWN


class _MalformedField(Exception):
    """Raised by a field decoder when the value cannot be used for its tag."""


def _decode_text_field(name: str, value: bytes, diagnostics: DiagnosticLog):
    text, codec = decode_text_with_codec(value)
    if codec not in ("utf-8", "empty"):
        diagnostics.emit("text-fallback", name, codec)
    return text


def _decode_date_field(name: str, value: bytes, diagnostics: DiagnosticLog):
    # 3-byte values are packed dates; anything else is a printed date.
    if len(value) != 3:
        return _decode_text_field(name, value, diagnostics)
    text = decode_packed_date(value)
    if is_undecodable_date(text):
        diagnostics.emit("date-undecodable", name, text)
    return text


def _decode_boolean_field(name: str, value: bytes, diagnostics: DiagnosticLog):
    if len(value) != 1:
        raise _MalformedField(f"expected 1 byte, got {len(value)}")
    return value not in (b"\x00", b"0", b"N")


def _decode_portrait_field(name: str, value: bytes, diagnostics: DiagnosticLog):
    image_format = sniff_image_format(value)
    if image_format == IMAGE_UNKNOWN:
        diagnostics.emit("image-format-unknown", name, value[:4].hex().upper())
    return PortraitImage(format=image_format, length=len(value), data=value)


FieldDecoder = Callable[[str, bytes, DiagnosticLog], object]

FIELD_DECODERS: Dict[int, Tuple[str, FieldDecoder]] = {
    TAG_DOCUMENT_NUMBER: ("document_number", _decode_text_field),
    TAG_DATE_OF_BIRTH: ("date_of_birth", _decode_date_field),
    TAG_NAME: ("name", _decode_text_field),
    TAG_SURNAMES: ("surnames", _decode_text_field),
    TAG_SEX: ("sex", _decode_text_field),
    TAG_NATIONALITY: ("nationality", _decode_text_field),
    TAG_EXPIRY_DATE: ("expiry_date", _decode_date_field),
    TAG_BIRTH_PLACE: ("birth_place", _decode_text_field),
    TAG_PORTRAIT: ("portrait", _decode_portrait_field),
    TAG_ADDRESS_LINE_1: ("address_line_1", _decode_text_field),
    TAG_ADDRESS_LINE_2: ("address_line_2", _decode_text_field),
    TAG_ADDRESS_LINE_3: ("address_line_3", _decode_text_field),
    TAG_PARENTAGE: ("parentage", _decode_text_field),
    TAG_IS_ADULT: ("is_adult", _decode_boolean_field),
}

_FIELD_NAMES = [name for name, _ in FIELD_DECODERS.values()]


def read_records(cursor: ByteCursor, signature_tag: int = SIGNATURE_TAG,
                 diagnostics: Optional[DiagnosticLog] = None) -> Tuple[List[TlvRecord], bool]:
    """
    Reads TLV records until the buffer runs out or the signature tag is seen.

    The signature tag is left unread so the signature can be read next. A
    record with a malformed or overlong length ends the loop; everything read
    before it is kept.

    Returns:
        A ``(records, truncated)`` tuple. ``truncated`` is True when the loop
        stopped on a bad length rather than at a clean boundary.
    """
    if diagnostics is None:
        diagnostics = DiagnosticLog()

    records: List[TlvRecord] = []
    truncated = False
    while cursor.remaining() >= 2:
        tag = cursor.read_byte()
        if tag == signature_tag:
            cursor.rewind()
            break

        try:
            length = decode_der_length(cursor)
        except InvalidLength as e:
            logger.warning("Payload truncated at tag 0x%02X: %s", tag, e)
            diagnostics.emit("invalid-length", f"0x{tag:02x}", str(e))
            truncated = True
            break

        value = cursor.read_bytes(length)
        logger.debug("TLV tag=0x%02X length=%d", tag, length)
        records.append(TlvRecord(tag, length, value))

    if not truncated and cursor.remaining() == 1 and cursor.peek() != signature_tag:
        diagnostics.emit("trailing-byte", None, f"0x{cursor.peek():02X}")

    return records, truncated


def build_payload(records: List[TlvRecord], diagnostics: Optional[DiagnosticLog] = None) -> Payload:
    """
    Decodes each record with the decoder registered for its tag.

    A repeated tag overwrites the earlier value. Unknown tags, and known tags
    whose value does not fit the field, are kept in ``Payload.unknown``.
    """
    if diagnostics is None:
        diagnostics = DiagnosticLog()

    fields: Dict[str, object] = {}
    unknown: List[UnknownField] = []
    for record in records:
        entry = FIELD_DECODERS.get(record.tag)
        if entry is None:
            unknown.append(UnknownField.from_record(record))
            continue

        name, decoder = entry
        try:
            value = decoder(name, record.value, diagnostics)
        except _MalformedField as e:
            diagnostics.emit("malformed-field", name, str(e))
            unknown.append(UnknownField.from_record(record))
            continue

        if name in fields:
            diagnostics.emit("duplicate-tag", name, f"0x{record.tag:02x}")
        fields[name] = value

    return Payload(unknown=tuple(unknown), **fields)
