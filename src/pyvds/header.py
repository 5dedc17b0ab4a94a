"""
This module parses the seal header that precedes the TLV payload.

Two header layouts exist across format revisions. The simple layout stores the
issuing country and signer identifier as plain ASCII pairs followed by a
decimal certificate size and the raw certificate reference. The packed layout
stores the country and the whole signer block as C40 text, with the
certificate reference size embedded as two hex digits inside the block.
"""
import enum
import logging
import string
from dataclasses import dataclass
from typing import Optional

from .constants import (
    DOC_TYPE_LABELS,
    DOC_TYPE_UNKNOWN,
    MAGIC_CONSTANT,
    MIN_HEADER_LENGTH,
    PACKED_SIGNER_VERSIONS,
    SIGNER_INITIAL_BYTES,
    SIGNER_PREFIX_CHARS,
)
from .cursor import ByteCursor
from .diagnostics import DiagnosticLog
from .exceptions import BufferTooShort, BufferUnderrun, InvalidSignerBlock
from .primitives import decode_c40, decode_packed_date, is_undecodable_date


logger = logging.getLogger(__name__)


class HeaderFormat(enum.Enum):
    SIMPLE = "simple"
    PACKED_SIGNER = "packed-signer"

    @classmethod
    def for_version(cls, version: int) -> "HeaderFormat":
        if version in PACKED_SIGNER_VERSIONS:
            return cls.PACKED_SIGNER
        return cls.SIMPLE


@dataclass(frozen=True)
class SignerId:
    country: str
    entity: str
    cert_ref: str

    def __str__(self) -> str:
        return f"{self.country}{self.entity}"

    def as_dict(self) -> dict:
        return {"country": self.country, "entity": self.entity, "cert_ref": self.cert_ref}


@dataclass(frozen=True)
class Header:
    """
    The decoded seal header.

    ``issue_date`` and ``sign_date`` are DD-MM-YYYY strings, or the
    undecodable marker when the packed bytes are not a valid date.
    ``length`` is the number of bytes the header occupied.
    """
    magic: int
    version: int
    header_format: HeaderFormat
    country: str
    signer: SignerId
    issue_date: str
    sign_date: str
    doc_type: int
    doc_category: int
    length: int

    @property
    def doc_type_label(self) -> str:
        return DOC_TYPE_LABELS.get(self.doc_type, DOC_TYPE_UNKNOWN)

    @property
    def doc_category_label(self) -> str:
        return f"category {self.doc_category}"

    def as_dict(self) -> dict:
        return {
            "magic": self.magic,
            "version": self.version,
            "header_format": self.header_format.value,
            "country": self.country,
            "signer": self.signer.as_dict(),
            "issue_date": self.issue_date,
            "sign_date": self.sign_date,
            "doc_type": self.doc_type,
            "doc_type_label": self.doc_type_label,
            "doc_category": self.doc_category,
            "doc_category_label": self.doc_category_label,
        }


def _read_ascii(cursor: ByteCursor, n: int) -> str:
    return cursor.read_bytes(n).decode("latin-1")


def _read_simple_signer(cursor: ByteCursor) -> SignerId:
    signer_country = _read_ascii(cursor, 2)
    signer_entity = _read_ascii(cursor, 2)
    size_text = _read_ascii(cursor, 2)
    if not size_text.isdecimal():
        raise InvalidSignerBlock("Invalid certificate reference size", size_text)

    cert_ref = cursor.read_bytes(int(size_text)).hex().upper()
    return SignerId(signer_country, signer_entity, cert_ref)


def _read_packed_signer(cursor: ByteCursor) -> SignerId:
    """
    Reads the C40 signer block.

    The first four bytes always hold the signer country, entity and the
    two-hex-digit certificate reference size. The block then grows to fit
    the certificate reference, rounded up to a whole C40 group.
    """
    block = cursor.read_bytes(SIGNER_INITIAL_BYTES)
    text = decode_c40(block, strip=False)
    if len(text) < SIGNER_PREFIX_CHARS:
        raise InvalidSignerBlock("Signer block is too short", text)

    size_text = text[SIGNER_PREFIX_CHARS - 2:SIGNER_PREFIX_CHARS]
    if any(c not in string.hexdigits for c in size_text):
        raise InvalidSignerBlock("Invalid certificate reference size", text)
    cert_size = int(size_text, 16)

    total_chars = SIGNER_PREFIX_CHARS + cert_size
    total_bytes = (total_chars + 2) // 3 * 2
    if total_bytes > len(block):
        block += cursor.read_bytes(total_bytes - len(block))
        text = decode_c40(block, strip=False)
    if len(text) < total_chars:
        raise InvalidSignerBlock(f"Signer block holds fewer than {total_chars} characters", text)

    return SignerId(text[0:2], text[2:4], text[SIGNER_PREFIX_CHARS:total_chars])


def parse_header(cursor: ByteCursor, header_format: Optional[HeaderFormat] = None,
                 diagnostics: Optional[DiagnosticLog] = None) -> Header:
    """
    Parses the header at the cursor.

    Args:
        cursor: A cursor positioned at the magic byte.
        header_format: Forces a header layout. If None, the layout is chosen
                       from the version byte.
        diagnostics: Receives non-fatal observations.

    Returns:
        The parsed Header. The cursor is left at the first payload byte.

    Raises:
        BufferTooShort: If the buffer ends before the header does.
        InvalidSignerBlock: If the signer identifier cannot be parsed.
    """
    if diagnostics is None:
        diagnostics = DiagnosticLog()

    if cursor.remaining() < MIN_HEADER_LENGTH:
        raise BufferTooShort(cursor.remaining(), MIN_HEADER_LENGTH)

    start = cursor.offset
    try:
        magic = cursor.read_byte()
        version = cursor.read_byte()
        if magic != MAGIC_CONSTANT:
            diagnostics.emit("unexpected-magic", "magic", f"0x{magic:02X}")

        if header_format is None:
            header_format = HeaderFormat.for_version(version)
        logger.debug("Header version %d, format %s", version, header_format.value)

        if header_format is HeaderFormat.PACKED_SIGNER:
            country = decode_c40(cursor.read_bytes(2))
            signer = _read_packed_signer(cursor)
        else:
            country = _read_ascii(cursor, 2)
            signer = _read_simple_signer(cursor)

        dates = {}
        for name in ("issue_date", "sign_date"):
            dates[name] = decode_packed_date(cursor.read_bytes(3))
            if is_undecodable_date(dates[name]):
                diagnostics.emit("date-undecodable", name, dates[name])

        doc_type = cursor.read_byte()
        doc_category = cursor.read_byte()
    except BufferUnderrun as e:
        raise BufferTooShort(len(cursor.buffer), e.offset + e.requested) from e

    return Header(
        magic=magic,
        version=version,
        header_format=header_format,
        country=country,
        signer=signer,
        issue_date=dates["issue_date"],
        sign_date=dates["sign_date"],
        doc_type=doc_type,
        doc_category=doc_category,
        length=cursor.offset - start,
    )
