"""
This module ties the header, payload and signature parsers into a single
decode call.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .constants import SIGNATURE_TAG
from .cursor import ByteCursor
from .diagnostics import DecodeStage, Diagnostic, DiagnosticLog
from .exceptions import VDSError
from .header import Header, HeaderFormat, parse_header
from .payload import Payload, build_payload, read_records
from .signature import Signature, read_signature


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeResult:
    """
    Everything decoded from one scanned seal.

    ``truncated`` is True when the payload ended on a malformed record; the
    fields read before it are still present.
    """
    header: Header
    payload: Payload
    signature: Optional[Signature]
    raw: bytes = field(repr=False)
    truncated: bool = False
    diagnostics: Tuple[Diagnostic, ...] = ()

    def as_dict(self) -> dict:
        return {
            "header": self.header.as_dict(),
            "payload": self.payload.as_dict(),
            "signature": self.signature.as_dict() if self.signature else None,
            "truncated": self.truncated,
            "diagnostics": [d.as_dict() for d in self.diagnostics],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.as_dict(), indent=indent, ensure_ascii=False)


def decode(data: Union[bytes, bytearray, memoryview], *,
           header_format: Optional[HeaderFormat] = None,
           signature_tag: int = SIGNATURE_TAG,
           trailing_record_signature: bool = False) -> DecodeResult:
    """
    Decodes the payload bytes of a scanned seal.

    Args:
        data: The raw bytes recovered from the QR symbol.
        header_format: Forces a header layout instead of choosing it from the
                       version byte.
        signature_tag: The tag that marks the signature record.
        trailing_record_signature: If no record carries the signature tag, treat
                                   the last payload record as the signature.

    Returns:
        A DecodeResult. Problems inside the payload are reported through
        ``truncated`` and ``diagnostics`` rather than raised.

    Raises:
        TypeError: If ``data`` is text rather than bytes.
        BufferTooShort: If the buffer cannot hold the header.
        InvalidSignerBlock: If the signer identifier cannot be parsed.
    """
    if isinstance(data, str):
        raise TypeError("decode() needs the raw payload bytes, not decoded text")

    raw = bytes(data)
    cursor = ByteCursor(raw)
    diagnostics = DiagnosticLog()

    try:
        header = parse_header(cursor, header_format, diagnostics)
    except VDSError as e:
        logger.warning(f"Header decoding failed: {e}")
        raise

    diagnostics.enter(DecodeStage.READING_PAYLOAD)
    records, truncated = read_records(cursor, signature_tag, diagnostics)
    tagged_signature = not truncated and cursor.remaining() >= 2 and cursor.peek() == signature_tag

    trailing = None
    if trailing_record_signature and not truncated and not tagged_signature and records:
        trailing = records.pop()
        diagnostics.emit("trailing-record-signature", None, f"0x{trailing.tag:02x}")
    payload = build_payload(records, diagnostics)

    diagnostics.enter(DecodeStage.READING_SIGNATURE)
    signature = None
    if trailing is not None:
        signature = Signature(trailing.tag, trailing.length, trailing.value)
    elif tagged_signature:
        signature = read_signature(cursor, signature_tag)
        if signature is None:
            diagnostics.emit("invalid-signature", None, "signature record is malformed")

    diagnostics.enter(DecodeStage.DONE)
    logger.info(
        "Decoded seal: %d bytes, %d records, signature %s%s",
        len(raw), len(records), "present" if signature else "absent",
        ", truncated" if truncated else "",
    )
    return DecodeResult(
        header=header,
        payload=payload,
        signature=signature,
        raw=raw,
        truncated=truncated,
        diagnostics=diagnostics.events,
    )
