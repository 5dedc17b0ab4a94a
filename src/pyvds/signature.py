"""
This module extracts the signature record that closes the seal.

The signature is kept as raw bytes; it is never verified here.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from pyasn1.codec.der import encoder as der_encoder
from pyasn1.type import namedtype, univ

from .constants import SIGNATURE_TAG
from .cursor import ByteCursor
from .exceptions import InvalidLength
from .primitives import decode_der_length


logger = logging.getLogger(__name__)


class EcdsaSigValue(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('r', univ.Integer()),
        namedtype.NamedType('s', univ.Integer())
    )


@dataclass(frozen=True)
class Signature:
    tag: int
    length: int
    value: bytes

    @property
    def hex(self) -> str:
        return self.value.hex().upper()

    def to_der(self) -> bytes:
        """
        Converts the raw ``r || s`` signature into a DER ECDSA-Sig-Value.

        Seals store ECDSA signatures as two equal-length big-endian integers
        back to back, while most crypto libraries expect the DER structure.

        Raises:
            ValueError: If the value is empty or has an odd length.
        """
        if not self.value or len(self.value) % 2:
            raise ValueError(f"Signature of {len(self.value)} bytes is not a raw r || s pair")

        half = len(self.value) // 2
        sig_value = EcdsaSigValue()
        sig_value.setComponentByName('r', univ.Integer(int.from_bytes(self.value[:half], "big")))
        sig_value.setComponentByName('s', univ.Integer(int.from_bytes(self.value[half:], "big")))
        return der_encoder.encode(sig_value)

    def as_dict(self) -> dict:
        return {"tag": self.tag, "length": self.length, "value": self.hex}


def read_signature(cursor: ByteCursor, signature_tag: int = SIGNATURE_TAG) -> Optional[Signature]:
    """
    Reads the signature record at the cursor.

    Returns:
        The Signature, or None if the next record is not a well-formed
        signature record.
    """
    if cursor.remaining() < 2 or cursor.peek() != signature_tag:
        return None

    tag = cursor.read_byte()
    try:
        length = decode_der_length(cursor)
    except InvalidLength as e:
        logger.warning("Ignoring malformed signature record: %s", e)
        return None

    return Signature(tag, length, cursor.read_bytes(length))
