# This file initializes the pyvds package.
__version__ = "0.1.0"

from .decoder import DecodeResult, decode
from .exceptions import (
    VDSError,
    BufferUnderrun,
    BufferTooShort,
    HeaderTooShort,
    InvalidSignerBlock,
    InvalidLength,
    DateUndecodable,
)
from .header import Header, HeaderFormat, SignerId
from .payload import Payload, PortraitImage, UnknownField
from .signature import Signature
from .diagnostics import DecodeStage, Diagnostic
from .utilities import to_hex, byte_array_string, hex_dump, detect_format, bytes_from_qr_text
