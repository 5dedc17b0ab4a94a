"""
Custom exceptions for the pyvds library.
"""
from typing import Optional


class VDSError(Exception):
    """Base exception class for all pyvds errors."""
    pass


class BufferUnderrun(VDSError):
    """
    Raised when a read needs more bytes than remain in the buffer.
    """
    def __init__(self, offset: int, requested: int, remaining: int):
        self.offset = offset
        self.requested = requested
        self.remaining = remaining
        super().__init__(
            f"Read of {requested} bytes at offset {offset} exceeds buffer ({remaining} remaining)"
        )


class BufferTooShort(VDSError):
    """
    Raised when the buffer cannot hold a complete header.
    """
    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"QR data too short to be a valid ICAO 9303 seal ({length} bytes, need at least {minimum})"
        )


HeaderTooShort = BufferTooShort


class InvalidSignerBlock(VDSError):
    """
    Raised when the signer identifier and certificate reference cannot be parsed.
    """
    def __init__(self, message: str, text: Optional[str] = None):
        self.text = text
        if text is not None:
            message = f"{message} (decoded: {text!r})"
        super().__init__(message)


class InvalidLength(VDSError):
    """
    Raised for a malformed DER length or one that overruns the buffer.
    """
    def __init__(self, message: str, offset: Optional[int] = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} at offset {offset}"
        super().__init__(message)


class DateUndecodable(VDSError):
    """
    Raised when a packed date does not resolve to a calendar date.
    """
    def __init__(self, raw: bytes):
        self.raw = bytes(raw)
        self.raw_hex = self.raw.hex().upper()
        super().__init__(f"Packed date {self.raw_hex} is not a valid date")
