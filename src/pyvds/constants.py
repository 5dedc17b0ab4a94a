"""
This module contains constants used throughout the pyvds library,
including header bytes, payload tags, and label tables.
"""

# Header
MAGIC_CONSTANT = 0xDC
MIN_HEADER_LENGTH = 12

# Version bytes whose header carries a C40-packed signer block
PACKED_SIGNER_VERSIONS = (0x02, 0x03)

# Signer block: 2 chars country, 2 chars entity, 2 hex chars certificate size
SIGNER_PREFIX_CHARS = 6
SIGNER_INITIAL_BYTES = 4

# Payload tags
TAG_DOCUMENT_NUMBER = 0x40
TAG_DATE_OF_BIRTH = 0x42
TAG_NAME = 0x44
TAG_SURNAMES = 0x46
TAG_SEX = 0x48
TAG_NATIONALITY = 0x4A
TAG_EXPIRY_DATE = 0x4C
TAG_BIRTH_PLACE = 0x4E
TAG_PORTRAIT = 0x50
TAG_ADDRESS_LINE_1 = 0x52
TAG_ADDRESS_LINE_2 = 0x54
TAG_ADDRESS_LINE_3 = 0x56
TAG_PARENTAGE = 0x58
TAG_IS_ADULT = 0x5A

# Signature marker
SIGNATURE_TAG = 0xFF

# DER lengths
DER_MAX_LENGTH_OCTETS = 4

# C40 basic set; positions 0-2 are shift codes
C40_ALPHABET = "\x00\x00\x00 0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
C40_FIRST_CHAR = 3
C40_SINGLE_CHAR_MARKER = 0xFE

# Packed dates
DATE_YEAR_MIN = 1900
DATE_YEAR_MAX = 2100
DATE_UNDECODABLE_PREFIX = "undecodable:"

# Document type labels
DOC_TYPE_LABELS = {
    7: "simple",
    8: "full",
    9: "age-verification-only",
}
DOC_TYPE_UNKNOWN = "unknown"

# Portrait containers, checked in order
IMAGE_SIGNATURES = (
    ("JPEG2000", b"\x00\x00\x00\x0C\x6A\x50\x20\x20\x0D\x0A\x87\x0A"),
    ("JPEG2000", b"\xFF\x4F\xFF\x51"),
    ("JPEG", b"\xFF\xD8\xFF"),
    ("PNG", b"\x89PNG\r\n\x1A\n"),
)
IMAGE_UNKNOWN = "unknown"
