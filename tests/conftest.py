import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from pyvds.primitives import encode_c40


def pack_date(day, month, year):
    """Packs a date the way seals store it: MMDDYYYY as a 3-byte integer."""
    return int(f"{month:02d}{day:02d}{year:04d}").to_bytes(3, "big")


def tlv(tag, value):
    """Encodes one TLV record with a DER length."""
    n = len(value)
    if n < 0x80:
        length = bytes([n])
    else:
        octets = n.to_bytes((n.bit_length() + 7) // 8, "big")
        length = bytes([0x80 | len(octets)]) + octets
    return bytes([tag]) + length + value


@pytest.fixture(scope="session")
def ec_key():
    """Generates a P-521 key, whose raw signatures need a long-form length."""
    return ec.generate_private_key(ec.SECP521R1())


@pytest.fixture
def make_simple_header():
    """Builds a header in the simple ASCII layout."""
    def _make(version=0x01, country=b"ES", signer=b"ESPE", cert_ref=b"\x12\x34\x56\x78",
              issue_date=None, sign_date=None, doc_type=7, doc_category=9, magic=0xDC):
        return (
            bytes([magic, version]) + country + signer
            + f"{len(cert_ref):02d}".encode("ascii") + cert_ref
            + (issue_date if issue_date is not None else pack_date(1, 3, 2021))
            + (sign_date if sign_date is not None else pack_date(2, 3, 2021))
            + bytes([doc_type, doc_category])
        )
    return _make


@pytest.fixture
def make_packed_header():
    """Builds a header in the C40 packed-signer layout."""
    def _make(version=0x03, country="ES", signer="ESPE", cert_ref="A1B2C",
              issue_date=None, sign_date=None, doc_type=8, doc_category=1):
        signer_block = encode_c40(f"{signer}{len(cert_ref):02X}{cert_ref}")
        return (
            bytes([0xDC, version]) + encode_c40(country) + signer_block
            + (issue_date if issue_date is not None else pack_date(15, 6, 2022))
            + (sign_date if sign_date is not None else pack_date(16, 6, 2022))
            + bytes([doc_type, doc_category])
        )
    return _make
