#!/usr/bin/env python3
import logging
import sys

from pyvds import VDSError, decode, detect_format, hex_dump


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("pyvds.example")

    if len(sys.argv) != 2:
        print(f"Usage: {sys.argv[0]} <hex bytes of the QR payload>")
        sys.exit(2)

    try:
        data = bytes.fromhex(sys.argv[1])
    except ValueError as e:
        logger.error(f"Input is not valid hex: {e}")
        sys.exit(1)

    logger.info("Payload is %d bytes, format: %s", len(data), detect_format(data))

    try:
        result = decode(data)
    except VDSError as e:
        # Header unreadable: show the raw bytes only
        logger.error(f"Could not decode seal: {e}")
        print(hex_dump(data))
        sys.exit(1)

    print(result.to_json())
    for diagnostic in result.diagnostics:
        logger.warning("%s: %s %s", diagnostic.event, diagnostic.field or "", diagnostic.detail)


if __name__ == "__main__":
    main()
