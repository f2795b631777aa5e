"""Input validation and normalization helpers."""

import re
from typing import Optional, Union

from eth_utils import to_checksum_address

from polyrelay.core.errors import InvalidInputError

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
HEX_PATTERN = re.compile(r"^(0x)?([a-fA-F0-9]{2})*$")

UINT256_MAX = 2**256 - 1


def validate_address(address: str) -> Optional[str]:
    """
    Validate Ethereum/Polygon address.

    Args:
        address: Address string

    Returns:
        Validated address (lowercase) or None if invalid
    """
    if not isinstance(address, str):
        return None

    address = address.strip()

    if not ADDRESS_PATTERN.match(address):
        return None

    return address.lower()


def normalize_address(address: Union[str, bytes], field: str = "address") -> str:
    """
    Return the checksummed form of an address.

    Raises:
        InvalidInputError: not a 20-byte address
    """
    if isinstance(address, (bytes, bytearray)):
        if len(address) != 20:
            raise InvalidInputError(f"{field}: expected 20 bytes, got {len(address)}")
        return to_checksum_address(bytes(address))

    if validate_address(address) is None:
        raise InvalidInputError(f"{field}: invalid address {address!r}")
    return to_checksum_address(address.strip())


def parse_uint(value: Union[int, str], field: str = "value", bits: int = 256) -> int:
    """
    Parse an unsigned integer given as int, decimal string or 0x-hex string.

    Raises:
        InvalidInputError: not an integer, negative, or wider than ``bits``
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"{field}: expected integer, got bool")

    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            number = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError:
            raise InvalidInputError(f"{field}: not an integer: {value!r}") from None
    else:
        raise InvalidInputError(f"{field}: expected int or str, got {type(value).__name__}")

    if number < 0 or number >= 2**bits:
        raise InvalidInputError(f"{field}: {number} out of range for uint{bits}")
    return number


def hex_to_bytes(data: Union[str, bytes, None], field: str = "data") -> bytes:
    """Decode ``0x``-prefixed (or bare) hex; bytes pass through. Empty and None mean b''."""
    if data is None:
        return b""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if not isinstance(data, str) or not HEX_PATTERN.match(data.strip()):
        raise InvalidInputError(f"{field}: invalid hex data {data!r}")

    text = data.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    return bytes.fromhex(text)


def bytes_to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()
