from .formatters import format_address, format_tx_hash
from .validators import (
    validate_address,
    normalize_address,
    parse_uint,
    hex_to_bytes,
    bytes_to_hex,
)

__all__ = [
    "format_address",
    "format_tx_hash",
    "validate_address",
    "normalize_address",
    "parse_uint",
    "hex_to_bytes",
    "bytes_to_hex",
]
