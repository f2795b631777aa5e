"""Safe signature packing (r || s || v with v shifted to 31/32)."""

from typing import Tuple, Union

from polyrelay.config.constants import SAFE_SIGNATURE_V_OFFSET
from polyrelay.core.errors import InvalidSignatureError, UnexpectedRecoveryIdError
from polyrelay.utils.validators import hex_to_bytes

_V_MAP = {0: 31, 27: 31, 1: 32, 28: 32}


def split_signature(signature: Union[bytes, str]) -> Tuple[int, int, int]:
    """
    Split a 65-byte signature into (r, s, v).

    Raises:
        InvalidSignatureError: signature is not 65 bytes
    """
    sig = hex_to_bytes(signature, "signature")
    if len(sig) != 65:
        raise InvalidSignatureError(f"signature must be 65 bytes, got {len(sig)}")
    return int.from_bytes(sig[:32], "big"), int.from_bytes(sig[32:64], "big"), sig[64]


def normalize_v(v: int) -> int:
    """
    Map a raw recovery id to the Safe "eth_sign" marker.

    0/27 -> 31, 1/28 -> 32. Anything else is rejected.
    """
    try:
        return _V_MAP[v]
    except KeyError:
        raise UnexpectedRecoveryIdError(v) from None


def split_and_pack_signature(signature: Union[bytes, str]) -> str:
    """
    Pack a raw ECDSA signature into the Safe format.

    Args:
        signature: 65-byte r || s || v, v in {0, 1, 27, 28}

    Returns:
        Hex-encoded packed signature
    """
    r, s, v = split_signature(signature)
    packed = r.to_bytes(32, "big") + s.to_bytes(32, "big") + bytes([normalize_v(v)])
    return "0x" + packed.hex()


def unpack_signature(packed: Union[bytes, str]) -> bytes:
    """Turn a packed Safe signature back into r || s || v with v in {27, 28}."""
    r, s, v = split_signature(packed)
    if v not in (31, 32):
        raise UnexpectedRecoveryIdError(v)
    return r.to_bytes(32, "big") + s.to_bytes(32, "big") + bytes([v - SAFE_SIGNATURE_V_OFFSET])
