"""ECDSA signing over 32-byte digests for Safe transactions."""

import logging
from typing import Union

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_hash.auto import keccak
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from polyrelay.config.constants import ETH_MESSAGE_PREFIX
from polyrelay.core.errors import InvalidInputError, InvalidSignatureError, SigningError
from polyrelay.utils.validators import hex_to_bytes, validate_address

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, str]


def _digest_bytes(digest: BytesLike) -> bytes:
    digest = hex_to_bytes(digest, "digest")
    if len(digest) != 32:
        raise InvalidInputError(f"digest must be 32 bytes, got {len(digest)}")
    return digest


def eth_prefixed_digest(digest: BytesLike) -> bytes:
    """keccak256("\\x19Ethereum Signed Message:\\n32" || digest)."""
    return keccak(ETH_MESSAGE_PREFIX + _digest_bytes(digest))


def recover_address(digest: BytesLike, signature: BytesLike) -> str:
    """
    Recover the checksummed signer address from a 65-byte r||s||v signature.

    ``v`` may be 0/1 or 27/28.

    Raises:
        InvalidSignatureError: wrong length or unrecoverable signature
    """
    digest = _digest_bytes(digest)
    signature = hex_to_bytes(signature, "signature")
    if len(signature) != 65:
        raise InvalidSignatureError(f"signature must be 65 bytes, got {len(signature)}")

    v = signature[64]
    if v >= 27:
        v -= 27

    try:
        sig = keys.Signature(signature_bytes=signature[:64] + bytes([v]))
        public_key = sig.recover_public_key_from_msg_hash(digest)
    except (BadSignature, ValidationError) as e:
        raise InvalidSignatureError(f"could not recover signer: {e}") from e

    return public_key.to_checksum_address()


class Signer:
    """
    Holds one private key and signs digests with it.

    ``sign_raw`` signs the digest as-is (Safe execTransaction).
    ``sign_with_eth_prefix`` signs the EIP-191 personal-message hash of the
    digest (proxy factory CreateProxy).
    """

    def __init__(self, private_key: str, chain_id: int):
        try:
            self._account = Account.from_key(private_key)
        except (ValueError, TypeError):
            raise InvalidInputError("invalid private key") from None
        self.chain_id = chain_id

    def __repr__(self) -> str:
        return f"Signer(address={self.address}, chain_id={self.chain_id})"

    @property
    def address(self) -> str:
        return self._account.address

    def sign_raw(self, digest: BytesLike) -> bytes:
        """
        Sign a 32-byte digest with no prefix.

        Returns:
            65 bytes r || s || v with v in {27, 28}
        """
        digest = _digest_bytes(digest)
        try:
            signed = self._account.unsafe_sign_hash(digest)
        except Exception as e:
            raise SigningError(f"signing failed for {self.address}: {type(e).__name__}") from e
        return bytes(signed.signature)

    def sign_with_eth_prefix(self, digest: BytesLike) -> bytes:
        """Sign keccak256(EIP-191 prefix || digest). Same output shape as sign_raw."""
        signable = encode_defunct(primitive=_digest_bytes(digest))
        try:
            signed = self._account.sign_message(signable)
        except Exception as e:
            raise SigningError(f"signing failed for {self.address}: {type(e).__name__}") from e
        return bytes(signed.signature)

    def recover_address(self, digest: BytesLike, signature: BytesLike) -> str:
        return recover_address(digest, signature)

    def verify(self, digest: BytesLike, signature: BytesLike, expected_address: str) -> bool:
        """True when ``signature`` over ``digest`` recovers to ``expected_address``."""
        expected = validate_address(expected_address)
        if expected is None:
            raise InvalidInputError(f"invalid expected address {expected_address!r}")
        return recover_address(digest, signature).lower() == expected
