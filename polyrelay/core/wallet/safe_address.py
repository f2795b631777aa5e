"""Deterministic Safe address derivation (CREATE2 through the proxy factory)."""

import logging
from typing import Any, Dict, Optional

from eth_abi import encode
from web3 import Web3

from polyrelay.config.constants import SAFE_INIT_CODE_HASH, SAFE_SETUP_SIGNATURE, ZERO_ADDRESS
from polyrelay.config.contracts import ChainRegistry, ContractConfig, default_registry
from polyrelay.utils.validators import normalize_address

logger = logging.getLogger(__name__)

SETUP_SELECTOR = bytes(Web3.keccak(text=SAFE_SETUP_SIGNATURE)[:4])


def build_initializer(owner: str, contracts: ContractConfig) -> bytes:
    """
    Calldata for Safe ``setup`` with a single owner and threshold 1.

    No module call, no payment, fallback handler from ``contracts``.
    """
    owner = normalize_address(owner, "owner")
    args = encode(
        ["address[]", "uint256", "address", "bytes", "address", "address", "uint256", "address"],
        [
            [owner],
            1,
            ZERO_ADDRESS,
            b"",
            Web3.to_checksum_address(contracts.safe_fallback_handler),
            ZERO_ADDRESS,
            0,
            ZERO_ADDRESS,
        ],
    )
    return SETUP_SELECTOR + args


def derive_wallet_address(
    owner: str,
    chain_id: int,
    registry: Optional[ChainRegistry] = None,
) -> str:
    """
    Derive the Safe address for an owner using CREATE2.

    The Safe address is deterministic: same owner and factory always give the
    same Safe.

    Args:
        owner: EOA (signer) address
        chain_id: Chain to look the factory up for
        registry: Contract registry (defaults to Polygon + Amoy)

    Returns:
        Checksummed Safe wallet address

    Raises:
        UnsupportedChainError: chain not in the registry
    """
    registry = registry or default_registry()
    contracts = registry.get(chain_id)
    owner = normalize_address(owner, "owner")

    # Salt = keccak256(abi.encode(owner)), address left-padded to 32 bytes
    padded_owner = bytes.fromhex(owner[2:]).rjust(32, b"\x00")
    salt = Web3.keccak(padded_owner)

    # CREATE2: keccak256(0xff ++ factory ++ salt ++ init_code_hash)[12:]
    create2_input = (
        b"\xff"
        + bytes.fromhex(contracts.safe_factory[2:])
        + salt
        + bytes.fromhex(SAFE_INIT_CODE_HASH[2:])
    )
    full_hash = Web3.keccak(create2_input)
    return Web3.to_checksum_address(full_hash[12:])


def verify_wallet_address(
    owner: str,
    expected: str,
    chain_id: int,
    registry: Optional[ChainRegistry] = None,
) -> bool:
    expected = normalize_address(expected, "expected wallet address")
    return derive_wallet_address(owner, chain_id, registry) == expected


def get_deployment_data(
    owner: str,
    chain_id: int,
    registry: Optional[ChainRegistry] = None,
) -> Dict[str, Any]:
    """Everything needed to inspect or reproduce a Safe deployment for ``owner``."""
    registry = registry or default_registry()
    contracts = registry.get(chain_id)
    owner = normalize_address(owner, "owner")

    return {
        "safeAddress": derive_wallet_address(owner, chain_id, registry),
        "signerAddress": owner,
        "factory": contracts.safe_factory,
        "singleton": contracts.safe_singleton,
        "fallbackHandler": contracts.safe_fallback_handler,
        "initializer": "0x" + build_initializer(owner, contracts).hex(),
        "chainId": chain_id,
    }


class SafeAddressDeriver:
    """Derivation bound to one registry."""

    def __init__(self, registry: Optional[ChainRegistry] = None):
        self.registry = registry or default_registry()

    def derive(self, owner: str, chain_id: int) -> str:
        return derive_wallet_address(owner, chain_id, self.registry)

    def verify(self, owner: str, expected: str, chain_id: int) -> bool:
        return verify_wallet_address(owner, expected, chain_id, self.registry)

    def initializer(self, owner: str, chain_id: int) -> bytes:
        return build_initializer(owner, self.registry.get(chain_id))

    def deployment_data(self, owner: str, chain_id: int) -> Dict[str, Any]:
        return get_deployment_data(owner, chain_id, self.registry)
