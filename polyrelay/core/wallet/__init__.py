from .signer import Signer, eth_prefixed_digest, recover_address
from .safe_address import (
    SafeAddressDeriver,
    build_initializer,
    derive_wallet_address,
    get_deployment_data,
    verify_wallet_address,
)

__all__ = [
    "Signer",
    "eth_prefixed_digest",
    "recover_address",
    "SafeAddressDeriver",
    "build_initializer",
    "derive_wallet_address",
    "get_deployment_data",
    "verify_wallet_address",
]
