"""Per-chain Safe contract addresses."""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List

from polyrelay.config.constants import AMOY_CHAIN_ID, POLYGON_CHAIN_ID
from polyrelay.core.errors import InvalidInputError, UnsupportedChainError
from polyrelay.utils.validators import normalize_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractConfig:
    """Safe factory, singleton, fallback handler and multisend for one chain."""

    chain_id: int
    safe_factory: str
    safe_singleton: str
    safe_fallback_handler: str
    safe_multisend: str

    def validate(self) -> None:
        """
        Check that the config is usable.

        Raises:
            InvalidInputError: non-positive chain id or an empty/invalid address
        """
        if not isinstance(self.chain_id, int) or self.chain_id <= 0:
            raise InvalidInputError(f"chain_id must be positive, got {self.chain_id!r}")

        for field in ("safe_factory", "safe_singleton", "safe_fallback_handler", "safe_multisend"):
            value = getattr(self, field)
            if not value:
                raise InvalidInputError(f"{field} is required for chain {self.chain_id}")
            normalize_address(value, field)


POLYGON_CONTRACTS = ContractConfig(
    chain_id=POLYGON_CHAIN_ID,
    safe_factory="0xaacFeEa03eb1561C4e67d661e40682Bd20E3541b",
    safe_singleton="0x3E5c63644E683549055b9Be8653de26E0B4CD36E",
    safe_fallback_handler="0xf48f2B2d2a534e402487b3ee7C18c33Aec0Fe5e4",
    safe_multisend="0xA238CBeb142c10Ef7Ad8442C6D1f9E89e07e7761",
)

AMOY_CONTRACTS = ContractConfig(
    chain_id=AMOY_CHAIN_ID,
    safe_factory="0xaacFeEa03eb1561C4e67d661e40682Bd20E3541b",
    safe_singleton="0x3E5c63644E683549055b9Be8653de26E0B4CD36E",
    safe_fallback_handler="0xf48f2B2d2a534e402487b3ee7C18c33Aec0Fe5e4",
    safe_multisend="0xA238CBeb142c10Ef7Ad8442C6D1f9E89e07e7761",
)


class ChainRegistry:
    """
    Chain id to ContractConfig lookup.

    Reads go straight to the current mapping. ``register`` swaps in a new
    mapping under a lock, so readers never see a half-updated table.
    """

    def __init__(self, configs=None):
        self._lock = threading.Lock()
        self._configs: Dict[int, ContractConfig] = {}
        for config in configs or ():
            self.register(config)

    def register(self, config: ContractConfig) -> None:
        config.validate()
        with self._lock:
            updated = dict(self._configs)
            updated[config.chain_id] = config
            self._configs = updated
        logger.debug(f"Registered contract config for chain {config.chain_id}")

    def get(self, chain_id: int) -> ContractConfig:
        """
        Raises:
            UnsupportedChainError: nothing registered for ``chain_id``
        """
        configs = self._configs
        try:
            return configs[chain_id]
        except KeyError:
            raise UnsupportedChainError(chain_id, configs.keys()) from None

    def supported_chain_ids(self) -> List[int]:
        return sorted(self._configs)

    def __contains__(self, chain_id: int) -> bool:
        return chain_id in self._configs

    def __len__(self) -> int:
        return len(self._configs)


def default_registry() -> ChainRegistry:
    """A fresh registry holding the Polygon and Amoy deployments."""
    return ChainRegistry([POLYGON_CONTRACTS, AMOY_CONTRACTS])
