"""Shared pytest fixtures for polyrelay tests.

Keys and addresses are well-known development values; derived Safe addresses
are checked against the live Polymarket proxy factory configuration.
"""

import base64
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from polyrelay.config.builder import BuilderConfig
from polyrelay.config.contracts import default_registry
from polyrelay.core.safe.models import Call
from polyrelay.core.wallet.signer import Signer


# Hardhat / anvil account #0
OWNER_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
OWNER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OWNER_SAFE_ADDRESS = "0xd93B25cb943D14d0d34FBaF01Fc93a0f8b5F6E47"

USDC_ADDRESS = "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"
CTF_ADDRESS = "0x4D97DCd97eC945f40cF65F87097ACe5EA0476045"
MULTISEND_ADDRESS = "0xA238CBeb142c10Ef7Ad8442C6D1f9E89e07e7761"
SAFE_FACTORY_ADDRESS = "0xaacFeEa03eb1561C4e67d661e40682Bd20E3541b"

# approve(CTF, 2**256 - 1)
APPROVE_MAX_DATA = (
    "0x095ea7b3"
    "0000000000000000000000004d97dcd97ec945f40cf65f87097ace5ea0476045"
    "ffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffff"
)


@pytest.fixture
def owner_private_key() -> str:
    return OWNER_PRIVATE_KEY


@pytest.fixture
def owner_address() -> str:
    return OWNER_ADDRESS


@pytest.fixture
def owner_safe_address() -> str:
    return OWNER_SAFE_ADDRESS


@pytest.fixture
def sample_wallet_address() -> str:
    """Provide a sample Ethereum address for testing."""
    return "0x742D35cc6634c0532925a3B844Bc9e7595f1ABcd"


@pytest.fixture
def registry():
    """Fresh registry with the Polygon and Amoy deployments."""
    return default_registry()


@pytest.fixture
def signer() -> Signer:
    return Signer(OWNER_PRIVATE_KEY, 137)


@pytest.fixture
def builder_config() -> BuilderConfig:
    return BuilderConfig(
        api_key="test_api_key",
        secret=base64.urlsafe_b64encode(b"test_secret_key").decode(),
        passphrase="test_passphrase",
    )


@pytest.fixture
def approve_call() -> Call:
    """USDC.e approve(CTF, max) as a plain call."""
    return Call(to=USDC_ADDRESS, value="0", data=APPROVE_MAX_DATA)
