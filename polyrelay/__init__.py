"""Client for the Polymarket builder relayer: Safe derivation, signing and submission."""

from polyrelay.config import BuilderConfig, ChainRegistry, ContractConfig, default_registry
from polyrelay.core.errors import (
    BuilderCredentialsRequiredError,
    EmptyBatchError,
    InvalidInputError,
    InvalidSignatureError,
    MissingFieldError,
    PollingTimeoutError,
    RelayerApiError,
    RelayerClientError,
    SafeAlreadyDeployedError,
    SignerRequiredError,
    SigningError,
    TransactionFailedError,
    TruncatedDataError,
    UnexpectedRecoveryIdError,
    UnsupportedChainError,
    UnsupportedTypeError,
)
from polyrelay.core.polymarket import RelayClient, RelayerTransactionResponse
from polyrelay.core.safe import Call, OperationType, RelayerTransactionState
from polyrelay.core.safe.assembler import TransactionAssembler
from polyrelay.core.wallet import Signer, derive_wallet_address

__version__ = "0.1.0"

__all__ = [
    "BuilderConfig",
    "ChainRegistry",
    "ContractConfig",
    "default_registry",
    "RelayClient",
    "RelayerTransactionResponse",
    "TransactionAssembler",
    "Call",
    "OperationType",
    "RelayerTransactionState",
    "Signer",
    "derive_wallet_address",
    "RelayerClientError",
    "InvalidInputError",
    "EmptyBatchError",
    "TruncatedDataError",
    "InvalidSignatureError",
    "UnsupportedChainError",
    "UnsupportedTypeError",
    "MissingFieldError",
    "SigningError",
    "UnexpectedRecoveryIdError",
    "SignerRequiredError",
    "BuilderCredentialsRequiredError",
    "SafeAlreadyDeployedError",
    "RelayerApiError",
    "TransactionFailedError",
    "PollingTimeoutError",
]
