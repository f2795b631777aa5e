from .models import (
    BatchRequest,
    Call,
    OperationType,
    RelayerTransaction,
    RelayerTransactionState,
    SignerType,
    TransactionRequest,
    TransactionType,
    WalletCreationRequest,
)
from .signatures import split_and_pack_signature, split_signature, unpack_signature

__all__ = [
    "BatchRequest",
    "Call",
    "OperationType",
    "RelayerTransaction",
    "RelayerTransactionState",
    "SignerType",
    "TransactionRequest",
    "TransactionType",
    "WalletCreationRequest",
    "split_and_pack_signature",
    "split_signature",
    "unpack_signature",
]
