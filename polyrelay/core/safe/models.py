"""Value objects for Safe calls, relayer requests and relayer transactions."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple

from polyrelay.config.constants import ZERO_ADDRESS
from polyrelay.core.errors import InvalidInputError
from polyrelay.utils.validators import bytes_to_hex, hex_to_bytes, normalize_address, parse_uint


class OperationType(IntEnum):
    CALL = 0
    DELEGATE_CALL = 1


class TransactionType(str, Enum):
    SAFE = "SAFE"
    SAFE_CREATE = "SAFE-CREATE"


class SignerType(str, Enum):
    """Signer tag sent to the nonce endpoint."""

    EOA = "EOA"
    SAFE = "SAFE"


class RelayerTransactionState(str, Enum):
    NEW = "STATE_NEW"
    EXECUTED = "STATE_EXECUTED"
    MINED = "STATE_MINED"
    CONFIRMED = "STATE_CONFIRMED"
    FAILED = "STATE_FAILED"
    INVALID = "STATE_INVALID"

    @property
    def is_terminal(self) -> bool:
        return self in (
            RelayerTransactionState.CONFIRMED,
            RelayerTransactionState.FAILED,
            RelayerTransactionState.INVALID,
        )

    @property
    def is_failure(self) -> bool:
        return self in (RelayerTransactionState.FAILED, RelayerTransactionState.INVALID)

    @classmethod
    def parse(cls, value: str) -> "RelayerTransactionState":
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError(f"Unknown relayer transaction state: {value!r}") from None


@dataclass(frozen=True)
class Call:
    """
    One call executed by a Safe.

    Inputs are normalized at construction: ``to`` is checksummed, ``value``
    becomes an int, ``data`` becomes bytes and ``operation`` an OperationType.
    """

    to: str
    value: int = 0
    data: bytes = b""
    operation: OperationType = OperationType.CALL

    def __post_init__(self):
        object.__setattr__(self, "to", normalize_address(self.to, "call.to"))
        object.__setattr__(self, "value", parse_uint(self.value, "call.value"))
        object.__setattr__(self, "data", hex_to_bytes(self.data, "call.data"))
        try:
            object.__setattr__(self, "operation", OperationType(int(self.operation)))
        except (TypeError, ValueError):
            raise InvalidInputError(f"call.operation: unknown operation {self.operation!r}") from None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Call":
        return cls(
            to=data["to"],
            value=data.get("value", 0),
            data=data.get("data", "0x"),
            operation=data.get("operation", OperationType.CALL),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "to": self.to,
            "value": str(self.value),
            "data": bytes_to_hex(self.data),
            "operation": int(self.operation),
        }


@dataclass(frozen=True)
class BatchRequest:
    """Calls to execute atomically from ``wallet_address``, in order."""

    calls: Tuple[Call, ...]
    wallet_address: str
    nonce: int
    metadata: str = ""

    def __post_init__(self):
        object.__setattr__(self, "calls", tuple(self.calls))
        object.__setattr__(
            self, "wallet_address", normalize_address(self.wallet_address, "wallet_address")
        )
        object.__setattr__(self, "nonce", parse_uint(self.nonce, "nonce"))


@dataclass(frozen=True)
class WalletCreationRequest:
    """Deployment of the Safe owned by ``owner_address``. The nonce is always 0."""

    owner_address: str
    expected_wallet_address: str
    nonce: int = 0
    metadata: str = ""

    def __post_init__(self):
        object.__setattr__(self, "owner_address", normalize_address(self.owner_address, "owner"))
        object.__setattr__(
            self,
            "expected_wallet_address",
            normalize_address(self.expected_wallet_address, "expected_wallet_address"),
        )
        if parse_uint(self.nonce, "nonce") != 0:
            raise InvalidInputError(f"wallet creation nonce must be 0, got {self.nonce!r}")
        object.__setattr__(self, "nonce", 0)


@dataclass(frozen=True)
class TransactionRequest:
    """
    A signed request ready for ``/submit``.

    ``call`` is the single (possibly multisend-wrapped) call for SAFE
    requests and ``None`` for SAFE-CREATE.
    """

    type: TransactionType
    from_address: str
    to: str
    proxy_wallet: str
    signature: str
    call: Optional[Call] = None
    nonce: Optional[int] = None
    chain_id: Optional[int] = None
    metadata: str = ""
    signature_params: Dict[str, str] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        """JSON body sent to the relayer."""
        payload: Dict[str, Any] = {
            "type": self.type.value,
            "from": self.from_address,
            "to": self.to,
            "proxyWallet": self.proxy_wallet,
        }

        if self.type == TransactionType.SAFE:
            payload["value"] = str(self.call.value)
            payload["data"] = bytes_to_hex(self.call.data)
            payload["operation"] = int(self.call.operation)
            payload["nonce"] = str(self.nonce)
            payload["chainId"] = self.chain_id
        else:
            payload["data"] = "0x"

        payload["signature"] = self.signature
        payload["signatureParams"] = dict(self.signature_params)

        if self.metadata:
            payload["metadata"] = self.metadata

        return payload


def safe_signature_params(operation: OperationType) -> Dict[str, str]:
    return {
        "gasPrice": "0",
        "operation": str(int(operation)),
        "safeTxnGas": "0",
        "baseGas": "0",
        "gasToken": ZERO_ADDRESS,
        "refundReceiver": ZERO_ADDRESS,
    }


def create_signature_params() -> Dict[str, str]:
    return {
        "paymentToken": ZERO_ADDRESS,
        "payment": "0",
        "paymentReceiver": ZERO_ADDRESS,
    }


@dataclass
class RelayerTransaction:
    """Transaction record as returned by the relayer."""

    transaction_id: str
    state: RelayerTransactionState
    type: str = ""
    proxy_address: str = ""
    from_address: str = ""
    to: str = ""
    transaction_hash: str = ""
    nonce: str = ""
    value: str = ""
    data: str = ""
    signature: str = ""
    metadata: str = ""
    owner: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RelayerTransaction":
        """Create from relayer API response."""
        return cls(
            transaction_id=data.get("transactionID") or data.get("transactionId", ""),
            state=RelayerTransactionState.parse(data.get("state", "")),
            type=data.get("type", ""),
            proxy_address=data.get("proxyAddress", ""),
            from_address=data.get("from", ""),
            to=data.get("to", ""),
            transaction_hash=data.get("transactionHash") or data.get("hash", ""),
            nonce=str(data.get("nonce", "")),
            value=str(data.get("value", "")),
            data=data.get("data", ""),
            signature=data.get("signature", ""),
            metadata=data.get("metadata", ""),
            owner=data.get("owner", ""),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )
