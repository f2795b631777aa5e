"""Exception hierarchy for the relayer client."""

from typing import Iterable, Optional


class RelayerClientError(Exception):
    """Base class for every error raised by polyrelay."""


class InvalidInputError(RelayerClientError, ValueError):
    """Malformed address, value, hex data or request shape."""


class EmptyBatchError(InvalidInputError):
    """A batch or multisend blob contained no calls."""

    def __init__(self, operation: str = "multisend"):
        self.operation = operation
        super().__init__(f"{operation}: at least one call is required")


class TruncatedDataError(InvalidInputError):
    """A multisend blob ended in the middle of an entry."""

    def __init__(self, offset: int, needed: int, available: int):
        self.offset = offset
        self.needed = needed
        self.available = available
        super().__init__(
            f"multisend decode: entry at offset {offset} needs {needed} bytes, "
            f"only {available} available"
        )


class InvalidSignatureError(InvalidInputError):
    """Signature has the wrong length or cannot be recovered."""


class UnsupportedChainError(RelayerClientError):
    """No contract configuration is registered for the chain id."""

    def __init__(self, chain_id: int, supported: Optional[Iterable[int]] = None):
        self.chain_id = chain_id
        self.supported = sorted(supported or [])
        message = f"Unsupported chain id {chain_id}"
        if self.supported:
            message += f" (supported: {', '.join(str(c) for c in self.supported)})"
        super().__init__(message)


class TypedDataError(RelayerClientError, ValueError):
    """Base class for EIP-712 encoding failures."""


class UnsupportedTypeError(TypedDataError):
    """Field type is neither a known atomic type nor a declared struct."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Unsupported EIP-712 type: {type_name}")


class MissingFieldError(TypedDataError):
    """A declared struct field has no value in the record being hashed."""

    def __init__(self, type_name: str, field_name: str):
        self.type_name = type_name
        self.field_name = field_name
        super().__init__(f"Missing field '{field_name}' for EIP-712 type {type_name}")


class SigningError(RelayerClientError):
    """The underlying ECDSA primitive failed."""


class UnexpectedRecoveryIdError(RelayerClientError, ValueError):
    """Raw signature v is outside {0, 1, 27, 28}."""

    def __init__(self, v: int):
        self.v = v
        super().__init__(f"Invalid v value in signature: {v}")


class ConfigurationError(RelayerClientError):
    """Client is missing a credential needed for the requested operation."""


class SignerRequiredError(ConfigurationError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} requires a signer (private key not configured)")


class BuilderCredentialsRequiredError(ConfigurationError):
    def __init__(self, operation: str, missing: Optional[Iterable[str]] = None):
        self.operation = operation
        self.missing = list(missing or [])
        message = f"{operation} requires builder API credentials"
        if self.missing:
            message += f" (missing: {', '.join(self.missing)})"
        super().__init__(message)


class SafeAlreadyDeployedError(RelayerClientError):
    def __init__(self, safe_address: str):
        self.safe_address = safe_address
        super().__init__(f"Safe already deployed at {safe_address}")


class RelayerApiError(RelayerClientError):
    """Relayer answered with a non-success HTTP status."""

    def __init__(self, status_code: int, error_message: str):
        self.status_code = status_code
        self.error_message = error_message
        super().__init__(f"Relayer API error {status_code}: {error_message}")


class TransactionFailedError(RelayerClientError):
    """Polled transaction reached a failure state."""

    def __init__(self, transaction_id: str, state: str):
        self.transaction_id = transaction_id
        self.state = state
        super().__init__(f"Transaction {transaction_id} failed with state {state}")


class PollingTimeoutError(RelayerClientError):
    def __init__(self, transaction_id: str, attempts: int):
        self.transaction_id = transaction_id
        self.attempts = attempts
        super().__init__(
            f"Transaction {transaction_id} did not reach a target state after {attempts} polls"
        )
