"""Builds and signs SAFE and SAFE-CREATE relayer requests."""

import logging
from typing import Optional, Sequence

from polyrelay.config.constants import SAFE_FACTORY_NAME, ZERO_ADDRESS
from polyrelay.config.contracts import ChainRegistry, default_registry
from polyrelay.core.eip712 import DOMAIN_TYPE, TypedDataSpec, TypedField, hash_typed_data
from polyrelay.core.errors import InvalidInputError, SignerRequiredError
from polyrelay.core.safe import multisend
from polyrelay.core.safe.models import (
    BatchRequest,
    Call,
    TransactionRequest,
    TransactionType,
    WalletCreationRequest,
    create_signature_params,
    safe_signature_params,
)
from polyrelay.core.safe.signatures import split_and_pack_signature
from polyrelay.core.wallet.safe_address import derive_wallet_address
from polyrelay.core.wallet.signer import Signer
from polyrelay.utils.formatters import format_address

logger = logging.getLogger(__name__)

SAFE_TX_FIELDS = [
    TypedField("to", "address"),
    TypedField("value", "uint256"),
    TypedField("data", "bytes"),
    TypedField("operation", "uint8"),
    TypedField("safeTxGas", "uint256"),
    TypedField("baseGas", "uint256"),
    TypedField("gasPrice", "uint256"),
    TypedField("gasToken", "address"),
    TypedField("refundReceiver", "address"),
    TypedField("nonce", "uint256"),
]

# The Safe singleton declares a domain with only verifyingContract
SAFE_TX_DOMAIN_FIELDS = [TypedField("verifyingContract", "address")]

CREATE_PROXY_FIELDS = [
    TypedField("paymentToken", "address"),
    TypedField("payment", "uint256"),
    TypedField("paymentReceiver", "address"),
]

CREATE_PROXY_DOMAIN_FIELDS = [
    TypedField("name", "string"),
    TypedField("chainId", "uint256"),
    TypedField("verifyingContract", "address"),
]


class TransactionAssembler:
    """
    Turns calls into signed relayer requests for one chain.

    SAFE requests sign the SafeTx digest as-is. SAFE-CREATE requests sign the
    CreateProxy digest with the Ethereum message prefix, which is what the
    proxy factory recovers against.
    """

    def __init__(
        self,
        signer: Optional[Signer],
        chain_id: int,
        registry: Optional[ChainRegistry] = None,
    ):
        self.signer = signer
        self.chain_id = chain_id
        self.registry = registry or default_registry()
        self.contracts = self.registry.get(chain_id)

    def _require_signer(self, operation: str) -> Signer:
        if self.signer is None:
            raise SignerRequiredError(operation)
        return self.signer

    def expected_wallet_address(self) -> str:
        signer = self._require_signer("expected wallet address")
        return derive_wallet_address(signer.address, self.chain_id, self.registry)

    def safe_tx_typed_data(self, call: Call, wallet_address: str, nonce: int) -> TypedDataSpec:
        return TypedDataSpec(
            types={DOMAIN_TYPE: SAFE_TX_DOMAIN_FIELDS, "SafeTx": SAFE_TX_FIELDS},
            primary_type="SafeTx",
            domain={"verifyingContract": wallet_address},
            message={
                "to": call.to,
                "value": call.value,
                "data": call.data,
                "operation": int(call.operation),
                "safeTxGas": 0,
                "baseGas": 0,
                "gasPrice": 0,
                "gasToken": ZERO_ADDRESS,
                "refundReceiver": ZERO_ADDRESS,
                "nonce": nonce,
            },
        )

    def create_proxy_typed_data(self) -> TypedDataSpec:
        return TypedDataSpec(
            types={DOMAIN_TYPE: CREATE_PROXY_DOMAIN_FIELDS, "CreateProxy": CREATE_PROXY_FIELDS},
            primary_type="CreateProxy",
            domain={
                "name": SAFE_FACTORY_NAME,
                "chainId": self.chain_id,
                "verifyingContract": self.contracts.safe_factory,
            },
            message={
                "paymentToken": ZERO_ADDRESS,
                "payment": 0,
                "paymentReceiver": ZERO_ADDRESS,
            },
        )

    def new_batch(self, calls: Sequence[Call], nonce: int, metadata: str = "") -> BatchRequest:
        """Batch for the signer's own Safe."""
        return BatchRequest(
            calls=tuple(calls),
            wallet_address=self.expected_wallet_address(),
            nonce=nonce,
            metadata=metadata,
        )

    def new_creation(self, metadata: str = "") -> WalletCreationRequest:
        signer = self._require_signer("wallet creation")
        return WalletCreationRequest(
            owner_address=signer.address,
            expected_wallet_address=self.expected_wallet_address(),
            metadata=metadata,
        )

    def build_execute_request(self, batch: BatchRequest) -> TransactionRequest:
        """
        Sign a SafeTx executing ``batch`` from its wallet.

        Several calls are wrapped in one DELEGATE_CALL to MultiSend.

        Raises:
            SignerRequiredError: no signer configured
            EmptyBatchError: batch has no calls
        """
        signer = self._require_signer("execute")
        call = multisend.aggregate(batch.calls, self.contracts.safe_multisend)

        digest = hash_typed_data(self.safe_tx_typed_data(call, batch.wallet_address, batch.nonce))
        signature = split_and_pack_signature(signer.sign_raw(digest))

        logger.info(
            f"Signed SAFE transaction: safe={format_address(batch.wallet_address)}, "
            f"calls={len(batch.calls)}, nonce={batch.nonce}"
        )

        return TransactionRequest(
            type=TransactionType.SAFE,
            from_address=signer.address,
            to=call.to,
            proxy_wallet=batch.wallet_address,
            signature=signature,
            call=call,
            nonce=batch.nonce,
            chain_id=self.chain_id,
            metadata=batch.metadata,
            signature_params=safe_signature_params(call.operation),
        )

    def build_create_request(self, request: WalletCreationRequest) -> TransactionRequest:
        """
        Sign a CreateProxy deploying the signer's Safe.

        Raises:
            SignerRequiredError: no signer configured
            InvalidInputError: owner is not the signer, or the expected
                wallet address does not match the derived one
        """
        signer = self._require_signer("deploy")
        if request.owner_address != signer.address:
            raise InvalidInputError(
                f"deploy: owner {request.owner_address} is not the signer {signer.address}"
            )

        derived = derive_wallet_address(request.owner_address, self.chain_id, self.registry)
        if derived != request.expected_wallet_address:
            raise InvalidInputError(
                f"deploy: expected Safe {request.expected_wallet_address} does not match "
                f"derived {derived} on chain {self.chain_id}"
            )

        digest = hash_typed_data(self.create_proxy_typed_data())
        signature = split_and_pack_signature(signer.sign_with_eth_prefix(digest))

        logger.info(
            f"Signed SAFE-CREATE: owner={format_address(signer.address)}, "
            f"safe={format_address(derived)}, chain={self.chain_id}"
        )

        return TransactionRequest(
            type=TransactionType.SAFE_CREATE,
            from_address=signer.address,
            to=self.contracts.safe_factory,
            proxy_wallet=derived,
            signature=signature,
            nonce=request.nonce,
            metadata=request.metadata,
            signature_params=create_signature_params(),
        )
