"""Tests for SAFE and SAFE-CREATE request assembly."""

import pytest

from polyrelay.config.constants import ZERO_ADDRESS
from polyrelay.core.eip712 import hash_struct, hash_typed_data
from polyrelay.core.errors import (
    EmptyBatchError,
    InvalidInputError,
    SignerRequiredError,
    UnsupportedChainError,
)
from polyrelay.core.safe import multisend
from polyrelay.core.safe.assembler import TransactionAssembler
from polyrelay.core.safe.models import (
    BatchRequest,
    Call,
    OperationType,
    TransactionType,
    WalletCreationRequest,
)
from polyrelay.core.safe.signatures import unpack_signature
from polyrelay.core.wallet.safe_address import derive_wallet_address
from polyrelay.core.wallet.signer import eth_prefixed_digest, recover_address

MULTISEND = "0xA238CBeb142c10Ef7Ad8442C6D1f9E89e07e7761"
FACTORY = "0xaacFeEa03eb1561C4e67d661e40682Bd20E3541b"
TARGET = "0x4D97DCd97eC945f40cF65F87097ACe5EA0476045"


@pytest.fixture
def assembler(signer, registry):
    return TransactionAssembler(signer, 137, registry)


def _recovered_owner(digest: bytes, packed_signature: str) -> str:
    return recover_address(digest, unpack_signature(packed_signature))


class TestSafeTxHashing:
    """Tests for the SafeTx typed data."""

    def test_domain_is_verifying_contract_only(self, assembler, approve_call, owner_safe_address):
        typed = assembler.safe_tx_typed_data(approve_call, owner_safe_address, 0)

        assert typed.domain == {"verifyingContract": owner_safe_address}
        assert [f.name for f in typed.types["EIP712Domain"]] == ["verifyingContract"]
        assert typed.primary_type == "SafeTx"

    def test_gas_fields_are_zero(self, assembler, approve_call, owner_safe_address):
        message = assembler.safe_tx_typed_data(approve_call, owner_safe_address, 3).message

        assert message["safeTxGas"] == message["baseGas"] == message["gasPrice"] == 0
        assert message["gasToken"] == message["refundReceiver"] == ZERO_ADDRESS
        assert message["nonce"] == 3

    def test_known_multisend_digest(self, assembler, approve_call, owner_safe_address):
        """Test the SafeTx hash of two batched approvals at nonce 8."""
        outer = multisend.aggregate([approve_call, approve_call], MULTISEND)
        typed = assembler.safe_tx_typed_data(outer, owner_safe_address, 8)

        assert hash_struct("SafeTx", typed.message, typed.types).hex() == (
            "d2a5400b32a92a8e79c62dadf5b5838e4a6b28344604dbeefd0c11f5d2344c9e"
        )
        assert hash_typed_data(typed).hex() == (
            "734e3b5cdbb6e268683c8be81c180193b791c9d40b85767a2dec344664256733"
        )


class TestExecuteRequest:
    """Tests for the EXECUTE (SAFE) path."""

    def test_end_to_end_single_call(self, assembler, owner_address, owner_safe_address):
        """Test that the packed signature recovers the owner over the SafeTx digest."""
        call = Call(to=TARGET, value="0", data="0x", operation=OperationType.CALL)
        batch = BatchRequest(calls=[call], wallet_address=owner_safe_address, nonce="5")

        request = assembler.build_execute_request(batch)
        signature = bytes.fromhex(request.signature[2:])

        assert len(signature) == 65
        assert signature[64] in (31, 32)

        digest = hash_typed_data(assembler.safe_tx_typed_data(call, owner_safe_address, 5))
        assert _recovered_owner(digest, request.signature) == owner_address

    def test_signed_without_prefix(self, assembler, approve_call, owner_address, owner_safe_address):
        batch = BatchRequest(calls=[approve_call], wallet_address=owner_safe_address, nonce=0)
        request = assembler.build_execute_request(batch)

        digest = hash_typed_data(assembler.safe_tx_typed_data(approve_call, owner_safe_address, 0))
        assert _recovered_owner(eth_prefixed_digest(digest), request.signature) != owner_address

    def test_single_call_payload(self, assembler, approve_call, owner_address, owner_safe_address):
        batch = BatchRequest(
            calls=[approve_call], wallet_address=owner_safe_address, nonce=2, metadata="approve"
        )
        payload = assembler.build_execute_request(batch).to_payload()

        assert payload["type"] == "SAFE"
        assert payload["from"] == owner_address
        assert payload["to"] == approve_call.to
        assert payload["proxyWallet"] == owner_safe_address
        assert payload["value"] == "0"
        assert payload["data"] == "0x" + approve_call.data.hex()
        assert payload["nonce"] == "2"
        assert payload["operation"] == 0
        assert payload["chainId"] == 137
        assert payload["metadata"] == "approve"
        assert payload["signatureParams"] == {
            "gasPrice": "0",
            "operation": "0",
            "safeTxnGas": "0",
            "baseGas": "0",
            "gasToken": ZERO_ADDRESS,
            "refundReceiver": ZERO_ADDRESS,
        }

    def test_batch_goes_through_multisend(self, assembler, approve_call, owner_address, owner_safe_address):
        """Test that several calls become one DELEGATE_CALL to MultiSend."""
        calls = [approve_call, Call(to=TARGET, value=1)]
        batch = BatchRequest(calls=calls, wallet_address=owner_safe_address, nonce=8)
        request = assembler.build_execute_request(batch)
        payload = request.to_payload()

        assert payload["to"] == MULTISEND
        assert payload["operation"] == 1
        assert payload["signatureParams"]["operation"] == "1"
        assert "metadata" not in payload
        assert multisend.unwrap_outer_call(request.call) == calls

        digest = hash_typed_data(assembler.safe_tx_typed_data(request.call, owner_safe_address, 8))
        assert _recovered_owner(digest, request.signature) == owner_address

    def test_new_batch_uses_signer_safe(self, assembler, approve_call, owner_safe_address):
        batch = assembler.new_batch([approve_call], nonce=4)
        assert batch.wallet_address == owner_safe_address
        assert batch.nonce == 4

    def test_empty_batch(self, assembler, owner_safe_address):
        batch = BatchRequest(calls=[], wallet_address=owner_safe_address, nonce=0)
        with pytest.raises(EmptyBatchError):
            assembler.build_execute_request(batch)

    def test_signer_required(self, registry, approve_call, owner_safe_address):
        assembler = TransactionAssembler(None, 137, registry)
        batch = BatchRequest(calls=[approve_call], wallet_address=owner_safe_address, nonce=0)

        with pytest.raises(SignerRequiredError):
            assembler.build_execute_request(batch)

    def test_unsupported_chain(self, signer, registry):
        with pytest.raises(UnsupportedChainError):
            TransactionAssembler(signer, 1, registry)


class TestCreateRequest:
    """Tests for the CREATE (SAFE-CREATE) path."""

    @pytest.mark.parametrize("chain_id", [137, 80002])
    def test_create_proxy_domain(self, signer, registry, chain_id):
        typed = TransactionAssembler(signer, chain_id, registry).create_proxy_typed_data()

        assert typed.domain == {
            "name": "Polymarket Contract Proxy Factory",
            "chainId": chain_id,
            "verifyingContract": FACTORY,
        }
        assert typed.message == {
            "paymentToken": ZERO_ADDRESS,
            "payment": 0,
            "paymentReceiver": ZERO_ADDRESS,
        }

    def test_payload(self, assembler, owner_address, owner_safe_address):
        request = assembler.build_create_request(assembler.new_creation())
        payload = request.to_payload()

        assert payload == {
            "type": "SAFE-CREATE",
            "from": owner_address,
            "to": FACTORY,
            "proxyWallet": owner_safe_address,
            "data": "0x",
            "signature": request.signature,
            "signatureParams": {
                "paymentToken": ZERO_ADDRESS,
                "payment": "0",
                "paymentReceiver": ZERO_ADDRESS,
            },
        }
        assert request.type is TransactionType.SAFE_CREATE

    def test_signed_with_prefix(self, assembler, owner_address):
        """Test that the creation signature is over the prefixed CreateProxy digest."""
        request = assembler.build_create_request(assembler.new_creation())
        digest = hash_typed_data(assembler.create_proxy_typed_data())

        assert _recovered_owner(eth_prefixed_digest(digest), request.signature) == owner_address
        assert _recovered_owner(digest, request.signature) != owner_address
        assert request.signature[-2:] in ("1f", "20")

    def test_known_create_digest(self, assembler):
        assert hash_typed_data(assembler.create_proxy_typed_data()).hex() == (
            "563ac315294c5be01ab1f3b04a5abdfa39e8317a9d90679d4e63caf760b126a4"
        )

    def test_metadata(self, assembler):
        payload = assembler.build_create_request(assembler.new_creation("deploy")).to_payload()
        assert payload["metadata"] == "deploy"

    def test_expected_address_mismatch(self, assembler, owner_address, sample_wallet_address):
        request = WalletCreationRequest(owner_address, sample_wallet_address)
        with pytest.raises(InvalidInputError, match="does not match"):
            assembler.build_create_request(request)

    def test_owner_must_be_signer(self, assembler, sample_wallet_address, registry):
        request = WalletCreationRequest(
            sample_wallet_address, derive_wallet_address(sample_wallet_address, 137, registry)
        )
        with pytest.raises(InvalidInputError, match="not the signer"):
            assembler.build_create_request(request)

    def test_signer_required(self, registry, owner_address, owner_safe_address):
        assembler = TransactionAssembler(None, 137, registry)
        with pytest.raises(SignerRequiredError):
            assembler.build_create_request(WalletCreationRequest(owner_address, owner_safe_address))
