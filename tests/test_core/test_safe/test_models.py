"""Tests for Safe call and relayer transaction models."""

import pytest

from polyrelay.core.errors import InvalidInputError
from polyrelay.core.safe.models import (
    BatchRequest,
    Call,
    OperationType,
    RelayerTransaction,
    RelayerTransactionState,
    WalletCreationRequest,
)

USDC = "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"


class TestCall:
    """Tests for Call normalization."""

    def test_equivalent_inputs_compare_equal(self):
        """Test that string, hex and int forms normalize to the same call."""
        first = Call(to=USDC.lower(), value="1000", data="0xABCD", operation=1)
        second = Call(to=USDC, value=1000, data=b"\xab\xcd", operation=OperationType.DELEGATE_CALL)

        assert first == second
        assert first.to == USDC
        assert first.operation is OperationType.DELEGATE_CALL

    def test_defaults(self):
        call = Call(to=USDC)
        assert call.value == 0
        assert call.data == b""
        assert call.operation is OperationType.CALL

    @pytest.mark.parametrize("data", ["0x", "", None])
    def test_empty_data(self, data):
        assert Call(to=USDC, data=data).data == b""

    def test_hex_value(self):
        assert Call(to=USDC, value="0x10").value == 16

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"to": "0x1234"},
            {"to": USDC, "value": -1},
            {"to": USDC, "value": 2**256},
            {"to": USDC, "value": "ten"},
            {"to": USDC, "data": "0xabc"},
            {"to": USDC, "data": "0xzz"},
            {"to": USDC, "operation": 2},
        ],
    )
    def test_invalid_inputs(self, kwargs):
        with pytest.raises(InvalidInputError):
            Call(**kwargs)

    def test_dict_round_trip(self):
        call = Call(to=USDC, value=5, data="0x095ea7b3", operation=0)
        as_dict = call.to_dict()

        assert as_dict == {"to": USDC, "value": "5", "data": "0x095ea7b3", "operation": 0}
        assert Call.from_dict(as_dict) == call


class TestRequests:
    """Tests for batch and creation requests."""

    def test_batch_request_normalizes(self, sample_wallet_address):
        batch = BatchRequest(
            calls=[Call(to=USDC)],
            wallet_address=sample_wallet_address.lower(),
            nonce="7",
        )

        assert batch.calls == (Call(to=USDC),)
        assert batch.wallet_address == sample_wallet_address
        assert batch.nonce == 7
        assert batch.metadata == ""

    def test_creation_nonce_is_zero(self, owner_address, owner_safe_address):
        request = WalletCreationRequest(owner_address, owner_safe_address, nonce="0")
        assert request.nonce == 0

    def test_creation_rejects_other_nonce(self, owner_address, owner_safe_address):
        """Test that a creation request never carries a non-zero nonce."""
        with pytest.raises(InvalidInputError, match="nonce must be 0"):
            WalletCreationRequest(owner_address, owner_safe_address, nonce=1)


class TestRelayerTransaction:
    """Tests for parsing relayer transactions."""

    def test_from_api(self):
        txn = RelayerTransaction.from_api(
            {
                "transactionID": "abc-123",
                "transactionHash": "0x" + "ab" * 32,
                "from": "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
                "to": USDC,
                "proxyAddress": "0xd93B25cb943D14d0d34FBaF01Fc93a0f8b5F6E47",
                "data": "0x",
                "nonce": 3,
                "value": "0",
                "state": "STATE_MINED",
                "type": "SAFE",
                "metadata": "approve",
                "createdAt": "2024-01-01T00:00:00Z",
            }
        )

        assert txn.transaction_id == "abc-123"
        assert txn.state is RelayerTransactionState.MINED
        assert txn.nonce == "3"
        assert txn.proxy_address == "0xd93B25cb943D14d0d34FBaF01Fc93a0f8b5F6E47"
        assert txn.updated_at == ""

    def test_from_api_alternate_keys(self):
        txn = RelayerTransaction.from_api(
            {"transactionId": "x", "hash": "0x01", "state": "STATE_NEW"}
        )
        assert txn.transaction_id == "x"
        assert txn.transaction_hash == "0x01"

    def test_unknown_state(self):
        with pytest.raises(InvalidInputError, match="STATE_UNKNOWN"):
            RelayerTransaction.from_api({"transactionID": "x", "state": "STATE_UNKNOWN"})

    @pytest.mark.parametrize(
        "state,terminal,failure",
        [
            (RelayerTransactionState.NEW, False, False),
            (RelayerTransactionState.EXECUTED, False, False),
            (RelayerTransactionState.MINED, False, False),
            (RelayerTransactionState.CONFIRMED, True, False),
            (RelayerTransactionState.FAILED, True, True),
            (RelayerTransactionState.INVALID, True, True),
        ],
    )
    def test_state_flags(self, state, terminal, failure):
        assert state.is_terminal is terminal
        assert state.is_failure is failure
