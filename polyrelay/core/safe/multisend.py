"""
MultiSend batching.

Each entry is packed as ``uint8 operation | address to | uint256 value |
uint256 data length | data`` with no padding between entries. The batch is
executed by DELEGATE_CALLing ``multiSend(bytes)`` on the MultiSend contract.
"""

import logging
from typing import List, Sequence

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.packed import encode_packed
from eth_hash.auto import keccak
from eth_utils import to_checksum_address

from polyrelay.config.constants import MULTISEND_SELECTOR
from polyrelay.core.errors import EmptyBatchError, InvalidInputError, TruncatedDataError
from polyrelay.core.safe.models import Call, OperationType

logger = logging.getLogger(__name__)

# operation(1) + to(20) + value(32) + data length(32)
ENTRY_HEADER_SIZE = 85


def encode(calls: Sequence[Call]) -> bytes:
    if not calls:
        raise EmptyBatchError("multisend encode")

    return b"".join(
        encode_packed(
            ["uint8", "address", "uint256", "uint256", "bytes"],
            [int(call.operation), call.to, call.value, len(call.data), call.data],
        )
        for call in calls
    )


def decode(blob: bytes) -> List[Call]:
    """
    Split a packed multisend blob back into calls.

    Raises:
        EmptyBatchError: blob is empty
        TruncatedDataError: an entry header or its data runs past the end
    """
    if not blob:
        raise EmptyBatchError("multisend decode")

    calls = []
    offset = 0
    total = len(blob)

    while offset < total:
        if total - offset < ENTRY_HEADER_SIZE:
            raise TruncatedDataError(offset, ENTRY_HEADER_SIZE, total - offset)

        operation = blob[offset]
        to = to_checksum_address(blob[offset + 1:offset + 21])
        value = int.from_bytes(blob[offset + 21:offset + 53], "big")
        data_length = int.from_bytes(blob[offset + 53:offset + 85], "big")

        data_start = offset + ENTRY_HEADER_SIZE
        if total - data_start < data_length:
            raise TruncatedDataError(offset, ENTRY_HEADER_SIZE + data_length, total - offset)

        calls.append(
            Call(
                to=to,
                value=value,
                data=blob[data_start:data_start + data_length],
                operation=operation,
            )
        )
        offset = data_start + data_length

    return calls


def wrap_as_outer_call(blob: bytes, multisend_address: str) -> Call:
    """The DELEGATE_CALL to ``multiSend(bytes)`` carrying ``blob``."""
    return Call(
        to=multisend_address,
        value=0,
        data=MULTISEND_SELECTOR + abi_encode(["bytes"], [blob]),
        operation=OperationType.DELEGATE_CALL,
    )


def unwrap_outer_call(call: Call) -> List[Call]:
    """Inverse of ``wrap_as_outer_call``."""
    if call.data[:4] != MULTISEND_SELECTOR:
        raise InvalidInputError(f"call to {call.to} is not a multiSend(bytes) call")
    (blob,) = abi_decode(["bytes"], call.data[4:])
    return decode(blob)


def aggregate(calls: Sequence[Call], multisend_address: str) -> Call:
    """
    Collapse a batch into the one call a Safe executes.

    A single call is returned unchanged, it never goes through MultiSend.
    """
    if not calls:
        raise EmptyBatchError("aggregate")
    if len(calls) == 1:
        return calls[0]

    logger.debug(f"Aggregating {len(calls)} calls through multisend {multisend_address}")
    return wrap_as_outer_call(encode(calls), multisend_address)


def multisend_hash(calls: Sequence[Call]) -> bytes:
    """keccak256 of the packed batch."""
    return keccak(encode(calls))
