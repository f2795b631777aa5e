"""Polymarket Relayer API client for gasless Safe transactions."""

import asyncio
import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import httpx

from polyrelay.config.builder import BuilderConfig
from polyrelay.config.constants import (
    DEPLOYED_ENDPOINT,
    NONCE_ENDPOINT,
    SUBMIT_ENDPOINT,
    TRANSACTION_ENDPOINT,
    TRANSACTIONS_ENDPOINT,
)
from polyrelay.config.contracts import ChainRegistry, default_registry
from polyrelay.config.settings import settings
from polyrelay.core.errors import (
    EmptyBatchError,
    PollingTimeoutError,
    RelayerApiError,
    SafeAlreadyDeployedError,
    SignerRequiredError,
    TransactionFailedError,
)
from polyrelay.core.safe.assembler import TransactionAssembler
from polyrelay.core.safe.models import (
    BatchRequest,
    Call,
    RelayerTransaction,
    RelayerTransactionState,
    SignerType,
    TransactionRequest,
)
from polyrelay.core.wallet.signer import Signer
from polyrelay.utils.formatters import format_address
from polyrelay.utils.validators import normalize_address

logger = logging.getLogger(__name__)

# Retry settings for rate limits and transport errors
RELAYER_MAX_RETRIES = 3
RELAYER_INITIAL_DELAY = 2.0  # seconds

StateLike = Union[RelayerTransactionState, str]


def _as_state(state: StateLike) -> RelayerTransactionState:
    if isinstance(state, RelayerTransactionState):
        return state
    return RelayerTransactionState.parse(state)


class RelayerTransactionResponse:
    """Result of a submit, with a handle back to the client for polling."""

    def __init__(
        self,
        client: "RelayClient",
        transaction_id: str,
        state: str = "",
        transaction_hash: str = "",
    ):
        self._client = client
        self.transaction_id = transaction_id
        self.state = state
        self.transaction_hash = transaction_hash

    def __repr__(self) -> str:
        return (
            f"RelayerTransactionResponse(transaction_id={self.transaction_id!r}, "
            f"state={self.state!r}, transaction_hash={self.transaction_hash!r})"
        )

    @classmethod
    def from_api(cls, client: "RelayClient", data: Dict[str, Any]) -> "RelayerTransactionResponse":
        return cls(
            client=client,
            transaction_id=data.get("transactionID") or data.get("transactionId", ""),
            state=data.get("state", ""),
            transaction_hash=data.get("transactionHash") or data.get("hash", ""),
        )

    async def get_transaction(self) -> List[RelayerTransaction]:
        return await self._client.get_transaction(self.transaction_id)

    async def wait(
        self,
        max_polls: Optional[int] = None,
        poll_frequency: Optional[float] = None,
    ) -> RelayerTransaction:
        """Poll until the transaction is mined or confirmed."""
        return await self._client.poll_until_state(
            self.transaction_id,
            [RelayerTransactionState.MINED, RelayerTransactionState.CONFIRMED],
            fail_state=RelayerTransactionState.FAILED,
            max_polls=max_polls,
            poll_frequency=poll_frequency,
        )


class RelayClient:
    """
    Client for the Polymarket Relayer API.

    Handles gasless operations through the signer's Safe:
    - Safe deployment (SAFE-CREATE)
    - Batched Safe execution (SAFE), multisend for several calls
    - Nonce, deployment status and transaction lookups
    """

    def __init__(
        self,
        relayer_url: Optional[str] = None,
        chain_id: Optional[int] = None,
        private_key: Optional[str] = None,
        builder_config: Optional[BuilderConfig] = None,
        registry: Optional[ChainRegistry] = None,
        timeout: Optional[float] = None,
    ):
        self.host = (relayer_url or settings.relayer_url).rstrip("/")
        self.chain_id = chain_id if chain_id is not None else settings.chain_id
        self.registry = registry or default_registry()
        self.contracts = self.registry.get(self.chain_id)

        private_key = private_key if private_key is not None else settings.private_key
        self.signer = Signer(private_key, self.chain_id) if private_key else None
        self.builder_config = builder_config or BuilderConfig.from_settings(settings)
        self.assembler = TransactionAssembler(self.signer, self.chain_id, self.registry)

        self.timeout = timeout or settings.http_timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def is_configured(self) -> bool:
        """Check if builder credentials are configured."""
        return self.builder_config.is_configured()

    def _require_signer(self, operation: str) -> Signer:
        if self.signer is None:
            raise SignerRequiredError(operation)
        return self.signer

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
        authenticated: bool = False,
    ) -> Any:
        """
        Send a request with exponential backoff on rate limits and transport errors.

        The body is serialized once, and the same string is signed and sent.

        Raises:
            RelayerApiError: relayer answered with a non-2xx status
        """
        body_str = json.dumps(body) if body is not None else ""
        client = await self._get_client()
        delay = RELAYER_INITIAL_DELAY

        for attempt in range(RELAYER_MAX_RETRIES):
            last_attempt = attempt == RELAYER_MAX_RETRIES - 1
            headers = (
                self.builder_config.headers(method, path, body_str)
                if authenticated
                else {"Content-Type": "application/json"}
            )

            try:
                response = await client.request(
                    method,
                    f"{self.host}{path}",
                    params=params,
                    headers=headers,
                    content=body_str or None,
                )
            except httpx.TransportError as e:
                if last_attempt:
                    raise
                logger.warning(
                    f"{method} {path} failed ({type(e).__name__}), retrying in {delay}s "
                    f"(attempt {attempt + 1}/{RELAYER_MAX_RETRIES})"
                )
                await asyncio.sleep(delay)
                delay *= 2
                continue

            if response.status_code == 429 and not last_attempt:
                logger.warning(
                    f"{method} {path} rate limited, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{RELAYER_MAX_RETRIES})"
                )
                await asyncio.sleep(delay)
                delay *= 2
                continue

            if not response.is_success:
                logger.error(f"Relayer {method} {path} error {response.status_code}: {response.text}")
                raise RelayerApiError(response.status_code, response.text)

            return response.json()

    async def get_nonce(self, address: str, signer_type: Union[SignerType, str]) -> str:
        """
        Get the relayer nonce for a signer.

        Args:
            address: Signer address
            signer_type: EOA or SAFE

        Returns:
            Nonce as a decimal string

        Raises:
            RelayerApiError: response carries no nonce
        """
        signer_type = SignerType(signer_type)
        result = await self._request(
            "GET",
            NONCE_ENDPOINT,
            params={"address": normalize_address(address), "type": signer_type.value},
        )
        if not isinstance(result, dict) or result.get("nonce") is None:
            raise RelayerApiError(200, f"nonce response without a nonce: {result!r}")
        nonce = str(result["nonce"])
        logger.debug(f"Nonce for {format_address(address)} ({signer_type.value}): {nonce}")
        return nonce

    async def get_deployed(self, safe_address: str) -> bool:
        """Check whether a Safe is already deployed, according to the relayer."""
        result = await self._request(
            "GET",
            DEPLOYED_ENDPOINT,
            params={"address": normalize_address(safe_address, "safe_address")},
        )
        return bool(result.get("deployed", False))

    async def get_transaction(self, transaction_id: str) -> List[RelayerTransaction]:
        result = await self._request("GET", TRANSACTION_ENDPOINT, params={"id": transaction_id})
        if isinstance(result, dict):
            result = [result]
        return [RelayerTransaction.from_api(item) for item in result]

    async def get_transactions(self) -> List[RelayerTransaction]:
        """All transactions submitted with these builder credentials."""
        self.builder_config.validate("get transactions")
        result = await self._request("GET", TRANSACTIONS_ENDPOINT, authenticated=True)
        if isinstance(result, dict):
            result = result.get("transactions", [])
        return [RelayerTransaction.from_api(item) for item in result]

    def get_expected_safe(self) -> str:
        """Safe address the signer controls on this chain."""
        self._require_signer("get expected safe")
        return self.assembler.expected_wallet_address()

    async def submit(self, request: TransactionRequest) -> RelayerTransactionResponse:
        payload = request.to_payload()
        logger.info(
            f"Submitting {payload['type']} transaction: "
            f"{format_address(payload['proxyWallet'])} -> {format_address(payload['to'])}"
        )
        result = await self._request("POST", SUBMIT_ENDPOINT, body=payload, authenticated=True)
        response = RelayerTransactionResponse.from_api(self, result)
        logger.info(f"Relayer accepted transaction {response.transaction_id} ({response.state})")
        return response

    async def execute(
        self,
        calls: Sequence[Union[Call, Dict[str, Any]]],
        metadata: str = "",
    ) -> RelayerTransactionResponse:
        """
        Execute calls through the signer's Safe.

        Several calls are batched atomically with MultiSend.

        Raises:
            SignerRequiredError: no private key configured
            BuilderCredentialsRequiredError: builder credentials missing
            EmptyBatchError: no calls given
        """
        signer = self._require_signer("execute")
        self.builder_config.validate("execute")

        calls = [call if isinstance(call, Call) else Call.from_dict(call) for call in calls]
        if not calls:
            raise EmptyBatchError("execute")

        safe_address = self.get_expected_safe()
        nonce = await self.get_nonce(signer.address, SignerType.SAFE)

        batch = BatchRequest(
            calls=tuple(calls),
            wallet_address=safe_address,
            nonce=nonce,
            metadata=metadata,
        )
        request = self.assembler.build_execute_request(batch)
        return await self.submit(request)

    async def deploy(self, metadata: str = "") -> RelayerTransactionResponse:
        """
        Deploy the signer's Safe via the relayer.

        Raises:
            SignerRequiredError: no private key configured
            BuilderCredentialsRequiredError: builder credentials missing
            SafeAlreadyDeployedError: relayer reports the Safe as deployed
        """
        self._require_signer("deploy")
        self.builder_config.validate("deploy")

        safe_address = self.get_expected_safe()
        if await self.get_deployed(safe_address):
            raise SafeAlreadyDeployedError(safe_address)

        logger.info(f"Deploying Safe {format_address(safe_address)} on chain {self.chain_id}")
        request = self.assembler.build_create_request(self.assembler.new_creation(metadata))
        return await self.submit(request)

    async def poll_until_state(
        self,
        transaction_id: str,
        states: Iterable[StateLike],
        fail_state: Optional[StateLike] = None,
        max_polls: Optional[int] = None,
        poll_frequency: Optional[float] = None,
    ) -> RelayerTransaction:
        """
        Poll a transaction until it reaches one of ``states``.

        Args:
            transaction_id: Relayer transaction ID
            states: Target states
            fail_state: State that ends polling with an error
            max_polls: Maximum number of polls
            poll_frequency: Seconds between polls

        Raises:
            TransactionFailedError: fail_state, FAILED or INVALID reached
            PollingTimeoutError: no target state after max_polls
        """
        targets = {_as_state(s) for s in states}
        fail = _as_state(fail_state) if fail_state else None
        max_polls = max_polls if max_polls is not None else settings.poll_max_attempts
        poll_frequency = poll_frequency if poll_frequency is not None else settings.poll_interval

        logger.info(
            f"Waiting for transaction {transaction_id} matching states: "
            f"{sorted(s.value for s in targets)}"
        )

        for attempt in range(max_polls):
            transactions = await self.get_transaction(transaction_id)
            if transactions:
                txn = transactions[0]
                if txn.state in targets:
                    return txn
                if txn.state == fail or txn.state.is_failure:
                    logger.error(f"Transaction {transaction_id} failed: {txn.state.value}")
                    raise TransactionFailedError(transaction_id, txn.state.value)

            if attempt < max_polls - 1:
                await asyncio.sleep(poll_frequency)

        logger.warning(f"Transaction {transaction_id} still pending after {max_polls} polls")
        raise PollingTimeoutError(transaction_id, max_polls)
