from .relayer_client import RelayClient, RelayerTransactionResponse

__all__ = ["RelayClient", "RelayerTransactionResponse"]
