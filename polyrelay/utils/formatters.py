"""Formatting helpers for log lines and operator output."""


def format_address(address: str) -> str:
    """Format wallet address (shortened)."""
    return f"{address[:6]}...{address[-4:]}"


def format_tx_hash(tx_hash: str) -> str:
    """Format transaction hash (shortened)."""
    if not tx_hash:
        return "-"
    return f"{tx_hash[:10]}...{tx_hash[-6:]}"
