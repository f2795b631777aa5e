"""Protocol constants shared by the encoders and the relay client."""

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# keccak256 of the Safe proxy creation code used by the Polymarket proxy factory.
# Sourced from the deployed factory, never recomputed.
SAFE_INIT_CODE_HASH = "0x2bce2127ff07fb632d16c8347c4ebf501f4841168bed00d9e6ef715ddb6fcecf"

# EIP-712 domain name declared by the proxy factory
SAFE_FACTORY_NAME = "Polymarket Contract Proxy Factory"

# Safe setup(...) used as the proxy initializer
SAFE_SETUP_SIGNATURE = "setup(address[],uint256,address,bytes,address,address,uint256,address)"

# multiSend(bytes)
MULTISEND_SELECTOR = bytes.fromhex("8d80ff0a")

# Packed signature v offset: raw {27, 28} become {31, 32}
SAFE_SIGNATURE_V_OFFSET = 4

# EIP-191 personal message prefix for a 32 byte payload
ETH_MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n32"

# Relayer REST endpoints
NONCE_ENDPOINT = "/nonce"
DEPLOYED_ENDPOINT = "/deployed"
TRANSACTION_ENDPOINT = "/transaction"
TRANSACTIONS_ENDPOINT = "/transactions"
SUBMIT_ENDPOINT = "/submit"

# Chain ids with a built-in contract configuration
POLYGON_CHAIN_ID = 137
AMOY_CHAIN_ID = 80002
