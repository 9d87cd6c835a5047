"""Shared endpoint constants for chain-state clients."""

ETHERSCAN_V2_API = "https://api.etherscan.io/v2/api"

DEFAULT_REQUEST_TIMEOUT = 10

DEFAULT_BLOCK_TAG = "latest"
