"""Chain-state clients implementing the oracle interface."""

from .constants import ETHERSCAN_V2_API
from .conversion import transaction_event_from_receipt
from .etherscan import EtherscanChainOracle
from .rpc import Web3ChainOracle

__all__ = [
    "ETHERSCAN_V2_API",
    "EtherscanChainOracle",
    "Web3ChainOracle",
    "transaction_event_from_receipt",
]
