"""Chain-state oracle backed by a JSON-RPC node through web3."""

import logging
from typing import Optional

from aiohttp import ClientTimeout
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import TransactionNotFound

from ..core.errors import ConfigurationError, OracleError
from ..core.models import TransactionEvent
from .constants import DEFAULT_BLOCK_TAG, DEFAULT_REQUEST_TIMEOUT
from .conversion import transaction_event_from_receipt

logger = logging.getLogger(__name__)


class Web3ChainOracle:
    """Reads code, nonces and receipts from a node via AsyncWeb3."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        w3: Optional[AsyncWeb3] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT
    ):
        """
        Args:
            rpc_url: HTTP JSON-RPC endpoint
            w3: Preconfigured AsyncWeb3 instance (takes precedence over rpc_url)
            timeout: HTTP request timeout in seconds
        """
        if w3 is None:
            if not rpc_url:
                raise ConfigurationError("An RPC URL or AsyncWeb3 instance is required")
            w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={'timeout': ClientTimeout(total=timeout)}))
        self.w3 = w3

    async def get_code(self, address: str) -> bytes:
        code = await self.w3.eth.get_code(AsyncWeb3.to_checksum_address(address), DEFAULT_BLOCK_TAG)
        return bytes(code)

    async def get_transaction_count(self, address: str) -> int:
        return await self.w3.eth.get_transaction_count(
            AsyncWeb3.to_checksum_address(address), DEFAULT_BLOCK_TAG
        )

    async def fetch_transaction_event(self, tx_hash: str) -> TransactionEvent:
        """
        Load a mined transaction and its logs.

        Raises:
            OracleError: the node could not be queried
            ConfigurationError: the transaction is unknown or malformed
        """
        try:
            tx = await self.w3.eth.get_transaction(tx_hash)
            receipt = await self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound as e:
            raise ConfigurationError(f"Transaction {tx_hash} not found") from e
        except Exception as e:
            raise OracleError(f"Failed to fetch {tx_hash} from RPC: {e}") from e

        logger.debug(f"Fetched {tx_hash} from RPC")
        return transaction_event_from_receipt(tx, receipt)

    async def close(self) -> None:
        """Release the provider's HTTP session."""
        try:
            await self.w3.provider.disconnect()
        except NotImplementedError:
            # Custom providers without a persistent session
            logger.debug(f"{type(self.w3.provider).__name__} has nothing to disconnect")
