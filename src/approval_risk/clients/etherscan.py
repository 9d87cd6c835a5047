"""Chain-state oracle backed by the Etherscan v2 proxy module."""

import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from ..core.errors import ConfigurationError, OracleError
from ..core.models import TransactionEvent
from .constants import DEFAULT_BLOCK_TAG, DEFAULT_REQUEST_TIMEOUT, ETHERSCAN_V2_API
from .conversion import transaction_event_from_receipt

logger = logging.getLogger(__name__)


class EtherscanChainOracle:
    """
    Reads chain state through Etherscan's JSON-RPC proxy endpoints.

    Requests are blocking, so each call runs in a worker thread to keep
    approvals of one transaction from serializing on each other.
    """

    def __init__(
        self,
        api_key: Optional[str],
        chain_id: int = 1,
        base_url: str = ETHERSCAN_V2_API,
        timeout: float = DEFAULT_REQUEST_TIMEOUT
    ):
        """
        Args:
            api_key: Etherscan API key
            chain_id: Chain ID passed to the v2 multichain API
            base_url: API base URL
            timeout: HTTP request timeout in seconds
        """
        if not api_key:
            raise ConfigurationError("An Etherscan API key is required")
        self.api_key = api_key
        self.chain_id = int(chain_id)
        self.base_url = base_url
        self.timeout = timeout

    def _proxy_call(self, action: str, **extra: Any) -> Any:
        """
        Run one proxy-module action and return its `result`.

        Raises:
            OracleError: transport failure, API error or JSON-RPC error payload
        """
        params: Dict[str, Any] = {
            'chainid': self.chain_id,
            'module': 'proxy',
            'action': action,
            **extra,
            'apikey': self.api_key,
        }

        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise OracleError(f"Etherscan {action} request failed: {e}") from e

        if not isinstance(data, dict):
            raise OracleError(f"Etherscan {action} returned non-dict payload: {data!r}")

        if data.get('error'):
            error = data['error']
            message = error.get('message') if isinstance(error, dict) else error
            raise OracleError(f"Etherscan {action} error: {message}")

        # Rate limits and bad keys come back as status "0" with the reason in `result`
        if data.get('status') == '0':
            raise OracleError(f"Etherscan {action} rejected: {data.get('message')} ({data.get('result')})")

        if 'result' not in data:
            raise OracleError(f"Etherscan {action} response has no result")

        logger.debug(f"Etherscan {action} succeeded on chain {self.chain_id}")
        return data['result']

    def _get_code(self, address: str) -> str:
        result = self._proxy_call('eth_getCode', address=address, tag=DEFAULT_BLOCK_TAG)
        if not isinstance(result, str):
            raise OracleError(f"Etherscan eth_getCode returned {result!r} for {address}")
        return result

    def _get_transaction_count(self, address: str) -> int:
        result = self._proxy_call('eth_getTransactionCount', address=address, tag=DEFAULT_BLOCK_TAG)
        try:
            return int(result, 16)
        except (TypeError, ValueError) as e:
            raise OracleError(f"Etherscan eth_getTransactionCount returned {result!r} for {address}") from e

    def _fetch_transaction_event(self, tx_hash: str) -> TransactionEvent:
        tx = self._proxy_call('eth_getTransactionByHash', txhash=tx_hash)
        receipt = self._proxy_call('eth_getTransactionReceipt', txhash=tx_hash)

        if not isinstance(tx, dict) or not isinstance(receipt, dict):
            raise ConfigurationError(f"Transaction {tx_hash} not found or not yet mined")

        return transaction_event_from_receipt(tx, receipt)

    async def get_code(self, address: str) -> str:
        return await asyncio.to_thread(self._get_code, address)

    async def get_transaction_count(self, address: str) -> int:
        return await asyncio.to_thread(self._get_transaction_count, address)

    async def fetch_transaction_event(self, tx_hash: str) -> TransactionEvent:
        """
        Load a mined transaction and its logs.

        Raises:
            OracleError: Etherscan could not be queried
            ConfigurationError: the transaction is unknown or malformed
        """
        return await asyncio.to_thread(self._fetch_transaction_event, tx_hash)

    async def close(self) -> None:
        """Nothing to release: every request opens and closes its own connection."""
