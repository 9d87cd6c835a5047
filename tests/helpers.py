"""Shared builders and a scriptable in-memory oracle for the test suite."""

import asyncio
from typing import Any, Dict, List, Optional

from web3.providers import AsyncBaseProvider

from approval_risk.core import APPROVAL_TOPIC, MAX_UINT256, LogEntry, TransactionEvent

OWNER = "0xabc0000000000000000000000000000000000000"
SPENDER = "0xdef0000000000000000000000000000000000000"
OTHER_SPENDER = "0x0000000000000000000000000000000000000bad"
TOKEN = "0x1111111111111111111111111111111111111111"
TX_HASH = "0x" + "ab" * 32

CONTRACT_CODE = "0x6001"
EMPTY_CODE = "0x"


def address_topic(address: str) -> str:
    return "0x" + "0" * 24 + address.lower()[2:]


def uint_word(value: int) -> str:
    return "0x" + format(value, "064x")


def approval_log(
    owner: str = OWNER,
    spender: str = SPENDER,
    value: int = 10**18,
    token: str = TOKEN,
    log_index: Optional[int] = None,
) -> LogEntry:
    return LogEntry(
        address=token,
        topics=[APPROVAL_TOPIC, address_topic(owner), address_topic(spender)],
        data=uint_word(value),
        log_index=log_index,
    )


def transfer_log(token: str = TOKEN) -> LogEntry:
    return LogEntry(
        address=token,
        topics=[
            "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef",
            address_topic(OWNER),
            address_topic(SPENDER),
        ],
        data=uint_word(5),
    )


def transaction(logs: List[LogEntry], to: Optional[str] = SPENDER, tx_hash: str = TX_HASH) -> TransactionEvent:
    return TransactionEvent(
        hash=tx_hash,
        from_address=OWNER,
        to_address=to,
        block_number=12345678,
        logs=logs,
    )


class FakeOracle:
    """
    In-memory oracle keyed by lowercase address.

    Unknown addresses are contracts with 10 transactions. `errors` maps an
    address to the exception both lookups raise; `delays` maps an address
    to seconds slept before answering.
    """

    def __init__(
        self,
        code: Optional[Dict[str, str]] = None,
        tx_counts: Optional[Dict[str, int]] = None,
        errors: Optional[Dict[str, Exception]] = None,
        delays: Optional[Dict[str, float]] = None,
        default_code: str = CONTRACT_CODE,
        default_count: int = 10,
    ):
        self.code = {k.lower(): v for k, v in (code or {}).items()}
        self.tx_counts = {k.lower(): v for k, v in (tx_counts or {}).items()}
        self.errors = {k.lower(): v for k, v in (errors or {}).items()}
        self.delays = {k.lower(): v for k, v in (delays or {}).items()}
        self.default_code = default_code
        self.default_count = default_count
        self.calls = []
        self.closed = False

    async def _answer(self, method: str, address: str):
        key = address.lower()
        self.calls.append((method, key))
        if key in self.delays:
            await asyncio.sleep(self.delays[key])
        if key in self.errors:
            raise self.errors[key]

    async def get_code(self, address: str):
        await self._answer("get_code", address)
        return self.code.get(address.lower(), self.default_code)

    async def get_transaction_count(self, address: str):
        await self._answer("get_transaction_count", address)
        return self.tx_counts.get(address.lower(), self.default_count)

    async def close(self):
        self.closed = True


class CannedProvider(AsyncBaseProvider):
    """
    web3 provider answering JSON-RPC methods from a dict.

    A result that is an exception instance is raised instead of returned.
    Requests are recorded in `requests` as (method, params).
    """

    def __init__(self, results: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.results = {"eth_chainId": "0x1", **(results or {})}
        self.requests = []
        self.disconnected = False

    async def make_request(self, method, params):
        self.requests.append((method, params))
        result = self.results[method]
        if isinstance(result, Exception):
            raise result
        return {"jsonrpc": "2.0", "id": len(self.requests), "result": result}

    async def is_connected(self, show_traceback: bool = False) -> bool:
        return True

    async def disconnect(self) -> None:
        self.disconnected = True


__all__ = [
    "CONTRACT_CODE",
    "EMPTY_CODE",
    "MAX_UINT256",
    "OTHER_SPENDER",
    "OWNER",
    "SPENDER",
    "TOKEN",
    "TX_HASH",
    "CannedProvider",
    "FakeOracle",
    "address_topic",
    "approval_log",
    "transaction",
    "transfer_log",
    "uint_word",
]
