"""Narrow read-only chain-state queries used by the risk rules."""

import logging
from typing import Protocol, Union

from .errors import OracleError

logger = logging.getLogger(__name__)

EMPTY_CODE_SENTINELS = ("", "0x")


class ChainStateOracle(Protocol):
    """Read-only view of the current chain head."""

    async def get_code(self, address: str) -> Union[bytes, str]:
        ...

    async def get_transaction_count(self, address: str) -> int:
        ...


def _code_is_empty(code: Union[bytes, str], address: str) -> bool:
    if isinstance(code, (bytes, bytearray)):
        return len(code) == 0

    if isinstance(code, str):
        normalized = code.lower()
        if normalized in EMPTY_CODE_SENTINELS:
            return True
        body = normalized[2:] if normalized.startswith('0x') else normalized
        try:
            bytes.fromhex(body)
        except ValueError as e:
            raise OracleError(f"Malformed code for {address}: {code[:20]!r}") from e
        return False

    raise OracleError(f"Unexpected code type for {address}: {type(code).__name__}")


async def is_contract_account(oracle: ChainStateOracle, address: str) -> bool:
    """
    Check whether an account has deployed code at the chain head.

    Raises:
        OracleError: the lookup failed or returned something that is not code
    """
    try:
        code = await oracle.get_code(address)
    except OracleError:
        raise
    except Exception as e:
        raise OracleError(f"getCode({address}) failed: {e}") from e

    is_contract = not _code_is_empty(code, address)
    logger.debug(f"{address} is {'a contract' if is_contract else 'an EOA'}")
    return is_contract


async def transaction_count_of(oracle: ChainStateOracle, address: str) -> int:
    """
    Number of transactions sent by `address`, used as a proxy for account age.

    Raises:
        OracleError: the lookup failed or did not return a non-negative integer
    """
    try:
        count = await oracle.get_transaction_count(address)
    except OracleError:
        raise
    except Exception as e:
        raise OracleError(f"getTransactionCount({address}) failed: {e}") from e

    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise OracleError(f"Malformed transaction count for {address}: {count!r}")

    logger.debug(f"{address} has sent {count} transactions")
    return count
