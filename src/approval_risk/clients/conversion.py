"""Conversion of raw JSON-RPC transaction/receipt payloads into TransactionEvents."""

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from ..core.errors import ConfigurationError
from ..core.models import LogEntry, TransactionEvent

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> Optional[int]:
    """Accept ints, 0x-prefixed hex quantities and decimal strings."""
    if value is None or value == '':
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 16) if value.startswith('0x') else int(value)
    raise ValueError(f"not an integer quantity: {value!r}")


def transaction_event_from_receipt(tx: Mapping[str, Any], receipt: Mapping[str, Any]) -> TransactionEvent:
    """
    Build a TransactionEvent from eth_getTransactionByHash and
    eth_getTransactionReceipt results.

    Works for both web3 AttributeDicts (HexBytes, ints) and raw JSON
    payloads from explorer proxies (hex strings).

    Raises:
        ConfigurationError: the payloads lack required fields or are malformed
    """
    try:
        tx_hash = tx['hash']
        from_address = tx['from']
        raw_logs = receipt['logs']
    except KeyError as e:
        raise ConfigurationError(f"Transaction descriptor is missing field {e}") from e

    try:
        block_number = _as_int(tx.get('blockNumber', receipt.get('blockNumber')))

        logs = []
        for log in raw_logs:
            logs.append(LogEntry(
                address=log['address'],
                topics=list(log.get('topics', [])),
                data=log.get('data', '0x'),
                log_index=_as_int(log.get('logIndex')),
            ))

        # Explorers report contract creation as an empty `to`
        to_address = tx.get('to') or None

        event = TransactionEvent(
            hash=tx_hash,
            from_address=from_address,
            to_address=to_address,
            block_number=block_number,
            logs=logs,
        )
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise ConfigurationError(f"Malformed transaction descriptor for {tx_hash!r}: {e}") from e

    logger.debug(f"Loaded {event.hash} with {len(event.logs)} log(s)")
    return event
