"""Extraction of ERC-20 Approval events from transaction logs."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak, to_bytes
from pydantic import ValidationError

from .errors import ApprovalDecodeError
from .models import ApprovalEvent, LogEntry, TransactionEvent

logger = logging.getLogger(__name__)

APPROVAL_EVENT_SIGNATURE = "Approval(address,address,uint256)"
APPROVAL_TOPIC = "0x" + keccak(text=APPROVAL_EVENT_SIGNATURE).hex()

WORD_SIZE = 32


@dataclass(frozen=True)
class ExtractedApproval:
    """Outcome of decoding one Approval log: either an event or the decode error."""
    log_index: int
    event: Optional[ApprovalEvent] = None
    error: Optional[ApprovalDecodeError] = None


def _word(hex_value: str, what: str) -> bytes:
    try:
        raw = to_bytes(hexstr=hex_value)
    except (TypeError, ValueError) as e:
        raise ApprovalDecodeError(f"{what} is not valid hex: {hex_value!r}") from e
    if len(raw) != WORD_SIZE:
        raise ApprovalDecodeError(f"{what} must be {WORD_SIZE} bytes, got {len(raw)}")
    return raw


def decode_approval(log: LogEntry, tx: TransactionEvent, log_index: int) -> ApprovalEvent:
    """
    Decode one Approval log into an ApprovalEvent.

    ERC-20 Approval indexes owner and spender and carries the value in data.
    Logs with any other layout are rejected with ApprovalDecodeError and
    skipped by extract_approvals. That includes an ERC-721 Approval, which
    indexes its tokenId too, and the non-indexed Approval some early ERC-20
    tokens emit (signature topic only, owner, spender and value packed into
    96 bytes of data).

    Raises:
        ApprovalDecodeError: the log does not match the expected shape
    """
    if len(log.topics) != 3:
        raise ApprovalDecodeError(f"expected 3 topics, got {len(log.topics)}")

    owner_word = _word(log.topics[1], "owner topic")
    spender_word = _word(log.topics[2], "spender topic")
    value_word = _word(log.data, "value data")

    try:
        (owner,) = decode(["address"], owner_word)
        (spender,) = decode(["address"], spender_word)
        (value,) = decode(["uint256"], value_word)
    except DecodingError as e:
        raise ApprovalDecodeError(f"failed to ABI-decode approval: {e}") from e

    try:
        return ApprovalEvent(
            owner=owner,
            spender=spender,
            value=value,
            token_contract=log.address,
            tx_hash=tx.hash,
            tx_from=tx.from_address,
            tx_to=tx.to_address,
            block_number=tx.block_number,
            log_index=log_index,
        )
    except ValidationError as e:
        raise ApprovalDecodeError(f"invalid approval fields: {e}") from e


def extract_approvals(tx: TransactionEvent) -> List[ExtractedApproval]:
    """
    Decode every Approval log of a transaction, keeping emission order.

    A malformed entry yields an ExtractedApproval carrying the error instead
    of an event; sibling entries are still decoded.
    """
    results = []
    for position, log in enumerate(tx.logs):
        if not log.topics or log.topics[0].lower() != APPROVAL_TOPIC:
            continue

        log_index = log.log_index if log.log_index is not None else position
        try:
            event = decode_approval(log, tx, log_index)
        except ApprovalDecodeError as e:
            logger.debug(f"Log {log_index} of {tx.hash} is not a decodable approval: {e}")
            results.append(ExtractedApproval(log_index=log_index, error=e))
            continue

        logger.debug(f"Decoded approval {event.owner} -> {event.spender} ({event.value}) in {tx.hash}")
        results.append(ExtractedApproval(log_index=log_index, event=event))

    return results
