"""Heuristics flagging risky ERC-20 approvals."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .models import MAX_UINT256, ApprovalEvent, RiskReason
from .oracle import ChainStateOracle, is_contract_account, transaction_count_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpenderFacts:
    """Chain-state facts about a spender, fetched fresh for every approval."""
    is_contract: bool
    transaction_count: int


async def gather_spender_facts(oracle: ChainStateOracle, spender: str) -> SpenderFacts:
    """
    Query code presence and transaction count for `spender` concurrently.

    Raises:
        OracleError: either lookup failed
    """
    results = await asyncio.gather(
        is_contract_account(oracle, spender),
        transaction_count_of(oracle, spender),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result

    is_contract, transaction_count = results
    return SpenderFacts(is_contract=is_contract, transaction_count=transaction_count)


def unlimited_approval(event: ApprovalEvent, facts: SpenderFacts) -> Optional[RiskReason]:
    if event.value == MAX_UINT256:
        return RiskReason.UNLIMITED_APPROVAL
    return None


def eoa_spender(event: ApprovalEvent, facts: SpenderFacts) -> Optional[RiskReason]:
    if not facts.is_contract:
        return RiskReason.EOA_SPENDER
    return None


def fresh_contract_spender(event: ApprovalEvent, facts: SpenderFacts) -> Optional[RiskReason]:
    if facts.is_contract and facts.transaction_count == 0:
        return RiskReason.FRESH_CONTRACT_SPENDER
    return None


def no_prior_interaction(event: ApprovalEvent, facts: SpenderFacts) -> Optional[RiskReason]:
    """
    Flag approvals whose spender is not the transaction's immediate target.

    Weak heuristic: no interaction history is consulted, so this fires for
    almost every approval made through a router, multicall or permit flow.
    Contract-creation transactions (no target) always trigger it.
    """
    target = (event.tx_to or '').lower()
    if target != event.spender.lower():
        return RiskReason.NO_PRIOR_INTERACTION
    return None


Rule = Callable[[ApprovalEvent, SpenderFacts], Optional[RiskReason]]

# Evaluation order is the order reasons appear in findings
RULES: Tuple[Rule, ...] = (
    unlimited_approval,
    eoa_spender,
    fresh_contract_spender,
    no_prior_interaction,
)


def evaluate_rules(event: ApprovalEvent, facts: SpenderFacts) -> List[RiskReason]:
    """Run every rule and return the triggered reasons in evaluation order."""
    reasons = []
    for rule in RULES:
        reason = rule(event, facts)
        if reason is not None:
            reasons.append(reason)

    logger.debug(f"Approval at log {event.log_index} of {event.tx_hash} triggered {len(reasons)} rule(s)")
    return reasons
