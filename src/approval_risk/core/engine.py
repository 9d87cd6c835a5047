"""Per-transaction approval risk evaluation."""

import asyncio
import logging
import time
from typing import List, Optional, Tuple

from .errors import OracleError
from .events import ExtractedApproval, extract_approvals
from .findings import DEFAULT_PROTOCOL, compose_finding
from .models import EvaluationFailure, EvaluationReport, Finding, TransactionEvent
from .oracle import ChainStateOracle
from .rules import SpenderFacts, evaluate_rules, gather_spender_facts

logger = logging.getLogger(__name__)


class RiskEvaluator:
    """
    Evaluates every ERC-20 approval of a transaction against the risk rules.

    The oracle is injected so tests and deployments can substitute their own
    chain-state source. Nothing is cached between calls: every evaluation
    re-queries the current chain head.
    """

    def __init__(
        self,
        oracle: ChainStateOracle,
        oracle_timeout: Optional[float] = 10.0,
        max_concurrent: int = 8,
        protocol: str = DEFAULT_PROTOCOL,
    ):
        """
        Args:
            oracle: Chain-state source for code and transaction-count lookups
            oracle_timeout: Deadline in seconds for one approval's lookups (None disables it)
            max_concurrent: Maximum number of approvals querying the oracle at once
            protocol: Protocol tag attached to findings
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")
        if oracle_timeout is not None and oracle_timeout <= 0:
            raise ValueError(f"oracle_timeout must be positive, got {oracle_timeout}")

        self.oracle = oracle
        self.oracle_timeout = oracle_timeout
        self.max_concurrent = max_concurrent
        self.protocol = protocol

    async def _spender_facts(self, spender: str) -> SpenderFacts:
        if self.oracle_timeout is None:
            return await gather_spender_facts(self.oracle, spender)
        try:
            return await asyncio.wait_for(
                gather_spender_facts(self.oracle, spender),
                timeout=self.oracle_timeout
            )
        except asyncio.TimeoutError as e:
            raise OracleError(
                f"Oracle lookups for {spender} exceeded {self.oracle_timeout}s"
            ) from e

    async def _evaluate_approval(
        self,
        item: ExtractedApproval,
        semaphore: asyncio.Semaphore
    ) -> Tuple[Optional[Finding], Optional[EvaluationFailure]]:
        if item.error is not None:
            logger.warning(f"Skipping log {item.log_index}: {item.error}")
            return None, EvaluationFailure(log_index=item.log_index, stage="decode", error=str(item.error))

        event = item.event
        try:
            async with semaphore:
                facts = await self._spender_facts(event.spender)
        except OracleError as e:
            logger.warning(
                f"Skipping approval at log {item.log_index} of {event.tx_hash} "
                f"(spender {event.spender}): {e}"
            )
            return None, EvaluationFailure(log_index=item.log_index, stage="oracle", error=str(e))

        reasons = evaluate_rules(event, facts)
        return compose_finding(event, reasons, protocol=self.protocol), None

    async def assess_transaction(self, tx: TransactionEvent) -> EvaluationReport:
        """
        Evaluate all approvals of `tx` and report findings plus skipped approvals.

        Approvals are evaluated concurrently; findings keep log order.
        Decode and oracle failures are confined to their own approval.
        """
        start_time = time.time()
        extracted = extract_approvals(tx)
        if not extracted:
            logger.debug(f"No approval events in {tx.hash}")
            return EvaluationReport(tx_hash=tx.hash)

        semaphore = asyncio.Semaphore(self.max_concurrent)
        outcomes = await asyncio.gather(
            *(self._evaluate_approval(item, semaphore) for item in extracted)
        )

        findings: List[Finding] = []
        failures: List[EvaluationFailure] = []
        for finding, failure in outcomes:
            if finding is not None:
                findings.append(finding)
            if failure is not None:
                failures.append(failure)

        elapsed_time = time.time() - start_time
        logger.info(
            f"Evaluated {len(extracted)} approval(s) in {tx.hash} in {elapsed_time:.2f}s: "
            f"{len(findings)} finding(s), {len(failures)} skipped"
        )
        if failures:
            # Skipped approvals emit no finding; callers must check failures to tell them from clean ones
            logger.warning(f"{len(failures)} approval(s) in {tx.hash} could not be evaluated")

        return EvaluationReport(tx_hash=tx.hash, findings=findings, failures=failures)

    async def evaluate_transaction(self, tx: TransactionEvent) -> List[Finding]:
        """Evaluate `tx` and return its findings in approval order."""
        report = await self.assess_transaction(tx)
        return report.findings

    def evaluate(self, tx: TransactionEvent) -> List[Finding]:
        """
        Synchronous wrapper around evaluate_transaction.
        Runs the async evaluation using asyncio.run().
        """
        return asyncio.run(self.evaluate_transaction(tx))
