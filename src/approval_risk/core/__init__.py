"""Approval risk evaluation core."""

from .engine import RiskEvaluator
from .errors import ApprovalDecodeError, ApprovalRiskError, ConfigurationError, OracleError
from .events import APPROVAL_TOPIC, decode_approval, extract_approvals
from .findings import ALERT_ID, FINDING_NAME, compose_finding
from .models import (
    MAX_UINT256,
    ApprovalEvent,
    EvaluationFailure,
    EvaluationReport,
    Finding,
    FindingSeverity,
    FindingType,
    LogEntry,
    RiskReason,
    TransactionEvent,
)
from .oracle import ChainStateOracle, is_contract_account, transaction_count_of
from .rules import RULES, SpenderFacts, evaluate_rules, gather_spender_facts

__all__ = [
    "ALERT_ID",
    "APPROVAL_TOPIC",
    "FINDING_NAME",
    "MAX_UINT256",
    "RULES",
    "ApprovalDecodeError",
    "ApprovalEvent",
    "ApprovalRiskError",
    "ChainStateOracle",
    "ConfigurationError",
    "EvaluationFailure",
    "EvaluationReport",
    "Finding",
    "FindingSeverity",
    "FindingType",
    "LogEntry",
    "OracleError",
    "RiskEvaluator",
    "RiskReason",
    "SpenderFacts",
    "TransactionEvent",
    "compose_finding",
    "decode_approval",
    "evaluate_rules",
    "extract_approvals",
    "gather_spender_facts",
    "is_contract_account",
    "transaction_count_of",
]
