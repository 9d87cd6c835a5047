"""Suspicious ERC-20 approval detection."""

from .core import Finding, RiskEvaluator, TransactionEvent

__all__ = ["Finding", "RiskEvaluator", "TransactionEvent"]
