"""Composition of alert findings from triggered risk reasons."""

from typing import Optional, Sequence

from .models import ApprovalEvent, Finding, FindingSeverity, FindingType, RiskReason

FINDING_NAME = "Suspicious Token Approval"
ALERT_ID = "VENN-APPROVAL-1"
DEFAULT_PROTOCOL = "ethereum"


def compose_finding(
    event: ApprovalEvent,
    reasons: Sequence[RiskReason],
    protocol: str = DEFAULT_PROTOCOL
) -> Optional[Finding]:
    """
    Build the finding for one approval.

    Args:
        event: Decoded approval
        reasons: Triggered reasons, in rule evaluation order
        protocol: Protocol tag attached to the alert

    Returns:
        A High severity Suspicious finding, or None when no reason triggered
    """
    if not reasons:
        return None

    messages = [reason.value for reason in reasons]

    return Finding(
        name=FINDING_NAME,
        description=(
            f"Suspicious approval from {event.owner} to {event.spender}. "
            f"Reason(s): {'; '.join(messages)}"
        ),
        alert_id=ALERT_ID,
        protocol=protocol,
        finding_type=FindingType.SUSPICIOUS,
        severity=FindingSeverity.HIGH,
        metadata={
            'owner': event.owner,
            'spender': event.spender,
            # Decimal string; uint256 amounts overflow JSON number consumers
            'value': str(event.value),
            'reasons': ', '.join(messages),
            'token': event.token_contract,
            'txHash': event.tx_hash,
        },
    )
