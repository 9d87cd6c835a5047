"""Structured models shared by the approval risk pipeline."""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_UINT256 = 2**256 - 1


def _to_hex(value: Any) -> Any:
    """Render bytes-like values (including HexBytes) as 0x-prefixed hex strings."""
    if isinstance(value, (bytes, bytearray)):
        return '0x' + bytes(value).hex()
    return value


class LogEntry(BaseModel):
    """A raw log emitted by a transaction."""
    model_config = ConfigDict(frozen=True, extra="ignore")
    address: str
    topics: List[str] = Field(default_factory=list)
    data: str = "0x"
    log_index: Optional[int] = None

    @field_validator("address", "data", mode="before")
    @classmethod
    def _hex_scalar(cls, value):
        return _to_hex(value)

    @field_validator("topics", mode="before")
    @classmethod
    def _hex_topics(cls, value):
        if isinstance(value, (list, tuple)):
            return [_to_hex(topic) for topic in value]
        return value


class TransactionEvent(BaseModel):
    """
    Transaction descriptor together with the logs it emitted.

    `to_address` is None for contract-creation transactions.
    """
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)
    hash: str
    from_address: str = Field(alias="from")
    to_address: Optional[str] = Field(default=None, alias="to")
    block_number: Optional[int] = None
    logs: List[LogEntry] = Field(default_factory=list)

    @field_validator("hash", mode="before")
    @classmethod
    def _hex_hash(cls, value):
        return _to_hex(value)


class ApprovalEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    owner: str
    spender: str
    value: int
    token_contract: str
    tx_hash: str
    tx_from: str
    tx_to: Optional[str] = None
    block_number: Optional[int] = None
    log_index: int

    @field_validator("value")
    @classmethod
    def _fits_uint256(cls, value: int) -> int:
        if not 0 <= value <= MAX_UINT256:
            raise ValueError(f"approval value {value} does not fit in uint256")
        return value


class RiskReason(str, Enum):
    UNLIMITED_APPROVAL = "Unlimited approval amount (MAX_UINT)"
    EOA_SPENDER = "Approval to an externally owned account (EOA)"
    FRESH_CONTRACT_SPENDER = "Approval to newly deployed contract (no tx history)"
    NO_PRIOR_INTERACTION = "No prior interaction with spender"


class FindingSeverity(str, Enum):
    UNKNOWN = "Unknown"
    INFO = "Info"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class FindingType(str, Enum):
    UNKNOWN = "Unknown"
    EXPLOIT = "Exploit"
    SUSPICIOUS = "Suspicious"
    DEGRADED = "Degraded"
    INFO = "Info"


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)
    name: str
    description: str
    alert_id: str = Field(alias="alertId")
    protocol: str
    finding_type: FindingType = Field(alias="type")
    severity: FindingSeverity
    metadata: Dict[str, str] = Field(default_factory=dict)

    def to_alert(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys expected by the alerting layer."""
        return self.model_dump(by_alias=True, mode="json")


class EvaluationFailure(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    log_index: int
    stage: Literal["decode", "oracle"]
    error: str


class EvaluationReport(BaseModel):
    """
    Findings for one transaction plus the approvals that could not be evaluated.

    A skipped approval produces no finding, exactly like a clean one;
    `failures` is the only place where the two can be told apart.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")
    tx_hash: str
    findings: List[Finding] = Field(default_factory=list)
    failures: List[EvaluationFailure] = Field(default_factory=list)
