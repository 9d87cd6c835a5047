"""Error taxonomy for approval risk evaluation."""


class ApprovalRiskError(Exception):
    """Base class for all approval risk errors."""


class ApprovalDecodeError(ApprovalRiskError):
    """A log entry does not have the shape of an ERC-20 Approval event."""


class OracleError(ApprovalRiskError):
    """A chain-state query failed, timed out or returned a malformed answer."""


class ConfigurationError(ApprovalRiskError):
    """Malformed transaction descriptor or missing client configuration."""
