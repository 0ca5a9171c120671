"""Domain-layer error definitions.

Every condition the runtime can report has a `ConditionKind`. Conditions that
abort a run are raised as `RuntimeFault` subclasses; the remaining kinds are
only ever logged as warnings.
"""

import enum
import json

# ============================================================================
#                               Condition kinds
# ============================================================================


class ConditionKind(enum.StrEnum):
    """Machine-readable identifiers for runtime conditions."""

    CONTRACT_MALFORMED = "contract_malformed"
    BINDING_ABSENT = "binding_absent"
    PAYLOAD_VALIDATION_FAILED = "payload_validation_failed"
    POLICY_VIOLATION = "policy_violation"
    VERSION_MISMATCH = "version_mismatch"
    CAPABILITY_UNAVAILABLE = "capability_unavailable"
    CAPABILITY_FAILED = "capability_failed"
    DRIFT_WARNING = "drift_warning"
    MISSING_FILE = "missing_file"
    MANIFEST_INVALID = "manifest_invalid"
    INTERNAL_ERROR = "internal_error"


# ============================================================================
#                           General domain errors
# ============================================================================


class DomainError(Exception):
    """Base class for domain-layer errors."""


class InvalidTransitionError(DomainError):
    """Raised when a run is in an invalid state for the attempted action."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot transition run from {current} to {target}.")
        self.current = current
        self.target = target


class InvalidEnvelopeError(DomainError):
    """Raised when an event envelope violates its invariants."""


# ============================================================================
#                               Fatal conditions
# ============================================================================


class RuntimeFault(DomainError):
    """Base class for conditions that abort a run.

    Attributes:
        kind: The condition kind reported in the fatal line.
        detail: Human-readable description of what went wrong.
        record: The aborted lifecycle record, attached by the orchestrator
            once the abort has been recorded.
    """

    kind: ConditionKind = ConditionKind.CONTRACT_MALFORMED

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail
        self.record = None

    def fatal_line(self) -> str:
        """Render the single machine-parsable line describing this fault."""
        return f"uma.fatal kind={self.kind} detail={json.dumps(self.detail)}"


class ContractMalformedError(RuntimeFault):
    """Raised when a contract (or a schema it references) is malformed."""

    kind = ConditionKind.CONTRACT_MALFORMED

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class PayloadValidationError(RuntimeFault):
    """Raised when a produced payload fails its declared schema."""

    kind = ConditionKind.PAYLOAD_VALIDATION_FAILED

    def __init__(self, service: str, schema: str, reason: str) -> None:
        super().__init__(
            f"payload from {service} failed schema {schema}: {reason}"
        )
        self.service = service
        self.schema = schema
        self.reason = reason


class PolicyViolationError(RuntimeFault):
    """Raised when a deny rule matches under fail-closed enforcement."""

    kind = ConditionKind.POLICY_VIOLATION

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class CapabilityUnavailableError(RuntimeFault):
    """Raised when no implementation of a capability can run on this host."""

    kind = ConditionKind.CAPABILITY_UNAVAILABLE

    def __init__(self, capability: str, reasons: list[str] | None = None) -> None:
        tried = "; ".join(reasons) if reasons else "no implementations registered"
        super().__init__(f"no usable implementation for {capability} ({tried})")
        self.capability = capability
        self.reasons = list(reasons or [])


class CapabilityInvocationError(RuntimeFault):
    """Raised when a capability implementation fails while being invoked."""

    kind = ConditionKind.CAPABILITY_FAILED

    def __init__(self, implementation: str, reason: str) -> None:
        super().__init__(f"{implementation} failed: {reason}")
        self.implementation = implementation
        self.reason = reason


class MissingFileError(RuntimeFault):
    """Raised when a required file or directory does not exist."""

    kind = ConditionKind.MISSING_FILE

    def __init__(self, path: str, what: str = "file") -> None:
        super().__init__(f"required {what} not found: {path}")
        self.path = path


class ContractNotFoundError(MissingFileError):
    """Raised when no loaded contract declares the requested service."""

    def __init__(self, service: str) -> None:
        super().__init__(service, what="contract for service")
        self.service = service


class ManifestError(RuntimeFault):
    """Raised when a run manifest is malformed."""

    kind = ConditionKind.MANIFEST_INVALID

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class InternalRuntimeError(RuntimeFault):
    """Raised in place of an unexpected exception that escaped a run."""

    kind = ConditionKind.INTERNAL_ERROR

    def __init__(self, error: Exception) -> None:
        super().__init__(f"{type(error).__name__}: {error}")
        self.error = error
