"""Policy enforcement.

The policy digest is logged on every run as an advisory fingerprint; it is
never compared against a pinned value. Deny rules are always evaluated, and
the fail mode decides whether a hit aborts the run.
"""

import json
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from uma_runtime.domain.contracts import Contract
from uma_runtime.domain.errors import (
    ConditionKind,
    ContractMalformedError,
    MissingFileError,
    PolicyViolationError,
)
from uma_runtime.domain.policy import (
    FailMode,
    PolicyDocument,
    PolicyVerdict,
    evaluate_deny_rules,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PolicyReport:
    """Outcome of a policy check that did not abort."""

    digest: str
    fail_mode: FailMode
    verdict: PolicyVerdict

    @property
    def violated(self) -> bool:
        """True when a deny rule matched (only possible under fail-open)."""
        return not self.verdict.ok


class PolicyEngine:
    """Enforce an organization policy document.

    Args:
        document: The parsed policy document.
        fail_mode: What to do when a deny rule matches.
    """

    def __init__(
        self, document: PolicyDocument, fail_mode: FailMode = FailMode.CLOSED
    ) -> None:
        self.document = document
        self.fail_mode = fail_mode

    @classmethod
    def from_file(
        cls, path: str | os.PathLike[str], fail_mode: FailMode = FailMode.CLOSED
    ) -> "PolicyEngine":
        """Load the policy document at ``path``.

        Raises:
            MissingFileError: If the file does not exist.
            ContractMalformedError: If it is not valid JSON or has the wrong shape.
        """
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            raise MissingFileError(str(path), what="policy document") from None
        except json.JSONDecodeError as e:
            raise ContractMalformedError(str(path), f"policy is not valid JSON: {e}") from e
        return cls(PolicyDocument.from_dict(raw, source=str(path)), fail_mode)

    @property
    def digest(self) -> str:
        """The policy document digest."""
        return self.document.digest

    def enforce(self, contracts: Iterable[Contract]) -> PolicyReport:
        """Evaluate the deny rules against ``contracts``.

        Returns:
            The report, when the run may proceed.

        Raises:
            PolicyViolationError: If a rule matched under fail-closed.
        """
        digest = self.digest
        logger.info("policy.digest %s", digest)

        verdict = evaluate_deny_rules(contracts, self.document.rules)
        if verdict.ok:
            logger.info("policy.passed %d rule(s)", len(self.document.rules))
        elif self.fail_mode is FailMode.CLOSED:
            logger.error("%s %s", ConditionKind.POLICY_VIOLATION, verdict.reason)
            raise PolicyViolationError(verdict.reason)
        else:
            logger.warning(
                "%s %s continuing due to fail-open",
                ConditionKind.POLICY_VIOLATION,
                verdict.reason,
            )
        return PolicyReport(digest=digest, fail_mode=self.fail_mode, verdict=verdict)
