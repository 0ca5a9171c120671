"""Organization policy documents and deny-rule evaluation.

A policy document lists deny rules of the form
``{"rule": <id>, "if": {"service": <name>, "placement": <env>}}``. Evaluation
is a pure function of the contracts and the rules, and the policy digest is a
SHA-256 over the document's canonical JSON form.
"""

import enum
import hashlib
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .contracts import Contract
from .errors import ContractMalformedError


class FailMode(enum.StrEnum):
    """How a policy violation is enforced."""

    CLOSED = "closed"
    OPEN = "open"

    @classmethod
    def parse(cls, value: str | None) -> "FailMode":
        """Interpret an externally supplied fail-mode flag.

        Unset, empty and ``closed`` select fail-closed; every other value opts
        in to fail-open. Surrounding whitespace and letter case are ignored,
        so ``"CLOSED"`` and ``" closed "`` stay fail-closed where an exact
        comparison would fall through to fail-open.
        """
        if value is None or value.strip().lower() in {"", cls.CLOSED.value}:
            return cls.CLOSED
        return cls.OPEN


@dataclass(frozen=True, slots=True)
class DenyRule:
    """A deny rule keyed on service name and placement."""

    rule_id: str
    service: str
    placement: str

    def matches(self, contract: Contract) -> bool:
        """Return True if ``contract`` may be placed where this rule denies it."""
        return self.service == contract.name and self.placement in contract.placement


@dataclass(frozen=True, slots=True)
class PolicyDocument:
    """A parsed policy document."""

    rules: tuple[DenyRule, ...]
    raw: Mapping[str, Any]

    @classmethod
    def from_dict(
        cls, document: Mapping[str, Any], source: str = "<memory>"
    ) -> "PolicyDocument":
        """Parse a policy document.

        Raises:
            ContractMalformedError: If the document or one of its rules has
                the wrong shape.
        """
        if not isinstance(document, Mapping):
            raise ContractMalformedError(source, "policy document must be a mapping")
        deny = document.get("deny") or []
        if not isinstance(deny, list):
            raise ContractMalformedError(source, "'deny' must be a list")
        rules = []
        for index, entry in enumerate(deny):
            try:
                condition = entry["if"]
                rules.append(
                    DenyRule(
                        rule_id=str(entry["rule"]),
                        service=str(condition["service"]),
                        placement=str(condition["placement"]),
                    )
                )
            except (KeyError, TypeError) as e:
                raise ContractMalformedError(
                    source, f"deny[{index}] is malformed: missing {e}"
                ) from e
        return cls(rules=tuple(rules), raw=document)

    @property
    def digest(self) -> str:
        """The content digest of this document."""
        return policy_digest(self.raw)


@dataclass(frozen=True, slots=True)
class PolicyHit:
    """A deny rule that matched a contract."""

    rule_id: str
    service: str
    placement: str

    def __str__(self) -> str:
        return f"policy.deny {self.rule_id} ({self.service}@{self.placement})"


@dataclass(frozen=True, slots=True)
class PolicyVerdict:
    """The outcome of evaluating deny rules."""

    ok: bool
    reason: str = ""
    hits: tuple[PolicyHit, ...] = ()


def canonical_json(document: Any) -> str:
    """Serialize ``document`` with sorted keys and no insignificant whitespace."""
    return json.dumps(
        document, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def policy_digest(document: Mapping[str, Any]) -> str:
    """Return the ``sha256:<hex>`` digest of a policy document's canonical form."""
    data = canonical_json(document).encode("utf-8")
    return "sha256:" + hashlib.sha256(data).hexdigest()


def evaluate_deny_rules(
    contracts: Iterable[Contract], rules: Iterable[DenyRule]
) -> PolicyVerdict:
    """Evaluate deny rules against every contract's declared placement.

    Args:
        contracts: The loaded contracts.
        rules: Deny rules, in document order.

    Returns:
        ``PolicyVerdict(ok=True)`` when nothing matches, otherwise a failed
        verdict whose reason lists every hit.
    """
    rules = tuple(rules)
    hits = tuple(
        PolicyHit(rule.rule_id, contract.name, rule.placement)
        for contract in contracts
        for rule in rules
        if rule.matches(contract)
    )
    if not hits:
        return PolicyVerdict(ok=True)
    return PolicyVerdict(ok=False, reason="; ".join(str(h) for h in hits), hits=hits)
