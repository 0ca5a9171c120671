"""Unit tests for policy enforcement."""

import json
import logging
from pathlib import Path

import pytest

from uma_runtime.domain.contracts import parse_contract
from uma_runtime.domain.errors import ContractMalformedError, MissingFileError, PolicyViolationError
from uma_runtime.domain.policy import FailMode, PolicyDocument, policy_digest
from uma_runtime.service_layer.policy_engine import PolicyEngine

DOCUMENT = {
    "deny": [
        {"rule": "no-browser-ai", "if": {"service": "ai.model.evaluator", "placement": "browser"}}
    ]
}
EVALUATOR = parse_contract(
    {"name": "ai.model.evaluator", "version": "1.0.0", "constraints": {"placement": ["browser"]}}
)
TAGGER = parse_contract({"name": "image.tagger", "version": "1.0.0"})


def engine(fail_mode: FailMode = FailMode.CLOSED) -> PolicyEngine:
    """Engine over the sample document."""
    return PolicyEngine(PolicyDocument.from_dict(DOCUMENT), fail_mode)


def test_pass_logs_digest(caplog: pytest.LogCaptureFixture) -> None:
    """A clean check logs the digest and reports no violation."""
    with caplog.at_level(logging.INFO):
        report = engine().enforce([TAGGER])
    assert report.digest == policy_digest(DOCUMENT)
    assert not report.violated
    assert f"policy.digest {report.digest}" in caplog.text


def test_fail_closed_raises() -> None:
    """Under fail-closed a hit aborts."""
    with pytest.raises(PolicyViolationError, match="policy.deny no-browser-ai"):
        engine().enforce([TAGGER, EVALUATOR])


def test_fail_open_warns_and_continues(caplog: pytest.LogCaptureFixture) -> None:
    """Under fail-open a hit is a warning and the verdict is returned."""
    with caplog.at_level(logging.WARNING):
        report = engine(FailMode.OPEN).enforce([EVALUATOR])
    assert report.violated
    assert report.fail_mode is FailMode.OPEN
    assert "policy_violation policy.deny no-browser-ai" in caplog.text
    assert "fail-open" in caplog.text


def test_digest_logged_even_when_violated(caplog: pytest.LogCaptureFixture) -> None:
    """The digest is logged before the rules are evaluated."""
    with caplog.at_level(logging.INFO), pytest.raises(PolicyViolationError):
        engine().enforce([EVALUATOR])
    assert "policy.digest sha256:" in caplog.text


class TestFromFile:
    """Tests for loading the policy from disk."""

    @staticmethod
    def test_load(tmp_path: Path) -> None:
        """The file is parsed and the fail mode kept."""
        path = tmp_path / "policy.json"
        path.write_text(json.dumps(DOCUMENT, indent=4))
        loaded = PolicyEngine.from_file(path, FailMode.OPEN)
        assert loaded.fail_mode is FailMode.OPEN
        assert loaded.digest == policy_digest(DOCUMENT)

    @staticmethod
    def test_missing(tmp_path: Path) -> None:
        """A missing policy file is a missing-file condition."""
        with pytest.raises(MissingFileError, match="policy document not found"):
            PolicyEngine.from_file(tmp_path / "absent.json")

    @staticmethod
    def test_invalid_json(tmp_path: Path) -> None:
        """An unparsable policy file is malformed."""
        path = tmp_path / "policy.json"
        path.write_text("{")
        with pytest.raises(ContractMalformedError, match="not valid JSON"):
            PolicyEngine.from_file(path)
