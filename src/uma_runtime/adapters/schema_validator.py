"""JSON Schema validation of event payloads.

Schemas are referenced by name from contracts (``image.analyzed.v1``) and
resolved to ``<schemas_dir>/<name>.json``. Each schema is loaded and compiled
once. A schema that cannot be compiled means the contract that references it
is malformed, which is fatal; a payload that fails validation is not an error
here, it is reported back so the caller can decide whether to abort.
"""

import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError, ValidationError
from jsonschema.protocols import Validator
from jsonschema.validators import validator_for

from uma_runtime.domain.errors import ContractMalformedError, MissingFileError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating one payload."""

    ok: bool
    errors: tuple[str, ...] = ()

    @property
    def reason(self) -> str:
        """All errors joined into one human-readable string."""
        return "; ".join(self.errors)


def format_error(error: ValidationError) -> str:
    """Render a validation error as ``<json path>: <message>``."""
    return f"{error.json_path}: {error.message}"


def compile_schema(schema: Mapping[str, Any], source: str) -> Validator:
    """Check ``schema`` against its dialect's meta-schema and compile it.

    The dialect is taken from ``$schema``; draft 7 is assumed when absent.

    Raises:
        ContractMalformedError: If the schema itself is invalid.
    """
    cls = validator_for(schema, default=Draft7Validator)
    try:
        cls.check_schema(schema)
    except SchemaError as e:
        raise ContractMalformedError(source, f"invalid schema: {e.message}") from e
    return cls(schema)


def validate_with(validator: Validator, payload: Any) -> ValidationResult:
    """Validate ``payload`` and aggregate every error, ordered by location."""
    errors = sorted(validator.iter_errors(payload), key=lambda e: (e.json_path, e.message))
    if not errors:
        return ValidationResult(ok=True)
    return ValidationResult(ok=False, errors=tuple(format_error(e) for e in errors))


class JsonSchemaValidator:
    """Validate payloads against named schemas from a directory.

    Args:
        schemas_dir: Directory holding ``<ref>.json`` schema files.
    """

    def __init__(self, schemas_dir: str | os.PathLike[str]) -> None:
        self._dir = Path(schemas_dir)
        self._compiled: dict[str, Validator] = {}

    def compile(self, ref: str) -> Validator:
        """Load and compile the schema ``ref`` (once).

        Raises:
            MissingFileError: If the schema file does not exist.
            ContractMalformedError: If it is not valid JSON or not a valid schema.
        """
        if (validator := self._compiled.get(ref)) is not None:
            return validator

        path = self._path_for(ref)
        try:
            with path.open(encoding="utf-8") as f:
                schema = json.load(f)
        except FileNotFoundError:
            raise MissingFileError(str(path), what="schema") from None
        except json.JSONDecodeError as e:
            raise ContractMalformedError(str(path), f"schema is not valid JSON: {e}") from e
        if not isinstance(schema, dict):
            raise ContractMalformedError(str(path), "schema must be a JSON object")

        validator = compile_schema(schema, str(path))
        self._compiled[ref] = validator
        logger.debug("schema.compiled %s", ref)
        return validator

    def preload(self, refs: Iterable[str]) -> None:
        """Compile every schema in ``refs`` up front."""
        for ref in refs:
            self.compile(ref)

    def validate(self, ref: str, payload: Any) -> ValidationResult:
        """Validate ``payload`` against schema ``ref``.

        Returns:
            ``ValidationResult(ok=True)`` or a failed result listing every error.
        """
        return validate_with(self.compile(ref), payload)

    def _path_for(self, ref: str) -> Path:
        if not ref or "/" in ref or "\\" in ref or ref in {".", ".."}:
            raise ContractMalformedError(ref or "<empty>", "invalid schema reference")
        return self._dir / f"{ref}.json"
