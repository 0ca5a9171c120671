"""Contract store backed by a directory of YAML contract files.

Every ``*.contract.yaml`` file in the contracts directory is one capability
contract. Files are read in name order so that a given directory always
yields the same contract sequence, and so the same bindings.
"""

import json
import logging
import os
from importlib import resources
from pathlib import Path

import yaml
from jsonschema.protocols import Validator

from uma_runtime.domain.contracts import Contract, parse_contract
from uma_runtime.domain.errors import (
    ContractMalformedError,
    ContractNotFoundError,
    MissingFileError,
)

from .schema_validator import compile_schema, validate_with

logger = logging.getLogger(__name__)

CONTRACT_GLOB = "*.contract.yaml"
META_SCHEMA_RESOURCE = "contract.schema.json"


def load_meta_validator() -> Validator:
    """Compile the packaged contract meta-schema."""
    text = (
        resources.files("uma_runtime.resources")
        .joinpath(META_SCHEMA_RESOURCE)
        .read_text(encoding="utf-8")
    )
    return compile_schema(json.loads(text), META_SCHEMA_RESOURCE)


class ContractStore:
    """Load and index capability contracts.

    Args:
        contracts_dir: Directory containing ``*.contract.yaml`` files.
        meta_validator: Validator for the contract meta-schema. Defaults to
            the packaged one.
    """

    def __init__(
        self,
        contracts_dir: str | os.PathLike[str],
        meta_validator: Validator | None = None,
    ) -> None:
        self._dir = Path(contracts_dir)
        self._meta = meta_validator
        self._contracts: tuple[Contract, ...] | None = None
        self._by_name: dict[str, Contract] = {}

    @property
    def directory(self) -> Path:
        """The directory contracts are read from."""
        return self._dir

    def load_all(self) -> tuple[Contract, ...]:
        """Load every contract in the directory (once).

        Returns:
            The contracts, ordered by file name.

        Raises:
            MissingFileError: If the contracts directory does not exist.
            ContractMalformedError: If a file is not valid YAML, fails the
                meta-schema, or two files declare the same service name.
        """
        if self._contracts is not None:
            return self._contracts

        if not self._dir.is_dir():
            raise MissingFileError(str(self._dir), what="contracts directory")

        meta = self._meta or load_meta_validator()
        contracts: list[Contract] = []
        by_name: dict[str, Contract] = {}
        for path in sorted(self._dir.glob(CONTRACT_GLOB)):
            contract = self._load_file(path, meta)
            if (previous := by_name.get(contract.name)) is not None:
                raise ContractMalformedError(
                    str(path),
                    f"duplicate contract name {contract.name!r} "
                    f"(already declared in {previous.source})",
                )
            by_name[contract.name] = contract
            contracts.append(contract)
            logger.debug("contract.loaded %s@%s", contract.name, contract.version)

        if not contracts:
            logger.warning("contract.none found in %s", self._dir)

        self._contracts = tuple(contracts)
        self._by_name = by_name
        return self._contracts

    def get(self, name: str) -> Contract:
        """Return the contract declaring service ``name``.

        Raises:
            ContractNotFoundError: If no loaded contract has that name.
        """
        self.load_all()
        try:
            return self._by_name[name]
        except KeyError:
            raise ContractNotFoundError(name) from None

    def names(self) -> tuple[str, ...]:
        """Return the names of all loaded contracts, in load order."""
        return tuple(c.name for c in self.load_all())

    @staticmethod
    def _load_file(path: Path, meta: Validator) -> Contract:
        try:
            with path.open(encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ContractMalformedError(str(path), f"invalid YAML: {e}") from e

        result = validate_with(meta, document)
        if not result.ok:
            raise ContractMalformedError(str(path), result.reason)
        return parse_contract(document, source=str(path))
