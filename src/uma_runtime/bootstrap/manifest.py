"""Run manifests.

A run manifest is a small YAML document naming the producer stage, its input
payload, the subscriber stages, and the candidate implementations of each
capability in preference order::

    producer:
      service: image.tagger
      input: {id: img-001, bytes: [0, 1, 2]}
    subscribers:
      - service: telemetry.logger
      - service: edge.cache
        event: cache.persisted.v1
    implementations:
      image.tagger:
        - kind: wasi
          module: services/image.tagger/image_tagger.wasm
        - kind: python
          target: mypkg.tagger:analyze

Relative module paths are resolved against the manifest's directory.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from uma_runtime.adapters.capabilities import PythonCallable, WasiModule
from uma_runtime.adapters.capabilities.wasi import DEFAULT_RUNTIME
from uma_runtime.domain.errors import ManifestError, MissingFileError
from uma_runtime.interfaces.capability import Implementation
from uma_runtime.service_layer.orchestrator import RunPlan, StageSpec

IMPLEMENTATION_KINDS = ("wasi", "python")


@dataclass(frozen=True, slots=True)
class ImplementationSpec:
    """One candidate implementation as declared in a manifest."""

    kind: str
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RunManifest:
    """A parsed run manifest."""

    producer: StageSpec
    payload: Any
    subscribers: tuple[StageSpec, ...]
    implementations: Mapping[str, tuple[ImplementationSpec, ...]]
    base_dir: Path

    def to_plan(self) -> RunPlan:
        """Build the run plan, instantiating every declared implementation."""
        return RunPlan(
            producer=self.producer,
            subscribers=self.subscribers,
            payload=self.payload,
            registry=build_registry(self.implementations, self.base_dir),
        )


def load_manifest(path: str | os.PathLike[str]) -> RunManifest:
    """Read and parse the manifest at ``path``.

    Raises:
        MissingFileError: If the file does not exist.
        ManifestError: If it is not valid YAML or has the wrong shape.
    """
    path = Path(path)
    source = str(path)
    try:
        with path.open(encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except FileNotFoundError:
        raise MissingFileError(source, what="run manifest") from None
    except yaml.YAMLError as e:
        raise ManifestError(source, f"invalid YAML: {e}") from e
    return parse_manifest(document, source, base_dir=path.parent)


def parse_manifest(
    document: Any, source: str = "<memory>", base_dir: Path = Path(".")
) -> RunManifest:
    """Parse a decoded manifest document.

    Raises:
        ManifestError: If the document has the wrong shape.
    """
    if not isinstance(document, Mapping):
        raise ManifestError(source, "manifest must be a mapping")

    producer_doc = document.get("producer")
    if not isinstance(producer_doc, Mapping):
        raise ManifestError(source, "'producer' must be a mapping")
    producer = _stage(producer_doc, source, "producer")

    subscriber_docs = document.get("subscribers")
    if subscriber_docs is None:
        subscriber_docs = []
    if not isinstance(subscriber_docs, list):
        raise ManifestError(source, "'subscribers' must be a list")
    subscribers = tuple(
        _stage(doc, source, f"subscribers[{i}]") for i, doc in enumerate(subscriber_docs)
    )

    impl_docs = document.get("implementations")
    if impl_docs is None:
        impl_docs = {}
    if not isinstance(impl_docs, Mapping):
        raise ManifestError(source, "'implementations' must be a mapping")
    implementations = {
        str(service): _implementations(candidates, source, str(service))
        for service, candidates in impl_docs.items()
    }

    return RunManifest(
        producer=producer,
        payload=producer_doc.get("input"),
        subscribers=subscribers,
        implementations=implementations,
        base_dir=base_dir,
    )


def build_registry(
    implementations: Mapping[str, tuple[ImplementationSpec, ...]], base_dir: Path
) -> dict[str, list[Implementation]]:
    """Instantiate the implementations declared for each capability."""
    return {
        service: [_build(spec, base_dir) for spec in specs]
        for service, specs in implementations.items()
    }


def _stage(document: Any, source: str, where: str) -> StageSpec:
    if not isinstance(document, Mapping):
        raise ManifestError(source, f"{where} must be a mapping")
    service = document.get("service")
    if not isinstance(service, str) or not service.strip():
        raise ManifestError(source, f"{where}.service must be a non-empty string")
    event = document.get("event")
    if event is not None and not isinstance(event, str):
        raise ManifestError(source, f"{where}.event must be a string")
    return StageSpec(service=service.strip(), event=event)


def _implementations(
    candidates: Any, source: str, service: str
) -> tuple[ImplementationSpec, ...]:
    if not isinstance(candidates, list):
        raise ManifestError(source, f"implementations.{service} must be a list")
    specs = []
    for index, candidate in enumerate(candidates):
        where = f"implementations.{service}[{index}]"
        if not isinstance(candidate, Mapping):
            raise ManifestError(source, f"{where} must be a mapping")
        kind = candidate.get("kind")
        if kind not in IMPLEMENTATION_KINDS:
            raise ManifestError(
                source, f"{where}.kind must be one of {', '.join(IMPLEMENTATION_KINDS)}"
            )
        required = "module" if kind == "wasi" else "target"
        if not isinstance(candidate.get(required), str):
            raise ManifestError(source, f"{where}.{required} must be a string")
        options = {k: v for k, v in candidate.items() if k != "kind"}
        specs.append(ImplementationSpec(kind=kind, options=options))
    return tuple(specs)


def _build(spec: ImplementationSpec, base_dir: Path) -> Implementation:
    if spec.kind == "wasi":
        module = Path(spec.options["module"])
        if not module.is_absolute():
            module = base_dir / module
        return WasiModule(module, runtime=spec.options.get("runtime", DEFAULT_RUNTIME))
    return PythonCallable(spec.options["target"])
