"""Bootstrap (composition root) for the UMA runtime.

Assembles the runtime: wires concrete adapters to the service layer, reads
configuration and run manifests, and exposes small factories for the
entrypoints.

Import rules:
- Entry points import *this* package (not adapters/service_layer/interfaces/domain).
- This package may import: `uma_runtime.adapters`, `uma_runtime.service_layer`,
  `uma_runtime.interfaces`, `uma_runtime.domain`, and `uma_runtime.config`.
- Inner layers must not import `uma_runtime.bootstrap`.
"""

from .bootstrap import RuntimeContainer, bootstrap, build_drift_auditor
from .manifest import load_manifest

__all__ = ["RuntimeContainer", "bootstrap", "build_drift_auditor", "load_manifest"]
