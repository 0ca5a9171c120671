"""Service layer for the UMA runtime.

Implements the run use-case: policy enforcement, capability resolution and
decoration, telemetry collection, drift auditing and the run orchestrator.
Calls domain objects and the ports defined in `uma_runtime.interfaces`.

Dependency rule: may import `uma_runtime.domain` and `uma_runtime.interfaces`,
but not `uma_runtime.adapters` or `uma_runtime.entrypoints`.
"""
