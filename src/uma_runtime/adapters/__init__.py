"""Adapters (infrastructure) for the UMA runtime.

Provide concrete implementations of the ports: local-filesystem and in-memory
audit logs and telemetry stores, the YAML contract store, the JSON Schema
validator, metrics forwarders and capability implementations.

Dependency rule: may import `uma_runtime.domain` and
`uma_runtime.interfaces`; the domain must not import this package.
"""
