"""Interfaces (application boundary) for the UMA runtime.

Defines framework-free ports: ABCs and small DTOs shared by the service layer
and adapters (ID generators, audit logs, telemetry stores, metrics
forwarders, capability implementations). Business rules stay out of this
package.

Dependency rule: this package is independent, do not import from any
`uma_runtime.*` modules. It may be imported by `uma_runtime.service_layer`,
`uma_runtime.adapters`, and `uma_runtime.bootstrap`.
"""
