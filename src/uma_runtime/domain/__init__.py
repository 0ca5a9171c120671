"""Domain layer for the UMA runtime.

Contains the rules of the runtime: contracts and their pattern-matched
bindings, policy evaluation, event envelopes, the run lifecycle and the
error taxonomy. This package is deliberately technology-agnostic and does no
I/O.

Dependency rule: do not import from `uma_runtime.adapters` or
`uma_runtime.entrypoints`.
"""
