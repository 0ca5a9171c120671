"""Entrypoints (inbound adapters) for the UMA runtime.

Expose the runtime to the outside world through the ``uma`` command. Parse and
validate inputs, call the bootstrap factories, and present results.
"""
