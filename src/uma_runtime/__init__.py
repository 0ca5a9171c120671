"""UMA runtime

A contract-driven runtime for independently deployable capability modules.
It binds publishers to subscribers from their declarative contracts,
validates every payload that crosses a boundary, enforces organization-wide
policy before execution and records an ordered, auditable trail of each run.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
