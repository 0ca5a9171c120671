"""Telemetry store adapters."""

from .jsonl import JsonlTelemetryStore
from .memory import InMemoryTelemetryStore

__all__ = ["InMemoryTelemetryStore", "JsonlTelemetryStore"]
