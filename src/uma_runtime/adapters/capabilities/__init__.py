"""Concrete capability implementations."""

from .python_callable import PythonCallable
from .wasi import WasiModule

__all__ = ["PythonCallable", "WasiModule"]
