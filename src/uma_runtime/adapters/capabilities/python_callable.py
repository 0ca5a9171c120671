"""Host-native capability implementation backed by a Python callable."""

import importlib
import json
import logging
from collections.abc import Callable
from typing import Any

from uma_runtime.domain.errors import CapabilityInvocationError
from uma_runtime.interfaces.capability import Implementation, Unavailable

logger = logging.getLogger(__name__)

HOST_IMPORT_FAILED = "HOST_IMPORT_FAILED"


def load_target(target: str) -> Callable[[Any], Any]:
    """Import ``"package.module:function"`` and return the function.

    Raises:
        ImportError: If the module cannot be imported.
        AttributeError: If the module has no such attribute.
        TypeError: If the target is not a callable, or not of the right form.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise TypeError(f"target {target!r} is not of the form 'module:function'")
    obj: Any = importlib.import_module(module_name)
    for part in attr.split("."):
        obj = getattr(obj, part)
    if not callable(obj):
        raise TypeError(f"target {target!r} is not callable")
    return obj


class PythonCallable(Implementation):
    """Run a capability as an in-process Python function.

    Args:
        target: ``"package.module:function"``; the function receives the
            request document and returns the result document.
    """

    name = "python"
    host = "native"

    def __init__(self, target: str) -> None:
        self.target = target
        self._func: Callable[[Any], Any] | None = None

    def check_available(self) -> Unavailable | None:
        try:
            self._func = load_target(self.target)
        except (ImportError, AttributeError, TypeError) as e:
            return Unavailable(HOST_IMPORT_FAILED, f"{self.target}: {e}")
        return None

    def invoke(self, request: Any) -> Any:
        func = self._load()
        try:
            result = func(request)
        except CapabilityInvocationError:
            raise
        except Exception as e:  # pylint: disable=broad-except
            raise CapabilityInvocationError(
                self.name, f"{self.target} raised {type(e).__name__}: {e}"
            ) from e
        try:
            json.dumps(result)
        except (TypeError, ValueError) as e:
            raise CapabilityInvocationError(
                self.name, f"{self.target} returned a non-JSON result: {e}"
            ) from e
        return result

    def __repr__(self) -> str:
        return f"PythonCallable({self.target!r})"

    def _load(self) -> Callable[[Any], Any]:
        if self._func is None:
            try:
                self._func = load_target(self.target)
            except (ImportError, AttributeError, TypeError) as e:
                raise CapabilityInvocationError(self.name, f"{self.target}: {e}") from e
        return self._func
