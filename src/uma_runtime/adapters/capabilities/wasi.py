"""Sandboxed capability implementation run through a WASI runtime.

The module is executed as a single blocking subprocess of the runtime binary
(``wasmtime <module>``). The request is written to its stdin as JSON and the
result is read from its stdout as JSON.
"""

import json
import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Any

from uma_runtime.domain.errors import CapabilityInvocationError
from uma_runtime.interfaces.capability import Implementation, Unavailable

logger = logging.getLogger(__name__)

WASI_RUNTIME_MISSING = "WASI_RUNTIME_MISSING"
MODULE_MISSING = "MODULE_MISSING"

DEFAULT_RUNTIME = "wasmtime"


class WasiModule(Implementation):
    """Run a capability as a WASI module under an external runtime.

    Args:
        module_path: Path to the compiled ``.wasm`` module.
        runtime: Name or path of the WASI runtime executable.
        timeout: Optional subprocess timeout in seconds.
    """

    name = "wasi"
    host = "wasi"

    def __init__(
        self,
        module_path: str | os.PathLike[str],
        runtime: str = DEFAULT_RUNTIME,
        timeout: float | None = None,
    ) -> None:
        self.module_path = Path(module_path)
        self.runtime = runtime
        self.timeout = timeout

    def check_available(self) -> Unavailable | None:
        if shutil.which(self.runtime) is None:
            return Unavailable(WASI_RUNTIME_MISSING, f"{self.runtime} not on PATH")
        if not self.module_path.is_file():
            return Unavailable(MODULE_MISSING, str(self.module_path))
        return None

    def invoke(self, request: Any) -> Any:
        executable = shutil.which(self.runtime) or self.runtime
        logger.debug("wasi.invoke %s %s", executable, self.module_path)
        try:
            completed = subprocess.run(
                [executable, str(self.module_path)],
                input=json.dumps(request).encode("utf-8"),
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise CapabilityInvocationError(self.name, str(e)) from e

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise CapabilityInvocationError(
                self.name, f"exit status {completed.returncode}: {stderr}"
            )
        try:
            return json.loads(completed.stdout)
        except json.JSONDecodeError as e:
            raise CapabilityInvocationError(
                self.name, f"output is not valid JSON: {e}"
            ) from e

    def __repr__(self) -> str:
        return f"WasiModule({str(self.module_path)!r}, runtime={self.runtime!r})"
