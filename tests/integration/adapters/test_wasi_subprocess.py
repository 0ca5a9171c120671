"""Integration tests for WASI modules against a stand-in runtime executable.

The stand-in is a shell script installed as the runtime; it receives the
module path as its argument and the request on stdin, like ``wasmtime`` does.
"""

import stat
import sys
from pathlib import Path

import pytest

from uma_runtime.adapters.capabilities import WasiModule
from uma_runtime.adapters.capabilities.wasi import MODULE_MISSING, WASI_RUNTIME_MISSING
from uma_runtime.domain.errors import CapabilityInvocationError

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="needs /bin/sh")


def install_runtime(tmp_path: Path, body: str) -> Path:
    """Write an executable shell script acting as the WASI runtime."""
    script = tmp_path / "fake-wasmtime"
    script.write_text(f"#!/bin/sh\n{body}\n")
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    return script


@pytest.fixture
def module(tmp_path: Path) -> Path:
    """An (empty) module file."""
    path = tmp_path / "tagger.wasm"
    path.write_bytes(b"\0asm")
    return path


def test_echo_round_trip(tmp_path: Path, module: Path) -> None:
    """The request goes in on stdin and the result comes back on stdout."""
    runtime = install_runtime(tmp_path, "cat")
    wasi = WasiModule(module, runtime=str(runtime))
    assert wasi.check_available() is None
    assert wasi.invoke({"id": "img-1", "bytes": [1, 2]}) == {"id": "img-1", "bytes": [1, 2]}


def test_module_path_passed(tmp_path: Path, module: Path) -> None:
    """The module path is the runtime's only argument."""
    runtime = install_runtime(tmp_path, 'printf \'{"module": "%s"}\' "$1"')
    assert WasiModule(module, runtime=str(runtime)).invoke({}) == {"module": str(module)}


def test_non_zero_exit(tmp_path: Path, module: Path) -> None:
    """A failing module reports its exit status and stderr."""
    runtime = install_runtime(tmp_path, "echo trap >&2\nexit 3")
    with pytest.raises(CapabilityInvocationError, match="exit status 3: trap"):
        WasiModule(module, runtime=str(runtime)).invoke({})


def test_non_json_output(tmp_path: Path, module: Path) -> None:
    """Output that is not JSON is a capability failure."""
    runtime = install_runtime(tmp_path, "echo hello")
    with pytest.raises(CapabilityInvocationError, match="not valid JSON"):
        WasiModule(module, runtime=str(runtime)).invoke({})


def test_timeout(tmp_path: Path, module: Path) -> None:
    """A module exceeding its timeout is a capability failure."""
    runtime = install_runtime(tmp_path, "exec sleep 5")
    with pytest.raises(CapabilityInvocationError):
        WasiModule(module, runtime=str(runtime), timeout=0.2).invoke({})


def test_unavailable(tmp_path: Path, module: Path) -> None:
    """Missing runtimes and modules are reported before invocation."""
    missing_runtime = WasiModule(module, runtime=str(tmp_path / "no-such-runtime"))
    assert missing_runtime.check_available().reason_code == WASI_RUNTIME_MISSING
    runtime = install_runtime(tmp_path, "cat")
    missing_module = WasiModule(tmp_path / "absent.wasm", runtime=str(runtime))
    assert missing_module.check_available().reason_code == MODULE_MISSING
