"""Runtime options shared by the uma commands.

Each option overrides the environment variable named in its help; options
that are not given leave the environment's value in place.
"""

import dataclasses
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from uma_runtime.config import RuntimeSettings, settings_from_env
from uma_runtime.domain.policy import FailMode

F = TypeVar("F", bound=Callable[..., Any])

_OPTIONS = (
    click.option(
        "--workspace",
        "-w",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Workspace root holding contracts/ and logs/ [env: UMA_WORKSPACE; default: .].",
    ),
    click.option(
        "--fail-mode",
        type=str,
        default=None,
        help=(
            "Policy enforcement: 'closed' aborts on a deny-rule hit, any other "
            "value warns and continues [env: POLICY_FAIL_MODE; default: closed]."
        ),
    ),
    click.option(
        "--otlp-endpoint",
        type=str,
        default=None,
        help="Collector URL metrics are pushed to, best effort [env: OTLP_ENDPOINT].",
    ),
    click.option(
        "--retry/--no-retry",
        "enable_retry",
        default=None,
        help="Retry failed capability calls up to 3 times [env: UMA_ENABLE_RETRY].",
    ),
    click.option(
        "--cache/--no-cache",
        "enable_cache",
        default=None,
        help="Memoize capability results within a run [env: UMA_ENABLE_CACHE].",
    ),
    click.option(
        "--runtime-id",
        type=str,
        default=None,
        help="Runtime identifier stamped on envelopes [env: UMA_RUNTIME_ID].",
    ),
)


def runtime_options(func: F) -> F:
    """Add the shared runtime options to a command."""
    for option in reversed(_OPTIONS):
        func = option(func)
    return func


def settings_with_overrides(  # pylint: disable=too-many-arguments
    *,
    workspace: Path | None,
    fail_mode: str | None,
    otlp_endpoint: str | None,
    enable_retry: bool | None,
    enable_cache: bool | None,
    runtime_id: str | None,
) -> RuntimeSettings:
    """Read settings from the environment and apply the given overrides."""
    overrides: dict[str, Any] = {
        "workspace": workspace,
        "fail_mode": FailMode.parse(fail_mode) if fail_mode is not None else None,
        "otlp_endpoint": otlp_endpoint,
        "enable_retry": enable_retry,
        "enable_cache": enable_cache,
        "runtime_id": runtime_id,
    }
    return dataclasses.replace(
        settings_from_env(), **{k: v for k, v in overrides.items() if v is not None}
    )
