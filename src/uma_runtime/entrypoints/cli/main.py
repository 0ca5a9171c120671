"""uma CLI entry point.

Defines the top-level ``uma`` command (via Click-Extra) and registers the
runtime subcommands:

- ``uma run MANIFEST``: execute a producer and its subscribers.
- ``uma validate``: check contracts, schemas, policy and bindings.
- ``uma audit``: compare recorded p99 latency with a target.

Examples
    $ uma --version
    $ uma -v run manifests/image-pipeline.yaml
    $ POLICY_FAIL_MODE=open uma validate
    $ uma audit --target-ms 75
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir

from uma_runtime import __version__
from uma_runtime.logging import (
    config_console_handler,
    config_flight_recorder,
    log_startup,
)

from .audit import audit as audit_command
from .helpers.log_level_parser import parse_log_level
from .run import run as run_command
from .validate import validate as validate_command

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """UMA runtime command-line interface.

    Runs capability modules that talk through typed events. Wiring is derived
    from declarative contracts, every payload is validated against its schema,
    organization policy is enforced before anything executes, and each run
    leaves an ordered, auditable trail of envelopes, lifecycle records and
    latency telemetry.
    """


EPILOG = "\b\n" + "\n".join(
    [
        f"{click.style('Environment:', fg='blue', bold=True, underline=True)}",
        "  POLICY_FAIL_MODE   closed (default) or open",
        "  OTLP_ENDPOINT      metrics collector URL",
        "  UMA_ENABLE_RETRY   retry failed capability calls",
        "  UMA_ENABLE_CACHE   cache capability results within a run",
        "  UMA_RUNTIME_ID     runtime identifier on envelopes",
        "  UMA_WORKSPACE      workspace root",
    ]
)


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
    epilog=EPILOG,
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help=(
        "Increase the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help=(
        "Decrease the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Enable debug mode (enables extra developer diagnostics beyond -vvv).",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to log file (overrides default flight recorder path).",
    default=Path(user_log_dir("uma", appauthor=False)) / "latest.log",
    envvar="UMA_LOG_PATH",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--flight-recorder-capacity",
    type=int,
    default=2000,
    hidden=True,
    envvar="UMA_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Capacity of the flight recorder (in number of log records).",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Enable the in-memory flight recorder. Keeps the last N log records "
        "(tunable via UMA_FLIGHT_RECORDER_CAPACITY) at DEBUG granularity (unaffected by -v/-q) "
        "and writes them to --log-path when a WARNING/ERROR occurs, or on clean exit "
        "if --force-flush is set. Use --no-flight-recorder to disable."
    ),
    default=True,
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush_flight_recorder",
    is_flag=True,
    help=(
        "Force-flush the flight recorder buffer to --log-path on program exit. "
        "Normally the buffer only dumps on WARNING/ERROR; console output is unaffected."
    ),
    default=False,
    show_default=True,
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    help=(
        "Set MINIMUM LEVEL for specific LOGGERS (NAME=LEVEL). This changes the "
        "logger's own level, so it applies to BOTH console and flight-recorder. "
        "Repeatable (e.g. -L httpx=INFO -L uma_runtime.adapters=DEBUG)."
    ),
    default=("httpx=WARNING", "httpcore=WARNING"),
    show_default=True,
    show_envvar=True,
)
@clickx.pass_context
def uma(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush_flight_recorder: bool,
    logger_levels: dict[str, int],
) -> None:
    """UMA runtime command-line interface."""

    # 0) compute effective verbosity
    base_level = logging.WARNING
    level = base_level - (10 * verbose_count) + (10 * quiet_count)
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = []

    # 1) console handler
    use_color = ctx.color is not False  # None or True => allow color
    handlers.append(
        config_console_handler(level=level, debug_mode=debug, color=use_color)
    )

    # 2) flight recorder
    if flight_recorder:
        handlers.append(
            config_flight_recorder(
                path=log_path,
                capacity=flight_recorder_capacity,
                flush_on_close=force_flush_flight_recorder,
            )
        )

    # 3) root logger captures everything; handlers filter
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    # 4) per-logger levels
    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)

    # 5) startup info
    log_startup(
        logger,
        app_version=__version__,
        level=level,
        handlers=handlers,
        log_path=log_path,
        flight_recorder=flight_recorder,
        flight_capacity=flight_recorder_capacity if flight_recorder else None,
        force_flush_fr=force_flush_flight_recorder,
        logger_levels=logger_levels,
    )

    # 6) flush and close handlers after the command returns
    ctx.call_on_close(logging.shutdown)


uma.add_command(run_command)
uma.add_command(validate_command)
uma.add_command(audit_command)
