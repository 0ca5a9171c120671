"""``uma audit``: compare recorded tail latency with its target."""

from __future__ import annotations

import json
from pathlib import Path

import click

from uma_runtime.bootstrap import build_drift_auditor
from uma_runtime.config import WorkspaceLayout, settings_from_env
from uma_runtime.service_layer.drift import DEFAULT_TARGET_MS, DriftStatus

from .helpers import success, warn


@click.command()
@click.option(
    "--workspace",
    "-w",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Workspace root holding logs/telemetry.jsonl [env: UMA_WORKSPACE; default: .].",
)
@click.option(
    "--target-ms",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TARGET_MS,
    show_default=True,
    help="p99 latency target in milliseconds.",
)
def audit(workspace: Path | None, target_ms: float) -> None:
    """Audit p99 call latency recorded in the workspace telemetry.

    Drift is informational: the command exits 0 whatever the outcome and
    prints the report as JSON on stdout.
    """
    root = workspace if workspace is not None else settings_from_env().workspace
    report = build_drift_auditor(WorkspaceLayout(root), target_ms).audit()

    click.echo(
        json.dumps(
            {
                "status": str(report.status),
                "p99": report.p99,
                "target": report.target,
                "count": report.count,
            }
        )
    )
    if report.status is DriftStatus.SKIPPED:
        warn("No latency samples recorded; drift audit skipped.")
    elif report.status is DriftStatus.DRIFT:
        warn(f"p99 latency {report.p99:.2f}ms exceeds target {report.target:.2f}ms.")
    else:
        success(f"p99 latency {report.p99:.2f}ms within target {report.target:.2f}ms.")
