"""``uma run``: execute one run from a run manifest.

The finalized lifecycle record is printed as JSON on **stdout**; progress and
warnings go to stderr. A fatal condition prints a single ``uma.fatal`` line
on stderr and exits with the code for its kind.
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from uma_runtime.bootstrap import bootstrap, load_manifest
from uma_runtime.domain.errors import RuntimeFault

from .helpers import report_fault, runtime_options, settings_with_overrides, success, warn


@click.command()
@click.argument("manifest", type=click.Path(dir_okay=False, path_type=Path))
@runtime_options
@click.pass_context
def run(ctx: click.Context, manifest: Path, **options: object) -> None:
    """Run the producer and subscribers declared in MANIFEST."""
    settings = settings_with_overrides(**options)  # type: ignore[arg-type]
    try:
        plan = load_manifest(manifest).to_plan()
        container = bootstrap(settings)
    except RuntimeFault as fault:
        ctx.exit(report_fault(fault))

    try:
        result = container.orchestrator.run(plan)
    except RuntimeFault as fault:
        ctx.exit(report_fault(fault))
    finally:
        container.close()

    record = result.record
    for choice in record.bindings_chosen:
        if choice.degraded:
            skipped = ", ".join(f"{f.implementation} ({f.reason_code})" for f in choice.fallbacks)
            warn(f"{choice.capability} ran degraded on {choice.implementation}; skipped {skipped}")
    click.echo(json.dumps(record.to_dict(), indent=2))
    success(f"Run {record.run_id} finalized (logical clock {record.logical_clock}).")
