"""``uma validate``: check a workspace without running anything."""

from __future__ import annotations

import json

import click

from uma_runtime.bootstrap import bootstrap
from uma_runtime.domain.errors import RuntimeFault

from .helpers import report_fault, runtime_options, settings_with_overrides, success, warn


@click.command()
@runtime_options
@click.pass_context
def validate(ctx: click.Context, **options: object) -> None:
    """Validate contracts, schemas, policy and bindings.

    Prints a JSON summary on stdout: the policy digest, each contract with its
    version, and the bindings from every producer.
    """
    settings = settings_with_overrides(**options)  # type: ignore[arg-type]
    try:
        container = bootstrap(settings)
        try:
            report = container.check()
        finally:
            container.close()
    except RuntimeFault as fault:
        ctx.exit(report_fault(fault))

    summary = {
        "policyDigest": report.policy.digest,
        "contracts": {c.name: str(c.version) for c in report.contracts},
        "bindings": [
            {"event": b.event, "producer": b.producer, "subscriber": b.subscriber}
            for r in report.bindings
            for b in r.bindings
        ],
        "warnings": list(report.warnings),
    }
    click.echo(json.dumps(summary, indent=2))
    for line in report.warnings:
        warn(line)
    success(
        f"{len(report.contracts)} contract(s) valid, {report.binding_count} binding(s)."
    )
