"""Fatal condition reporting for the uma CLI.

Every fatal condition is reported as exactly one machine-parsable line on
stderr followed by a process exit with a stable code:

====  ==========================================
code  condition
====  ==========================================
0     success
1     capability unavailable or failed, internal error
2     payload validation failed
3     contract, schema, policy or manifest malformed
4     policy violation (fail-closed)
5     required file missing
====  ==========================================
"""

import click

from uma_runtime.domain.errors import ConditionKind, RuntimeFault

EXIT_CODES: dict[ConditionKind, int] = {
    ConditionKind.CAPABILITY_UNAVAILABLE: 1,
    ConditionKind.CAPABILITY_FAILED: 1,
    ConditionKind.INTERNAL_ERROR: 1,
    ConditionKind.PAYLOAD_VALIDATION_FAILED: 2,
    ConditionKind.CONTRACT_MALFORMED: 3,
    ConditionKind.MANIFEST_INVALID: 3,
    ConditionKind.POLICY_VIOLATION: 4,
    ConditionKind.MISSING_FILE: 5,
}


def exit_code_for(fault: RuntimeFault) -> int:
    """Return the process exit code for ``fault``."""
    return EXIT_CODES.get(fault.kind, 1)


def report_fault(fault: RuntimeFault) -> int:
    """Print the fatal line for ``fault`` on stderr and return its exit code."""
    click.echo(fault.fatal_line(), err=True)
    return exit_code_for(fault)
