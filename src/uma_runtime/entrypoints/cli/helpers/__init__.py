"""CLI helpers for uma.

Message emitters that write to stderr with emoji to ASCII fallbacks, the
``-L NAME=LEVEL`` parser, shared runtime options, and the mapping from fatal
conditions to exit codes.
"""

from .faults import EXIT_CODES, exit_code_for, report_fault
from .messages import success, warn
from .options import runtime_options, settings_with_overrides

__all__ = [
    "EXIT_CODES",
    "exit_code_for",
    "report_fault",
    "runtime_options",
    "settings_with_overrides",
    "success",
    "warn",
]
