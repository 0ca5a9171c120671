"""Terminal message helpers for the uma CLI.

Small helpers for rendering user-visible lines with emoji to ASCII fallbacks.
Messages write to stderr so stdout can remain machine-readable.
"""

import click


def _supports_character(character: str) -> bool:
    """Return True if *character* can be encoded on stderr."""

    stream = click.get_text_stream("stderr")  # pragma: no mutate
    encoding = getattr(stream, "encoding", None) or "ascii"
    try:
        character.encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


def _glyph(emoji: str, fallback: str) -> str:
    return emoji if _supports_character(emoji) else fallback


def caution_glyph() -> str:
    """Return "⚠️" when stderr can encode it, else "[!]"."""
    return _glyph("⚠️", "[!]")  # pragma: no mutate


def success_glyph() -> str:
    """Return "✅" when stderr can encode it, else "[OK]"."""
    return _glyph("✅", "[OK]")  # pragma: no mutate


def warn(msg: str) -> None:
    """Emit a yellow, bold warning line to **stderr**.

    Example:
        ``⚠️  policy_violation: policy.deny deny-browser (ai.model.evaluator@browser)``
    """
    click.secho(f"{caution_glyph()}  {msg}", fg="yellow", bold=True, err=True)


def success(msg: str) -> None:
    """Emit a green, bold success line to **stderr**.

    Example:
        ``✅  Run 01J... finalized (logical clock 3).``
    """
    click.secho(f"{success_glyph()}  {msg}", fg="green", bold=True, err=True)
