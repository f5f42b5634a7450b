# topmark:header:start
#
#   project      : BuildStamp
#   file         : emitter.py
#   file_relpath : src/buildstamp/pipeline/emitter.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Directive rendering and writing.

Directive format (one line each, facts first, then triggers)::

    cargo:rustc-env=<KEY>=<VALUE>
    cargo:rerun-if-changed=<PATH>

The directive stream is line oriented, so:

- a *value* with a line break cannot be represented; `screen_result` turns the
  owning provider's result into ``FAILED`` before merging;
- a *key* or *trigger path* that cannot be represented is fatal
  (`DirectiveSyntaxError`), checked by `render_lines` before anything is written.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from buildstamp.config.logging import get_logger
from buildstamp.core.errors import DirectiveSyntaxError
from buildstamp.facts.model import ProviderResult

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path
    from typing import TextIO

    from buildstamp.config.logging import BuildstampLogger
    from buildstamp.config.types import DirectiveStyle
    from buildstamp.facts.model import Fact

logger: BuildstampLogger = get_logger(__name__)

_LINE_BREAKS: tuple[str, ...] = ("\n", "\r")


def has_line_break(text: str) -> bool:
    """Return True if ``text`` contains ``\\n`` or ``\\r``."""
    return any(ch in text for ch in _LINE_BREAKS)


def screen_result(result: ProviderResult) -> ProviderResult:
    """Return ``result``, or a ``FAILED`` result if any fact value has a line break.

    The whole provider is dropped: emitting part of its facts would hide the
    problem from the build.
    """
    if not result.ok:
        return result
    for fact in result.facts:
        if has_line_break(fact.value):
            logger.debug("Fact %s of %s contains a line break", fact.key, result.provider)
            return ProviderResult.failed(
                result.provider, f"value of {fact.key} contains a line break"
            )
    return result


def validate_key(key: str) -> None:
    """Raise `DirectiveSyntaxError` if ``key`` cannot be used as a ``rustc-env`` name."""
    if not key:
        raise DirectiveSyntaxError("Empty output key")
    if "=" in key:
        raise DirectiveSyntaxError(f"Output key contains '=': {key!r}")
    if any(ch.isspace() or not ch.isprintable() for ch in key):
        raise DirectiveSyntaxError(f"Output key contains whitespace or control characters: {key!r}")


def validate_trigger(path: Path) -> str:
    """Return ``path`` as text, raising `DirectiveSyntaxError` if it spans lines."""
    text: str = str(path)
    if has_line_break(text):
        raise DirectiveSyntaxError(f"Trigger path contains a line break: {text!r}")
    return text


def render_lines(
    facts: Iterable[Fact],
    triggers: Iterable[Path],
    style: DirectiveStyle,
) -> tuple[str, ...]:
    """Render every directive line, newline-terminated.

    Args:
        facts (Iterable[Fact]): Merged facts, in emission order.
        triggers (Iterable[Path]): Merged trigger paths, in emission order.
        style (DirectiveStyle): Directive prefix (``cargo:`` or ``cargo::``).

    Returns:
        tuple[str, ...]: The lines to write.

    Raises:
        DirectiveSyntaxError: If a key or trigger path cannot be represented.
    """
    prefix: str = style.value
    lines: list[str] = []
    for fact in facts:
        validate_key(fact.key)
        if has_line_break(fact.value):
            raise DirectiveSyntaxError(f"Value of {fact.key} contains a line break")
        lines.append(f"{prefix}rustc-env={fact.key}={fact.value}\n")
    for path in triggers:
        lines.append(f"{prefix}rerun-if-changed={validate_trigger(path)}\n")
    return tuple(lines)


def write_lines(lines: Sequence[str], stream: TextIO) -> None:
    """Write all ``lines`` to ``stream`` in a single write, then flush."""
    if not lines:
        return
    stream.write("".join(lines))
    stream.flush()
    logger.debug("Wrote %d directive line(s)", len(lines))
