# topmark:header:start
#
#   project      : BuildStamp
#   file         : model.py
#   file_relpath : src/buildstamp/diagnostic/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Diagnostics collected during a generation pass.

Sections:
    * DiagnosticLevel: severity levels.
    * Diagnostic: immutable payload (level, message, originating provider).
    * DiagnosticLog: mutable per-pass collection.
    * FrozenDiagnosticLog: immutable snapshot stored on results.

Only ``FAILED`` providers and emitter rejections produce warnings; unavailable
data sources are expected and never become diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from buildstamp.config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from buildstamp.config.logging import BuildstampLogger


logger: BuildstampLogger = get_logger(__name__)


class DiagnosticLevel(Enum):
    """Severity levels, ordered ERROR > WARNING > INFO."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """Structured diagnostic with a severity level and message.

    Attributes:
        level (DiagnosticLevel): Severity.
        message (str): Human-readable message.
        source (str | None): Provider name the diagnostic relates to.
    """

    level: DiagnosticLevel
    message: str
    source: str | None = None

    def render(self) -> str:
        """Return ``"<source>: <message>"`` (or just the message without a source)."""
        return f"{self.source}: {self.message}" if self.source else self.message


@dataclass
class DiagnosticLog:
    """Mutable collection of diagnostics for one generation pass."""

    items: list[Diagnostic] = field(default_factory=lambda: [])

    def freeze(self) -> FrozenDiagnosticLog:
        """Return an immutable snapshot of this log's diagnostics."""
        return FrozenDiagnosticLog(items=tuple(self.items))

    def _add(self, diagnostic: Diagnostic) -> None:
        self.items.append(diagnostic)
        logger.trace("Adding [%s]: %r", diagnostic.level.value, diagnostic.render())

    def add_warning(self, message: str, *, source: str | None = None) -> None:
        """Add a ``warning`` diagnostic.

        Args:
            message: The diagnostic message.
            source: Provider name the warning relates to.
        """
        self._add(Diagnostic(DiagnosticLevel.WARNING, message, source))

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True, slots=True)
class FrozenDiagnosticLog:
    """Immutable counterpart to `DiagnosticLog`."""

    items: tuple[Diagnostic, ...] = ()

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def at_level(self, level: DiagnosticLevel) -> tuple[Diagnostic, ...]:
        """Return the diagnostics of ``level`` in insertion order."""
        return filter_level(self.items, level)

    def has_warning(self) -> bool:
        """Return True if any warning diagnostic is present."""
        return bool(self.at_level(DiagnosticLevel.WARNING))


def filter_level(diagnostics: Iterable[Diagnostic], level: DiagnosticLevel) -> tuple[Diagnostic, ...]:
    """Return the diagnostics of ``level`` from ``diagnostics``, preserving order."""
    return tuple(d for d in diagnostics if d.level == level)
