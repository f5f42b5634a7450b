# topmark:header:start
#
#   project      : BuildStamp
#   file         : types.py
#   file_relpath : src/buildstamp/api/types.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stable public types for the BuildStamp API.

The shapes in this module appear in the return values of
[`buildstamp.api`][buildstamp.api] and follow the project's semver policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from buildstamp.diagnostic.model import FrozenDiagnosticLog
    from buildstamp.facts.model import Fact, ProviderResult
    from buildstamp.pipeline.engine import Generation


@dataclass(frozen=True)
class GenerationReport:
    """What one `generate` call produced and wrote.

    Attributes:
        facts (tuple[Fact, ...]): Emitted facts, in emission order.
        triggers (tuple[Path, ...]): Emitted ``rerun-if-changed`` paths.
        lines (tuple[str, ...]): Exact directive lines written to the stream.
        results (tuple[ProviderResult, ...]): Result of every invoked provider.
        warning (str | None): Aggregated warning for failed providers, if any.
        diagnostics (FrozenDiagnosticLog): One warning diagnostic per failed provider.
    """

    facts: tuple[Fact, ...]
    triggers: tuple[Path, ...]
    lines: tuple[str, ...]
    results: tuple[ProviderResult, ...]
    warning: str | None
    diagnostics: FrozenDiagnosticLog

    @classmethod
    def from_generation(cls, generation: Generation, lines: tuple[str, ...]) -> GenerationReport:
        """Build a report from a merged `Generation` and its rendered lines."""
        return cls(
            facts=generation.facts,
            triggers=generation.triggers,
            lines=lines,
            results=generation.results,
            warning=generation.warning,
            diagnostics=generation.diagnostics,
        )

    @property
    def text(self) -> str:
        """Return the directive output exactly as written."""
        return "".join(self.lines)
