# topmark:header:start
#
#   project      : BuildStamp
#   file         : model.py
#   file_relpath : src/buildstamp/facts/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Facts and provider results.

Sections:
    * Fact: one named value destined for a ``rustc-env`` directive.
    * ProviderResult: the tagged outcome of a provider (success, unavailable,
      failed), carrying facts and ``rerun-if-changed`` trigger paths on success.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from buildstamp.facts.status import ProviderStatus

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from buildstamp.facts.keys import FactKey


@dataclass(frozen=True, slots=True)
class Fact:
    """A build-time fact.

    Attributes:
        key (str): Output key (the environment variable name seen by the compiler).
        value (str): Fact value.
        source (FactKey | None): The stable fact this value belongs to; ``None`` for
            facts produced by custom providers.
    """

    key: str
    value: str
    source: FactKey | None = None


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of a single provider invocation.

    Use the `success`, `unavailable` and `failed` constructors rather than
    building instances directly.

    Attributes:
        provider (str): Name of the provider that produced the result.
        status (ProviderStatus): Result tag.
        facts (tuple[Fact, ...]): Facts gathered (``SUCCESS`` only).
        triggers (tuple[Path, ...]): Paths for ``rerun-if-changed`` (``SUCCESS`` only).
        reason (str | None): Why the provider was unavailable or failed.
        skipped (tuple[tuple[FactKey, str], ...]): Enabled facts the provider could not
            produce, with a reason each. Logged at DEBUG only.
    """

    provider: str
    status: ProviderStatus
    facts: tuple[Fact, ...] = ()
    triggers: tuple[Path, ...] = ()
    reason: str | None = None
    skipped: tuple[tuple[FactKey, str], ...] = field(default=())

    @classmethod
    def success(
        cls,
        provider: str,
        facts: Iterable[Fact],
        *,
        triggers: Iterable[Path] = (),
        skipped: Iterable[tuple[FactKey, str]] = (),
    ) -> ProviderResult:
        """Build a ``SUCCESS`` result."""
        return cls(
            provider=provider,
            status=ProviderStatus.SUCCESS,
            facts=tuple(facts),
            triggers=tuple(triggers),
            skipped=tuple(skipped),
        )

    @classmethod
    def unavailable(cls, provider: str, reason: str) -> ProviderResult:
        """Build an ``UNAVAILABLE`` result (expected absence, silent)."""
        return cls(provider=provider, status=ProviderStatus.UNAVAILABLE, reason=reason)

    @classmethod
    def failed(cls, provider: str, reason: str) -> ProviderResult:
        """Build a ``FAILED`` result (reported as a warning, never fatal)."""
        return cls(provider=provider, status=ProviderStatus.FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        """Return True for ``SUCCESS`` results."""
        return self.status == ProviderStatus.SUCCESS

    def describe(self) -> str:
        """Return a one-line, colored summary for log output."""
        if self.ok:
            detail: str = f"{len(self.facts)} fact(s), {len(self.triggers)} trigger(s)"
        else:
            detail = self.reason or ""
        return f"{self.provider}: {self.status.colored()} ({detail})"
