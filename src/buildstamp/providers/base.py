# topmark:header:start
#
#   project      : BuildStamp
#   file         : base.py
#   file_relpath : src/buildstamp/providers/base.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Base class for fact providers.

The engine invokes providers as *callables*. `BaseProvider` implements the
common lifecycle:

    result = provider(config, env)  # internally: may_proceed → run → result

Design goals
------------
- One place for the provider boundary: library errors raised inside ``run()``
  are converted into a `ProviderResult` here and never reach the engine.
- ``run()`` only reports facts through a `FactSink`; the sink applies the
  toggles and the output key naming, so providers never check toggles for
  plain facts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from buildstamp.config.logging import get_logger
from buildstamp.core.errors import ProviderFailed, ProviderUnavailable
from buildstamp.facts.model import Fact, ProviderResult

if TYPE_CHECKING:
    from pathlib import Path

    from buildstamp.config.logging import BuildstampLogger
    from buildstamp.config.model import Config
    from buildstamp.environment import BuildEnvironment
    from buildstamp.facts.keys import FactKey, Family

logger: BuildstampLogger = get_logger(__name__)


@dataclass
class FactSink:
    """Collects the facts and triggers reported by one provider run.

    Attributes:
        config (Config): Configuration of the pass (toggles and key naming).
        facts (list[Fact]): Facts added so far, in report order.
        triggers (list[Path]): Trigger paths added so far.
        skipped (list[tuple[FactKey, str]]): Enabled facts that could not be produced.
    """

    config: Config
    facts: list[Fact] = field(default_factory=lambda: [])
    triggers: list[Path] = field(default_factory=lambda: [])
    skipped: list[tuple[FactKey, str]] = field(default_factory=lambda: [])

    def wants(self, key: FactKey) -> bool:
        """Return True if ``key`` is enabled for this pass."""
        return self.config.is_enabled(key)

    def wants_any(self, *keys: FactKey) -> bool:
        """Return True if any of ``keys`` is enabled for this pass."""
        return any(self.wants(k) for k in keys)

    def add(self, key: FactKey, value: str | None, *, missing: str = "not available") -> None:
        """Record ``value`` for ``key`` if enabled; ``None`` marks it unavailable.

        Args:
            key (FactKey): The fact being reported.
            value (str | None): Its value, or ``None`` when the source lacks it.
            missing (str): Reason recorded when ``value`` is ``None``.
        """
        if not self.wants(key):
            return
        if value is None:
            self.skip(key, missing)
            return
        self.facts.append(Fact(key=self.config.output_key(key), value=value, source=key))

    def skip(self, key: FactKey, reason: str) -> None:
        """Mark the enabled fact ``key`` as unavailable for ``reason``."""
        if not self.wants(key):
            return
        logger.debug("Fact %s unavailable: %s", key.value, reason)
        self.skipped.append((key, reason))

    def trigger(self, path: Path) -> None:
        """Register ``path`` for a ``rerun-if-changed`` directive."""
        if path not in self.triggers:
            self.triggers.append(path)

    def result(self, provider: str) -> ProviderResult:
        """Return the provider result for everything collected.

        A run that produced no facts at all but skipped some is reported as
        ``UNAVAILABLE``: every enabled fact was missing from its source.
        """
        if not self.facts and self.skipped:
            reasons: str = "; ".join(f"{k.value}: {r}" for k, r in self.skipped)
            return ProviderResult.unavailable(provider, reasons)
        return ProviderResult.success(
            provider, self.facts, triggers=self.triggers, skipped=self.skipped
        )


@dataclass
class BaseProvider:
    """Reusable foundation for fact providers.

    Subclass this and override ``run()``. Do not override ``__call__`` unless
    you need a different lifecycle.

    Attributes:
        name (str): Stable provider identifier used in logs and warnings.
        family (Family): Toggle family that gates this provider.
    """

    name: str
    family: Family

    def __call__(self, config: Config, env: BuildEnvironment) -> ProviderResult:
        """Run the provider and convert every outcome into a `ProviderResult`.

        Args:
            config (Config): The frozen configuration of the pass.
            env (BuildEnvironment): The environment snapshot.

        Returns:
            ProviderResult: ``SUCCESS``, ``UNAVAILABLE`` or ``FAILED``.
        """
        if not self.may_proceed(config):
            logger.debug("Provider %s: no toggles enabled", self.name)
            return ProviderResult.unavailable(self.name, "no toggles enabled")

        sink = FactSink(config=config)
        try:
            self.run(config, env, sink)
        except ProviderUnavailable as exc:
            logger.debug("Provider %s unavailable: %s", self.name, exc.reason)
            return ProviderResult.unavailable(self.name, exc.reason)
        except ProviderFailed as exc:
            logger.info("Provider %s failed: %s", self.name, exc.reason)
            return ProviderResult.failed(self.name, exc.reason)
        except Exception as exc:
            # Provider boundary: nothing below this point may abort the pass.
            logger.exception("Unexpected error in provider %s", self.name)
            return ProviderResult.failed(self.name, f"unexpected error: {exc}")

        return sink.result(self.name)

    def may_proceed(self, config: Config) -> bool:
        """Return whether this provider has anything to do for ``config``."""
        return config.family_enabled(self.family)

    def run(self, config: Config, env: BuildEnvironment, sink: FactSink) -> None:
        """Gather facts into ``sink``.

        Subclasses implement this; the base provider gathers nothing. Raise
        `ProviderUnavailable` when the whole data source is absent and
        `ProviderFailed` when it is present but unreadable.

        Args:
            config (Config): The frozen configuration of the pass.
            env (BuildEnvironment): The environment snapshot.
            sink (FactSink): Destination for facts and triggers.
        """
        pass
