# topmark:header:start
#
#   project      : BuildStamp
#   file         : engine.py
#   file_relpath : src/buildstamp/pipeline/engine.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Execution engine: run providers and merge their results (engine layer).

Design goals:
  - No output: the engine never writes directives. Rendering and writing are
    done by [`buildstamp.pipeline.emitter`][] once the merge has succeeded.
  - Deterministic: facts are merged in provider order, then in the order each
    provider reported them. Triggers are de-duplicated, first occurrence wins.
  - Failure isolation: a provider can only degrade its own facts. The only
    fatal condition here is a duplicate output key (`DuplicateKeyError`),
    checked against the config before any provider runs and again on merge.

Typical usage:

    generation = collect_facts(config, env, default_providers())
    if generation.warning:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from buildstamp.config.logging import get_logger
from buildstamp.core.errors import DuplicateKeyError, GenerationError
from buildstamp.diagnostic.model import DiagnosticLog, FrozenDiagnosticLog
from buildstamp.facts.model import ProviderResult
from buildstamp.facts.status import ProviderStatus
from buildstamp.pipeline.emitter import screen_result

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from buildstamp.config.logging import BuildstampLogger
    from buildstamp.config.model import Config
    from buildstamp.environment import BuildEnvironment
    from buildstamp.facts.keys import FactKey, Family
    from buildstamp.facts.model import Fact
    from buildstamp.pipeline.contracts import Provider

logger: BuildstampLogger = get_logger(__name__)


@dataclass(frozen=True)
class Generation:
    """Merged outcome of one generation pass.

    Attributes:
        facts (tuple[Fact, ...]): Facts to emit, in emission order.
        triggers (tuple[Path, ...]): Unique trigger paths, in emission order.
        results (tuple[ProviderResult, ...]): Result of every invoked provider.
        diagnostics (FrozenDiagnosticLog): One warning per failed provider.
    """

    facts: tuple[Fact, ...] = ()
    triggers: tuple[Path, ...] = ()
    results: tuple[ProviderResult, ...] = ()
    diagnostics: FrozenDiagnosticLog = field(default_factory=FrozenDiagnosticLog)

    @property
    def failed(self) -> tuple[ProviderResult, ...]:
        """Return the ``FAILED`` provider results."""
        return tuple(r for r in self.results if r.status == ProviderStatus.FAILED)

    @property
    def warning(self) -> str | None:
        """Return the aggregated warning text, or ``None`` if nothing failed."""
        return aggregate_warning(self.results)

    def as_dict(self) -> dict[str, str]:
        """Return the facts as an ordered ``{key: value}`` mapping."""
        return {f.key: f.value for f in self.facts}


def aggregate_warning(results: Iterable[ProviderResult]) -> str | None:
    """Summarize every ``FAILED`` result in one message.

    Returns:
        str | None: ``"<n> provider(s) failed: git: <reason>; ..."`` or ``None``.
    """
    failed: list[ProviderResult] = [r for r in results if r.status == ProviderStatus.FAILED]
    if not failed:
        return None
    details: str = "; ".join(f"{r.provider}: {r.reason}" for r in failed)
    return f"{len(failed)} provider(s) failed: {details}"


def _invoke(provider: Provider, config: Config, env: BuildEnvironment) -> ProviderResult:
    try:
        return provider(config, env)
    except GenerationError:
        raise
    except Exception as exc:
        # Custom providers may not implement the provider boundary themselves.
        logger.exception("Unexpected error in provider %s", provider.name)
        return ProviderResult.failed(provider.name, f"unexpected error: {exc}")


def run_providers(
    config: Config,
    env: BuildEnvironment,
    providers: Sequence[Provider],
) -> tuple[ProviderResult, ...]:
    """Invoke every provider whose family is enabled, in the given order.

    Args:
        config (Config): The frozen configuration of the pass.
        env (BuildEnvironment): The environment snapshot.
        providers (Sequence[Provider]): Providers in emission order.

    Returns:
        tuple[ProviderResult, ...]: One result per invoked provider, with fact
        values screened for line breaks.
    """
    results: list[ProviderResult] = []
    for provider in providers:
        family: Family | None = provider.family
        if family is not None and not config.family_enabled(family):
            logger.trace("Skipping provider %s: family %s disabled", provider.name, family.key)
            continue

        result: ProviderResult = screen_result(_invoke(provider, config, env))
        logger.debug("%s", result.describe())
        for key, reason in result.skipped:
            logger.debug("  %s skipped: %s", key.value, reason)
        results.append(result)
    return tuple(results)


def check_output_keys(config: Config) -> None:
    """Reject a config in which two enabled facts share an output key.

    Runs before any provider, so the outcome does not depend on which facts
    happen to be available in this build.

    Raises:
        DuplicateKeyError: Naming the output key and both fact keys.
    """
    owners: dict[str, FactKey] = {}
    for key in config.enabled_keys():
        output: str = config.output_key(key)
        first: FactKey | None = owners.get(output)
        if first is not None:
            raise DuplicateKeyError(output, first.value, key.value)
        owners[output] = key


def merge_results(results: Sequence[ProviderResult]) -> Generation:
    """Merge provider results into a `Generation`.

    Args:
        results (Sequence[ProviderResult]): Results in provider order.

    Returns:
        Generation: Merged facts, triggers and diagnostics.

    Raises:
        DuplicateKeyError: If two facts share an output key.
    """
    facts: list[Fact] = []
    owners: dict[str, str] = {}
    triggers: list[Path] = []
    log = DiagnosticLog()

    for result in results:
        if result.status == ProviderStatus.FAILED:
            log.add_warning(result.reason or "failed", source=result.provider)
            continue
        if not result.ok:
            continue
        for fact in result.facts:
            first: str | None = owners.get(fact.key)
            if first is not None:
                raise DuplicateKeyError(fact.key, first, result.provider)
            owners[fact.key] = result.provider
            facts.append(fact)
        for path in result.triggers:
            if path not in triggers:
                triggers.append(path)

    return Generation(
        facts=tuple(facts),
        triggers=tuple(triggers),
        results=tuple(results),
        diagnostics=log.freeze(),
    )


def collect_facts(
    config: Config,
    env: BuildEnvironment,
    providers: Sequence[Provider],
) -> Generation:
    """Run ``providers`` and merge their results.

    The aggregated warning, if any, is logged once at WARNING.

    Raises:
        DuplicateKeyError: If two enabled facts map to the same output key, or
            two produced facts share one.
    """
    check_output_keys(config)
    generation: Generation = merge_results(run_providers(config, env, providers))
    warning: str | None = generation.warning
    if warning is not None:
        logger.warning("%s", warning)
    logger.info(
        "Collected %d fact(s) and %d trigger(s) from %d provider(s)",
        len(generation.facts),
        len(generation.triggers),
        len(generation.results),
    )
    return generation
