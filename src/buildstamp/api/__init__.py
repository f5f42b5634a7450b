# topmark:header:start
#
#   project      : BuildStamp
#   file         : __init__.py
#   file_relpath : src/buildstamp/api/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Public BuildStamp API (stable surface).

Call `generate` from a build script to emit ``rustc-env`` and
``rerun-if-changed`` directives on standard output:

```python
from buildstamp import api
from buildstamp.config import MutableConfig

config = MutableConfig.from_mapping(
    {
        "build": {"timestamp": True},
        "git": {"sha": True, "dirty": True},
    }
).freeze()
report = api.generate(config)
```

Configuration contract
----------------------
- Functions accept a frozen [`buildstamp.config.Config`][] or a plain mapping
  in the `MutableConfig.from_mapping` shape; mappings are frozen internally.
- A toggle that is not set is disabled. Use `Config.from_defaults()` to enable
  every fact.

Failure contract
----------------
- Unavailable data sources are silent.
- Failed data sources produce one aggregated warning (logged and returned on
  the report); the other facts are still written.
- A duplicate output key or an unrepresentable key/path raises a
  `GenerationError` subclass and nothing is written.

Logging
-------
- Log records go to stderr, never to the directive stream. `generate` sets up
  logging from ``BUILDSTAMP_LOG_LEVEL`` unless the root logger already has
  handlers.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from buildstamp.api.types import GenerationReport
from buildstamp.config.logging import ensure_logging, get_logger
from buildstamp.config.model import Config, MutableConfig
from buildstamp.constants import BUILDSTAMP_VERSION
from buildstamp.environment import BuildEnvironment
from buildstamp.pipeline.emitter import render_lines, write_lines
from buildstamp.pipeline.engine import Generation, collect_facts
from buildstamp.providers import default_providers

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import TextIO

    from buildstamp.config.logging import BuildstampLogger
    from buildstamp.pipeline.contracts import Provider

logger: BuildstampLogger = get_logger(__name__)

__all__: list[str] = [
    "Generation",
    "GenerationReport",
    "collect",
    "default_providers",
    "generate",
    "version",
]


def _ensure_config(config: Config | Mapping[str, Any]) -> Config:
    if isinstance(config, Config):
        return config
    if isinstance(config, Mapping):
        return MutableConfig.from_mapping(config).freeze()
    raise TypeError(f"config must be a Config or a mapping, got {type(config).__name__}")


def collect(
    config: Config | Mapping[str, Any],
    *,
    env: BuildEnvironment | None = None,
    providers: Sequence[Provider] | None = None,
) -> Generation:
    """Gather and merge facts without writing anything.

    Args:
        config (Config | Mapping[str, Any]): Toggles and output settings.
        env (BuildEnvironment | None): Environment snapshot; defaults to the
            current process environment.
        providers (Sequence[Provider] | None): Providers in emission order;
            defaults to `default_providers()`.

    Returns:
        Generation: The merged facts, triggers and provider results.

    Raises:
        ConfigError: If ``config`` is a mapping with invalid entries.
        DuplicateKeyError: If two facts share an output key.
    """
    cfg: Config = _ensure_config(config)
    snapshot: BuildEnvironment = env if env is not None else BuildEnvironment.capture()
    chosen: Sequence[Provider] = providers if providers is not None else default_providers()
    logger.debug("Collecting facts in %s with %d provider(s)", snapshot.cwd, len(chosen))
    return collect_facts(cfg, snapshot, chosen)


def generate(
    config: Config | Mapping[str, Any],
    *,
    env: BuildEnvironment | None = None,
    providers: Sequence[Provider] | None = None,
    stream: TextIO | None = None,
) -> GenerationReport:
    """Gather facts and write the directives to ``stream``.

    All lines are rendered before the first write; on a fatal error nothing is
    written.

    Args:
        config (Config | Mapping[str, Any]): Toggles and output settings.
        env (BuildEnvironment | None): Environment snapshot; defaults to the
            current process environment.
        providers (Sequence[Provider] | None): Providers in emission order;
            defaults to `default_providers()`.
        stream (TextIO | None): Directive channel; defaults to ``sys.stdout``.

    Returns:
        GenerationReport: What was written, plus per-provider results.

    Raises:
        ConfigError: If ``config`` is a mapping with invalid entries.
        GenerationError: On a duplicate output key or an unrepresentable
            key or trigger path.
    """
    ensure_logging()
    cfg: Config = _ensure_config(config)
    generation: Generation = collect(cfg, env=env, providers=providers)
    lines: tuple[str, ...] = render_lines(
        generation.facts, generation.triggers, cfg.directive_style
    )
    write_lines(lines, stream if stream is not None else sys.stdout)
    return GenerationReport.from_generation(generation, lines)


def version() -> str:
    """Return the installed BuildStamp version."""
    return BUILDSTAMP_VERSION
