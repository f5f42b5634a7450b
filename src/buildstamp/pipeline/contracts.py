# topmark:header:start
#
#   project      : BuildStamp
#   file         : contracts.py
#   file_relpath : src/buildstamp/pipeline/contracts.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Type contract for fact providers (engine-facing).

Providers are callable objects; the engine invokes them as
``provider(config, env)``. Built-in providers subclass
[`buildstamp.providers.base.BaseProvider`][]; custom providers only need to
satisfy this protocol.

Attributes:
----------
name : str
    Stable identifier used in logs and in the aggregated warning.
family : Family | None
    Toggle family gating the provider. ``None`` means the provider is always
    invoked (custom providers outside the built-in families).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from buildstamp.config.model import Config
    from buildstamp.environment import BuildEnvironment
    from buildstamp.facts.keys import Family
    from buildstamp.facts.model import ProviderResult


class Provider(Protocol):
    """Protocol for a single fact provider."""

    @property
    def name(self) -> str:
        """Stable provider identifier."""
        ...

    @property
    def family(self) -> Family | None:
        """Family whose toggles gate this provider."""
        ...

    def __call__(self, config: Config, env: BuildEnvironment) -> ProviderResult:
        """Gather facts for one pass.

        Implementations must not raise for missing or broken data sources; they
        report those as ``UNAVAILABLE`` or ``FAILED`` results.

        Args:
            config (Config): The frozen configuration of the pass.
            env (BuildEnvironment): The environment snapshot.

        Returns:
            ProviderResult: The tagged outcome.
        """
        ...
