# topmark:header:start
#
#   project      : BuildStamp
#   file         : cargo.py
#   file_relpath : src/buildstamp/providers/cargo.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Cargo environment provider (``CARGO_*`` facts).

Republishes the variables cargo sets for build scripts so the compiled crate
can read them at compile time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from buildstamp.constants import CARGO_FEATURE_PREFIX
from buildstamp.facts.keys import FactKey, Family
from buildstamp.providers.base import BaseProvider

if TYPE_CHECKING:
    from buildstamp.config.model import Config
    from buildstamp.environment import BuildEnvironment
    from buildstamp.providers.base import FactSink

# Fact key → environment variable set by cargo
CARGO_VARIABLES: Final[dict[FactKey, str]] = {
    FactKey.CARGO_PKG_VERSION: "CARGO_PKG_VERSION",
    FactKey.CARGO_PKG_VERSION_MAJOR: "CARGO_PKG_VERSION_MAJOR",
    FactKey.CARGO_PKG_VERSION_MINOR: "CARGO_PKG_VERSION_MINOR",
    FactKey.CARGO_PKG_VERSION_PATCH: "CARGO_PKG_VERSION_PATCH",
    FactKey.CARGO_PKG_VERSION_PRE: "CARGO_PKG_VERSION_PRE",
    FactKey.CARGO_TARGET_TRIPLE: "TARGET",
    FactKey.CARGO_PROFILE: "PROFILE",
    FactKey.CARGO_OPT_LEVEL: "OPT_LEVEL",
}


def enabled_features(env: BuildEnvironment) -> list[str]:
    """Return the cargo feature names enabled in ``env``, sorted.

    ``CARGO_FEATURE_SERDE_JSON`` becomes ``serde-json``.
    """
    return sorted(
        name[len(CARGO_FEATURE_PREFIX) :].lower().replace("_", "-")
        for name, _value in env.with_prefix(CARGO_FEATURE_PREFIX)
    )


@dataclass
class CargoProvider(BaseProvider):
    """Emit the package version, target, profile and feature facts."""

    name: str = "cargo"
    family: Family = Family.CARGO

    def run(self, config: Config, env: BuildEnvironment, sink: FactSink) -> None:
        for key, variable in CARGO_VARIABLES.items():
            sink.add(key, env.get(variable), missing=f"{variable} not set")
        # An empty list is a valid answer (no features enabled).
        sink.add(FactKey.CARGO_FEATURES, ",".join(enabled_features(env)))
