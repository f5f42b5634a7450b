# topmark:header:start
#
#   project      : BuildStamp
#   file         : __init__.py
#   file_relpath : src/buildstamp/providers/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Fact providers and the default provider set.

Providers run in the fixed family order Build, Cargo, Git, Rustc, Sysinfo.
Callers that only have some data sources available pass the families they
want to `default_providers`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from buildstamp.facts.keys import Family
from buildstamp.providers.base import BaseProvider, FactSink
from buildstamp.providers.build import BuildProvider
from buildstamp.providers.cargo import CargoProvider
from buildstamp.providers.git import GitProvider
from buildstamp.providers.rustc import RustcProvider
from buildstamp.providers.sysinfo import SysinfoProvider, SystemProbe

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

_FACTORIES: dict[Family, Callable[[], BaseProvider]] = {
    Family.BUILD: BuildProvider,
    Family.CARGO: CargoProvider,
    Family.GIT: GitProvider,
    Family.RUSTC: RustcProvider,
    Family.SYSINFO: SysinfoProvider,
}


def default_providers(families: Iterable[Family] | None = None) -> tuple[BaseProvider, ...]:
    """Return the built-in providers for ``families`` in the fixed family order.

    Args:
        families (Iterable[Family] | None): Families to include; ``None`` means all.

    Returns:
        tuple[BaseProvider, ...]: One provider per selected family.
    """
    selected: frozenset[Family] = frozenset(Family if families is None else families)
    return tuple(_FACTORIES[f]() for f in Family if f in selected)


__all__ = [
    "BaseProvider",
    "BuildProvider",
    "CargoProvider",
    "FactSink",
    "GitProvider",
    "RustcProvider",
    "SysinfoProvider",
    "SystemProbe",
    "default_providers",
]
