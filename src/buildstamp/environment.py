# topmark:header:start
#
#   project      : BuildStamp
#   file         : environment.py
#   file_relpath : src/buildstamp/environment.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Explicit snapshot of the process environment seen by providers.

Providers never read ``os.environ``, ``os.getcwd()`` or the system clock
directly; they receive a `BuildEnvironment`. Tests build synthetic snapshots
instead of mutating process state:

    env = BuildEnvironment(
        vars={"CARGO_PKG_VERSION": "1.2.3"},
        cwd=tmp_path,
        clock=lambda: 1_700_000_000.0,
    )
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping


@dataclass(frozen=True)
class BuildEnvironment:
    """Read-only view of environment variables, working directory and clock.

    Attributes:
        vars (Mapping[str, str]): Environment variables.
        cwd (Path): Directory from which the repository search starts.
        clock (Callable[[], float]): Returns the current time in seconds since the epoch.
    """

    vars: Mapping[str, str] = field(default_factory=lambda: {})
    cwd: Path = field(default_factory=Path.cwd)
    clock: Callable[[], float] = time.time

    @classmethod
    def capture(cls) -> BuildEnvironment:
        """Snapshot the current process environment and working directory."""
        return cls(vars=dict(os.environ), cwd=Path.cwd())

    def get(self, name: str) -> str | None:
        """Return the variable ``name``, or ``None`` if unset."""
        return self.vars.get(name)

    def with_prefix(self, prefix: str) -> Iterator[tuple[str, str]]:
        """Yield ``(name, value)`` pairs whose name starts with ``prefix``, sorted by name."""
        for name in sorted(self.vars):
            if name.startswith(prefix):
                yield name, self.vars[name]

    def updated(self, **overrides: str) -> BuildEnvironment:
        """Return a copy with ``overrides`` applied to the variables."""
        return replace(self, vars={**self.vars, **overrides})
