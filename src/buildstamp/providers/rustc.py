# topmark:header:start
#
#   project      : BuildStamp
#   file         : rustc.py
#   file_relpath : src/buildstamp/providers/rustc.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Compiler provider (``RUSTC_*`` facts).

Runs ``$RUSTC -vV`` and parses its ``key: value`` lines, e.g.::

    rustc 1.75.0 (82e1608df 2023-12-21)
    binary: rustc
    commit-hash: 82e1608dfa6e0b5569232559e3d385fea5a93112
    commit-date: 2023-12-21
    host: x86_64-unknown-linux-gnu
    release: 1.75.0
    LLVM version: 17.0.6

Any problem running or parsing the compiler is reported as UNAVAILABLE: the
compiler is an optional source of facts and never fails a build.
"""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from buildstamp.config.logging import get_logger
from buildstamp.constants import DEFAULT_RUSTC, RUSTC_ENV_VAR, RUSTC_TIMEOUT_SECONDS
from buildstamp.core.errors import ProviderUnavailable
from buildstamp.facts.keys import FactKey, Family
from buildstamp.providers.base import BaseProvider

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from buildstamp.config.logging import BuildstampLogger
    from buildstamp.config.model import Config
    from buildstamp.environment import BuildEnvironment
    from buildstamp.providers.base import FactSink

logger: BuildstampLogger = get_logger(__name__)

_SEMVER_RE: Final[re.Pattern[str]] = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)

_UNKNOWN: Final[str] = "unknown"


def run_command(argv: Sequence[str], timeout: float) -> str:
    """Run ``argv`` and return its standard output.

    Raises:
        OSError: If the executable cannot be started.
        subprocess.SubprocessError: On a non-zero exit status or timeout.
    """
    completed: subprocess.CompletedProcess[str] = subprocess.run(
        list(argv),
        capture_output=True,
        text=True,
        check=True,
        timeout=timeout,
    )
    return completed.stdout


@dataclass(frozen=True)
class RustcInfo:
    """Parsed ``rustc -vV`` output.

    ``None`` marks a field rustc did not report (or reported as ``unknown``).
    """

    semver: str
    channel: str
    host: str | None = None
    commit_hash: str | None = None
    commit_date: str | None = None
    llvm_version: str | None = None


def channel_of(semver: str) -> str:
    """Return the release channel encoded in the pre-release suffix of ``semver``."""
    match: re.Match[str] | None = _SEMVER_RE.match(semver)
    pre: str | None = match.group(4) if match else None
    if pre is None:
        return "stable"
    for channel in ("nightly", "beta", "dev"):
        if pre.startswith(channel):
            return channel
    return "stable"


def parse_version_verbose(output: str) -> RustcInfo:
    """Parse the output of ``rustc -vV``.

    Args:
        output (str): Captured standard output.

    Returns:
        RustcInfo: The parsed fields.

    Raises:
        ValueError: If no valid ``release:`` line is present.
    """
    fields: dict[str, str] = {}
    for line in output.splitlines():
        name, sep, value = line.partition(":")
        if not sep:
            continue
        value = value.strip()
        fields[name.strip().lower()] = value

    release: str | None = fields.get("release")
    if release is None or not _SEMVER_RE.match(release):
        raise ValueError(f"unrecognized rustc release: {release!r}")

    def known(name: str) -> str | None:
        raw: str | None = fields.get(name)
        return None if raw in (None, "", _UNKNOWN) else raw

    return RustcInfo(
        semver=release,
        channel=channel_of(release),
        host=known("host"),
        commit_hash=known("commit-hash"),
        commit_date=known("commit-date"),
        llvm_version=known("llvm version"),
    )


@dataclass
class RustcProvider(BaseProvider):
    """Emit the compiler version, channel, host triple and build metadata.

    Attributes:
        runner (Callable[[Sequence[str], float], str]): Executes the compiler;
            replaced in tests.
    """

    name: str = "rustc"
    family: Family = Family.RUSTC
    runner: Callable[[Sequence[str], float], str] = field(default=run_command)

    def run(self, config: Config, env: BuildEnvironment, sink: FactSink) -> None:
        rustc: str = env.get(RUSTC_ENV_VAR) or DEFAULT_RUSTC
        try:
            output: str = self.runner([rustc, "-vV"], RUSTC_TIMEOUT_SECONDS)
            info: RustcInfo = parse_version_verbose(output)
        except (OSError, subprocess.SubprocessError, ValueError) as exc:
            raise ProviderUnavailable(f"cannot query {rustc}: {exc}") from exc

        logger.debug("Compiler %s reports %s (%s)", rustc, info.semver, info.channel)
        sink.add(FactKey.RUSTC_SEMVER, info.semver)
        sink.add(FactKey.RUSTC_CHANNEL, info.channel)
        sink.add(FactKey.RUSTC_HOST_TRIPLE, info.host)
        sink.add(FactKey.RUSTC_COMMIT_HASH, info.commit_hash)
        sink.add(FactKey.RUSTC_COMMIT_DATE, info.commit_date)
        sink.add(FactKey.RUSTC_LLVM_VERSION, info.llvm_version)
