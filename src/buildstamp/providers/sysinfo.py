# topmark:header:start
#
#   project      : BuildStamp
#   file         : sysinfo.py
#   file_relpath : src/buildstamp/providers/sysinfo.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""System information provider (``SYSINFO_*`` facts).

Host queries go through `SystemProbe`, which wraps `platform`, `psutil`,
``/proc/cpuinfo`` (Linux) and ``sysctl`` (macOS). Every probe method returns
a value or ``None``; ``None`` only makes the corresponding fact unavailable.
"""

from __future__ import annotations

import platform
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Final

import psutil

from buildstamp.config.logging import get_logger
from buildstamp.constants import CPUINFO_READ_LIMIT, SYSCTL_TIMEOUT_SECONDS
from buildstamp.core.errors import ProviderFailed
from buildstamp.facts.keys import FactKey, Family
from buildstamp.providers.base import BaseProvider

if TYPE_CHECKING:
    from buildstamp.config.logging import BuildstampLogger
    from buildstamp.config.model import Config
    from buildstamp.environment import BuildEnvironment
    from buildstamp.providers.base import FactSink

logger: BuildstampLogger = get_logger(__name__)

CPUINFO_PATH: Final[Path] = Path("/proc/cpuinfo")

_UNITS: Final[tuple[tuple[int, str], ...]] = (
    (1024**4, "TiB"),
    (1024**3, "GiB"),
    (1024**2, "MiB"),
    (1024, "KiB"),
)


def human_bytes(amount: int) -> str:
    """Render ``amount`` bytes with the largest binary unit it fills (``15 GiB``).

    The value is truncated to a whole number of units.
    """
    for size, unit in _UNITS:
        if amount >= size:
            return f"{amount // size} {unit}"
    return f"{amount} B"


def parse_cpuinfo(text: str) -> dict[str, str]:
    """Return the ``key: value`` pairs of the first processor block of ``/proc/cpuinfo``."""
    out: dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip():
            if out:
                break
            continue
        name, sep, value = line.partition(":")
        if sep:
            out.setdefault(name.strip(), value.strip())
    return out


class SystemProbe:
    """Platform abstraction for host queries.

    Subclass (or replace methods) to fake the host in tests.
    """

    def os_name(self) -> str | None:
        release: dict[str, str] = self._os_release()
        return release.get("NAME") or platform.system() or None

    def os_version(self) -> str | None:
        release: dict[str, str] = self._os_release()
        if release.get("VERSION_ID"):
            return release["VERSION_ID"]
        if sys.platform == "darwin":
            mac_version: str = platform.mac_ver()[0]
            if mac_version:
                return mac_version
        return platform.release() or None

    def cpu_vendor(self) -> str | None:
        info: dict[str, str] = self._cpuinfo()
        if info:
            return info.get("vendor_id") or info.get("CPU implementer") or None
        return self._sysctl("machdep.cpu.vendor")

    def cpu_brand(self) -> str | None:
        info: dict[str, str] = self._cpuinfo()
        if info:
            return info.get("model name") or info.get("Model") or None
        return self._sysctl("machdep.cpu.brand_string") or platform.processor() or None

    def cpu_core_count(self) -> int | None:
        return psutil.cpu_count(logical=False)

    def total_memory(self) -> int | None:
        return int(psutil.virtual_memory().total)

    def available_memory(self) -> int | None:
        return int(psutil.virtual_memory().available)

    def _os_release(self) -> dict[str, str]:
        try:
            return platform.freedesktop_os_release()
        except OSError:
            return {}

    def _cpuinfo(self) -> dict[str, str]:
        if not sys.platform.startswith("linux"):
            return {}
        try:
            with CPUINFO_PATH.open(encoding="utf-8", errors="replace") as fh:
                return parse_cpuinfo(fh.read(CPUINFO_READ_LIMIT))
        except OSError as exc:
            logger.debug("Cannot read %s: %s", CPUINFO_PATH, exc)
            return {}

    def _sysctl(self, name: str) -> str | None:
        if sys.platform != "darwin":
            return None
        try:
            completed: subprocess.CompletedProcess[str] = subprocess.run(
                ["sysctl", "-n", name],
                capture_output=True,
                text=True,
                check=True,
                timeout=SYSCTL_TIMEOUT_SECONDS,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("sysctl %s failed: %s", name, exc)
            return None
        return completed.stdout.strip() or None


@dataclass
class SysinfoProvider(BaseProvider):
    """Emit operating system, CPU and memory facts for the build host."""

    name: str = "sysinfo"
    family: Family = Family.SYSINFO
    probe: SystemProbe = field(default_factory=SystemProbe)

    def run(self, config: Config, env: BuildEnvironment, sink: FactSink) -> None:
        probe: SystemProbe = self.probe
        try:
            if sink.wants(FactKey.SYSINFO_OS_NAME):
                sink.add(FactKey.SYSINFO_OS_NAME, probe.os_name())
            if sink.wants(FactKey.SYSINFO_OS_VERSION):
                sink.add(FactKey.SYSINFO_OS_VERSION, probe.os_version())
            if sink.wants(FactKey.SYSINFO_CPU_VENDOR):
                sink.add(FactKey.SYSINFO_CPU_VENDOR, probe.cpu_vendor())
            if sink.wants(FactKey.SYSINFO_CPU_BRAND):
                sink.add(FactKey.SYSINFO_CPU_BRAND, probe.cpu_brand())
            if sink.wants(FactKey.SYSINFO_CPU_CORE_COUNT):
                cores: int | None = probe.cpu_core_count()
                sink.add(FactKey.SYSINFO_CPU_CORE_COUNT, None if cores is None else str(cores))
            if sink.wants(FactKey.SYSINFO_TOTAL_MEMORY):
                total: int | None = probe.total_memory()
                sink.add(FactKey.SYSINFO_TOTAL_MEMORY, None if total is None else human_bytes(total))
            if sink.wants(FactKey.SYSINFO_AVAILABLE_MEMORY):
                available: int | None = probe.available_memory()
                sink.add(
                    FactKey.SYSINFO_AVAILABLE_MEMORY,
                    None if available is None else human_bytes(available),
                )
        except psutil.Error as exc:
            raise ProviderFailed(f"system query failed: {exc}") from exc
