# topmark:header:start
#
#   project      : BuildStamp
#   file         : test_sysinfo_provider.py
#   file_relpath : tests/providers/test_sysinfo_provider.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the system information provider."""

from __future__ import annotations

from typing import TYPE_CHECKING

import psutil

from buildstamp.facts.keys import FactKey, Family
from buildstamp.facts.status import ProviderStatus
from buildstamp.providers.sysinfo import (
    SysinfoProvider,
    SystemProbe,
    human_bytes,
    parse_cpuinfo,
)
from tests.conftest import make_config, make_env, parametrize

if TYPE_CHECKING:
    from buildstamp.facts.model import ProviderResult

GIB: int = 1024**3


class FakeProbe(SystemProbe):
    """Deterministic host description."""

    def os_name(self) -> str | None:
        return "Ubuntu"

    def os_version(self) -> str | None:
        return "22.04"

    def cpu_vendor(self) -> str | None:
        return "GenuineIntel"

    def cpu_brand(self) -> str | None:
        return None

    def cpu_core_count(self) -> int | None:
        return 8

    def total_memory(self) -> int | None:
        return 16 * GIB

    def available_memory(self) -> int | None:
        return 512 * 1024**2


class BrokenProbe(FakeProbe):
    def total_memory(self) -> int | None:
        raise psutil.AccessDenied(pid=1)


@parametrize(
    "amount, text",
    [
        (16 * GIB, "16 GiB"),
        (16 * GIB - 1, "15 GiB"),
        (512 * 1024**2, "512 MiB"),
        (2 * 1024**4, "2 TiB"),
        (4096, "4 KiB"),
        (1023, "1023 B"),
    ],
)
def test_human_bytes(amount: int, text: str) -> None:
    assert human_bytes(amount) == text


def test_parse_cpuinfo_reads_first_processor_block() -> None:
    text = (
        "processor\t: 0\n"
        "vendor_id\t: AuthenticAMD\n"
        "model name\t: AMD Ryzen 7 5800X 8-Core Processor\n"
        "\n"
        "processor\t: 1\n"
        "vendor_id\t: SomethingElse\n"
    )

    info: dict[str, str] = parse_cpuinfo(text)

    assert info["vendor_id"] == "AuthenticAMD"
    assert info["model name"] == "AMD Ryzen 7 5800X 8-Core Processor"


def test_provider_renders_probe_values() -> None:
    provider = SysinfoProvider(probe=FakeProbe())

    result: ProviderResult = provider(make_config([Family.SYSINFO]), make_env())

    assert result.status is ProviderStatus.SUCCESS
    assert {f.source: f.value for f in result.facts} == {
        FactKey.SYSINFO_OS_NAME: "Ubuntu",
        FactKey.SYSINFO_OS_VERSION: "22.04",
        FactKey.SYSINFO_CPU_VENDOR: "GenuineIntel",
        FactKey.SYSINFO_CPU_CORE_COUNT: "8",
        FactKey.SYSINFO_TOTAL_MEMORY: "16 GiB",
        FactKey.SYSINFO_AVAILABLE_MEMORY: "512 MiB",
    }
    assert [k for k, _ in result.skipped] == [FactKey.SYSINFO_CPU_BRAND]


def test_psutil_error_fails_the_provider() -> None:
    provider = SysinfoProvider(probe=BrokenProbe())

    result: ProviderResult = provider(make_config([Family.SYSINFO]), make_env())

    assert result.status is ProviderStatus.FAILED
    assert result.facts == ()


def test_disabled_queries_are_not_made() -> None:
    provider = SysinfoProvider(probe=BrokenProbe())

    result: ProviderResult = provider(make_config(sysinfo={"os_name": True}), make_env())

    assert result.status is ProviderStatus.SUCCESS
    assert [f.value for f in result.facts] == ["Ubuntu"]


def test_real_probe_answers_or_declines() -> None:
    """The host probe returns a value or None; it never raises for missing data."""
    probe = SystemProbe()

    for value in (probe.os_name(), probe.os_version(), probe.cpu_vendor(), probe.cpu_brand()):
        assert value is None or isinstance(value, str)
    total: int | None = probe.total_memory()
    assert total is None or total > 0
