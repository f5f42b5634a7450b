# topmark:header:start
#
#   project      : BuildStamp
#   file         : test_engine.py
#   file_relpath : tests/pipeline/test_engine.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for provider execution and result merging."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from buildstamp.core.errors import DuplicateKeyError
from buildstamp.diagnostic.model import DiagnosticLevel
from buildstamp.facts.keys import Family
from buildstamp.facts.model import Fact, ProviderResult
from buildstamp.facts.status import ProviderStatus
from buildstamp.pipeline.engine import (
    aggregate_warning,
    check_output_keys,
    collect_facts,
    merge_results,
)
from tests.conftest import StaticProvider, make_config, make_env

if TYPE_CHECKING:
    from buildstamp.config import Config
    from buildstamp.environment import BuildEnvironment
    from buildstamp.pipeline.engine import Generation


class ExplodingProvider:
    """Custom provider that ignores the provider boundary."""

    name: str = "exploding"
    family: Family | None = None

    def __call__(self, config: Config, env: BuildEnvironment) -> ProviderResult:
        raise RuntimeError("kaboom")


def test_merge_preserves_provider_then_fact_order() -> None:
    providers = [
        StaticProvider("first", facts=(("A", "1"), ("B", "2"))),
        StaticProvider("second", facts=(("C", "3"),)),
    ]

    generation: Generation = collect_facts(make_config(), make_env(), providers)

    assert [(f.key, f.value) for f in generation.facts] == [("A", "1"), ("B", "2"), ("C", "3")]
    assert generation.as_dict() == {"A": "1", "B": "2", "C": "3"}
    assert generation.warning is None


def test_duplicate_output_key_is_fatal() -> None:
    providers = [
        StaticProvider("first", facts=(("SAME", "1"),)),
        StaticProvider("second", facts=(("SAME", "2"),)),
    ]

    with pytest.raises(DuplicateKeyError) as excinfo:
        collect_facts(make_config(), make_env(), providers)

    assert excinfo.value.key == "SAME"
    assert (excinfo.value.first, excinfo.value.second) == ("first", "second")


def test_colliding_overrides_are_fatal_before_any_provider_runs() -> None:
    cfg: Config = make_config(
        build={"semver": True},
        git={"sha": True},
        key_overrides={"BUILD_SEMVER": "X", "GIT_SHA": "X"},
    )
    build = StaticProvider("build", facts=(("X", "1.2.3"),), family=Family.BUILD)
    # git has nothing to report here, yet the config is still rejected
    git = StaticProvider(
        "git", result=ProviderResult.unavailable("git", "no repository"), family=Family.GIT
    )

    with pytest.raises(DuplicateKeyError) as excinfo:
        collect_facts(cfg, make_env(), [build, git])

    assert excinfo.value.key == "X"
    assert (excinfo.value.first, excinfo.value.second) == ("BUILD_SEMVER", "GIT_SHA")
    assert (build.calls, git.calls) == (0, 0)


def test_prefix_and_override_collision_is_detected() -> None:
    cfg: Config = make_config(
        build={"date": True},
        cargo={"profile": True},
        key_overrides={"CARGO_PROFILE": "BUILDSTAMP_BUILD_DATE"},
    )

    with pytest.raises(DuplicateKeyError):
        check_output_keys(cfg)


def test_duplicate_within_one_provider_is_fatal() -> None:
    result = ProviderResult.success("solo", [Fact("K", "1"), Fact("K", "2")])

    with pytest.raises(DuplicateKeyError):
        merge_results([result])


def test_triggers_are_deduplicated_in_first_seen_order() -> None:
    head, ref = Path("/repo/.git/HEAD"), Path("/repo/.git/refs/heads/main")
    providers = [
        StaticProvider("a", triggers=(head, ref)),
        StaticProvider("b", triggers=(ref, head)),
    ]

    generation: Generation = collect_facts(make_config(), make_env(), providers)

    assert generation.triggers == (head, ref)


def test_failed_providers_are_aggregated_into_one_warning(
    caplog: pytest.LogCaptureFixture,
) -> None:
    providers = [
        StaticProvider("git", result=ProviderResult.failed("git", "corrupt index")),
        StaticProvider("ok", facts=(("K", "v"),)),
        StaticProvider("sysinfo", result=ProviderResult.failed("sysinfo", "access denied")),
    ]

    with caplog.at_level("WARNING"):
        generation: Generation = collect_facts(make_config(), make_env(), providers)

    assert [f.key for f in generation.facts] == ["K"]
    assert generation.warning == "2 provider(s) failed: git: corrupt index; sysinfo: access denied"
    assert [r.provider for r in generation.failed] == ["git", "sysinfo"]
    warnings = [r for r in caplog.records if r.levelname == "WARNING"]
    assert len(warnings) == 1
    assert generation.diagnostics.has_warning()
    assert [d.source for d in generation.diagnostics.at_level(DiagnosticLevel.WARNING)] == [
        "git",
        "sysinfo",
    ]


def test_unavailable_providers_are_silent() -> None:
    providers = [
        StaticProvider("rustc", result=ProviderResult.unavailable("rustc", "not installed")),
    ]

    generation: Generation = collect_facts(make_config(), make_env(), providers)

    assert generation.facts == ()
    assert generation.warning is None
    assert len(generation.diagnostics) == 0
    assert generation.results[0].status is ProviderStatus.UNAVAILABLE


def test_only_enabled_families_are_invoked() -> None:
    git = StaticProvider("git", facts=(("G", "1"),), family=Family.GIT)
    rustc = StaticProvider("rustc", facts=(("R", "1"),), family=Family.RUSTC)

    generation: Generation = collect_facts(
        make_config(git={"sha": True}), make_env(), [git, rustc]
    )

    assert (git.calls, rustc.calls) == (1, 0)
    assert [r.provider for r in generation.results] == ["git"]


def test_line_break_in_a_value_fails_only_its_provider() -> None:
    providers = [
        StaticProvider("clean", facts=(("A", "1"),)),
        StaticProvider("multiline", facts=(("B", "ok"), ("C", "two\nlines"))),
    ]

    generation: Generation = collect_facts(make_config(), make_env(), providers)

    assert [f.key for f in generation.facts] == ["A"]
    assert generation.warning is not None
    assert "multiline" in generation.warning


def test_unexpected_exception_in_custom_provider_is_a_failure() -> None:
    providers = [ExplodingProvider(), StaticProvider("ok", facts=(("K", "v"),))]

    generation: Generation = collect_facts(make_config(), make_env(), providers)

    assert [f.key for f in generation.facts] == ["K"]
    assert generation.failed[0].provider == "exploding"


def test_aggregate_warning_without_failures() -> None:
    assert aggregate_warning([ProviderResult.success("a", [])]) is None
