# topmark:header:start
#
#   project      : BuildStamp
#   file         : test_generate.py
#   file_relpath : tests/api/test_generate.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""End-to-end tests for `buildstamp.api.generate` and `collect`."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

import pytest

from buildstamp import api
from buildstamp.config import Config
from buildstamp.core.errors import ConfigError, DuplicateKeyError, GenerationError
from buildstamp.facts.keys import FactKey, Family
from buildstamp.facts.status import ProviderStatus
from buildstamp.providers import (
    BuildProvider,
    CargoProvider,
    GitProvider,
    RustcProvider,
    SysinfoProvider,
    default_providers,
)
from tests.conftest import (
    StaticProvider,
    init_repo,
    make_config,
    make_env,
    mark_integration,
    mark_pipeline,
    requires_git,
)

if TYPE_CHECKING:
    from pathlib import Path

    from git import Repo

    from buildstamp.api.types import GenerationReport
    from buildstamp.environment import BuildEnvironment

CARGO_ENV: dict[str, str] = {
    "CARGO_PKG_VERSION": "0.9.1",
    "CARGO_PKG_VERSION_MAJOR": "0",
    "CARGO_PKG_VERSION_MINOR": "9",
    "CARGO_PKG_VERSION_PATCH": "1",
    "CARGO_PKG_VERSION_PRE": "",
    "TARGET": "x86_64-unknown-linux-gnu",
    "PROFILE": "debug",
    "OPT_LEVEL": "0",
    "CARGO_FEATURE_STD": "1",
}


def _keys(report: GenerationReport) -> list[str]:
    return [f.key for f in report.facts]


def _deterministic_providers() -> tuple[BuildProvider, CargoProvider]:
    return BuildProvider(), CargoProvider()


def test_default_providers_follow_family_order() -> None:
    providers = default_providers()

    assert [type(p) for p in providers] == [
        BuildProvider,
        CargoProvider,
        GitProvider,
        RustcProvider,
        SysinfoProvider,
    ]
    assert [p.family for p in providers] == list(Family)


def test_default_providers_subset_keeps_order() -> None:
    providers = default_providers([Family.SYSINFO, Family.BUILD])

    assert [p.name for p in providers] == ["build", "sysinfo"]


@mark_pipeline
def test_all_toggles_disabled_writes_nothing() -> None:
    stream = io.StringIO()

    report: GenerationReport = api.generate(
        Config(), env=make_env(CARGO_ENV), providers=default_providers(), stream=stream
    )

    assert stream.getvalue() == ""
    assert report.lines == ()
    assert report.results == ()


@mark_pipeline
def test_emitted_keys_are_enabled_and_available() -> None:
    cfg: Config = make_config(
        build={"date": True, "semver": True},
        cargo={"profile": True, "pkg_version_pre": True},
        rustc={"semver": True},
    )
    failing_rustc = RustcProvider(runner=lambda argv, timeout: "garbage\n")
    stream = io.StringIO()

    report: GenerationReport = api.generate(
        cfg,
        env=make_env({"CARGO_PKG_VERSION": "0.9.1", "PROFILE": "debug"}),
        providers=[BuildProvider(), CargoProvider(), failing_rustc],
        stream=stream,
    )

    assert _keys(report) == [
        "BUILDSTAMP_BUILD_DATE",
        "BUILDSTAMP_BUILD_SEMVER",
        "BUILDSTAMP_CARGO_PROFILE",
    ]
    assert report.warning is None
    assert stream.getvalue() == report.text


@mark_pipeline
def test_reruns_are_byte_identical() -> None:
    cfg: Config = make_config([Family.BUILD, Family.CARGO], build={"timezone": "utc"})
    env: BuildEnvironment = make_env(CARGO_ENV)
    outputs: list[str] = []

    for _ in range(2):
        stream = io.StringIO()
        api.generate(cfg, env=env, providers=_deterministic_providers(), stream=stream)
        outputs.append(stream.getvalue())

    assert outputs[0] == outputs[1]
    assert outputs[0].startswith(
        "cargo:rustc-env=BUILDSTAMP_BUILD_TIMESTAMP=2021-02-12T01:54:15.500000+00:00\n"
    )
    assert "cargo:rustc-env=BUILDSTAMP_CARGO_FEATURES=std\n" in outputs[0]


@mark_pipeline
def test_duplicate_output_key_writes_nothing() -> None:
    cfg: Config = make_config(
        build={"semver": True},
        cargo={"pkg_version": True},
        key_overrides={"BUILD_SEMVER": "VERSION", "CARGO_PKG_VERSION": "VERSION"},
    )
    stream = io.StringIO()

    with pytest.raises(DuplicateKeyError) as excinfo:
        api.generate(
            cfg, env=make_env(CARGO_ENV), providers=_deterministic_providers(), stream=stream
        )

    assert excinfo.value.key == "VERSION"
    assert isinstance(excinfo.value, GenerationError)
    assert stream.getvalue() == ""


@mark_pipeline
@mark_integration
def test_colliding_overrides_fail_even_outside_a_checkout(tmp_path: Path) -> None:
    cfg: Config = make_config(
        build={"semver": True},
        git={"sha": True},
        key_overrides={"BUILD_SEMVER": "X", "GIT_SHA": "X"},
    )
    stream = io.StringIO()

    with pytest.raises(DuplicateKeyError):
        api.generate(
            cfg,
            env=make_env({"CARGO_PKG_VERSION": "1.2.3"}, cwd=tmp_path),
            providers=default_providers([Family.BUILD, Family.GIT]),
            stream=stream,
        )

    assert stream.getvalue() == ""


@mark_pipeline
def test_line_break_fails_its_provider_and_the_rest_is_written(
    caplog: pytest.LogCaptureFixture,
) -> None:
    cfg: Config = make_config(build={"semver": True}, cargo={"profile": True})
    env: BuildEnvironment = make_env({"CARGO_PKG_VERSION": "1.0.0\n", "PROFILE": "release"})
    stream = io.StringIO()

    with caplog.at_level("WARNING"):
        report: GenerationReport = api.generate(
            cfg, env=env, providers=_deterministic_providers(), stream=stream
        )

    assert stream.getvalue() == "cargo:rustc-env=BUILDSTAMP_CARGO_PROFILE=release\n"
    assert report.warning is not None and "build" in report.warning
    assert report.results[0].status is ProviderStatus.FAILED
    assert "1 provider(s) failed" in caplog.text


@mark_pipeline
def test_custom_providers_and_key_overrides() -> None:
    cfg: Config = make_config(
        build={"date": True, "timezone": "utc"},
        key_prefix="",
        key_overrides={FactKey.BUILD_DATE: "RELEASE_DATE"},
        directive_style="double_colon",
    )
    stream = io.StringIO()

    api.generate(
        cfg,
        env=make_env(),
        providers=[BuildProvider(), StaticProvider("extra", facts=(("CUSTOM", "x"),))],
        stream=stream,
    )

    assert stream.getvalue() == (
        "cargo::rustc-env=RELEASE_DATE=2021-02-12\ncargo::rustc-env=CUSTOM=x\n"
    )


@mark_pipeline
def test_config_mapping_is_accepted() -> None:
    generation = api.collect(
        {"cargo": {"profile": True}},
        env=make_env({"PROFILE": "release"}),
        providers=[CargoProvider()],
    )

    assert generation.as_dict() == {"BUILDSTAMP_CARGO_PROFILE": "release"}


def test_invalid_config_mapping_raises() -> None:
    with pytest.raises(ConfigError):
        api.collect({"cargo": {"nope": True}}, env=make_env(), providers=[])


@mark_pipeline
@mark_integration
def test_outside_a_checkout_other_facts_still_emit(tmp_path: Path) -> None:
    cfg: Config = make_config([Family.GIT], build={"date": True, "timezone": "utc"})
    stream = io.StringIO()

    report: GenerationReport = api.generate(
        cfg,
        env=make_env(cwd=tmp_path),
        providers=default_providers([Family.BUILD, Family.GIT]),
        stream=stream,
    )

    assert stream.getvalue() == "cargo:rustc-env=BUILDSTAMP_BUILD_DATE=2021-02-12\n"
    assert report.triggers == ()
    assert report.warning is None


@mark_pipeline
@mark_integration
@requires_git
def test_git_facts_in_a_checkout(tmp_path: Path) -> None:
    repo: Repo = init_repo(tmp_path, {"Cargo.toml": "[package]\n"})
    cfg: Config = make_config(git={"sha": True, "sha_short": True, "dirty": True})
    stream = io.StringIO()

    clean: GenerationReport = api.generate(
        cfg, env=make_env(cwd=tmp_path), providers=default_providers([Family.GIT]), stream=stream
    )
    facts: dict[str, str] = {f.key: f.value for f in clean.facts}

    assert facts["BUILDSTAMP_GIT_SHA"] == repo.head.commit.hexsha
    assert facts["BUILDSTAMP_GIT_SHA"].startswith(facts["BUILDSTAMP_GIT_SHA_SHORT"])
    assert facts["BUILDSTAMP_GIT_DIRTY"] == "false"
    assert any(line.startswith("cargo:rerun-if-changed=") for line in clean.lines)
    assert clean.lines[-1].endswith("\n")

    (tmp_path / "Cargo.toml").write_text("[package]\nname = 'x'\n", encoding="utf-8")
    dirty: GenerationReport = api.generate(
        cfg,
        env=make_env(cwd=tmp_path),
        providers=default_providers([Family.GIT]),
        stream=io.StringIO(),
    )

    assert {f.key: f.value for f in dirty.facts}["BUILDSTAMP_GIT_DIRTY"] == "true"


def test_generate_sets_up_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(api, "ensure_logging", lambda: calls.append("setup") is None)

    api.generate(Config(), env=make_env(), providers=[], stream=io.StringIO())

    assert calls == ["setup"]


def test_version_is_a_string() -> None:
    assert isinstance(api.version(), str)
