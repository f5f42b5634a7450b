# topmark:header:start
#
#   project      : BuildStamp
#   file         : conftest.py
#   file_relpath : tests/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Pytest configuration for the BuildStamp test suite.

This file sets up global fixtures and customizes the logging configuration for test runs,
ensuring consistent and verbose logging output during testing.

Notes:
    Tests never read the real process environment. Build a synthetic
    `BuildEnvironment` with `make_env` and a frozen `Config` with `make_config`;
    providers receive both explicitly.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar, cast

import pytest

from buildstamp.config import MutableConfig, logging
from buildstamp.environment import BuildEnvironment
from buildstamp.facts.model import Fact, ProviderResult

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from git import Repo

    from buildstamp.config import Config
    from buildstamp.facts.keys import Family

F = TypeVar("F", bound=Callable[..., object])

# This defines the type for the decorator function itself:
# It takes a Callable (F) and returns the same Callable (F).
DecoratorType = Callable[[F], F]

# 2021-02-12T01:54:15.500000+00:00
FIXED_NOW: float = 1_613_094_855.5


def as_typed_mark(mark: Any) -> DecoratorType[Any]:
    """Wrap a pytest mark so static type checkers preserve the function type.

    Args:
        mark (Any): A pytest mark decorator such as `pytest.mark.integration`.

    Returns:
        DecoratorType[Any]: A decorator that preserves the wrapped function's type.
    """

    def _decorator(func: F) -> F:
        return cast("F", mark(func))

    return _decorator


mark_integration: DecoratorType[Any] = as_typed_mark(pytest.mark.integration)
mark_pipeline: DecoratorType[Any] = as_typed_mark(pytest.mark.pipeline)
requires_git: DecoratorType[Any] = as_typed_mark(
    pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")
)


def parametrize(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.mark.parametrize`.

    Args:
        *args (Any): Positional arguments forwarded to `pytest.mark.parametrize`.
        **kwargs (Any): Keyword arguments forwarded to `pytest.mark.parametrize`.

    Returns:
        Callable[[F], F]: A decorator that preserves the wrapped function's type.
    """
    mark: pytest.MarkDecorator = pytest.mark.parametrize(*args, **kwargs)
    return as_typed_mark(mark)


def hookimpl(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.hookimpl`."""
    return as_typed_mark(pytest.hookimpl(*args, **kwargs))


@pytest.fixture(autouse=True)
def silence_buildstamp_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure BuildStamp's runtime log level is not forced via env during tests.

    Args:
        monkeypatch (pytest.MonkeyPatch): Pytest monkeypatch fixture used to manipulate
            environment variables.
    """
    monkeypatch.delenv("BUILDSTAMP_LOG_LEVEL", raising=False)


@hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # pylint: disable=unused-argument
    """Set the logging level to TRACE for all tests.

    Args:
        config (pytest.Config): The pytest configuration object.
    """
    logging.setup_logging(level=logging.TRACE_LEVEL)


def make_mutable_config(
    families: Iterable[Family] | None = (),
    **tables: Any,
) -> MutableConfig:
    """Return a mutable builder for scenarios that need staged edits.

    Args:
        families (Iterable[Family] | None): Families whose toggles are all enabled
            (``None`` for all families; empty for none).
        **tables (Any): Mapping entries applied on top (see `MutableConfig.from_mapping`).

    Returns:
        MutableConfig: A mutable configuration object ready to be frozen or further edited.
    """
    m: MutableConfig = MutableConfig() if families == () else MutableConfig.from_defaults(families)
    m.apply_mapping(tables)
    return m


def make_config(families: Iterable[Family] | None = (), **tables: Any) -> Config:
    """Return a frozen `Config` built from enabled families and mapping overrides.

    Example:
        ``make_config(git={"sha": True}, build={"timezone": "utc"})``

    Returns:
        Config: An immutable configuration snapshot for use in tests.
    """
    return make_mutable_config(families, **tables).freeze()


def make_env(
    vars: Mapping[str, str] | None = None,
    *,
    cwd: Path | None = None,
    clock: Callable[[], float] | None = None,
) -> BuildEnvironment:
    """Return a synthetic environment snapshot with a fixed clock.

    Args:
        vars (Mapping[str, str] | None): Environment variables (empty by default).
        cwd (Path | None): Working directory; defaults to the current directory.
        clock (Callable[[], float] | None): Clock; defaults to `FIXED_NOW`.

    Returns:
        BuildEnvironment: The snapshot.
    """
    return BuildEnvironment(
        vars=dict(vars or {}),
        cwd=cwd if cwd is not None else Path.cwd(),
        clock=clock if clock is not None else (lambda: FIXED_NOW),
    )


@dataclass
class StaticProvider:
    """Test provider returning a canned result and counting invocations.

    Attributes:
        name (str): Provider name.
        facts (tuple[tuple[str, str], ...]): ``(key, value)`` pairs to report.
        triggers (tuple[Path, ...]): Trigger paths to report.
        family (Family | None): Gating family (``None`` means always invoked).
        result (ProviderResult | None): Explicit result overriding ``facts``.
        calls (int): Number of invocations so far.
    """

    name: str
    facts: tuple[tuple[str, str], ...] = ()
    triggers: tuple[Path, ...] = ()
    family: Family | None = None
    result: ProviderResult | None = None
    calls: int = field(default=0)

    def __call__(self, config: Config, env: BuildEnvironment) -> ProviderResult:
        self.calls += 1
        if self.result is not None:
            return self.result
        return ProviderResult.success(
            self.name,
            [Fact(key=k, value=v) for k, v in self.facts],
            triggers=self.triggers,
        )


def init_repo(path: Path, files: Mapping[str, str] | None = None, *, message: str = "initial") -> Repo:
    """Create a git repository at ``path`` with one commit of ``files``.

    Pass ``files={}`` to create a repository without commits.

    Args:
        path (Path): Repository root (created if missing).
        files (Mapping[str, str] | None): Relative path to content; defaults to a README.
        message (str): Commit message.

    Returns:
        Repo: The opened repository.
    """
    import git

    path.mkdir(parents=True, exist_ok=True)
    repo: Repo = git.Repo.init(path)
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Ada Lovelace")
        cw.set_value("user", "email", "ada@example.com")
        cw.set_value("commit", "gpgsign", "false")

    contents: Mapping[str, str] = {"README.md": "hello\n"} if files is None else files
    if contents:
        commit_files(repo, contents, message=message)
    return repo


def commit_files(repo: Repo, files: Mapping[str, str], *, message: str) -> str:
    """Write ``files`` into the work tree, commit them and return the new sha."""
    import git

    root: Path = _work_tree(repo)
    for rel, content in files.items():
        target: Path = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    repo.index.add(list(files))
    actor = git.Actor("Ada Lovelace", "ada@example.com")
    return repo.index.commit(message, author=actor, committer=actor).hexsha


def _work_tree(repo: Repo) -> Path:
    assert repo.working_tree_dir is not None
    return Path(repo.working_tree_dir)
