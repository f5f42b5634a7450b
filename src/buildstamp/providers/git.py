# topmark:header:start
#
#   project      : BuildStamp
#   file         : git.py
#   file_relpath : src/buildstamp/providers/git.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Version control provider (``GIT_*`` facts) backed by GitPython.

The repository is discovered at or above the snapshot's working directory.
Outcomes:

- no repository, or GitPython / the ``git`` executable is missing: UNAVAILABLE
  (no facts, no triggers);
- repository without commits: only ``GIT_BRANCH`` (unless HEAD is detached);
- unreadable repository metadata: FAILED.

``GitPython`` is imported lazily because importing it fails when no ``git``
executable is installed, which must not prevent the other providers from
running.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from buildstamp.config.logging import get_logger
from buildstamp.core.errors import ProviderFailed, ProviderUnavailable
from buildstamp.facts.keys import FactKey, Family
from buildstamp.providers.base import BaseProvider

if TYPE_CHECKING:
    from types import ModuleType

    from git import Commit, Repo

    from buildstamp.config.logging import BuildstampLogger
    from buildstamp.config.model import Config
    from buildstamp.config.toggles import GitToggles
    from buildstamp.environment import BuildEnvironment
    from buildstamp.providers.base import FactSink

logger: BuildstampLogger = get_logger(__name__)

_COMMIT_KEYS: tuple[FactKey, ...] = (
    FactKey.GIT_SHA,
    FactKey.GIT_SHA_SHORT,
    FactKey.GIT_COMMIT_TIMESTAMP,
    FactKey.GIT_COMMIT_DATE,
    FactKey.GIT_COMMIT_COUNT,
    FactKey.GIT_COMMIT_AUTHOR_NAME,
    FactKey.GIT_COMMIT_AUTHOR_EMAIL,
    FactKey.GIT_COMMIT_MESSAGE,
)


def _import_git() -> ModuleType:
    """Import GitPython, mapping an unusable installation to UNAVAILABLE."""
    try:
        import git
    except ImportError as exc:
        raise ProviderUnavailable(f"GitPython unusable: {exc}") from exc
    return git


def _text(value: str | bytes) -> str:
    return value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value


def head_triggers(repo: Repo) -> list[Path]:
    """Return the files whose change means HEAD moved.

    Always ``<git-dir>/HEAD``. When HEAD is symbolic, also the loose ref file it
    points to, even if it does not exist yet: the next commit on a packed or
    unborn branch creates it, and a missing path makes cargo re-run. Then
    ``packed-refs``, when present.
    """
    git_dir = Path(repo.git_dir)
    triggers: list[Path] = [git_dir / "HEAD"]
    if repo.head.is_detached:
        return triggers

    common_dir = Path(repo.common_dir)
    triggers.append(common_dir / repo.head.reference.path)
    packed: Path = common_dir / "packed-refs"
    if packed.is_file():
        triggers.append(packed)
    return triggers


def ensure_unborn(repo: Repo) -> None:
    """Raise ``ValueError`` unless HEAD names a branch without any commit yet.

    Called when HEAD does not resolve to a commit. An existing but unparsable
    ref file, or a detached HEAD naming a missing object, is corrupt metadata.
    """
    if repo.head.is_detached:
        raise ValueError("detached HEAD does not name a valid commit")
    ref_path: str = repo.head.reference.path
    if (Path(repo.common_dir) / ref_path).is_file():
        raise ValueError(f"cannot resolve {ref_path}")


@dataclass
class GitProvider(BaseProvider):
    """Emit commit id, commit metadata, branch and dirty state of the checkout."""

    name: str = "git"
    family: Family = Family.GIT

    def run(self, config: Config, env: BuildEnvironment, sink: FactSink) -> None:
        git: ModuleType = _import_git()
        try:
            repo: Repo = git.Repo(env.cwd, search_parent_directories=True)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as exc:
            raise ProviderUnavailable(f"no git repository at or above {env.cwd}") from exc

        with repo:
            logger.debug("Using git repository at %s", repo.git_dir)
            try:
                self._collect(repo, config.git, sink)
            except (git.GitError, ValueError) as exc:
                raise ProviderFailed(f"cannot read repository metadata: {exc}") from exc

    def _collect(self, repo: Repo, toggles: GitToggles, sink: FactSink) -> None:
        has_commits: bool = repo.head.is_valid()
        if not has_commits:
            ensure_unborn(repo)

        if has_commits:
            self._add_commit(repo.head.commit, toggles, sink)
        else:
            for key in _COMMIT_KEYS:
                sink.skip(key, "repository has no commits")

        if repo.head.is_detached:
            sink.skip(FactKey.GIT_BRANCH, "HEAD is detached")
        else:
            sink.add(FactKey.GIT_BRANCH, repo.head.reference.name)

        if has_commits:
            if sink.wants(FactKey.GIT_DIRTY):
                dirty: bool = repo.is_dirty(
                    index=True,
                    working_tree=True,
                    untracked_files=toggles.dirty_include_untracked,
                )
                sink.add(FactKey.GIT_DIRTY, "true" if dirty else "false")
            if sink.wants(FactKey.GIT_DESCRIBE):
                sink.add(FactKey.GIT_DESCRIBE, self._describe(repo, dirty=toggles.dirty))
        else:
            sink.skip(FactKey.GIT_DIRTY, "repository has no commits")
            sink.skip(FactKey.GIT_DESCRIBE, "repository has no commits")

        if toggles.rerun_on_head_change:
            for path in head_triggers(repo):
                sink.trigger(path)

    def _add_commit(self, commit: Commit, toggles: GitToggles, sink: FactSink) -> None:
        sha: str = commit.hexsha
        sink.add(FactKey.GIT_SHA, sha)
        sink.add(FactKey.GIT_SHA_SHORT, sha[: toggles.sha_short_length])

        if sink.wants_any(FactKey.GIT_COMMIT_TIMESTAMP, FactKey.GIT_COMMIT_DATE):
            committed = datetime.fromtimestamp(commit.committed_date, tz=timezone.utc)
            sink.add(FactKey.GIT_COMMIT_TIMESTAMP, committed.isoformat())
            sink.add(FactKey.GIT_COMMIT_DATE, committed.strftime("%Y-%m-%d"))

        if sink.wants(FactKey.GIT_COMMIT_COUNT):
            sink.add(FactKey.GIT_COMMIT_COUNT, str(commit.count()))
        if sink.wants_any(FactKey.GIT_COMMIT_AUTHOR_NAME, FactKey.GIT_COMMIT_AUTHOR_EMAIL):
            sink.add(FactKey.GIT_COMMIT_AUTHOR_NAME, commit.author.name or None)
            sink.add(FactKey.GIT_COMMIT_AUTHOR_EMAIL, commit.author.email or None)
        if sink.wants(FactKey.GIT_COMMIT_MESSAGE):
            sink.add(FactKey.GIT_COMMIT_MESSAGE, _text(commit.summary))

    def _describe(self, repo: Repo, *, dirty: bool) -> str | None:
        from git import GitCommandError

        args: list[str] = ["--tags", "--always"]
        if dirty:
            args.append("--dirty")
        try:
            return repo.git.describe(*args).strip() or None
        except GitCommandError as exc:
            logger.debug("git describe failed: %s", exc)
            return None
