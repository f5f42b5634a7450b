# topmark:header:start
#
#   project      : BuildStamp
#   file         : toggles.py
#   file_relpath : src/buildstamp/config/toggles.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Per-family toggle sets (frozen runtime view and mutable builder).

Design:
    * Each provider family has a frozen toggle set (e.g. `GitToggles`) holding
      plain booleans and settings, used by providers at runtime.
    * The matching mutable builder (e.g. `MutableGitToggles`) uses tri-state
      options (``bool | None``) so that layers can be merged without clobbering
      explicit values. ``None`` means "inherit".
    * ``freeze()`` resolves unset fields against the frozen class defaults: every
      fact toggle defaults to ``False`` (absence means disabled), settings keep
      their documented default.

Mapping shape accepted by ``from_mapping``::

    {"timestamp": True, "timezone": "utc"}
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from buildstamp.config.types import TimeZone
from buildstamp.constants import DEFAULT_SHA_SHORT_LENGTH, FULL_SHA_LENGTH
from buildstamp.core.errors import ConfigError
from buildstamp.facts.keys import FactKey, Family

if TYPE_CHECKING:
    from collections.abc import Mapping

_MUTABLE_TYPES: dict[type[ToggleSet], type[MutableToggleSet]] = {}


class ToggleSet:
    """Base class for the frozen per-family toggle sets."""

    family: ClassVar[Family]

    def is_enabled(self, key: FactKey) -> bool:
        """Return True if the toggle for ``key`` is on.

        Args:
            key (FactKey): A fact key of this set's family.

        Returns:
            bool: Whether the fact should be attempted.
        """
        if key.family is not self.family:
            return False
        return bool(getattr(self, key.toggle))

    def enabled_keys(self) -> tuple[FactKey, ...]:
        """Return the enabled fact keys in declaration order."""
        return tuple(k for k in FactKey.for_family(self.family) if self.is_enabled(k))

    def any_enabled(self) -> bool:
        """Return True if at least one fact toggle of this family is on."""
        return any(self.is_enabled(k) for k in FactKey.for_family(self.family))

    def thaw(self) -> MutableToggleSet:
        """Return a mutable builder initialized from this frozen set."""
        mutable_type: type[MutableToggleSet] = _MUTABLE_TYPES[type(self)]
        return mutable_type(**{f.name: getattr(self, f.name) for f in fields(self)})  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, Any]:
        """Return a plain mapping of every toggle and setting (enums as keys)."""
        out: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value: Any = getattr(self, f.name)
            out[f.name] = value.value if isinstance(value, Enum) else value
        return out


class MutableToggleSet:
    """Base class for the mutable, tri-state toggle builders."""

    frozen_type: ClassVar[type[ToggleSet]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _MUTABLE_TYPES[cls.frozen_type] = cls

    def enable_all(self) -> None:
        """Switch every fact toggle of this family on."""
        for name in FactKey.toggle_names(self.frozen_type.family):
            setattr(self, name, True)

    def disable_all(self) -> None:
        """Switch every fact toggle of this family off."""
        for name in FactKey.toggle_names(self.frozen_type.family):
            setattr(self, name, False)

    def merge_with(self, other: MutableToggleSet) -> MutableToggleSet:
        """Return a new builder by applying ``other`` over ``self`` (last-wins).

        ``None`` fields in ``other`` do not override explicit values in ``self``.
        """
        merged: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            override: Any = getattr(other, f.name)
            merged[f.name] = override if override is not None else getattr(self, f.name)
        return type(self)(**merged)

    def resolve(self, base: ToggleSet) -> ToggleSet:
        """Resolve tri-state fields against a frozen base set."""
        values: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            current: Any = getattr(self, f.name)
            values[f.name] = getattr(base, f.name) if current is None else current
        frozen: ToggleSet = self.frozen_type(**values)
        _validate(frozen)
        return frozen

    def freeze(self) -> ToggleSet:
        """Freeze against the class defaults (fact toggles off, settings default)."""
        return self.resolve(self.frozen_type())

    def apply_mapping(self, tbl: Mapping[str, Any]) -> None:
        """Apply a programmatic ``{toggle: value}`` mapping in place.

        Raises:
            ConfigError: If a key is not a toggle/setting of this family or a
                setting value cannot be parsed.
        """
        known: dict[str, Any] = {f.name: f for f in fields(self)}  # type: ignore[arg-type]
        family: Family = self.frozen_type.family
        for name, raw in tbl.items():
            if name not in known:
                raise ConfigError(f"Unknown {family.key} toggle: {name!r}")
            setattr(self, name, _coerce(family, name, raw, getattr(self.frozen_type(), name)))


def _coerce(family: Family, name: str, raw: Any, default: Any) -> Any:
    if raw is None:
        return None
    if isinstance(default, bool):
        if not isinstance(raw, bool):
            raise ConfigError(f"{family.key}.{name} must be a boolean, got {raw!r}")
        return raw
    if isinstance(default, TimeZone):
        tz: TimeZone | None = raw if isinstance(raw, TimeZone) else TimeZone.parse(str(raw))
        if tz is None:
            raise ConfigError(f"{family.key}.{name}: unknown time zone {raw!r}")
        return tz
    if isinstance(default, int):
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise ConfigError(f"{family.key}.{name} must be an integer, got {raw!r}")
        return raw
    return raw


def _validate(toggles: ToggleSet) -> None:
    if isinstance(toggles, GitToggles) and not 1 <= toggles.sha_short_length <= FULL_SHA_LENGTH:
        raise ConfigError(
            f"git.sha_short_length must be between 1 and {FULL_SHA_LENGTH}, "
            f"got {toggles.sha_short_length}"
        )


# ------------------------------ Build / time ------------------------------


@dataclass(frozen=True, slots=True)
class BuildToggles(ToggleSet):
    """Toggles for the ``BUILD_*`` facts.

    Attributes:
        timestamp (bool): Emit ``BUILD_TIMESTAMP`` (RFC 3339).
        date (bool): Emit ``BUILD_DATE`` (``%Y-%m-%d``).
        time (bool): Emit ``BUILD_TIME`` (``%H:%M:%S``).
        semver (bool): Emit ``BUILD_SEMVER`` from ``CARGO_PKG_VERSION``.
        timezone (TimeZone): Zone used to render the date/time facts.
    """

    family: ClassVar[Family] = Family.BUILD

    timestamp: bool = False
    date: bool = False
    time: bool = False
    semver: bool = False
    timezone: TimeZone = TimeZone.LOCAL


@dataclass
class MutableBuildToggles(MutableToggleSet):
    """Mutable builder for `BuildToggles`."""

    frozen_type: ClassVar[type[ToggleSet]] = BuildToggles

    timestamp: bool | None = None
    date: bool | None = None
    time: bool | None = None
    semver: bool | None = None
    timezone: TimeZone | None = None


# ------------------------------ Cargo env ------------------------------


@dataclass(frozen=True, slots=True)
class CargoToggles(ToggleSet):
    """Toggles for the ``CARGO_*`` facts republished from cargo's environment."""

    family: ClassVar[Family] = Family.CARGO

    pkg_version: bool = False
    pkg_version_major: bool = False
    pkg_version_minor: bool = False
    pkg_version_patch: bool = False
    pkg_version_pre: bool = False
    target_triple: bool = False
    profile: bool = False
    opt_level: bool = False
    features: bool = False


@dataclass
class MutableCargoToggles(MutableToggleSet):
    """Mutable builder for `CargoToggles`."""

    frozen_type: ClassVar[type[ToggleSet]] = CargoToggles

    pkg_version: bool | None = None
    pkg_version_major: bool | None = None
    pkg_version_minor: bool | None = None
    pkg_version_patch: bool | None = None
    pkg_version_pre: bool | None = None
    target_triple: bool | None = None
    profile: bool | None = None
    opt_level: bool | None = None
    features: bool | None = None


# ------------------------------ Git ------------------------------


@dataclass(frozen=True, slots=True)
class GitToggles(ToggleSet):
    """Toggles and settings for the ``GIT_*`` facts.

    Attributes:
        dirty_include_untracked (bool): Count untracked (non-ignored) files as
            dirty. Staged and unstaged changes to tracked files always count.
        rerun_on_head_change (bool): Emit ``rerun-if-changed`` triggers for
            ``HEAD`` and the ref it points to.
        sha_short_length (int): Length of ``GIT_SHA_SHORT``.
    """

    family: ClassVar[Family] = Family.GIT

    sha: bool = False
    sha_short: bool = False
    commit_timestamp: bool = False
    commit_date: bool = False
    commit_count: bool = False
    commit_author_name: bool = False
    commit_author_email: bool = False
    commit_message: bool = False
    branch: bool = False
    dirty: bool = False
    describe: bool = False

    dirty_include_untracked: bool = False
    rerun_on_head_change: bool = True
    sha_short_length: int = DEFAULT_SHA_SHORT_LENGTH


@dataclass
class MutableGitToggles(MutableToggleSet):
    """Mutable builder for `GitToggles`."""

    frozen_type: ClassVar[type[ToggleSet]] = GitToggles

    sha: bool | None = None
    sha_short: bool | None = None
    commit_timestamp: bool | None = None
    commit_date: bool | None = None
    commit_count: bool | None = None
    commit_author_name: bool | None = None
    commit_author_email: bool | None = None
    commit_message: bool | None = None
    branch: bool | None = None
    dirty: bool | None = None
    describe: bool | None = None

    dirty_include_untracked: bool | None = None
    rerun_on_head_change: bool | None = None
    sha_short_length: int | None = None


# ------------------------------ Compiler ------------------------------


@dataclass(frozen=True, slots=True)
class RustcToggles(ToggleSet):
    """Toggles for the ``RUSTC_*`` facts."""

    family: ClassVar[Family] = Family.RUSTC

    semver: bool = False
    channel: bool = False
    host_triple: bool = False
    commit_hash: bool = False
    commit_date: bool = False
    llvm_version: bool = False


@dataclass
class MutableRustcToggles(MutableToggleSet):
    """Mutable builder for `RustcToggles`."""

    frozen_type: ClassVar[type[ToggleSet]] = RustcToggles

    semver: bool | None = None
    channel: bool | None = None
    host_triple: bool | None = None
    commit_hash: bool | None = None
    commit_date: bool | None = None
    llvm_version: bool | None = None


# ------------------------------ System information ------------------------------


@dataclass(frozen=True, slots=True)
class SysinfoToggles(ToggleSet):
    """Toggles for the ``SYSINFO_*`` facts."""

    family: ClassVar[Family] = Family.SYSINFO

    os_name: bool = False
    os_version: bool = False
    cpu_vendor: bool = False
    cpu_brand: bool = False
    cpu_core_count: bool = False
    total_memory: bool = False
    available_memory: bool = False


@dataclass
class MutableSysinfoToggles(MutableToggleSet):
    """Mutable builder for `SysinfoToggles`."""

    frozen_type: ClassVar[type[ToggleSet]] = SysinfoToggles

    os_name: bool | None = None
    os_version: bool | None = None
    cpu_vendor: bool | None = None
    cpu_brand: bool | None = None
    cpu_core_count: bool | None = None
    total_memory: bool | None = None
    available_memory: bool | None = None
