# topmark:header:start
#
#   project      : BuildStamp
#   file         : model.py
#   file_relpath : src/buildstamp/config/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration model.

This module defines:
    - `Config`: an immutable snapshot passed to the engine and providers.
    - `MutableConfig`: a mutable builder; it can be frozen into `Config` and
      thawed back for edits.

Toggle semantics:
    - A fact toggle that was never set freezes to ``False`` ("absence means
      disabled"). `MutableConfig.from_defaults` switches every toggle of the
      selected families on, mirroring a build where those families are
      available.
    - `Config` is frozen; edit through `Config.thaw` → change →
      `MutableConfig.freeze`.

Mapping shape accepted by `MutableConfig.from_mapping`::

    {
        "build": {"timestamp": True, "timezone": "utc"},
        "git": {"sha": True, "dirty": True, "dirty_include_untracked": False},
        "key_prefix": "MYAPP",
        "key_overrides": {"GIT_SHA": "MYAPP_COMMIT"},
        "directive_style": "double_colon",
    }
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final, cast

from buildstamp.config.logging import get_logger
from buildstamp.config.toggles import (
    BuildToggles,
    CargoToggles,
    GitToggles,
    MutableBuildToggles,
    MutableCargoToggles,
    MutableGitToggles,
    MutableRustcToggles,
    MutableSysinfoToggles,
    MutableToggleSet,
    RustcToggles,
    SysinfoToggles,
    ToggleSet,
)
from buildstamp.config.types import DirectiveStyle
from buildstamp.constants import DEFAULT_KEY_PREFIX
from buildstamp.core.errors import ConfigError
from buildstamp.facts.keys import FactKey, Family

if TYPE_CHECKING:
    from collections.abc import Iterable

    from buildstamp.config.logging import BuildstampLogger

logger: BuildstampLogger = get_logger(__name__)

_PREFIX_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_TOP_LEVEL_KEYS: Final[frozenset[str]] = frozenset(
    {f.key for f in Family} | {"key_prefix", "key_overrides", "directive_style"}
)


# ------------------ Immutable runtime config ------------------


@dataclass(frozen=True, slots=True)
class Config:
    """Immutable configuration for one generation pass.

    Attributes:
        build (BuildToggles): Build/time toggles.
        cargo (CargoToggles): Cargo environment toggles.
        git (GitToggles): Git toggles and settings.
        rustc (RustcToggles): Compiler toggles.
        sysinfo (SysinfoToggles): System information toggles.
        key_prefix (str): Prefix of every output key (``""`` for none).
        key_overrides (Mapping[FactKey, str]): Explicit output key per fact; takes
            precedence over the prefix.
        directive_style (DirectiveStyle): Directive prefix for the host build tool.
    """

    build: BuildToggles = field(default_factory=BuildToggles)
    cargo: CargoToggles = field(default_factory=CargoToggles)
    git: GitToggles = field(default_factory=GitToggles)
    rustc: RustcToggles = field(default_factory=RustcToggles)
    sysinfo: SysinfoToggles = field(default_factory=SysinfoToggles)
    key_prefix: str = DEFAULT_KEY_PREFIX
    key_overrides: Mapping[FactKey, str] = field(default_factory=lambda: {})
    directive_style: DirectiveStyle = DirectiveStyle.SINGLE_COLON

    @classmethod
    def from_defaults(cls, families: Iterable[Family] | None = None) -> Config:
        """Return a frozen config with every toggle of ``families`` enabled."""
        return MutableConfig.from_defaults(families).freeze()

    def toggles_for(self, family: Family) -> ToggleSet:
        """Return the toggle set of ``family``."""
        return cast("ToggleSet", getattr(self, family.key))

    def family_enabled(self, family: Family) -> bool:
        """Return True if at least one fact toggle of ``family`` is on."""
        return self.toggles_for(family).any_enabled()

    def is_enabled(self, key: FactKey) -> bool:
        """Return True if the toggle for ``key`` is on."""
        return self.toggles_for(key.family).is_enabled(key)

    def enabled_keys(self) -> tuple[FactKey, ...]:
        """Return every enabled fact key, in family order then declaration order."""
        return tuple(k for family in Family for k in self.toggles_for(family).enabled_keys())

    def output_key(self, key: FactKey) -> str:
        """Return the environment variable name emitted for ``key``."""
        override: str | None = self.key_overrides.get(key)
        if override is not None:
            return override
        if not self.key_prefix:
            return key.value
        return f"{self.key_prefix}_{key.value}"

    def to_dict(self) -> dict[str, Any]:
        """Return a plain, JSON-friendly view of this configuration."""
        out: dict[str, Any] = {f.key: self.toggles_for(f).to_dict() for f in Family}
        out["key_prefix"] = self.key_prefix
        out["key_overrides"] = {k.value: v for k, v in self.key_overrides.items()}
        out["directive_style"] = self.directive_style.name.lower()
        return out

    def thaw(self) -> MutableConfig:
        """Return a mutable copy of this frozen config.

        Returns:
            MutableConfig: A mutable builder initialized from this snapshot.
        """
        return MutableConfig(
            build=cast("MutableBuildToggles", self.build.thaw()),
            cargo=cast("MutableCargoToggles", self.cargo.thaw()),
            git=cast("MutableGitToggles", self.git.thaw()),
            rustc=cast("MutableRustcToggles", self.rustc.thaw()),
            sysinfo=cast("MutableSysinfoToggles", self.sysinfo.thaw()),
            key_prefix=self.key_prefix,
            key_overrides=dict(self.key_overrides),
            directive_style=self.directive_style,
        )


# -------------------------- Mutable builder --------------------------


@dataclass
class MutableConfig:
    """Mutable configuration builder.

    Toggles are tri-state (``None`` means "inherit"); `freeze` resolves them and
    validates the result.
    """

    build: MutableBuildToggles = field(default_factory=MutableBuildToggles)
    cargo: MutableCargoToggles = field(default_factory=MutableCargoToggles)
    git: MutableGitToggles = field(default_factory=MutableGitToggles)
    rustc: MutableRustcToggles = field(default_factory=MutableRustcToggles)
    sysinfo: MutableSysinfoToggles = field(default_factory=MutableSysinfoToggles)
    key_prefix: str | None = None
    key_overrides: dict[FactKey, str] = field(default_factory=lambda: {})
    directive_style: DirectiveStyle | None = None

    def toggles_for(self, family: Family) -> MutableToggleSet:
        """Return the mutable toggle set of ``family``."""
        return cast("MutableToggleSet", getattr(self, family.key))

    @classmethod
    def from_defaults(cls, families: Iterable[Family] | None = None) -> MutableConfig:
        """Return a builder with every fact toggle of ``families`` enabled.

        Args:
            families (Iterable[Family] | None): Families available in this build;
                ``None`` means all of them.

        Returns:
            MutableConfig: The builder.
        """
        m = cls()
        selected: tuple[Family, ...] = tuple(Family) if families is None else tuple(families)
        for family in selected:
            m.toggles_for(family).enable_all()
        logger.debug("Default toggles enabled for: %s", ", ".join(f.key for f in selected))
        return m

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> MutableConfig:
        """Create a builder from a programmatic nested mapping.

        Unspecified toggles stay unset (and thus freeze to disabled).

        Args:
            mapping (Mapping[str, Any]): See the module docstring for the shape.

        Returns:
            MutableConfig: The builder.

        Raises:
            ConfigError: On unknown keys or values of the wrong type.
        """
        m = cls()
        m.apply_mapping(mapping)
        return m

    def apply_mapping(self, mapping: Mapping[str, Any]) -> MutableConfig:
        """Apply a nested mapping over this builder (last-wins) and return ``self``.

        Raises:
            ConfigError: On unknown keys or values of the wrong type.
        """
        unknown: list[str] = sorted(str(k) for k in mapping if k not in _TOP_LEVEL_KEYS)
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown)}")

        for family in Family:
            tbl: Any = mapping.get(family.key)
            if tbl is None:
                continue
            if not isinstance(tbl, Mapping):
                raise ConfigError(f"{family.key!r} must be a mapping of toggles")
            self.toggles_for(family).apply_mapping(cast("Mapping[str, Any]", tbl))

        if "key_prefix" in mapping:
            self.key_prefix = mapping["key_prefix"]

        overrides: Any = mapping.get("key_overrides")
        if overrides is not None:
            if not isinstance(overrides, Mapping):
                raise ConfigError("'key_overrides' must be a mapping of fact key to name")
            for raw_key, name in cast("Mapping[Any, Any]", overrides).items():
                fact_key: FactKey | None = (
                    raw_key if isinstance(raw_key, FactKey) else FactKey.parse(str(raw_key))
                )
                if fact_key is None:
                    raise ConfigError(f"Unknown fact key in key_overrides: {raw_key!r}")
                self.key_overrides[fact_key] = str(name)

        if "directive_style" in mapping:
            raw_style: Any = mapping["directive_style"]
            style: DirectiveStyle | None = (
                raw_style
                if isinstance(raw_style, DirectiveStyle)
                else DirectiveStyle.parse(str(raw_style))
            )
            if style is None:
                raise ConfigError(f"Unknown directive style: {raw_style!r}")
            self.directive_style = style
        return self

    def merge_with(self, other: MutableConfig) -> MutableConfig:
        """Return a new builder by applying ``other`` over ``self`` (last-wins).

        Unset values in ``other`` keep the values of ``self``; key overrides are
        merged per fact key.
        """
        return MutableConfig(
            build=cast("MutableBuildToggles", self.build.merge_with(other.build)),
            cargo=cast("MutableCargoToggles", self.cargo.merge_with(other.cargo)),
            git=cast("MutableGitToggles", self.git.merge_with(other.git)),
            rustc=cast("MutableRustcToggles", self.rustc.merge_with(other.rustc)),
            sysinfo=cast("MutableSysinfoToggles", self.sysinfo.merge_with(other.sysinfo)),
            key_prefix=other.key_prefix if other.key_prefix is not None else self.key_prefix,
            key_overrides={**self.key_overrides, **other.key_overrides},
            directive_style=other.directive_style or self.directive_style,
        )

    def freeze(self) -> Config:
        """Freeze this builder into an immutable `Config`.

        Raises:
            ConfigError: If the key prefix is not a valid identifier or a setting
                is out of range.
        """
        prefix: str = DEFAULT_KEY_PREFIX if self.key_prefix is None else self.key_prefix
        if prefix and not _PREFIX_RE.match(prefix):
            raise ConfigError(
                f"key_prefix must be empty or an identifier ([A-Za-z_][A-Za-z0-9_]*), got {prefix!r}"
            )

        return Config(
            build=cast("BuildToggles", self.build.freeze()),
            cargo=cast("CargoToggles", self.cargo.freeze()),
            git=cast("GitToggles", self.git.freeze()),
            rustc=cast("RustcToggles", self.rustc.freeze()),
            sysinfo=cast("SysinfoToggles", self.sysinfo.freeze()),
            key_prefix=prefix,
            key_overrides=dict(self.key_overrides),
            directive_style=self.directive_style or DirectiveStyle.SINGLE_COLON,
        )
