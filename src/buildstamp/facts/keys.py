# topmark:header:start
#
#   project      : BuildStamp
#   file         : keys.py
#   file_relpath : src/buildstamp/facts/keys.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Stable fact keys.

Every fact BuildStamp can emit has one `FactKey` member. The member records the
provider family that produces it and the name of the toggle that enables it in
that family's toggle set. Declaration order is the emission order within a
provider.

| Fact key | Example value |
| -------- | ------------- |
| ``BUILD_TIMESTAMP`` | ``2021-02-12T01:54:15.134750+00:00`` |
| ``BUILD_DATE`` | ``2021-02-12`` |
| ``BUILD_TIME`` | ``01:54:15`` |
| ``GIT_SHA`` | ``75b390dc6c05a6a4aa2791cc7b3934591803bc22`` |
| ``GIT_DIRTY`` | ``false`` |
| ``RUSTC_SEMVER`` | ``1.75.0`` |
| ``SYSINFO_TOTAL_MEMORY`` | ``15 GiB`` |
"""

from __future__ import annotations

from buildstamp.core.enums import KeyedStrEnum


class Family(KeyedStrEnum):
    """Provider families, in the fixed order in which providers run.

    Each family owns one cluster of toggles in `Config` (the attribute name
    equals the family key).
    """

    BUILD = ("build", "Build time", ("time",))
    CARGO = ("cargo", "Cargo environment", ("cargo_env",))
    GIT = ("git", "Version control", ("vcs",))
    RUSTC = ("rustc", "Compiler", ("compiler",))
    SYSINFO = ("sysinfo", "System information", ("si", "system"))


class FactKey(KeyedStrEnum):
    """A fact known to BuildStamp.

    Attributes:
        family (Family): Provider family that produces the fact.
        toggle (str): Name of the enabling toggle in that family's toggle set.
    """

    family: Family
    toggle: str

    def __new__(cls, key: str, family: Family, toggle: str, label: str) -> FactKey:
        obj: FactKey = str.__new__(cls, key)
        obj._value_ = key
        obj.family = family
        obj.toggle = toggle
        obj.label = label
        obj.aliases = ()
        return obj

    # Build / time
    BUILD_TIMESTAMP = ("BUILD_TIMESTAMP", Family.BUILD, "timestamp", "RFC 3339 build timestamp")
    BUILD_DATE = ("BUILD_DATE", Family.BUILD, "date", "Build date (YYYY-MM-DD)")
    BUILD_TIME = ("BUILD_TIME", Family.BUILD, "time", "Build time (HH:MM:SS)")
    BUILD_SEMVER = ("BUILD_SEMVER", Family.BUILD, "semver", "Package version being built")

    # Cargo environment
    CARGO_PKG_VERSION = ("CARGO_PKG_VERSION", Family.CARGO, "pkg_version", "Package version")
    CARGO_PKG_VERSION_MAJOR = (
        "CARGO_PKG_VERSION_MAJOR",
        Family.CARGO,
        "pkg_version_major",
        "Package major version",
    )
    CARGO_PKG_VERSION_MINOR = (
        "CARGO_PKG_VERSION_MINOR",
        Family.CARGO,
        "pkg_version_minor",
        "Package minor version",
    )
    CARGO_PKG_VERSION_PATCH = (
        "CARGO_PKG_VERSION_PATCH",
        Family.CARGO,
        "pkg_version_patch",
        "Package patch version",
    )
    CARGO_PKG_VERSION_PRE = (
        "CARGO_PKG_VERSION_PRE",
        Family.CARGO,
        "pkg_version_pre",
        "Package pre-release identifier",
    )
    CARGO_TARGET_TRIPLE = ("CARGO_TARGET_TRIPLE", Family.CARGO, "target_triple", "Target triple")
    CARGO_PROFILE = ("CARGO_PROFILE", Family.CARGO, "profile", "Build profile")
    CARGO_OPT_LEVEL = ("CARGO_OPT_LEVEL", Family.CARGO, "opt_level", "Optimization level")
    CARGO_FEATURES = ("CARGO_FEATURES", Family.CARGO, "features", "Enabled cargo features")

    # Git
    GIT_SHA = ("GIT_SHA", Family.GIT, "sha", "HEAD commit id")
    GIT_SHA_SHORT = ("GIT_SHA_SHORT", Family.GIT, "sha_short", "Abbreviated HEAD commit id")
    GIT_COMMIT_TIMESTAMP = (
        "GIT_COMMIT_TIMESTAMP",
        Family.GIT,
        "commit_timestamp",
        "RFC 3339 commit timestamp (UTC)",
    )
    GIT_COMMIT_DATE = ("GIT_COMMIT_DATE", Family.GIT, "commit_date", "Commit date (UTC)")
    GIT_COMMIT_COUNT = ("GIT_COMMIT_COUNT", Family.GIT, "commit_count", "Commits reachable from HEAD")
    GIT_COMMIT_AUTHOR_NAME = (
        "GIT_COMMIT_AUTHOR_NAME",
        Family.GIT,
        "commit_author_name",
        "HEAD commit author name",
    )
    GIT_COMMIT_AUTHOR_EMAIL = (
        "GIT_COMMIT_AUTHOR_EMAIL",
        Family.GIT,
        "commit_author_email",
        "HEAD commit author email",
    )
    GIT_COMMIT_MESSAGE = (
        "GIT_COMMIT_MESSAGE",
        Family.GIT,
        "commit_message",
        "HEAD commit summary line",
    )
    GIT_BRANCH = ("GIT_BRANCH", Family.GIT, "branch", "Checked-out branch")
    GIT_DIRTY = ("GIT_DIRTY", Family.GIT, "dirty", "Uncommitted changes present")
    GIT_DESCRIBE = ("GIT_DESCRIBE", Family.GIT, "describe", "git describe --tags --always")

    # Compiler
    RUSTC_SEMVER = ("RUSTC_SEMVER", Family.RUSTC, "semver", "Compiler version")
    RUSTC_CHANNEL = ("RUSTC_CHANNEL", Family.RUSTC, "channel", "Compiler release channel")
    RUSTC_HOST_TRIPLE = ("RUSTC_HOST_TRIPLE", Family.RUSTC, "host_triple", "Compiler host triple")
    RUSTC_COMMIT_HASH = ("RUSTC_COMMIT_HASH", Family.RUSTC, "commit_hash", "Compiler commit id")
    RUSTC_COMMIT_DATE = ("RUSTC_COMMIT_DATE", Family.RUSTC, "commit_date", "Compiler commit date")
    RUSTC_LLVM_VERSION = ("RUSTC_LLVM_VERSION", Family.RUSTC, "llvm_version", "LLVM version")

    # System information
    SYSINFO_OS_NAME = ("SYSINFO_OS_NAME", Family.SYSINFO, "os_name", "Operating system name")
    SYSINFO_OS_VERSION = (
        "SYSINFO_OS_VERSION",
        Family.SYSINFO,
        "os_version",
        "Operating system version",
    )
    SYSINFO_CPU_VENDOR = ("SYSINFO_CPU_VENDOR", Family.SYSINFO, "cpu_vendor", "CPU vendor")
    SYSINFO_CPU_BRAND = ("SYSINFO_CPU_BRAND", Family.SYSINFO, "cpu_brand", "CPU brand string")
    SYSINFO_CPU_CORE_COUNT = (
        "SYSINFO_CPU_CORE_COUNT",
        Family.SYSINFO,
        "cpu_core_count",
        "Physical CPU cores",
    )
    SYSINFO_TOTAL_MEMORY = (
        "SYSINFO_TOTAL_MEMORY",
        Family.SYSINFO,
        "total_memory",
        "Total memory",
    )
    SYSINFO_AVAILABLE_MEMORY = (
        "SYSINFO_AVAILABLE_MEMORY",
        Family.SYSINFO,
        "available_memory",
        "Available memory",
    )

    @classmethod
    def for_family(cls, family: Family) -> tuple[FactKey, ...]:
        """Return the keys of ``family`` in declaration order."""
        return tuple(k for k in cls if k.family is family)

    @classmethod
    def toggle_names(cls, family: Family) -> tuple[str, ...]:
        """Return the fact toggle names of ``family`` in declaration order."""
        return tuple(k.toggle for k in cls.for_family(family))
