# topmark:header:start
#
#   project      : BuildStamp
#   file         : types.py
#   file_relpath : src/buildstamp/config/types.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Enumerations used by the BuildStamp configuration model."""

from __future__ import annotations

from buildstamp.core.enums import KeyedStrEnum


class TimeZone(KeyedStrEnum):
    """Time zone used to render the build date/time facts."""

    LOCAL = ("local", "Local time (falls back to UTC when the offset is unknown)")
    UTC = ("utc", "Coordinated Universal Time", ("z", "zulu"))


class DirectiveStyle(KeyedStrEnum):
    """Directive prefix understood by the host build tool.

    The member value is the literal line prefix.
    """

    SINGLE_COLON = ("cargo:", "cargo:KEY=VALUE (all cargo versions)", ("single", "legacy"))
    DOUBLE_COLON = ("cargo::", "cargo::KEY=VALUE (cargo 1.77+)", ("double", "modern"))
