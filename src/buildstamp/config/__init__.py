# topmark:header:start
#
#   project      : BuildStamp
#   file         : __init__.py
#   file_relpath : src/buildstamp/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration layer: toggles, the frozen `Config` and its mutable builder.

Build a configuration with `MutableConfig` (e.g. `MutableConfig.from_defaults`),
then `freeze()` it before handing it to `buildstamp.api.generate`.
"""

from __future__ import annotations

from buildstamp.config.model import Config, MutableConfig
from buildstamp.config.toggles import (
    BuildToggles,
    CargoToggles,
    GitToggles,
    RustcToggles,
    SysinfoToggles,
)
from buildstamp.config.types import DirectiveStyle, TimeZone

__all__ = [
    "BuildToggles",
    "CargoToggles",
    "Config",
    "DirectiveStyle",
    "GitToggles",
    "MutableConfig",
    "RustcToggles",
    "SysinfoToggles",
    "TimeZone",
]
