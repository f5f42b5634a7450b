# topmark:header:start
#
#   project      : BuildStamp
#   file         : constants.py
#   file_relpath : src/buildstamp/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""BuildStamp Constants."""

from __future__ import annotations

from importlib.metadata import version as get_version
from typing import Final

BUILDSTAMP_VERSION: str = get_version("buildstamp")

# Environment variable consulted by `setup_logging()` when no level is given.
LOG_LEVEL_ENV_VAR: Final[str] = "BUILDSTAMP_LOG_LEVEL"

# Output keys are "<prefix>_<FACT KEY>"; an empty prefix emits the bare fact key.
DEFAULT_KEY_PREFIX: Final[str] = "BUILDSTAMP"

# Reproducible-builds convention: fixed build time in seconds since the epoch.
SOURCE_DATE_EPOCH_ENV_VAR: Final[str] = "SOURCE_DATE_EPOCH"

# Cargo-provided variables
CARGO_FEATURE_PREFIX: Final[str] = "CARGO_FEATURE_"
RUSTC_ENV_VAR: Final[str] = "RUSTC"
DEFAULT_RUSTC: Final[str] = "rustc"

# Upper bounds for external queries (seconds / bytes)
RUSTC_TIMEOUT_SECONDS: Final[float] = 10.0
SYSCTL_TIMEOUT_SECONDS: Final[float] = 2.0
CPUINFO_READ_LIMIT: Final[int] = 64 * 1024

DEFAULT_SHA_SHORT_LENGTH: Final[int] = 7
FULL_SHA_LENGTH: Final[int] = 40
