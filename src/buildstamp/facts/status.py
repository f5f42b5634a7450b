# topmark:header:start
#
#   project      : BuildStamp
#   file         : status.py
#   file_relpath : src/buildstamp/facts/status.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Provider result status.

Conventions:
  * Values are human-readable strings used in log lines; compare with ``==``.
  * ``UNAVAILABLE`` is an expected, silent condition. ``FAILED`` is reported to
    the caller as part of the aggregated warning.
"""

from __future__ import annotations

from yachalk import chalk

from buildstamp.core.enums import ColoredStrEnum


class ProviderStatus(ColoredStrEnum):
    """Outcome of one provider invocation."""

    SUCCESS = ("success", chalk.green)
    UNAVAILABLE = ("unavailable", chalk.yellow)
    FAILED = ("failed", chalk.red_bright)
