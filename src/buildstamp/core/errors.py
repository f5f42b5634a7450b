# topmark:header:start
#
#   project      : BuildStamp
#   file         : errors.py
#   file_relpath : src/buildstamp/core/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exceptions raised by BuildStamp.

Two groups live here:

* **Fatal** errors (`GenerationError` and subclasses) propagate to the caller of
  `buildstamp.api.generate` and guarantee that nothing was written to the
  directive stream.
* **Provider signals** (`ProviderUnavailable`, `ProviderFailed`) are raised inside
  a provider's ``run()`` and converted into a `ProviderResult` by the provider
  lifecycle. They never escape the provider boundary.
"""

from __future__ import annotations


class BuildstampError(Exception):
    """Base class for all BuildStamp errors."""


class ConfigError(BuildstampError, ValueError):
    """Invalid configuration value (unknown toggle, bad prefix, out-of-range setting)."""


class GenerationError(BuildstampError):
    """Fatal error that aborts a generation pass before any output is written."""


class DuplicateKeyError(GenerationError):
    """Two facts resolved to the same output key.

    Attributes:
        key (str): The duplicated output key.
        first (str): Provider (or fact key, when caught in the config) that
            claimed the key first.
        second (str): Provider or fact key that claimed it again.
    """

    def __init__(self, key: str, first: str, second: str) -> None:
        self.key = key
        self.first = first
        self.second = second
        super().__init__(
            f"Duplicate output key {key!r} (claimed by {first!r} and {second!r}); "
            "check key_overrides and custom providers."
        )


class DirectiveSyntaxError(GenerationError):
    """A key or trigger path cannot be expressed in the directive line format."""


class ProviderUnavailable(BuildstampError):
    """Expected absence of a provider's data source (silent)."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class ProviderFailed(BuildstampError):
    """A data source was present but querying it failed (reported, non-fatal)."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)
