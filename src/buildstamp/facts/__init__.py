# topmark:header:start
#
#   project      : BuildStamp
#   file         : __init__.py
#   file_relpath : src/buildstamp/facts/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Fact model: stable keys, facts, and provider results."""

from __future__ import annotations

from buildstamp.facts.keys import FactKey
from buildstamp.facts.model import Fact, ProviderResult
from buildstamp.facts.status import ProviderStatus

__all__ = [
    "Fact",
    "FactKey",
    "ProviderResult",
    "ProviderStatus",
]
