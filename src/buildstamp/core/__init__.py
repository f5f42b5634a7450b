# topmark:header:start
#
#   project      : BuildStamp
#   file         : __init__.py
#   file_relpath : src/buildstamp/core/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Core primitives (enums, errors) shared by all BuildStamp layers."""

from __future__ import annotations
