# topmark:header:start
#
#   project      : BuildStamp
#   file         : __init__.py
#   file_relpath : src/buildstamp/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""BuildStamp package.

BuildStamp runs from a build script and emits build-time facts (timestamp,
git state, compiler version, host information, cargo environment) as
``cargo:rustc-env`` directives. The programmatic entry points live in
`buildstamp.api`.
"""

from __future__ import annotations
