# topmark:header:start
#
#   project      : BuildStamp
#   file         : build.py
#   file_relpath : src/buildstamp/providers/build.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Build time provider (``BUILD_*`` facts).

The build time comes from ``SOURCE_DATE_EPOCH`` when the snapshot defines it
(always rendered in UTC), otherwise from the snapshot clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from buildstamp.config.logging import get_logger
from buildstamp.config.types import TimeZone
from buildstamp.constants import SOURCE_DATE_EPOCH_ENV_VAR
from buildstamp.core.errors import ProviderFailed
from buildstamp.facts.keys import FactKey, Family
from buildstamp.providers.base import BaseProvider

if TYPE_CHECKING:
    from buildstamp.config.logging import BuildstampLogger
    from buildstamp.config.model import Config
    from buildstamp.environment import BuildEnvironment
    from buildstamp.providers.base import FactSink

logger: BuildstampLogger = get_logger(__name__)

_TIME_KEYS: tuple[FactKey, ...] = (
    FactKey.BUILD_TIMESTAMP,
    FactKey.BUILD_DATE,
    FactKey.BUILD_TIME,
)


def parse_source_date_epoch(raw: str) -> datetime:
    """Parse a ``SOURCE_DATE_EPOCH`` value into an aware UTC datetime.

    Args:
        raw (str): Decimal seconds since the epoch.

    Returns:
        datetime: The build time in UTC.

    Raises:
        ProviderFailed: If ``raw`` is not a non-negative integer in range.
    """
    text: str = raw.strip()
    if not text.isdigit():
        raise ProviderFailed(f"{SOURCE_DATE_EPOCH_ENV_VAR} is not an integer: {raw!r}")
    try:
        return datetime.fromtimestamp(int(text), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise ProviderFailed(f"{SOURCE_DATE_EPOCH_ENV_VAR} out of range: {raw!r}") from exc


def to_zone(moment: datetime, zone: TimeZone) -> datetime:
    """Render the aware UTC ``moment`` in ``zone``; local falls back to UTC."""
    if zone is TimeZone.UTC:
        return moment
    try:
        return moment.astimezone()
    except (OverflowError, OSError, ValueError):
        logger.debug("Local time zone unavailable, using UTC")
        return moment


@dataclass
class BuildProvider(BaseProvider):
    """Emit the build timestamp, date, time and package version."""

    name: str = "build"
    family: Family = Family.BUILD

    def run(self, config: Config, env: BuildEnvironment, sink: FactSink) -> None:
        if sink.wants_any(*_TIME_KEYS):
            self._add_time(config, env, sink)
        sink.add(
            FactKey.BUILD_SEMVER,
            env.get("CARGO_PKG_VERSION"),
            missing="CARGO_PKG_VERSION not set",
        )

    def _add_time(self, config: Config, env: BuildEnvironment, sink: FactSink) -> None:
        epoch: str | None = env.get(SOURCE_DATE_EPOCH_ENV_VAR)
        if epoch is not None:
            moment: datetime = parse_source_date_epoch(epoch)
            logger.debug("Build time pinned by %s=%s", SOURCE_DATE_EPOCH_ENV_VAR, epoch)
        else:
            try:
                now: datetime = datetime.fromtimestamp(env.clock(), tz=timezone.utc)
            except (OverflowError, OSError, ValueError) as exc:
                for key in _TIME_KEYS:
                    sink.skip(key, f"clock unreadable: {exc}")
                return
            moment = to_zone(now, config.build.timezone)

        sink.add(FactKey.BUILD_TIMESTAMP, moment.isoformat())
        sink.add(FactKey.BUILD_DATE, moment.strftime("%Y-%m-%d"))
        sink.add(FactKey.BUILD_TIME, moment.strftime("%H:%M:%S"))
