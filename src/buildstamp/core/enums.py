# topmark:header:start
#
#   project      : BuildStamp
#   file         : enums.py
#   file_relpath : src/buildstamp/core/enums.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Enum primitives shared by the configuration and fact layers.

Provided:
    - `KeyedStrEnum`: ``str`` enum whose ``.value`` is a stable machine key, with a
      human label and optional aliases used by `KeyedStrEnum.parse`.
    - `ColoredStrEnum`: ``str`` enum that carries a `yachalk` colorizer next to its
      textual value, for human-facing log lines.

Example:
    ```python
    from yachalk import chalk

    class Zone(KeyedStrEnum):
        UTC = ("utc", "Coordinated Universal Time", ("z", "zulu"))

    assert Zone.parse("Zulu") is Zone.UTC

    class Outcome(ColoredStrEnum):
        OK = ("ok", chalk.green)

    print(Outcome.OK.color("done"))
    ```
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable

_KS = TypeVar("_KS", bound="KeyedStrEnum")


def _norm_token(s: str) -> str:
    """Normalize an identifier-like string to match enum keys and aliases."""
    return s.strip().lower().replace("-", "_").replace(" ", "_")


class KeyedStrEnum(str, Enum):
    """Enum where `.value` is a stable machine key; metadata lives on attributes.

    Attributes:
        label (str): Human-readable label for the member.
        aliases (tuple[str, ...]): Alternative tokens accepted by `parse()`.
    """

    label: str
    aliases: tuple[str, ...]

    def __new__(
        cls: type[_KS],
        key: str,
        label: str,
        aliases: Iterable[str] = (),
    ) -> _KS:
        """Create a new member with key, label, and optional aliases.

        Args:
            key (str): The stable machine key (stored as `.value`).
            label (str): The human-readable label for the enum member.
            aliases (Iterable[str]): Optional aliases for parsing. Defaults to empty.

        Returns:
            _KS: The newly created enum member.
        """
        obj: _KS = str.__new__(cls, key)
        obj._value_ = key
        obj.label = label
        obj.aliases = tuple(aliases)
        return obj

    @property
    def key(self) -> str:
        """Stable machine key (same as `.value`)."""
        return str.__str__(self)

    def __str__(self) -> str:
        return self.key

    @classmethod
    def parse(cls: type[_KS], raw: str | None) -> _KS | None:
        """Parse a token into an enum member.

        Matching is case-insensitive against the key, the member name and the
        aliases; ``-`` and spaces are treated as ``_``.

        Args:
            raw (str | None): Token to parse.

        Returns:
            _KS | None: The matching member, or ``None``.
        """
        if raw is None:
            return None
        token: str = _norm_token(raw)

        for m in cls:
            if token in (_norm_token(m.value), _norm_token(m.name)):
                return m
            if any(token == _norm_token(a) for a in m.aliases):
                return m
        return None


class Colorizer(Protocol):
    """Callable that decorates a string for display (e.g. a `yachalk.ChalkBuilder`)."""

    def __call__(self, *args: object, sep: str = " ") -> str:
        """Colorize and concatenate the given arguments."""
        ...


class ColoredStrEnum(str, Enum):
    """Enum whose *value* is a string and that carries an associated colorizer.

    The colorizer is kept outside ``_value_`` so hashing, equality and ``repr``
    behave like a plain string enum.
    """

    _value_: str
    _color: Colorizer

    def __new__(cls, text: str, color: Colorizer) -> ColoredStrEnum:
        obj: ColoredStrEnum = str.__new__(cls, text)
        obj._value_ = text
        obj._color = color
        return obj

    @property
    def color(self) -> Colorizer:
        """Return the colorizer associated with this member."""
        return self._color

    def colored(self) -> str:
        """Return the member's text rendered with its own colorizer."""
        return self._color(self._value_)
