"""Jam's table of multi-valued variables.

Every variable holds a list of strings.  An unset variable and a variable
set to the empty list look the same to :meth:`Variables.get`.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from enum import IntEnum


class VarFlag(IntEnum):
    """How a new value relates to the variable's previous value."""

    SET = 0  # override previous value
    APPEND = 1  # append to previous value
    DEFAULT = 2  # set only if no previous value


_PATH_ENDINGS = ("PATH", "Path", "path")


class Variables:
    """A symbol table mapping variable names to lists of strings."""

    def __init__(self) -> None:
        self._values: dict[str, list[str]] = {}

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._values

    def _enter(self, symbol: str) -> list[str]:
        return self._values.setdefault(symbol, [])

    def get(self, symbol: str) -> list[str]:
        """Return the value of ``symbol``; an empty list if it is unset."""
        return list(self._values.get(symbol, ()))

    def set(self, symbol: str, value: Iterable[str], flag: VarFlag = VarFlag.SET) -> None:
        """Set, append to or default the value of ``symbol``."""
        current = self._enter(symbol)
        new = list(value)
        if flag is VarFlag.SET:
            self._values[symbol] = new
        elif flag is VarFlag.APPEND:
            current.extend(new)
        elif flag is VarFlag.DEFAULT:
            if not current:
                self._values[symbol] = new
        else:
            raise ValueError(f"unknown variable flag: {flag!r}")

    def swap(self, symbol: str, value: Iterable[str]) -> list[str]:
        """Give ``symbol`` a new value and return the one it had."""
        old = self._enter(symbol)
        self._values[symbol] = list(value)
        return old

    def load_defines(
        self,
        entries: Iterable[str] | Mapping[str, str],
        path_split: str = os.pathsep,
    ) -> None:
        """Load ``name=value`` settings, such as the process environment.

        Values are split at blanks, except for names ending in ``PATH``,
        ``Path`` or ``path``, which are split at ``path_split``.  Entries
        without ``=`` and ``OS=Windows_NT`` are ignored.
        """
        if isinstance(entries, Mapping):
            entries = [f"{name}={value}" for name, value in entries.items()]
        for entry in entries:
            if entry == "OS=Windows_NT":
                continue
            name, equals, value = entry.partition("=")
            if not equals:
                continue
            split = " "
            if len(name) >= 4 and name[-4:] in _PATH_ENDINGS:
                split = path_split
            self.set(name, value.split(split), VarFlag.SET)