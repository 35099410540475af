"""Routing of command output lines to files by regular-expression rules.

An :class:`OutputFilter` holds up to :data:`MAX_RULES` rules and up to
:data:`MAX_DESTINATIONS` destinations.  Every line a command prints is
offered to the rules in order.  The first rule that matches writes the line,
or a replacement built from its capture groups, to the rule's destination.
Unless the rule carries the ``p`` flag, no later rule sees the line.

Rule flags:

``p``
    keep trying later rules after this one matched.
``dN``
    treat capture group ``N`` (1 to 8) as a dependency file name.  The name
    is normalised with :func:`simplify_fname` and each distinct name is
    written only once.

A replacement is literal text in which ``$N`` stands for capture group
``N`` and ``$$`` for a dollar sign.  The destinations ``nul``, ``stdout``
and ``stderr`` are special; any other name is a file opened for writing.
"""

from __future__ import annotations

import sys
import warnings
from collections import deque
from dataclasses import dataclass
from typing import TextIO

from jamtool.regcompile import RegexpError
from jamtool.regmatch import Match, Regexp

MAX_DESTINATIONS = 8
MAX_RULES = 32

FLAG_DEPMASK = 0x0007
"""Selects the capture group (0..7 for groups 1..8) of a ``d`` rule."""
FLAG_DEPKIND = 0x0008
"""The rule matches dependency file names and writes each one once."""
FLAG_PROCEED = 0x0010
"""Later rules are tried even after this rule matched."""

_FNAME_LIMIT = 260
_MAX_PARENTS = 16


class FilterError(Exception):
    """Raised when a rule cannot be added to a filter."""


def _lower(char: str) -> str:
    return chr(ord(char) + 32) if "A" <= char <= "Z" else char


def _find_slash(chars: list[str], start: int) -> int | None:
    try:
        return chars.index("/", start)
    except ValueError:
        return None


def simplify_fname(name: str) -> str | None:
    """Normalise a file name for duplicate detection.

    Backslashes become slashes, repeated slashes and ``/./`` collapse,
    ASCII letters are lowered and ``dir/..`` pairs are removed.  Returns
    ``None`` when the result would not fit the 260-character limit.
    """
    if not name:
        return ""

    first = name[0]
    last = "/" if first == "\\" else _lower(first)
    chars = [last]
    for char in name[1:]:
        if char in "\\/":
            if last == "." and len(chars) > 1 and chars[-2] == "/":
                chars.pop()
                last = "/"
            elif last != "/":
                chars.append("/")
                last = "/"
                if len(chars) >= _FNAME_LIMIT:
                    return None
        else:
            last = _lower(char)
            chars.append(last)
            if len(chars) >= _FNAME_LIMIT:
                return None

    parents: deque[int] = deque(maxlen=_MAX_PARENTS)
    slash = _find_slash(chars, 0)
    while slash is not None:
        while True:
            if slash < len(chars) - 2 and chars[slash + 1] == "." and chars[slash + 2] == ".":
                if parents:
                    parent = parents.pop()
                    del chars[parent : slash + 3]
                    slash = parent
                    if slash >= len(chars):
                        return "".join(chars)
                    continue
            else:
                parents.append(slash)
            break
        slash = _find_slash(chars, slash + 1)
    return "".join(chars)


def _parse_flags(text: str) -> int:
    flags = 0
    chars = iter(text)
    for char in chars:
        if char == "p":
            flags |= FLAG_PROCEED
        elif char == "d":
            flags |= FLAG_DEPKIND
            digit = next(chars, "")
            if "1" <= digit <= "8":
                flags |= ord(digit) - ord("1")
        else:
            warnings.warn(f"unknown regexp flag: <{char}>", stacklevel=3)
    return flags


def _parse_replacement(text: str) -> tuple[str | int, ...]:
    """Split a replacement into literal strings and group numbers."""
    parts: list[str | int] = []
    literal: list[str] = []
    drop_tail = False
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char != "$":
            literal.append(char)
            pos += 1
            continue
        following = text[pos + 1] if pos + 1 < len(text) else ""
        if following == "$":
            literal.append("$")
            pos += 2
            # A pattern ending in an escaped dollar loses its last literal.
            drop_tail = pos >= len(text)
        elif "0" <= following <= "9" and following:
            parts.append("".join(literal))
            parts.append(int(following))
            literal = []
            pos += 2
            drop_tail = False
        else:
            raise ValueError(f"bad replace pattern <{text}> <{text[pos:]}>")
    if not drop_tail:
        parts.append("".join(literal))
    return tuple(parts)


@dataclass
class FilterRule:
    """One pattern with its destination, flags and replacement."""

    regexp: Regexp
    destination: int
    flags: int = 0
    replacement: tuple[str | int, ...] | None = None
    seen: set[str] | None = None

    @property
    def proceed(self) -> bool:
        return bool(self.flags & FLAG_PROCEED)

    @property
    def dep_group(self) -> int | None:
        """Capture group holding a dependency name, if this is a ``d`` rule."""
        if self.flags & FLAG_DEPKIND:
            return (self.flags & FLAG_DEPMASK) + 1
        return None

    def render(self, line: str, found: Match, overrides: dict[int, str]) -> str:
        """Build the text written for a matched ``line``."""
        if self.replacement is None:
            return line + "\n"
        pieces = []
        for part in self.replacement:
            if isinstance(part, str):
                pieces.append(part)
            elif part in overrides:
                pieces.append(overrides[part])
            else:
                pieces.append(found.group(part) or "")
        return "".join(pieces) + "\n"


class OutputFilter:
    """A set of rules deciding where each line of command output goes."""

    def __init__(self) -> None:
        self.destinations: list[str] = []
        self.rules: list[FilterRule] = []
        self._files: list[TextIO | None] = []
        self._owned: set[int] = set()

    def add(
        self,
        fname: str,
        pattern: str,
        flags: str | None = "",
        replacement: str | None = None,
    ) -> FilterRule:
        """Add a rule sending lines matching ``pattern`` to ``fname``."""
        if len(self.rules) >= MAX_RULES:
            raise FilterError(f"no more room for rule re=<{pattern}>")

        key = fname.lower()
        dest = next(
            (index for index, name in enumerate(self.destinations) if name.lower() == key),
            None,
        )
        if dest is None and len(self.destinations) >= MAX_DESTINATIONS:
            raise FilterError(f"no more room in destFname when adding <{fname}> re=<{pattern}>")

        try:
            regexp = Regexp(pattern)
        except RegexpError as exc:
            raise FilterError(f"cannot compile re=<{pattern}>: {exc}") from exc

        if dest is None:
            self.destinations.append(fname)
            self._files.append(None)
            dest = len(self.destinations) - 1

        rule_flags = _parse_flags(flags or "")

        parts = None
        if replacement is not None:
            try:
                parts = _parse_replacement(replacement)
            except ValueError as exc:
                warnings.warn(str(exc), stacklevel=2)

        rule = FilterRule(
            regexp=regexp,
            destination=dest,
            flags=rule_flags,
            replacement=parts,
            seen=set() if rule_flags & FLAG_DEPKIND else None,
        )
        self.rules.append(rule)
        return rule

    def prepare(self) -> None:
        """Open every destination; unopenable files are treated as ``nul``."""
        for index, name in enumerate(self.destinations):
            key = name.lower()
            if key == "nul":
                self._files[index] = None
            elif key == "stdout":
                self._files[index] = sys.stdout
            elif key == "stderr":
                self._files[index] = sys.stderr
            elif self._files[index] is None:
                try:
                    self._files[index] = open(name, "w", encoding="utf-8")
                except OSError:
                    warnings.warn(
                        f"cannot open <{name}> for write, redirected to NUL", stacklevel=2
                    )
                else:
                    self._owned.add(index)

    def process_line(self, line: str) -> bool:
        """Offer ``line`` to the rules; return whether one consumed it."""
        for rule in self.rules:
            found = rule.regexp.search(line)
            if found is None:
                continue

            stream = self._files[rule.destination]
            overrides: dict[int, str] = {}
            group = rule.dep_group
            if group is not None:
                name = found.group(group) or ""
                simplified = simplify_fname(name)
                if simplified is not None:
                    overrides[group] = simplified
                    key = simplified
                else:
                    key = name
                seen = rule.seen if rule.seen is not None else set()
                rule.seen = seen
                if key in seen:
                    stream = None
                else:
                    seen.add(key)

            if stream is not None:
                stream.write(rule.render(line, found, overrides))

            if not rule.proceed:
                return True
        return False

    def close(self) -> None:
        """Close the files this filter opened and forget all rules."""
        for index in self._owned:
            stream = self._files[index]
            if stream is not None:
                stream.close()
        self._owned.clear()
        self._files.clear()
        self.destinations.clear()
        self.rules.clear()

    def __enter__(self) -> OutputFilter:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()