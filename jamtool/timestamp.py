"""Modification times of files and archive members, with caching.

Looking up one file scans its whole directory once, and an archive member
scans its archive once.  Every name seen is remembered, so later lookups in
the same directory cost no system calls.  A file is timed only when asked
for.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from enum import IntEnum

from jamtool.pathsys import PathName
from jamtool.pathunix import path_build, path_parse

ScanFunc = Callable[[str], Iterable[tuple[str, bool, float]]]
"""Lists a directory or archive as ``(name, found, time)`` entries.

``found`` says ``time`` is already valid; otherwise the entry is timed
later through the file-time function.
"""


class BindProgress(IntEnum):
    """What is known about a name."""

    INIT = 0  # never seen
    NOENTRY = 1  # timestamp requested but file never found
    SPOTTED = 2  # file found but not timed yet
    MISSING = 3  # file found but can't get timestamp
    FOUND = 4  # file found and time stamped


@dataclass
class _Binding:
    name: str
    scanned: bool = False
    progress: BindProgress = BindProgress.INIT
    time: float = 0


def _scan_directory(dirname: str) -> Iterable[tuple[str, bool, float]]:
    try:
        entries = list(os.scandir(dirname or "."))
    except OSError:
        return []
    return [(path_build(PathName(dir=dirname, base=entry.name)), False, 0) for entry in entries]


def _scan_nothing(archive: str) -> Iterable[tuple[str, bool, float]]:
    return []


def _file_time(name: str) -> float | None:
    try:
        return os.stat(name).st_mtime
    except OSError:
        return None


class TimestampCache:
    """Remembers the modification times of files and archive members."""

    def __init__(
        self,
        dirscan: ScanFunc | None = None,
        archscan: ScanFunc | None = None,
        file_time: Callable[[str], float | None] | None = None,
        downshift: bool = False,
    ) -> None:
        self._dirscan = dirscan or _scan_directory
        self._archscan = archscan or _scan_nothing
        self._file_time = file_time or _file_time
        self._downshift = downshift
        self._bindings: dict[str, _Binding] = {}

    def _entry(self, name: str) -> _Binding:
        binding = self._bindings.get(name)
        if binding is None:
            binding = self._bindings[name] = _Binding(name)
        return binding

    def _enter(self, name: str, found: bool, time: float) -> None:
        if self._downshift:
            name = name.lower()
        binding = self._entry(name)
        binding.time = time
        binding.progress = BindProgress.FOUND if found else BindProgress.SPOTTED

    def _scan(self, name: str, scanner: ScanFunc) -> None:
        holder = self._entry(name)
        if not holder.scanned:
            for entry, found, time in scanner(name):
                self._enter(entry, found, time)
            holder.scanned = True

    def timestamp(self, target: str) -> float:
        """Return the modification time of ``target``, or 0 if it is missing."""
        if self._downshift:
            target = target.lower()

        binding = self._entry(target)
        if binding.progress is BindProgress.INIT:
            binding.progress = BindProgress.NOENTRY
            parsed = path_parse(target)

            directory = replace(parsed, grist="").parent_dir()
            self._scan(path_build(directory), self._dirscan)

            if parsed.member:
                archive = replace(parsed, grist="", member="")
                self._scan(path_build(archive), self._archscan)

        if binding.progress is BindProgress.SPOTTED:
            time = self._file_time(binding.name)
            if time is None:
                binding.progress = BindProgress.MISSING
            else:
                binding.time = time
                binding.progress = BindProgress.FOUND

        return binding.time if binding.progress is BindProgress.FOUND else 0

    def clear(self) -> None:
        """Forget everything learned so far."""
        self._bindings.clear()