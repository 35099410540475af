"""File names on VMS, of the form ``dev:[dir.sub]base.suffix``.

Combining a root with a directory follows a table of the kinds of both,
so that for example ``[.dir]`` below ``dev:[root]`` becomes
``dev:[root.dir]``.  When building a name for binding, a name without a
suffix gets a trailing ``.`` so that VMS does not supply one of its own.
"""

from __future__ import annotations

from dataclasses import replace
from enum import IntEnum
from typing import NamedTuple

from jamtool.pathsys import PathName
from jamtool.pathunix import _grist_text, _split_grist, _split_tail


class _Dir(IntEnum):
    EMPTY = 0  # empty string
    DEV = 1  # dev:
    DEVDIR = 2  # dev:[dir]
    DOTDIR = 3  # [.dir]
    DASHDIR = 4  # [-] or [-.dir]
    ABSDIR = 5  # [dir]
    ROOT = 6  # [000000] or dev:[000000]


class _Act(IntEnum):
    DIR = 0  # take just dir
    ROOT = 1  # take just root
    VAD = 2  # root's dev: + [abs]
    DRD = 3  # root's dev:[dir] + [.rel]
    VRD = 4  # root's dev: + [.rel] made [abs]
    DDD = 5  # root's dev:[dir] + . + [dir]


_D, _R, _VAD, _DRD, _VRD, _DDD = (
    _Act.DIR,
    _Act.ROOT,
    _Act.VAD,
    _Act.DRD,
    _Act.VRD,
    _Act.DDD,
)

_GRID = (
    # dir: EMPTY DEV DEVDIR DOTDIR DASH ABSDIR ROOT
    (_D, _D, _D, _D, _D, _D, _D),  # root EMPTY
    (_R, _D, _D, _VRD, _VAD, _VAD, _VAD),  # root DEV
    (_R, _D, _D, _DRD, _VAD, _VAD, _VAD),  # root DEVDIR
    (_R, _D, _D, _DRD, _D, _D, _D),  # root DOTDIR
    (_R, _D, _D, _DRD, _DDD, _D, _D),  # root DASHDIR
    (_R, _D, _D, _DRD, _D, _D, _D),  # root ABSDIR
    (_R, _D, _D, _VRD, _D, _D, _D),  # root ROOT
)

_TOP = "[000000]"


class _DirInfo(NamedTuple):
    kind: _Dir
    dev: str
    dir: str


def _dir_info(text: str) -> _DirInfo:
    if not text:
        return _DirInfo(_Dir.EMPTY, "", "")
    colon = text.find(":")
    if colon >= 0:
        dev, rest = text[: colon + 1], text[colon + 1 :]
        kind = _Dir.DEVDIR if rest.startswith("[") else _Dir.DEV
    else:
        dev, rest = "", text
        if text[:2] == "[]":
            kind = _Dir.EMPTY
        elif text[:2] == "[.":
            kind = _Dir.DOTDIR
        elif text[:2] == "[-":
            kind = _Dir.DASHDIR
        else:
            kind = _Dir.ABSDIR
    if rest == _TOP:
        kind = _Dir.ROOT
    return _DirInfo(kind, dev, rest)


def path_parse(file: str) -> PathName:
    """Split ``file`` into grist, directory, base, suffix and member."""
    grist, file = _split_grist(file)

    directory = ""
    close = file.find("]")
    if close < 0:
        close = file.find(":")
    if close >= 0:
        directory = file[: close + 1]
        file = file[close + 1 :]

    base, suffix, member = _split_tail(file)
    return PathName(
        grist=grist, dir=directory, base=base, suffix=suffix, member=member, parent=False
    )


def _climb(out: str) -> str:
    """Replace the last directory level of ``out`` by its parent."""
    for index in range(len(out) - 1, -1, -1):
        char = out[index]
        if char == ".":
            return out[:index] + "]"
        if char == "-":
            if index > 0 and out[index - 1] == ".":
                index -= 1
            return out[:index] + "]"
        if char == "[":
            if out[index + 1 : index + 2] == "]":
                return out[: index + 2]
            return out[:index] + _TOP
    return out


def path_build(path: PathName, binding: bool = False) -> str:
    """Join the parts of ``path`` back into a file name."""
    out = _grist_text(path.grist)

    root = _dir_info(path.root)
    directory = _dir_info(path.dir)
    act = _GRID[root.kind][directory.kind]

    if act is _Act.DIR:
        out += path.dir
    elif act is _Act.ROOT:
        out += path.root
    elif act is _Act.VAD:
        out += root.dev + directory.dir
    elif act in (_Act.DRD, _Act.DDD):
        out += path.root
        if out.endswith("]"):
            out = out[:-1]
        if act is _Act.DDD:
            out += "."
        out += directory.dir[1:]
    elif act is _Act.VRD:
        out += root.dev + "[" + directory.dir[2:]

    if out.endswith("]") and path.parent:
        out = _climb(out)

    out += path.base
    if path.suffix:
        out += path.suffix
    elif binding and path.base:
        out += "."
    if path.member:
        out += f"({path.member})"
    return out


def path_parent(path: PathName) -> PathName:
    """Return the parent of ``path``.

    A name with a file loses the file; a bare directory is marked so that
    building it climbs one level up.
    """
    if path.base:
        return path.parent_dir()
    return replace(path, parent=True)