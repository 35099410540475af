"""File names on the classic Mac OS, where ``:`` separates directories.

A name starting with ``:`` is relative, ``:`` alone is the current
directory and ``::`` its parent.
"""

from __future__ import annotations

from enum import IntEnum

from jamtool.pathsys import PathName
from jamtool.pathunix import _grist_text, _split_grist, _split_tail

DELIM = ":"


class _Dir(IntEnum):
    EMPTY = 0  # ""
    DOT = 1  # :
    DOTDOT = 2  # ::
    ABS = 3  # dira:dirb:
    REL = 4  # :dira:dirb:


class _Act(IntEnum):
    DIR = 0  # take dir
    ROOT = 1  # take root
    CAT = 2  # prepend root to dir
    DTDR = 3  # : before a relative dir
    DDDD = 4  # make it :::
    MT = 5  # leave it empty


_GRID = (
    # dir:  EMPTY     DOT       DOTDOT     ABS       REL
    (_Act.MT, _Act.DIR, _Act.DIR, _Act.DIR, _Act.DIR),  # root EMPTY
    (_Act.ROOT, _Act.DIR, _Act.DIR, _Act.DIR, _Act.DIR),  # root DOT
    (_Act.ROOT, _Act.ROOT, _Act.DDDD, _Act.DIR, _Act.DTDR),  # root DOTDOT
    (_Act.ROOT, _Act.ROOT, _Act.ROOT, _Act.DIR, _Act.CAT),  # root ABS
    (_Act.ROOT, _Act.ROOT, _Act.ROOT, _Act.DIR, _Act.CAT),  # root REL
)


def _kind(text: str) -> _Dir:
    if not text:
        return _Dir.EMPTY
    if text == DELIM:
        return _Dir.DOT
    if text == DELIM * 2:
        return _Dir.DOTDOT
    if text.startswith(DELIM):
        return _Dir.REL
    return _Dir.ABS


def path_parse(file: str) -> PathName:
    """Split ``file`` into grist, directory, base, suffix and member."""
    grist, file = _split_grist(file)

    directory = ""
    last = file.rfind(DELIM)
    if last >= 0:
        directory = file[:last]
        # A directory made only of colons keeps its last colon.
        scan = last
        while scan > 0:
            scan -= 1
            if file[scan] != DELIM:
                break
        if scan == 0:
            directory = file[: last + 1]
        file = file[last + 1 :]

    base, suffix, member = _split_tail(file)
    return PathName(grist=grist, dir=directory, base=base, suffix=suffix, member=member)


def path_build(path: PathName, binding: bool = False) -> str:
    """Join the parts of ``path`` back into a file name."""
    out = _grist_text(path.grist)

    act = _GRID[_kind(path.root)][_kind(path.dir)]
    if act is _Act.DTDR:
        out += DELIM + path.dir
    elif act is _Act.DIR:
        out += path.dir
    elif act is _Act.ROOT:
        out += path.root
    elif act is _Act.CAT:
        out += path.root
        if out.endswith(DELIM):
            out = out[:-1]
        out += path.dir
    elif act is _Act.DDDD:
        out += DELIM * 3

    if act is not _Act.MT and not out.endswith(DELIM) and (path.base or path.suffix):
        out += DELIM

    out += path.base + path.suffix
    if path.member:
        out += f"({path.member})"
    return out


def path_parent(path: PathName) -> PathName:
    """Return the name of the directory holding ``path``."""
    return path.parent_dir()