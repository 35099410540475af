"""File names on UNIX and on NT-like systems.

With ``nt`` set, a backslash also separates directories and drive letters
such as ``D:/`` are recognised.  Built names always use ``/``.
"""

from __future__ import annotations

from jamtool.pathsys import PathName

_SET_DELIM = "/"


def _split_grist(file: str) -> tuple[str, str]:
    if file.startswith("<"):
        close = file.find(">")
        if close >= 0:
            return file[:close], file[close + 1 :]
    return "", file


def _split_tail(file: str) -> tuple[str, str, str]:
    """Split what follows the directory into base, suffix and member."""
    end = len(file)
    member = ""
    paren = file.find("(")
    if paren >= 0 and file.endswith(")"):
        member = file[paren + 1 : -1]
        end = paren
    suffix = ""
    dot = file.rfind(".", 0, end)
    if dot >= 0:
        suffix = file[dot:end]
        end = dot
    return file[:end], suffix, member


def _grist_text(grist: str) -> str:
    if not grist:
        return ""
    opened = grist if grist.startswith("<") else "<" + grist
    return opened if opened.endswith(">") else opened + ">"


def path_parse(file: str, nt: bool = False) -> PathName:
    """Split ``file`` into grist, directory, base, suffix and member."""
    grist, file = _split_grist(file)

    slash = file.rfind("/")
    if nt:
        slash = max(slash, file.rfind("\\"))

    directory = ""
    if slash >= 0:
        directory = file[:slash]
        # The directory of "/x" is "/", not "".
        if not directory:
            directory = file[:1]
        # The directory of "D:/x" is "D:/", not "D:".
        if nt and len(directory) == 2 and file[1] == ":":
            directory = file[:3]
        file = file[slash + 1 :]

    base, suffix, member = _split_tail(file)
    return PathName(grist=grist, dir=directory, base=base, suffix=suffix, member=member)


def _root_applies(path: PathName, nt: bool) -> bool:
    if not path.root or path.root == ".":
        return False
    if path.dir.startswith("/"):
        return False
    if nt and (path.dir.startswith("\\") or path.dir[1:2] == ":"):
        return False
    return True


def path_build(path: PathName, binding: bool = False, nt: bool = False) -> str:
    """Join the parts of ``path`` back into a file name."""
    pieces = [_grist_text(path.grist)]

    if _root_applies(path, nt):
        pieces.append(path.root + _SET_DELIM)

    directory = path.dir
    pieces.append(directory)

    if directory and (path.base or path.suffix):
        already_ends = directory == ("\\" if nt else "/")
        if nt:
            already_ends = already_ends or directory == "/" or (
                len(directory) == 3 and directory[1] == ":"
            )
        if not already_ends:
            pieces.append(_SET_DELIM)

    pieces.append(path.base)
    pieces.append(path.suffix)
    if path.member:
        pieces.append(f"({path.member})")
    return "".join(pieces)


def path_parent(path: PathName) -> PathName:
    """Return the name of the directory holding ``path``."""
    return path.parent_dir()