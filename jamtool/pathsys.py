"""The parts a file name is split into.

A name has the form ``<grist>dir/base.suffix(member)``.  The grist keeps
apart targets that would otherwise share a name and never appears in the
bound file name; the member names an entry of an archive.  A ``root`` may
be set to place a relative directory below another one when the name is
built again.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class PathName:
    """A file name broken into its parts; an absent part is ``""``.

    After parsing, ``grist`` holds the text up to the closing ``>`` without
    that bracket; building adds the missing brackets back.  ``parent`` is
    used by VMS names only.  It marks a directory with no file, so that
    building climbs to the parent directory.
    """

    grist: str = ""
    root: str = ""
    dir: str = ""
    base: str = ""
    suffix: str = ""
    member: str = ""
    parent: bool = False

    def parent_dir(self) -> PathName:
        """Return the name of the directory holding this file."""
        return replace(self, base="", suffix="", member="")