"""Finding the file a target names along ``$(LOCATE)`` or ``$(SEARCH)``."""

from __future__ import annotations

from dataclasses import replace

from jamtool.pathunix import path_build, path_parse
from jamtool.timestamp import TimestampCache
from jamtool.variables import Variables


def search(
    target: str,
    variables: Variables,
    stamps: TimestampCache | None = None,
) -> tuple[str, float]:
    """Return the bound file name of ``target`` and its time.

    With ``LOCATE`` set, the target is placed in its first directory whether
    it exists or not.  Otherwise each ``SEARCH`` directory is tried in turn
    for an existing file.  Failing both, the name itself is used.  The time
    is 0 for a missing file; the grist never appears in the bound name.
    """
    if stamps is None:
        stamps = TimestampCache()

    parsed = replace(path_parse(target), grist="")

    locate = variables.get("LOCATE")
    if locate:
        name = path_build(replace(parsed, root=locate[0]), True)
        return name, stamps.timestamp(name)

    for root in variables.get("SEARCH"):
        name = path_build(replace(parsed, root=root), True)
        time = stamps.timestamp(name)
        if time:
            return name, time

    name = path_build(replace(parsed, root=""), True)
    return name, stamps.timestamp(name)