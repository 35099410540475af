"""Running a command and passing its output through an output filter.

The command's standard output and standard error share one pipe.  Without
a filter the raw bytes are copied to our standard output.  With a filter
the output is cut into lines; each line the filter does not consume is
printed.
"""

from __future__ import annotations

import codecs
import os
import shlex
import subprocess
import sys
import threading
from collections.abc import Iterable, Iterator
from enum import IntEnum

from jamtool.outfilter import OutputFilter

_BUFFER_SIZE = 16384
_CAPACITY = _BUFFER_SIZE - 8
_SPLIT_AT = _BUFFER_SIZE // 2
_RAW_CHUNK = 1024

_output_lock = threading.Lock()


class ExecStatus(IntEnum):
    """Outcome of running a command."""

    OK = 0
    FAIL = 1
    INTR = 2


def _take_lines(pending: str) -> tuple[list[str], str]:
    lines: list[str] = []
    pos = 0
    while pos < len(pending):
        cut = pending.find("\n", pos)
        if cut < 0 and len(pending) - pos > _SPLIT_AT:
            # An overlong line is cut; the character at the cut is lost.
            cut = pos + _SPLIT_AT
        if cut < 0:
            break
        line = pending[pos:cut]
        if line.endswith("\r"):
            line = line[:-1]
        lines.append(line)
        pos = cut + 1
        if pos < len(pending) and pending[pos] == "\r":
            pos += 1
    return lines, pending[pos:]


def split_lines(chunks: Iterable[str]) -> Iterator[str]:
    """Cut a stream of text chunks into lines.

    ``\\r\\n`` and ``\\n\\r`` end a line like ``\\n`` does, and a line with no
    end longer than half the read buffer is cut.  Trailing text without a
    line end is yielded last.
    """
    pending = ""
    for chunk in chunks:
        while chunk:
            room = _CAPACITY - len(pending)
            pending += chunk[:room]
            chunk = chunk[room:]
            lines, pending = _take_lines(pending)
            yield from lines
    if pending:
        yield pending


def _read_chunks(stream, size: int) -> Iterator[bytes]:
    fd = stream.fileno()
    while True:
        data = os.read(fd, size)
        if not data:
            return
        yield data


def _decoded(chunks: Iterable[bytes]) -> Iterator[str]:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    for chunk in chunks:
        yield decoder.decode(chunk)
    yield decoder.decode(b"", final=True)


def _pin_to_one_core(pid: int) -> None:
    setter = getattr(os, "sched_setaffinity", None)
    if setter is None:
        return
    try:
        setter(pid, {min(os.sched_getaffinity(0))})
    except OSError:
        pass


def _filter_output(stream, output_filter: OutputFilter) -> None:
    chunks = _decoded(_read_chunks(stream, _CAPACITY))
    for line in split_lines(chunks):
        with _output_lock:
            if not output_filter.process_line(line):
                print(line)


def _copy_output(stream) -> None:
    sys.stdout.flush()
    raw = getattr(sys.stdout, "buffer", None)
    for chunk in _read_chunks(stream, _RAW_CHUNK):
        if raw is not None:
            raw.write(chunk)
            raw.flush()
        else:
            sys.stdout.write(chunk.decode("utf-8", errors="replace"))
            sys.stdout.flush()


def spawn(
    cmdname: str,
    params: str = "",
    output_filter: OutputFilter | None = None,
    one_core: bool = False,
) -> int:
    """Run ``cmdname`` with ``params`` and return its exit code.

    With ``one_core`` the process is kept on a single processor where the
    platform allows it.  Raises :class:`OSError` if the command cannot start.
    """
    options: dict = {"stdout": subprocess.PIPE, "stderr": subprocess.STDOUT}
    if os.name == "nt":
        args: str | list[str] = f"{subprocess.list2cmdline([cmdname])} {params}"
        options["executable"] = cmdname
    else:
        args = [cmdname, *shlex.split(params)]

    try:
        proc = subprocess.Popen(args, **options)
    except OSError as exc:
        raise OSError(exc.errno, f"failed exec <{cmdname}> <{params}>") from exc

    if one_core:
        _pin_to_one_core(proc.pid)

    if output_filter is not None:
        output_filter.prepare()

    with proc.stdout as stream:
        if output_filter is not None:
            _filter_output(stream, output_filter)
        else:
            _copy_output(stream)

    return proc.wait()