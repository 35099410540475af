"""Matching of compiled regular expressions against strings.

Matching follows the rules of the compiled dialect.  The leftmost match is
found, alternatives are tried in order and repetitions are greedy.  A capture
group that matched several times keeps its last match.  Like a C string, the
subject text ends at its first NUL character.
"""

from __future__ import annotations

from dataclasses import dataclass

from jamtool.regcompile import MAX_GROUPS, Op, Program, RegexpError, compile_regexp


def _is_word(char: str) -> bool:
    return char == "_" or (char.isascii() and char.isalnum())


@dataclass(frozen=True)
class Match:
    """Result of a successful search.

    ``spans`` holds one ``(start, end)`` pair per capture slot, or ``None``
    for a group that took no part in the match; slot 0 is the whole match.
    """

    string: str
    spans: tuple[tuple[int, int] | None, ...]

    def span(self, index: int = 0) -> tuple[int, int] | None:
        """Return the ``(start, end)`` offsets of group ``index``."""
        if not 0 <= index < len(self.spans):
            raise IndexError(f"no such group: {index}")
        return self.spans[index]

    def group(self, index: int = 0) -> str | None:
        """Return the text matched by group ``index``, or ``None``."""
        bounds = self.span(index)
        if bounds is None:
            return None
        start, end = bounds
        return self.string[start:end]


class _Matcher:
    def __init__(self, program: Program, text: str) -> None:
        self.nodes = program.nodes
        self.text = text
        self.pos = 0
        self.starts: list[int | None] = [None] * MAX_GROUPS
        self.ends: list[int | None] = [None] * MAX_GROUPS

    def char(self, pos: int) -> str:
        return self.text[pos] if pos < len(self.text) else "\0"

    def attempt(self, start: int, first: int) -> Match | None:
        self.pos = start
        self.starts = [None] * MAX_GROUPS
        self.ends = [None] * MAX_GROUPS
        if not self.match(first):
            return None
        self.starts[0] = start
        self.ends[0] = self.pos
        spans = tuple(
            (s, e) if s is not None and e is not None else None
            for s, e in zip(self.starts, self.ends)
        )
        return Match(self.text, spans)

    def repeat(self, index: int) -> int:
        """Match a simple node as often as possible; return the count."""
        node = self.nodes[index]
        text = self.text
        pos = self.pos
        if node.op is Op.ANY:
            pos = len(text)
        elif node.op is Op.EXACTLY:
            first = node.text[0]
            while pos < len(text) and text[pos] == first:
                pos += 1
        elif node.op is Op.ANYOF:
            while pos < len(text) and text[pos] in node.text:
                pos += 1
        elif node.op is Op.ANYBUT:
            while pos < len(text) and text[pos] not in node.text:
                pos += 1
        else:
            raise RegexpError("internal foulup")
        count = pos - self.pos
        self.pos = pos
        return count

    def match(self, scan: int | None) -> bool:
        nodes = self.nodes
        text = self.text
        while scan is not None:
            node = nodes[scan]
            following = node.next
            op = node.op

            if op is Op.BOL:
                if self.pos != 0:
                    return False
            elif op is Op.EOL:
                if self.pos < len(text):
                    return False
            elif op is Op.WORDA:
                if not _is_word(self.char(self.pos)):
                    return False
                if self.pos > 0 and _is_word(text[self.pos - 1]):
                    return False
            elif op is Op.WORDZ:
                if _is_word(self.char(self.pos)):
                    return False
            elif op is Op.ANY:
                if self.pos >= len(text):
                    return False
                self.pos += 1
            elif op is Op.EXACTLY:
                if not text.startswith(node.text, self.pos):
                    return False
                self.pos += len(node.text)
            elif op is Op.ANYOF:
                if self.pos >= len(text) or text[self.pos] not in node.text:
                    return False
                self.pos += 1
            elif op is Op.ANYBUT:
                if self.pos >= len(text) or text[self.pos] in node.text:
                    return False
                self.pos += 1
            elif op in (Op.NOTHING, Op.BACK):
                pass
            elif op is Op.OPEN:
                save = self.pos
                if not self.match(following):
                    return False
                if self.starts[node.group] is None:
                    self.starts[node.group] = save
                return True
            elif op is Op.CLOSE:
                save = self.pos
                if not self.match(following):
                    return False
                if self.ends[node.group] is None:
                    self.ends[node.group] = save
                return True
            elif op is Op.BRANCH:
                if following is None or nodes[following].op is not Op.BRANCH:
                    following = node.operand
                else:
                    branch: int | None = scan
                    while branch is not None and nodes[branch].op is Op.BRANCH:
                        save = self.pos
                        if self.match(nodes[branch].operand):
                            return True
                        self.pos = save
                        branch = nodes[branch].next
                    return False
            elif op in (Op.STAR, Op.PLUS):
                nextch = None
                if following is not None and nodes[following].op is Op.EXACTLY:
                    nextch = nodes[following].text[0]
                minimum = 0 if op is Op.STAR else 1
                save = self.pos
                count = self.repeat(node.operand)
                while count >= minimum:
                    if nextch is None or self.char(self.pos) == nextch:
                        if self.match(following):
                            return True
                    count -= 1
                    self.pos = save + count
                return False
            elif op is Op.END:
                return True
            else:
                raise RegexpError("memory corruption")

            scan = following
        return False


def search(program: Program, string: str) -> Match | None:
    """Find the leftmost match of ``program`` in ``string``."""
    if program is None or string is None:
        raise RegexpError("NULL parameter")

    text = string.split("\0", 1)[0]
    if program.must is not None and program.must not in text:
        return None

    matcher = _Matcher(program, text)
    first = program.start

    if program.anchored:
        return matcher.attempt(0, first)

    if program.regstart is not None:
        candidates = (i for i, ch in enumerate(text) if ch == program.regstart)
    else:
        candidates = iter(range(len(text) + 1))

    for start in candidates:
        found = matcher.attempt(start, first)
        if found is not None:
            return found
    return None


class Regexp:
    """A compiled pattern ready for searching."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        self.program = compile_regexp(pattern)

    def search(self, string: str) -> Match | None:
        """Find the leftmost match in ``string``, or return ``None``."""
        return search(self.program, string)

    def __repr__(self) -> str:
        return f"Regexp({self.pattern!r})"