"""Compiler for the small regular-expression dialect used by output filters.

The dialect supports ``^``, ``$``, ``.``, ``[...]``, ``[^...]``, ``(...)``,
alternation with ``|`` or a newline, the postfix operators ``*``, ``+`` and
``?``, backslash quoting and the word anchors ``\\<`` and ``\\>``.

A pattern is compiled into a :class:`Program`: a flat tuple of :class:`Node`
objects forming a nondeterministic automaton.  Each node names the node that
follows it through ``next``.  BRANCH, STAR and PLUS nodes also have an
``operand``, which is always the node placed immediately after them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

MAX_GROUPS = 10
"""Number of capture slots, including the whole match in slot 0."""

MAX_PROGRAM_SIZE = 32767

_HASWIDTH = 0x1  # never matches the empty string
_SIMPLE = 0x2  # simple enough to be a STAR/PLUS operand
_SPSTART = 0x4  # starts with * or +
_WORST = 0x0

_MULTIPLIERS = "*+?"


class RegexpError(ValueError):
    """Raised when a pattern cannot be compiled."""


class Op(IntEnum):
    """Node opcodes of a compiled program."""

    END = 0  # end of program
    BOL = 1  # match "" at beginning of line
    EOL = 2  # match "" at end of line
    ANY = 3  # match any one character
    ANYOF = 4  # match any character in text
    ANYBUT = 5  # match any character not in text
    BRANCH = 6  # match this alternative, or the next
    BACK = 7  # match "", next points backward
    EXACTLY = 8  # match text
    NOTHING = 9  # match the empty string
    STAR = 10  # match operand zero or more times
    PLUS = 11  # match operand one or more times
    WORDA = 12  # match "" at a word start
    WORDZ = 13  # match "" at a word end
    OPEN = 20  # start of capture group ``group``
    CLOSE = 30  # end of capture group ``group``


@dataclass(frozen=True)
class Node:
    """One node of a compiled program.

    ``next`` and ``operand`` are indices into :attr:`Program.nodes`.
    ``text`` holds the literal or character set of EXACTLY, ANYOF and ANYBUT
    nodes; ``group`` is the capture number of OPEN and CLOSE nodes.
    """

    op: Op
    next: int | None = None
    text: str | None = None
    group: int = 0
    operand: int | None = None


@dataclass(frozen=True)
class Program:
    """A compiled regular expression.

    ``regstart`` is a character every match must start with, ``anchored``
    says the match may only begin at the start of the string and ``must``
    is a literal every match has to contain; each may be absent.
    """

    pattern: str
    nodes: tuple[Node, ...]
    regstart: str | None
    anchored: bool
    must: str | None
    groups: int
    size: int

    @property
    def start(self) -> int:
        """Index of the first node to run."""
        return 0


class _Slot:
    """Mutable node used while the program is being built."""

    __slots__ = ("op", "text", "group", "next")

    def __init__(self, op: Op, text: str | None = None, group: int = 0) -> None:
        self.op = op
        self.text = text
        self.group = group
        self.next: _Slot | None = None


class _Compiler:
    def __init__(self, pattern: str) -> None:
        self.src = pattern.split("\0", 1)[0]
        self.pos = 0
        self.npar = 1
        self.code: list[_Slot] = []

    # -- input ---------------------------------------------------------

    def peek(self, ahead: int = 0) -> str:
        index = self.pos + ahead
        return self.src[index] if index < len(self.src) else "\0"

    def take(self) -> str:
        char = self.peek()
        self.pos += 1
        return char

    # -- code emission -------------------------------------------------

    def node(self, op: Op, text: str | None = None, group: int = 0) -> _Slot:
        slot = _Slot(op, text, group)
        self.code.append(slot)
        return slot

    def _where(self, slot: _Slot) -> int:
        for index, candidate in enumerate(self.code):
            if candidate is slot:
                return index
        raise RegexpError("corrupted program")

    def insert(self, op: Op, operand: _Slot) -> _Slot:
        """Place a new node in front of an already emitted operand."""
        slot = _Slot(op)
        self.code.insert(self._where(operand), slot)
        return slot

    def operand(self, slot: _Slot) -> _Slot:
        return self.code[self._where(slot) + 1]

    @staticmethod
    def tail(chain: _Slot, target: _Slot) -> None:
        """Set the next pointer at the end of a node chain."""
        scan = chain
        while scan.next is not None:
            scan = scan.next
        scan.next = target

    def optail(self, chain: _Slot | None, target: _Slot) -> None:
        """Tail the operand chain of a BRANCH node; ignore other nodes."""
        if chain is None or chain.op is not Op.BRANCH:
            return
        self.tail(self.operand(chain), target)

    # -- grammar -------------------------------------------------------

    def reg(self, paren: bool) -> tuple[_Slot, int]:
        """Main body or parenthesised sub-expression."""
        flags = _HASWIDTH
        parno = 0
        ret: _Slot | None = None
        if paren:
            if self.npar >= MAX_GROUPS:
                raise RegexpError("too many ()")
            parno = self.npar
            self.npar += 1
            ret = self.node(Op.OPEN, group=parno)

        branch, branch_flags = self.branch()
        if ret is not None:
            self.tail(ret, branch)
        else:
            ret = branch
        if not branch_flags & _HASWIDTH:
            flags &= ~_HASWIDTH
        flags |= branch_flags & _SPSTART

        while self.peek() in "|\n":
            self.pos += 1
            branch, branch_flags = self.branch()
            self.tail(ret, branch)
            if not branch_flags & _HASWIDTH:
                flags &= ~_HASWIDTH
            flags |= branch_flags & _SPSTART

        ender = self.node(Op.CLOSE, group=parno) if paren else self.node(Op.END)
        self.tail(ret, ender)

        scan: _Slot | None = ret
        while scan is not None:
            self.optail(scan, ender)
            scan = scan.next

        if paren:
            if self.take() != ")":
                raise RegexpError("unmatched ()")
        elif self.peek() != "\0":
            if self.peek() == ")":
                raise RegexpError("unmatched ()")
            raise RegexpError("junk on end")
        return ret, flags

    def branch(self) -> tuple[_Slot, int]:
        """One alternative: a concatenation of pieces."""
        flags = _WORST
        ret = self.node(Op.BRANCH)
        chain: _Slot | None = None
        while self.peek() not in "\0)\n|":
            latest, piece_flags = self.piece()
            flags |= piece_flags & _HASWIDTH
            if chain is None:
                flags |= piece_flags & _SPSTART
            else:
                self.tail(chain, latest)
            chain = latest
        if chain is None:
            self.node(Op.NOTHING)
        return ret, flags

    def piece(self) -> tuple[_Slot, int]:
        """An atom optionally followed by ``*``, ``+`` or ``?``."""
        ret, atom_flags = self.atom()
        op = self.peek()
        if op not in _MULTIPLIERS:
            return ret, atom_flags

        if not atom_flags & _HASWIDTH and op != "?":
            raise RegexpError("*+ operand could be empty")
        flags = (_WORST | _SPSTART) if op != "+" else (_WORST | _HASWIDTH)
        simple = bool(atom_flags & _SIMPLE)

        if op == "*" and simple:
            ret = self.insert(Op.STAR, ret)
        elif op == "*":
            # x* becomes (x&|) where & loops back to the branch.
            ret = self.insert(Op.BRANCH, ret)
            self.optail(ret, self.node(Op.BACK))
            self.optail(ret, ret)
            self.tail(ret, self.node(Op.BRANCH))
            self.tail(ret, self.node(Op.NOTHING))
        elif op == "+" and simple:
            ret = self.insert(Op.PLUS, ret)
        elif op == "+":
            # x+ becomes x(&|) where & loops back to x.
            following = self.node(Op.BRANCH)
            self.tail(ret, following)
            self.tail(self.node(Op.BACK), ret)
            self.tail(following, self.node(Op.BRANCH))
            self.tail(ret, self.node(Op.NOTHING))
        else:
            # x? becomes (x|).
            ret = self.insert(Op.BRANCH, ret)
            self.tail(ret, self.node(Op.BRANCH))
            empty = self.node(Op.NOTHING)
            self.tail(ret, empty)
            self.optail(ret, empty)

        self.pos += 1
        if self.peek() in _MULTIPLIERS:
            raise RegexpError("nested *?+")
        return ret, flags

    def atom(self) -> tuple[_Slot, int]:
        flags = _WORST
        char = self.take()
        if char == "^":
            return self.node(Op.BOL), flags
        if char == "$":
            return self.node(Op.EOL), flags
        if char == ".":
            return self.node(Op.ANY), flags | _HASWIDTH | _SIMPLE
        if char == "[":
            return self.char_class(), flags | _HASWIDTH | _SIMPLE
        if char == "(":
            ret, sub_flags = self.reg(True)
            return ret, flags | (sub_flags & (_HASWIDTH | _SPSTART))
        if char in "\0|\n)":
            raise RegexpError("internal urp")
        if char in _MULTIPLIERS:
            raise RegexpError("?+* follows nothing")
        if char == "\\":
            quoted = self.take()
            if quoted == "\0":
                raise RegexpError("trailing \\")
            if quoted == "<":
                return self.node(Op.WORDA), flags
            if quoted == ">":
                return self.node(Op.WORDZ), flags
        return self.literal(flags)

    def char_class(self) -> _Slot:
        if self.peek() == "^":
            op = Op.ANYBUT
            self.pos += 1
        else:
            op = Op.ANYOF
        chars: list[str] = []
        if self.peek() in "]-":
            chars.append(self.take())
        while self.peek() not in "\0]":
            if self.peek() == "-":
                self.pos += 1
                if self.peek() in "]\0":
                    chars.append("-")
                else:
                    low = ord(self.src[self.pos - 2]) + 1
                    high = ord(self.peek())
                    if low > high + 1:
                        raise RegexpError("invalid [] range")
                    chars.extend(chr(code) for code in range(low, high + 1))
                    self.pos += 1
            else:
                chars.append(self.take())
        if self.peek() != "]":
            raise RegexpError("unmatched []")
        self.pos += 1
        return self.node(op, text="".join(chars))

    def literal(self, flags: int) -> tuple[_Slot, int]:
        """Gather a run of ordinary characters into one EXACTLY node."""
        self.pos -= 1
        chars: list[str] = []
        backup: int | None = None
        while True:
            char = self.take()
            following = self.peek()
            if following in ".[()|\n$^\0":
                chars.append(char)
                break
            if following in _MULTIPLIERS:
                if backup is None:
                    chars.append(char)
                else:
                    # The multiplier binds to this char alone: leave it.
                    self.pos = backup
                break
            if following == "\\":
                chars.append(char)
                if self.peek(1) in "\0<>":
                    break
                backup = self.pos
                self.pos += 1
                continue
            chars.append(char)
            backup = self.pos
        flags |= _HASWIDTH
        if backup is None:
            flags |= _SIMPLE
        return self.node(Op.EXACTLY, text="".join(chars)), flags


_OPERAND_OPS = (Op.BRANCH, Op.STAR, Op.PLUS)


def compile_regexp(pattern: str) -> Program:
    """Compile ``pattern`` into a :class:`Program`.

    Raises :class:`RegexpError` if the pattern is malformed or too large.
    """
    if pattern is None:
        raise RegexpError("NULL argument")

    compiler = _Compiler(pattern)
    _, flags = compiler.reg(False)
    code = compiler.code

    size = 1 + sum(3 + (len(slot.text) + 1 if slot.text is not None else 0) for slot in code)
    if size >= MAX_PROGRAM_SIZE:
        raise RegexpError("regexp too big")

    index = {id(slot): position for position, slot in enumerate(code)}
    nodes = tuple(
        Node(
            op=slot.op,
            next=index[id(slot.next)] if slot.next is not None else None,
            text=slot.text,
            group=slot.group,
            operand=position + 1 if slot.op in _OPERAND_OPS else None,
        )
        for position, slot in enumerate(code)
    )

    regstart: str | None = None
    anchored = False
    must: str | None = None
    first = nodes[0]
    if first.next is not None and nodes[first.next].op is Op.END:
        scan: int | None = first.operand
        start_node = nodes[scan]
        if start_node.op is Op.EXACTLY:
            regstart = start_node.text[0]
        elif start_node.op is Op.BOL:
            anchored = True

        if flags & _SPSTART:
            longest: str | None = None
            length = 0
            while scan is not None:
                node = nodes[scan]
                if node.op is Op.EXACTLY and len(node.text) >= length:
                    longest = node.text
                    length = len(node.text)
                scan = node.next
            must = longest

    return Program(
        pattern=pattern,
        nodes=nodes,
        regstart=regstart,
        anchored=anchored,
        must=must,
        groups=compiler.npar - 1,
        size=size,
    )