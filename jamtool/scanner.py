"""Tokenizer for jam files.

The scanner reads a stack of sources: files or lists of lines.  The source
pushed last is read first.  When it runs out, it is dropped and the scanner
returns an end-of-file token, so that the parser can finish the block it is
reading.  Later calls carry on with the source below it.

Words are separated by white space.  Double quotes group text with white
space into one word and are removed.  A backslash protects the next
character.  ``#`` starts a comment that runs to the end of the line.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import TextIO

BIGGEST_TOKEN = 10240
"""No single token can be this long or longer."""

_SPACE = frozenset(" \t\n\v\f\r")


class ScanMode(IntEnum):
    """What the scanner looks for."""

    NORMAL = 0  # words and all keywords
    STRING = 1  # everything up to the matching }
    PUNCT = 2  # words and punctuation keywords only


class TokenKind(Enum):
    """The kind of a token; a keyword's value is its text."""

    EOF = "EOF"
    ARG = "ARG"
    STRING = "STRING"
    BANG = "!"
    BANG_EQUALS = "!="
    AMPER = "&"
    AMPERAMPER = "&&"
    LPAREN = "("
    RPAREN = ")"
    PLUS_EQUALS = "+="
    COLON = ":"
    SEMIC = ";"
    LANGLE = "<"
    LANGLE_EQUALS = "<="
    EQUALS = "="
    RANGLE = ">"
    RANGLE_EQUALS = ">="
    QUESTION_EQUALS = "?="
    LBRACKET = "["
    RBRACKET = "]"
    ACTIONS = "actions"
    BIND = "bind"
    BREAK = "break"
    CASE = "case"
    CONTINUE = "continue"
    DEFAULT = "default"
    ELSE = "else"
    EXISTING = "existing"
    FOR = "for"
    IF = "if"
    IGNORE = "ignore"
    IN = "in"
    INCLUDE = "include"
    LOCAL = "local"
    MAXLINE = "maxline"
    ON = "on"
    PIECEMEAL = "piecemeal"
    QUIETLY = "quietly"
    RETURN = "return"
    RULE = "rule"
    SWITCH = "switch"
    TOGETHER = "together"
    UPDATED = "updated"
    WHILE = "while"
    LBRACE = "{"
    BAR = "|"
    BARBAR = "||"
    RBRACE = "}"

    @property
    def is_keyword(self) -> bool:
        return self.name not in ("EOF", "ARG", "STRING")


KEYWORDS = {kind.value: kind for kind in TokenKind if kind.is_keyword}


@dataclass(frozen=True)
class Token:
    """A token and its text."""

    kind: TokenKind
    string: str = ""

    def __str__(self) -> str:
        if self.kind is TokenKind.EOF:
            return "EOF"
        if self.kind is TokenKind.ARG:
            return f"argument {self.string}"
        if self.kind is TokenKind.STRING:
            return f'string "{self.string}"'
        return f"keyword {self.string}"


class ScanError(Exception):
    """Raised for malformed input."""

    def __init__(
        self,
        message: str,
        file: str | None = None,
        line: int = 0,
        near: str = "EOF",
    ) -> None:
        self.message = message
        self.file = file
        self.line = line
        self.near = near
        prefix = f"{file}: line {line}: " if file is not None else ""
        super().__init__(f"{prefix}{message} at {near}")


@dataclass
class _Include:
    name: str
    lines: Iterator[str] | None = None
    stream: TextIO | None = None
    text: str = ""
    pos: int = 0
    line: int = 0
    owned: bool = field(default=False)

    def open(self) -> None:
        if self.lines is not None:
            return
        if self.name == "-":
            self.stream = sys.stdin
        else:
            self.stream = open(self.name, encoding="utf-8", errors="replace")
            self.owned = True
        self.lines = iter(self.stream)

    def close(self) -> None:
        if self.owned and self.stream is not None:
            self.stream.close()
        self.stream = None


class Scanner:
    """Turns a stack of jam sources into tokens."""

    def __init__(self) -> None:
        self._stack: list[_Include] = []
        self.mode = ScanMode.NORMAL
        self._last = Token(TokenKind.EOF)

    def push_file(self, name: str) -> None:
        """Read the file ``name`` next; ``-`` means standard input."""
        self._stack.append(_Include(name))

    def push_lines(self, name: str, lines: Iterable[str]) -> None:
        """Read ``lines`` next, reporting errors against ``name``."""
        self._stack.append(_Include(name, lines=iter(lines)))

    def set_mode(self, mode: ScanMode) -> None:
        """Change what the following tokens are scanned as."""
        self.mode = ScanMode(mode)

    # -- characters ----------------------------------------------------

    def _char(self) -> str | None:
        if not self._stack:
            return None
        inc = self._stack[-1]
        if inc.pos < len(inc.text):
            char = inc.text[inc.pos]
            inc.pos += 1
            return char
        return self._next_line(inc)

    def _next_line(self, inc: _Include) -> str | None:
        try:
            inc.open()
        except OSError as exc:
            self._stack.pop()
            raise ScanError(f"{inc.name}: {exc.strerror}") from exc
        assert inc.lines is not None
        for line in inc.lines:
            if line:
                inc.line += 1
                inc.text = line
                inc.pos = 1
                return line[0]
        self._stack.pop()
        inc.close()
        return None

    def _unread(self) -> None:
        self._stack[-1].pos -= 1

    def _error(self, message: str) -> ScanError:
        if self._stack:
            inc = self._stack[-1]
            return ScanError(message, inc.name, inc.line, str(self._last))
        return ScanError(message, near=str(self._last))

    # -- tokens --------------------------------------------------------

    def next_token(self) -> Token:
        """Scan and return the next token."""
        if not self._stack:
            token = Token(TokenKind.EOF)
        elif self.mode is ScanMode.STRING:
            token = self._action_block()
        else:
            token = self._word()
        self._last = token
        return token

    def _action_block(self) -> Token:
        chars: list[str] = []
        nest = 1
        char = self._char()
        while char is not None and len(chars) < BIGGEST_TOKEN:
            if char == "{":
                nest += 1
            if char == "}":
                nest -= 1
                if not nest:
                    break
            chars.append(char)
            char = self._char()
        if char is not None:
            self._unread()
        if len(chars) == BIGGEST_TOKEN:
            raise self._error("action block too big")
        if nest:
            raise self._error("unmatched {} in action block")
        return Token(TokenKind.STRING, "".join(chars))

    def _word(self) -> Token:
        char = self._char()
        while True:
            while char is not None and char in _SPACE:
                char = self._char()
            if char != "#":
                break
            char = self._char()
            while char is not None and char != "\n":
                char = self._char()

        if char is None:
            return Token(TokenKind.EOF)

        chars: list[str] = []
        inquote = False
        notkeyword = char == "$"
        while (
            char is not None
            and len(chars) < BIGGEST_TOKEN
            and (inquote or char not in _SPACE)
        ):
            if char == '"':
                inquote = not inquote
                notkeyword = True
            elif char != "\\":
                chars.append(char)
            else:
                char = self._char()
                if char is None:
                    break
                chars.append(char)
                notkeyword = True
            char = self._char()

        if len(chars) == BIGGEST_TOKEN:
            raise self._error("string too big")
        if inquote:
            raise self._error('unmatched " in string')
        if char is not None:
            self._unread()

        text = "".join(chars)
        first = text[:1]
        alpha = first.isascii() and first.isalpha()
        if not notkeyword and not (alpha and self.mode is ScanMode.PUNCT):
            kind = KEYWORDS.get(text)
            if kind is not None:
                return Token(kind, text)
        return Token(TokenKind.ARG, text)

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to, not including, the next end of file."""
        while True:
            token = self.next_token()
            if token.kind is TokenKind.EOF:
                return
            yield token