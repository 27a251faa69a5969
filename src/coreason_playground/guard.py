# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

"""Static import screening for submitted Go sources.

Only the package clause and the import declarations that follow it are
tokenized; scanning stops at the first token of the first other declaration,
so the body of a file is never inspected.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from importlib import resources
from typing import NamedTuple

from loguru import logger

from coreason_playground.exceptions import EmptyArchiveError, ImportNotPermittedError, MalformedSourceError
from coreason_playground.models import VirtualArchive

SOURCE_SUFFIX = ".go"

_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer", "else",
        "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
        "map", "package", "range", "return", "select", "struct", "switch", "type", "var",
    }
)  # fmt: skip
_SEMI_KEYWORDS = frozenset({"break", "continue", "fallthrough", "return"})
_ILLEGAL_IMPORT_CHARS = frozenset("!\"#$%&'()*,:;<=>?[\\]^{|}`\ufffd")
_OCT_DIGITS = "01234567"
_HEX_DIGITS = "0123456789abcdefABCDEF"
_SIMPLE_ESCAPES = {"a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v", "\\": "\\", '"': '"'}

IDENT = "IDENT"
KEYWORD = "KEYWORD"
STRING = "STRING"
LITERAL = "LITERAL"
LPAREN = "("
RPAREN = ")"
PERIOD = "."
SEMI = ";"
OP = "OP"
EOF = "EOF"


class _Token(NamedTuple):
    kind: str
    value: str
    line: int
    column: int

    def describe(self) -> str:
        if self.kind == SEMI and self.value == "\n":
            return "newline"
        if self.kind == EOF:
            return "EOF"
        if self.kind in (IDENT, STRING, LITERAL):
            return f"'{self.kind}' {self.value}"
        return f"'{self.value}'"


class _SyntaxError(Exception):
    def __init__(self, line: int, column: int, message: str):
        super().__init__(f"{line}:{column}: {message}")


@dataclass(frozen=True)
class ImportSpec:
    """One import found in a source file."""

    path: str
    name: str | None
    line: int
    column: int


class _Scanner:
    def __init__(self, source: str):
        if source.startswith("\ufeff"):
            source = source[1:]
        self.src = source
        self.pos = 0
        self.line = 1
        self.col = 1
        self.insert_semi = False

    def _peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.src[i] if i < len(self.src) else ""

    def _advance(self, n: int = 1) -> str:
        text = self.src[self.pos : self.pos + n]
        for ch in text:
            if ch == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1
        self.pos += n
        return text

    def tokens(self) -> Iterator[_Token]:
        while True:
            newline = self._skip_space_and_comments()
            line, col = self.line, self.col
            if newline and self.insert_semi:
                self.insert_semi = False
                yield _Token(SEMI, "\n", line, col)
                continue
            ch = self._peek()
            if not ch:
                if self.insert_semi:
                    self.insert_semi = False
                    yield _Token(SEMI, "\n", line, col)
                yield _Token(EOF, "", line, col)
                return
            token = self._scan_token(ch, line, col)
            self.insert_semi = token.kind in (IDENT, STRING, LITERAL, RPAREN) or (
                token.kind == KEYWORD and token.value in _SEMI_KEYWORDS
            ) or (token.kind == OP and token.value in ("]", "}", "++", "--"))
            yield token

    def _skip_space_and_comments(self) -> bool:
        """Skip blanks and comments; report whether a line break was crossed."""
        newline = False
        while True:
            ch = self._peek()
            if ch in (" ", "\t", "\r"):
                self._advance()
            elif ch == "\n":
                newline = True
                if self.insert_semi:
                    return True
                self._advance()
            elif ch == "/" and self._peek(1) == "/":
                while self._peek() not in ("", "\n"):
                    self._advance()
            elif ch == "/" and self._peek(1) == "*":
                line, col = self.line, self.col
                end = self.src.find("*/", self.pos + 2)
                if end < 0:
                    raise _SyntaxError(line, col, "comment not terminated")
                comment = self._advance(end + 2 - self.pos)
                if "\n" in comment:
                    newline = True
                    if self.insert_semi:
                        return True
            else:
                return newline

    def _scan_token(self, ch: str, line: int, col: int) -> _Token:
        if ch.isalpha() or ch == "_":
            start = self.pos
            while self._peek() and (self._peek().isalnum() or self._peek() == "_"):
                self._advance()
            word = self.src[start : self.pos]
            return _Token(KEYWORD if word in _KEYWORDS else IDENT, word, line, col)
        if ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
            start = self.pos
            while self._peek() and (self._peek().isalnum() or self._peek() in "._"):
                self._advance()
            return _Token(LITERAL, self.src[start : self.pos], line, col)
        if ch == '"':
            return _Token(STRING, self._scan_interpreted(line, col), line, col)
        if ch == "`":
            return _Token(STRING, self._scan_raw(line, col), line, col)
        if ch == "'":
            return _Token(LITERAL, self._scan_rune(line, col), line, col)
        if ch in "()":
            self._advance()
            return _Token(ch, ch, line, col)
        if ch == ";":
            self._advance()
            return _Token(SEMI, ";", line, col)
        if ch == "." and self._peek(1) != ".":
            self._advance()
            return _Token(PERIOD, ".", line, col)
        if ch in "+-" and self._peek(1) == ch:
            return _Token(OP, self._advance(2), line, col)
        return _Token(OP, self._advance(), line, col)

    def _scan_interpreted(self, line: int, col: int) -> str:
        self._advance()
        out: list[str] = []
        while True:
            ch = self._peek()
            if ch in ("", "\n"):
                raise _SyntaxError(line, col, "string literal not terminated")
            if ch == '"':
                self._advance()
                return "".join(out)
            if ch == "\\":
                out.append(self._scan_escape('"'))
            else:
                out.append(self._advance())

    def _scan_escape(self, quote: str) -> str:
        line, col = self.line, self.col
        self._advance()
        ch = self._peek()
        if ch in _SIMPLE_ESCAPES and (ch != '"' or quote == '"'):
            self._advance()
            return _SIMPLE_ESCAPES[ch]
        if ch == "'" and quote == "'":
            self._advance()
            return "'"
        if ch and ch in _OCT_DIGITS:
            digits, alphabet, limit = 3, _OCT_DIGITS, 0xFF
        elif ch == "x":
            digits, alphabet, limit = 2, _HEX_DIGITS, 0xFF
            self._advance()
        elif ch == "u":
            digits, alphabet, limit = 4, _HEX_DIGITS, 0x10FFFF
            self._advance()
        elif ch == "U":
            digits, alphabet, limit = 8, _HEX_DIGITS, 0x10FFFF
            self._advance()
        else:
            raise _SyntaxError(line, col, "unknown escape sequence")
        text = self.src[self.pos : self.pos + digits]
        if len(text) != digits or any(c not in alphabet for c in text):
            raise _SyntaxError(line, col, "illegal character in escape sequence")
        self._advance(digits)
        value = int(text, 16 if alphabet is _HEX_DIGITS else 8)
        if value > limit or 0xD800 <= value < 0xE000:
            raise _SyntaxError(line, col, "escape sequence is invalid Unicode code point")
        return chr(value)

    def _scan_raw(self, line: int, col: int) -> str:
        end = self.src.find("`", self.pos + 1)
        if end < 0:
            raise _SyntaxError(line, col, "raw string literal not terminated")
        text = self._advance(end + 1 - self.pos)
        return text[1:-1].replace("\r", "")

    def _scan_rune(self, line: int, col: int) -> str:
        self._advance()
        out: list[str] = []
        while True:
            ch = self._peek()
            if ch in ("", "\n"):
                raise _SyntaxError(line, col, "rune literal not terminated")
            if ch == "'":
                self._advance()
                return "".join(out)
            out.append(self._scan_escape("'") if ch == "\\" else self._advance())


class _ImportParser:
    def __init__(self, source: str):
        self._tokens = _Scanner(source).tokens()
        self.tok = next(self._tokens)

    def _next(self) -> None:
        self.tok = next(self._tokens)

    def _error(self, message: str) -> _SyntaxError:
        return _SyntaxError(self.tok.line, self.tok.column, message)

    def _expect_semi(self) -> None:
        if self.tok.kind == SEMI:
            self._next()
        elif self.tok.kind not in (RPAREN, EOF):
            raise self._error(f"expected ';', found {self.tok.describe()}")

    def parse(self) -> list[ImportSpec]:
        if not (self.tok.kind == KEYWORD and self.tok.value == "package"):
            raise self._error(f"expected 'package', found {self.tok.describe()}")
        self._next()
        if self.tok.kind != IDENT:
            raise self._error(f"expected 'IDENT', found {self.tok.describe()}")
        if self.tok.value == "_":
            raise self._error("invalid package name _")
        self._next()
        self._expect_semi()

        specs: list[ImportSpec] = []
        while self.tok.kind == KEYWORD and self.tok.value == "import":
            self._next()
            if self.tok.kind == LPAREN:
                self._next()
                while self.tok.kind not in (RPAREN, EOF):
                    specs.append(self._import_spec())
                    if self.tok.kind == SEMI:
                        self._next()
                    elif self.tok.kind != RPAREN:
                        raise self._error(f"expected ';', found {self.tok.describe()}")
                if self.tok.kind != RPAREN:
                    raise self._error(f"expected ')', found {self.tok.describe()}")
                self._next()
            else:
                specs.append(self._import_spec())
            self._expect_semi()
        return specs

    def _import_spec(self) -> ImportSpec:
        name: str | None = None
        if self.tok.kind == IDENT:
            name = self.tok.value
            self._next()
        elif self.tok.kind == PERIOD:
            name = "."
            self._next()

        tok = self.tok
        if tok.kind == STRING:
            if not _is_valid_import(tok.value):
                raise self._error(f"invalid import path: {tok.value!r}")
            self._next()
            return ImportSpec(path=tok.value, name=name, line=tok.line, column=tok.column)
        if tok.kind == LITERAL:
            raise self._error("import path must be a string")
        raise self._error("missing import path")


def _is_valid_import(path: str) -> bool:
    for ch in path:
        if not ch.isprintable() or ch.isspace() or ch in _ILLEGAL_IMPORT_CHARS:
            return False
    return path != ""


def parse_imports(source: str, filename: str = "main.go") -> list[ImportSpec]:
    """Parse the package clause and import declarations of a Go source file.

    Args:
        source: Full text of the file.
        filename: Name used to attribute syntax errors.

    Returns:
        list[ImportSpec]: Imports in declaration order.

    Raises:
        MalformedSourceError: If the package clause or import block is not valid Go.
    """
    try:
        return _ImportParser(source).parse()
    except _SyntaxError as e:
        raise MalformedSourceError(filename, str(e)) from e


def load_allow_list() -> frozenset[str]:
    """Load the packaged line-delimited list of importable paths."""
    text = resources.files("coreason_playground").joinpath("data/import_allow_list.txt").read_text(encoding="utf-8")
    return frozenset(line.strip() for line in text.splitlines() if line.strip())


class ImportGuard:
    """Rejects submissions that import anything outside the allow-list.

    The allow-list is frozen at construction and only ever read, so a single
    guard is shared by every concurrent request.
    """

    def __init__(self, allowed: Iterable[str] | None = None):
        self.allowed: frozenset[str] = frozenset(allowed) if allowed is not None else load_allow_list()

    def check_source(self, source: str, filename: str = "main.go") -> list[ImportSpec]:
        """Check one source file, returning its imports when all are permitted.

        Raises:
            MalformedSourceError: If the import section does not parse.
            ImportNotPermittedError: On the first import not in the allow-list.
        """
        specs = parse_imports(source, filename)
        for spec in specs:
            if spec.path not in self.allowed:
                raise ImportNotPermittedError(filename, spec.path)
        return specs

    def screen(self, archive: VirtualArchive) -> None:
        """Screen every ``.go`` file of an archive; other files pass through.

        Raises:
            InvalidArchivePathError: If an entry name is not a clean relative path.
            EmptyArchiveError: If the archive holds no ``.go`` file.
            MalformedSourceError: If a source file's import section does not parse.
            ImportNotPermittedError: On the first disallowed import.
        """
        archive.validate_paths()
        sources = [f for f in archive.files if f.suffix == SOURCE_SUFFIX]
        if not sources:
            raise EmptyArchiveError()

        for f in sources:
            try:
                text = f.data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedSourceError(f.name, f"illegal UTF-8 encoding at byte {e.start}") from e
            try:
                self.check_source(text, f.name)
            except (MalformedSourceError, ImportNotPermittedError) as e:
                logger.info("Submission rejected by import screening", filename=f.name, reason=str(e))
                raise
