"""
Lexer
=====
Turns template source into a flat list of tokens.

    Hello {{ name }}!                      → TEXT, VARIABLE_BEGIN, IDENTIFIER, VARIABLE_END, TEXT
    {% import "forms.html" field as f %}   → TAG_BEGIN, IDENTIFIER, STRING, IDENTIFIER,
                                             KEYWORD, IDENTIFIER, TAG_END
    {# a comment #}                        → (dropped)

Only the inside of {{ }} and {% %} blocks is split into typed tokens; the
text between blocks is emitted verbatim as a single TEXT token.
"""

from __future__ import annotations

import re
import enum
from dataclasses import dataclass

from macrotpl.core.errors import TemplateSyntaxError


class TokenType(str, enum.Enum):
    TEXT = "text"
    VARIABLE_BEGIN = "variable_begin"
    VARIABLE_END = "variable_end"
    TAG_BEGIN = "tag_begin"
    TAG_END = "tag_end"
    STRING = "string"
    NUMBER = "number"
    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    SYMBOL = "symbol"


KEYWORDS = frozenset({"as", "export", "true", "false", "none"})

SYMBOLS = ("(", ")", "[", "]", ",", ".", "=")

_BLOCK_START = re.compile(r"\{\{|\{%|\{#")
_BLOCK_END = {"{{": "}}", "{%": "%}", "{#": "#}"}

_WHITESPACE = re.compile(r"\s+")
_NUMBER = re.compile(r"\d+(?:\.\d+)?")
_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"', "'": "'"}


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    column: int
    filename: str | None = None

    def __repr__(self) -> str:
        return f"<Token {self.type.value} {self.value!r} {self.line}:{self.column}>"


# -----------------------------------------------------------------------------

class Lexer:
    """
    Single-use scanner over one source string.

    Usage::

        tokens = Lexer(source, filename="page.html").tokenize()
    """

    def __init__(self, source: str, filename: str | None = None) -> None:
        self.source = source
        self.filename = filename
        self.tokens: list[Token] = []
        self._pos = 0
        self._line = 1
        self._col = 1

    # ----------------------------------------------------------------- public

    def tokenize(self) -> list[Token]:
        src = self.source
        while self._pos < len(src):
            m = _BLOCK_START.search(src, self._pos)
            if m is None:
                self._emit_text(src[self._pos:])
                break

            if m.start() > self._pos:
                self._emit_text(src[self._pos:m.start()])

            opener = m.group(0)
            closer = _BLOCK_END[opener]
            end = src.find(closer, m.end())
            if end < 0:
                raise self._error(f"Block opened with '{opener}' is never closed with '{closer}'.", opener)

            if opener == "{#":
                self._advance(src[self._pos:end + len(closer)])
                continue

            begin, finish = (
                (TokenType.VARIABLE_BEGIN, TokenType.VARIABLE_END)
                if opener == "{{"
                else (TokenType.TAG_BEGIN, TokenType.TAG_END)
            )
            self._push(begin, opener)
            self._advance(opener)
            self._tokenize_block(end)
            self._push(finish, closer)
            self._advance(closer)

        return self.tokens

    # ----------------------------------------------------------------- private

    def _tokenize_block(self, end: int) -> None:
        """Split the inside of a block (up to source offset *end*) into tokens."""
        src = self.source
        while self._pos < end:
            ch = src[self._pos]

            m = _WHITESPACE.match(src, self._pos, end)
            if m:
                self._advance(m.group(0))
                continue

            if ch in "\"'":
                self._lex_string(end)
                continue

            m = _NUMBER.match(src, self._pos, end)
            if m:
                self._push(TokenType.NUMBER, m.group(0))
                self._advance(m.group(0))
                continue

            m = _NAME.match(src, self._pos, end)
            if m:
                word = m.group(0)
                kind = TokenType.KEYWORD if word in KEYWORDS else TokenType.IDENTIFIER
                self._push(kind, word)
                self._advance(word)
                continue

            for sym in SYMBOLS:
                if src.startswith(sym, self._pos) and self._pos + len(sym) <= end:
                    self._push(TokenType.SYMBOL, sym)
                    self._advance(sym)
                    break
            else:
                raise self._error(f"Unexpected character '{ch}'.", ch)

    def _lex_string(self, end: int) -> None:
        src = self.source
        quote = src[self._pos]
        i = self._pos + 1
        chars: list[str] = []
        while i < end:
            ch = src[i]
            if ch == "\\" and i + 1 < end:
                chars.append(_ESCAPES.get(src[i + 1], src[i + 1]))
                i += 2
                continue
            if ch == quote:
                self._push(TokenType.STRING, "".join(chars))
                self._advance(src[self._pos:i + 1])
                return
            chars.append(ch)
            i += 1
        raise self._error("Unterminated string.", quote)

    def _emit_text(self, text: str) -> None:
        self._push(TokenType.TEXT, text)
        self._advance(text)

    def _push(self, kind: TokenType, value: str) -> None:
        self.tokens.append(Token(kind, value, self._line, self._col, self.filename))

    def _advance(self, consumed: str) -> None:
        """Move the cursor past *consumed*, keeping line/column in step."""
        self._pos += len(consumed)
        newlines = consumed.count("\n")
        if newlines:
            self._line += newlines
            self._col = len(consumed) - consumed.rfind("\n")
        else:
            self._col += len(consumed)

    def _error(self, message: str, value: str) -> TemplateSyntaxError:
        token = Token(TokenType.SYMBOL, value, self._line, self._col, self.filename)
        return TemplateSyntaxError(message, sender="lexer", filename=self.filename, token=token)


# -----------------------------------------------------------------------------

def tokenize(source: str, filename: str | None = None) -> list[Token]:
    return Lexer(source, filename).tokenize()
