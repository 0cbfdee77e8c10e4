# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Lexer and parser for the HCL subset used by rule group configurations.

Supported: labelled top-level blocks (``resource "type" "name" { ... }``),
attributes, nested blocks, quoted strings with escapes, heredocs, numbers,
booleans, ``null``, lists, objects and ``#`` / ``//`` / ``/* */`` comments.
Expressions, references and interpolation are not supported.

Nested blocks always parse to a list of bodies, so repeating a block name
collects every occurrence in order.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import ConfigurationParseError


class TokenType(Enum):
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    HEREDOC = "HEREDOC"
    NUMBER = "NUMBER"
    BOOL = "BOOL"
    NULL = "NULL"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    EQUALS = "="
    COLON = ":"
    COMMA = ","
    NEWLINE = "NEWLINE"
    EOF = "EOF"


@dataclass
class Token:
    type: TokenType
    value: Any
    line: int
    column: int


_PUNCTUATION = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "=": TokenType.EQUALS,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}

_LITERALS = {"true": (TokenType.BOOL, True), "false": (TokenType.BOOL, False), "null": (TokenType.NULL, None)}


class HCLLexer:
    """Turns configuration text into a token list ending with EOF."""

    def __init__(self, content: str):
        self.content = content
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        while self.pos < len(self.content):
            char = self.content[self.pos]
            if char == "\n":
                self._emit(TokenType.NEWLINE, "\n")
                self._advance()
            elif char in " \t\r":
                self._advance()
            elif char == "#" or self._peek_is("//"):
                self._skip_line_comment()
            elif self._peek_is("/*"):
                self._skip_block_comment()
            elif char == '"':
                self._read_string()
            elif self._peek_is("<<"):
                self._read_heredoc()
            elif char.isdigit() or (char == "-" and self._next_char().isdigit()):
                self._read_number()
            elif char.isalpha() or char == "_":
                self._read_identifier()
            elif char in _PUNCTUATION:
                self._emit(_PUNCTUATION[char], char)
                self._advance()
            else:
                raise self._error(f"unexpected character {char!r}")
        self._emit(TokenType.EOF, None)
        return self.tokens

    def _error(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        return ConfigurationParseError(message, line or self.line, column or self.column)

    def _emit(self, token_type: TokenType, value: Any, line: Optional[int] = None, column: Optional[int] = None):
        self.tokens.append(Token(token_type, value, line or self.line, column or self.column))

    def _advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self.content[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _peek_is(self, text: str) -> bool:
        return self.content.startswith(text, self.pos)

    def _next_char(self) -> str:
        return self.content[self.pos + 1] if self.pos + 1 < len(self.content) else ""

    def _skip_line_comment(self) -> None:
        while self.pos < len(self.content) and self.content[self.pos] != "\n":
            self._advance()

    def _skip_block_comment(self) -> None:
        line, column = self.line, self.column
        end = self.content.find("*/", self.pos + 2)
        if end == -1:
            raise self._error("unterminated block comment", line, column)
        self._advance(end + 2 - self.pos)

    def _read_string(self) -> None:
        line, column = self.line, self.column
        self._advance()
        chars: List[str] = []
        while True:
            if self.pos >= len(self.content) or self.content[self.pos] == "\n":
                raise self._error("unterminated string", line, column)
            char = self.content[self.pos]
            if char == '"':
                self._advance()
                break
            if char == "\\":
                escape = self._next_char()
                if escape in _ESCAPES:
                    chars.append(_ESCAPES[escape])
                    self._advance(2)
                    continue
                if escape == "u":
                    digits = self.content[self.pos + 2 : self.pos + 6]
                    try:
                        chars.append(chr(int(digits, 16)))
                    except ValueError:
                        raise self._error(f"invalid unicode escape \\u{digits}") from None
                    self._advance(6)
                    continue
                raise self._error(f"invalid escape sequence \\{escape}")
            chars.append(char)
            self._advance()
        self._emit(TokenType.STRING, "".join(chars), line, column)

    def _read_heredoc(self) -> None:
        line, column = self.line, self.column
        self._advance(2)
        indented = self._peek_is("-")
        if indented:
            self._advance()
        start = self.pos
        while self.pos < len(self.content) and (self.content[self.pos].isalnum() or self.content[self.pos] == "_"):
            self._advance()
        marker = self.content[start : self.pos]
        if not marker or not self._peek_is("\n"):
            raise self._error("heredoc marker must be an identifier followed by a newline", line, column)
        self._advance()

        lines: List[str] = []
        while True:
            if self.pos >= len(self.content):
                raise self._error(f"unterminated heredoc, expected {marker}", line, column)
            end = self.content.find("\n", self.pos)
            end = len(self.content) if end == -1 else end
            text = self.content[self.pos : end]
            self._advance(end - self.pos)
            if text.strip() == marker:
                break
            lines.append(text)
            if self.pos < len(self.content):
                self._advance()

        if indented:
            widths = [len(text) - len(text.lstrip()) for text in lines if text.strip()]
            trim = min(widths) if widths else 0
            lines = [text[trim:] for text in lines]
        self._emit(TokenType.HEREDOC, "".join(text + "\n" for text in lines), line, column)

    def _read_number(self) -> None:
        line, column = self.line, self.column
        start = self.pos
        self._advance()
        while self.pos < len(self.content) and (self.content[self.pos].isdigit() or self.content[self.pos] == "."):
            self._advance()
        text = self.content[start : self.pos]
        try:
            value: Any = float(text) if "." in text else int(text)
        except ValueError:
            raise self._error(f"invalid number {text!r}", line, column) from None
        self._emit(TokenType.NUMBER, value, line, column)

    def _read_identifier(self) -> None:
        line, column = self.line, self.column
        start = self.pos
        while self.pos < len(self.content) and (
            self.content[self.pos].isalnum() or self.content[self.pos] in "_-"
        ):
            self._advance()
        text = self.content[start : self.pos]
        token_type, value = _LITERALS.get(text, (TokenType.IDENTIFIER, text))
        self._emit(token_type, value, line, column)


_SCALARS = (TokenType.STRING, TokenType.HEREDOC, TokenType.NUMBER, TokenType.BOOL, TokenType.NULL)


class HCLParser:
    """Builds nested dictionaries from a token list.

    ``parse()`` returns top-level blocks keyed by type and then by label, for
    example ``{"resource": {"aws_networkfirewall_rule_group": {"test": {...}}}}``.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def parse(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"resource": {}}
        while True:
            self._skip_newlines()
            token = self._current()
            if token.type == TokenType.EOF:
                return result
            block_type = self._expect(TokenType.IDENTIFIER).value
            labels: List[str] = []
            while self._current().type in (TokenType.STRING, TokenType.IDENTIFIER):
                labels.append(self._advance().value)
            self._expect(TokenType.LBRACE)
            body = self._parse_body()
            self._store_block(result, block_type, labels, body, token)

    @staticmethod
    def _store_block(result: Dict[str, Any], block_type: str, labels: List[str], body: Dict[str, Any], token: Token):
        if block_type == "resource" and len(labels) != 2:
            raise ConfigurationParseError("resource blocks need a type and a name label", token.line, token.column)
        if not labels:
            result.setdefault(block_type, []).append(body)
            return
        target = result.setdefault(block_type, {})
        for label in labels[:-1]:
            target = target.setdefault(label, {})
        if labels[-1] in target:
            address = ".".join(labels)
            raise ConfigurationParseError(f"duplicate {block_type} block {address}", token.line, token.column)
        target[labels[-1]] = body

    def _parse_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        blocks = set()
        while True:
            self._skip_newlines()
            token = self._current()
            if token.type == TokenType.RBRACE:
                self._advance()
                return body
            name = self._expect(TokenType.IDENTIFIER).value
            following = self._current()
            if following.type == TokenType.EQUALS:
                self._advance()
                if name in body:
                    raise ConfigurationParseError(f"duplicate attribute {name!r}", token.line, token.column)
                body[name] = self._parse_value()
                self._expect_terminator()
            elif following.type == TokenType.LBRACE:
                self._advance()
                if name in body and name not in blocks:
                    raise ConfigurationParseError(
                        f"{name!r} is already defined as an attribute", token.line, token.column
                    )
                blocks.add(name)
                body.setdefault(name, []).append(self._parse_body())
            else:
                raise self._unexpected(following, "'=' or '{'")

    def _parse_value(self) -> Any:
        token = self._current()
        if token.type in _SCALARS:
            self._advance()
            return token.value
        if token.type == TokenType.LBRACKET:
            self._advance()
            return self._parse_list()
        if token.type == TokenType.LBRACE:
            self._advance()
            return self._parse_object()
        if token.type == TokenType.IDENTIFIER:
            raise ConfigurationParseError(
                f"references and expressions are not supported: {token.value!r}", token.line, token.column
            )
        raise self._unexpected(token, "a value")

    def _parse_list(self) -> List[Any]:
        items: List[Any] = []
        while True:
            self._skip_newlines()
            if self._current().type == TokenType.RBRACKET:
                self._advance()
                return items
            items.append(self._parse_value())
            self._skip_newlines()
            token = self._current()
            if token.type == TokenType.COMMA:
                self._advance()
            elif token.type != TokenType.RBRACKET:
                raise self._unexpected(token, "',' or ']'")

    def _parse_object(self) -> Dict[str, Any]:
        items: Dict[str, Any] = {}
        while True:
            self._skip_newlines()
            token = self._current()
            if token.type == TokenType.RBRACE:
                self._advance()
                return items
            if token.type not in (TokenType.IDENTIFIER, TokenType.STRING):
                raise self._unexpected(token, "an object key")
            self._advance()
            separator = self._current()
            if separator.type not in (TokenType.EQUALS, TokenType.COLON):
                raise self._unexpected(separator, "'=' or ':'")
            self._advance()
            items[token.value] = self._parse_value()
            token = self._current()
            if token.type in (TokenType.COMMA, TokenType.NEWLINE):
                self._advance()
            elif token.type != TokenType.RBRACE:
                raise self._unexpected(token, "',', a newline or '}'")

    def _expect_terminator(self) -> None:
        token = self._current()
        if token.type == TokenType.NEWLINE:
            self._advance()
        elif token.type not in (TokenType.RBRACE, TokenType.EOF):
            raise self._unexpected(token, "a newline after the attribute")

    def _skip_newlines(self) -> None:
        while self._current().type == TokenType.NEWLINE:
            self._advance()

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def _expect(self, token_type: TokenType) -> Token:
        token = self._current()
        if token.type != token_type:
            raise self._unexpected(token, token_type.value)
        return self._advance()

    @staticmethod
    def _unexpected(token: Token, expected: str) -> ConfigurationParseError:
        found = "end of input" if token.type == TokenType.EOF else repr(token.value)
        return ConfigurationParseError(f"expected {expected}, found {found}", token.line, token.column)


def parse_hcl(content: str) -> Dict[str, Any]:
    """Parse configuration text into nested dictionaries."""
    return HCLParser(HCLLexer(content).tokenize()).parse()
