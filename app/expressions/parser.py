"""Tokenizer and recursive-descent parser for formula expressions.

Precedence, loosest first::

    c ? a : b
    or ||
    and &&
    == != < <= > >=
    + -
    * / %
    unary - + not !
    ^            (right associative)
    a.b  a[i]  f(x)
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from app.errors import ExpressionSyntaxError
from app.expressions.nodes import (
    ArrayLiteral,
    Binary,
    Call,
    Conditional,
    Index,
    Literal,
    Logical,
    Member,
    Name,
    Node,
    Unary,
)

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?)
  | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
  | (?P<name>[A-Za-z_][A-Za-z_0-9]*)
  | (?P<op>==|!=|<=|>=|&&|\|\||[-+*/%^<>!?:.,()\[\]])
    """,
    re.VERBOSE,
)

_KEYWORDS = {"and", "or", "not", "true", "false", "null"}
_COMPARISON = {"==", "!=", "<", "<=", ">", ">="}
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


@dataclass(frozen=True)
class Token:
    kind: str  # number | string | name | op | eof
    value: str
    pos: int


def _unquote(raw: str) -> str:
    body = raw[1:-1]
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


def tokenize(source: str) -> list[Token]:
    """Split source text into tokens."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(source):
        m = _TOKEN_RE.match(source, pos)
        if not m:
            raise ExpressionSyntaxError(f"Unexpected character {source[pos]!r}", source, pos)
        kind = m.lastgroup
        if kind != "ws":
            value = m.group()
            if kind == "name" and value in _KEYWORDS:
                kind = "op"
            tokens.append(Token(kind, value, pos))
        pos = m.end()
    tokens.append(Token("eof", "", len(source)))
    return tokens


class Parser:
    """Builds an AST from a token list."""

    def __init__(self, source: str):
        self.source = source
        self.tokens = tokenize(source)
        self.i = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.i]

    def _error(self, message: str) -> ExpressionSyntaxError:
        return ExpressionSyntaxError(message, self.source, self.current.pos)

    def _accept(self, *ops: str) -> str | None:
        tok = self.current
        if tok.kind == "op" and tok.value in ops:
            self.i += 1
            return tok.value
        return None

    def _expect(self, op: str) -> None:
        if not self._accept(op):
            found = self.current.value or "end of input"
            raise self._error(f"Expected {op!r}, found {found!r}")

    def parse(self) -> Node:
        if self.current.kind == "eof":
            raise self._error("Empty expression")
        node = self._conditional()
        if self.current.kind != "eof":
            raise self._error(f"Unexpected token {self.current.value!r}")
        return node

    def _conditional(self) -> Node:
        test = self._or()
        if self._accept("?"):
            then = self._conditional()
            self._expect(":")
            otherwise = self._conditional()
            return Conditional(test, then, otherwise)
        return test

    def _or(self) -> Node:
        node = self._and()
        while self._accept("or", "||"):
            node = Logical("or", node, self._and())
        return node

    def _and(self) -> Node:
        node = self._comparison()
        while self._accept("and", "&&"):
            node = Logical("and", node, self._comparison())
        return node

    def _comparison(self) -> Node:
        node = self._additive()
        op = self._accept(*_COMPARISON)
        while op:
            node = Binary(op, node, self._additive())
            op = self._accept(*_COMPARISON)
        return node

    def _additive(self) -> Node:
        node = self._multiplicative()
        op = self._accept("+", "-")
        while op:
            node = Binary(op, node, self._multiplicative())
            op = self._accept("+", "-")
        return node

    def _multiplicative(self) -> Node:
        node = self._unary()
        op = self._accept("*", "/", "%")
        while op:
            node = Binary(op, node, self._unary())
            op = self._accept("*", "/", "%")
        return node

    def _unary(self) -> Node:
        op = self._accept("-", "+", "not", "!")
        if op:
            return Unary("not" if op == "!" else op, self._unary())
        return self._power()

    def _power(self) -> Node:
        base = self._postfix()
        if self._accept("^"):
            return Binary("^", base, self._unary())
        return base

    def _postfix(self) -> Node:
        node = self._primary()
        while True:
            if self._accept("."):
                tok = self.current
                if tok.kind != "name":
                    raise self._error("Expected property name after '.'")
                self.i += 1
                node = Member(node, tok.value)
            elif self._accept("["):
                index = self._conditional()
                self._expect("]")
                node = Index(node, index)
            elif self.current.kind == "op" and self.current.value == "(":
                if not isinstance(node, Name):
                    raise self._error("Only named functions can be called")
                self.i += 1
                node = Call(node.name, tuple(self._arguments(")")))
            else:
                return node

    def _arguments(self, closing: str) -> list[Node]:
        args: list[Node] = []
        if self._accept(closing):
            return args
        while True:
            args.append(self._conditional())
            if self._accept(closing):
                return args
            self._expect(",")

    def _primary(self) -> Node:
        tok = self.current
        if tok.kind == "number":
            self.i += 1
            return Literal(int(tok.value) if tok.value.isdigit() else float(tok.value))
        if tok.kind == "string":
            self.i += 1
            return Literal(_unquote(tok.value))
        if tok.kind == "name":
            self.i += 1
            return Name(tok.value)
        if self._accept("true"):
            return Literal(True)
        if self._accept("false"):
            return Literal(False)
        if self._accept("null"):
            return Literal(None)
        if self._accept("("):
            node = self._conditional()
            self._expect(")")
            return node
        if self._accept("["):
            return ArrayLiteral(tuple(self._arguments("]")))
        raise self._error(f"Unexpected token {tok.value or 'end of input'!r}")


@lru_cache(maxsize=None)
def compile_expression(source: str) -> Node:
    """Parse source text into an AST, memoised by exact text."""
    return Parser(source).parse()
