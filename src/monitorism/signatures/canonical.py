"""Canonicalize human-written function/event signatures.

Turns `"Transfer(address indexed from, address indexed to, uint256 value)"`
into `"Transfer(address,address,uint256)"`: the pre-image of the topic hash.

Grammar (whitespace allowed between tokens):

    signature := NAME "(" params? ")"
    params    := param ("," param)*
    param     := type MODIFIER* NAME?
    type      := (NAME | "tuple"? "(" params? ")") ARRAY*

Parameter names and modifiers (`indexed`, data locations, `payable`) are
dropped, tuple components are canonicalized recursively. Empty parameter
slots (`f(a,)`, `f(a,,b)`) are rejected instead of silently skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from monitorism.core.errors import InvalidSignature

# Keywords that may follow a type but never change the canonical form.
_MODIFIERS = frozenset({"indexed", "memory", "calldata", "storage", "payable"})

_TOKEN_RE = re.compile(
    r"(?P<name>[A-Za-z_$][A-Za-z0-9_$]*)"
    r"|(?P<array>\[\s*[0-9]*\s*\])"
    r"|(?P<punct>[(),])"
)


@dataclass(frozen=True)
class Token:
    kind: str  # "name" | "array" | "punct"
    value: str
    pos: int


@dataclass(frozen=True)
class ParsedSignature:
    """Name + canonical parameter types of a signature."""

    name: str
    types: tuple[str, ...]

    @property
    def canonical(self) -> str:
        return f"{self.name}({','.join(self.types)})"


def tokenize(signature: str) -> list[Token]:
    """Split a signature into name / array-suffix / punctuation tokens."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(signature):
        if signature[pos].isspace():
            pos += 1
            continue
        m = _TOKEN_RE.match(signature, pos)
        if m is None:
            raise InvalidSignature(signature, f"unexpected character {signature[pos]!r} at {pos}")
        kind = m.lastgroup or "punct"
        value = m.group()
        if kind == "array":
            value = "".join(value.split())
        tokens.append(Token(kind, value, pos))
        pos = m.end()
    return tokens


class _Parser:
    """Recursive-descent parser over the token list."""

    def __init__(self, signature: str) -> None:
        self.signature = signature
        self.tokens = tokenize(signature)
        self.i = 0

    def _fail(self, reason: str) -> InvalidSignature:
        return InvalidSignature(self.signature, reason)

    def _peek(self) -> Token | None:
        return self.tokens[self.i] if self.i < len(self.tokens) else None

    def _next(self) -> Token:
        tok = self._peek()
        if tok is None:
            raise self._fail("unexpected end of input")
        self.i += 1
        return tok

    def _expect(self, value: str) -> None:
        tok = self._next()
        if tok.value != value:
            raise self._fail(f"expected {value!r} at {tok.pos}, got {tok.value!r}")

    def _at(self, value: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.value == value

    def parse(self) -> ParsedSignature:
        tok = self._next()
        if tok.kind != "name":
            raise self._fail("missing function or event name")
        self._expect("(")
        types = self._params()
        self._expect(")")
        extra = self._peek()
        if extra is not None:
            raise self._fail(f"trailing input at {extra.pos}")
        return ParsedSignature(name=tok.value, types=tuple(types))

    def _params(self) -> list[str]:
        if self._at(")"):
            return []
        types = [self._param()]
        while self._at(","):
            self.i += 1
            types.append(self._param())
        return types

    def _param(self) -> str:
        tok = self._peek()
        if tok is None or tok.value in (",", ")"):
            pos = tok.pos if tok is not None else len(self.signature)
            raise self._fail(f"empty parameter at {pos}")
        abi_type = self._type()
        while (tok := self._peek()) is not None and tok.kind == "name" and tok.value in _MODIFIERS:
            self.i += 1
        tok = self._peek()
        if tok is not None and tok.kind == "name":
            self.i += 1  # parameter name
        tok = self._peek()
        if tok is not None and tok.value not in (",", ")"):
            raise self._fail(f"unexpected {tok.value!r} at {tok.pos}")
        return abi_type

    def _type(self) -> str:
        tok = self._next()
        if tok.value == "tuple" and self._at("("):
            tok = self._next()
        if tok.value == "(":
            inner = self._params()
            self._expect(")")
            base = f"({','.join(inner)})"
        elif tok.kind == "name":
            base = tok.value
        else:
            raise self._fail(f"expected a type at {tok.pos}, got {tok.value!r}")
        while (tok := self._peek()) is not None and tok.kind == "array":
            self.i += 1
            base += tok.value
        return base


def parse_signature(signature: str) -> ParsedSignature:
    """Parse a signature into its name and canonical parameter types."""
    if not signature or not signature.strip():
        raise InvalidSignature(signature, "empty signature")
    return _Parser(signature).parse()


def canonicalize_signature(signature: str) -> str:
    """Return the canonical type-only form of `signature`.

    >>> canonicalize_signature("transfer(address owner, uint256 amount)")
    'transfer(address,uint256)'
    """
    return parse_signature(signature).canonical
