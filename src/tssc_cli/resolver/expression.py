"""Required-integrations expressions.

A component declares the integrations it needs as a small boolean
expression over integration names::

    github || gitlab
    (quay || nexus) && !artifactory

Precedence is ``!`` over ``&&`` over ``||``; both binary operators are left
associative. The empty string means "no integration required".

Expressions are parsed once into a tree of nodes and evaluated by
recursive interpretation against the set of configured integrations.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Set
from dataclasses import dataclass

from .errors import InvalidExpressionError, UnknownIntegrationError

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<ident>[A-Za-z_][A-Za-z0-9_.\-]*)|(?P<op>&&|\|\||!|\(|\)))"
)


class Node:
    """Base class for expression tree nodes."""

    def evaluate(self, configured: Set[str]) -> bool:
        raise NotImplementedError

    def identifiers(self) -> frozenset[str]:
        raise NotImplementedError

    def missing(self, configured: Set[str]) -> frozenset[str]:
        """Identifiers whose configuration would help satisfy this node."""
        raise NotImplementedError


@dataclass(frozen=True)
class Always(Node):
    """Constant true, produced by an empty expression."""

    def evaluate(self, configured: Set[str]) -> bool:
        return True

    def identifiers(self) -> frozenset[str]:
        return frozenset()

    def missing(self, configured: Set[str]) -> frozenset[str]:
        return frozenset()

    def __str__(self) -> str:
        return ""


@dataclass(frozen=True)
class Ident(Node):
    name: str

    def evaluate(self, configured: Set[str]) -> bool:
        return self.name in configured

    def identifiers(self) -> frozenset[str]:
        return frozenset({self.name})

    def missing(self, configured: Set[str]) -> frozenset[str]:
        return frozenset() if self.name in configured else frozenset({self.name})

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Not(Node):
    operand: Node

    def evaluate(self, configured: Set[str]) -> bool:
        return not self.operand.evaluate(configured)

    def identifiers(self) -> frozenset[str]:
        return self.operand.identifiers()

    def missing(self, configured: Set[str]) -> frozenset[str]:
        # Configuring more integrations never satisfies a negation.
        return frozenset()

    def __str__(self) -> str:
        return f"!{_wrap(self.operand, Not)}"


@dataclass(frozen=True)
class And(Node):
    left: Node
    right: Node

    def evaluate(self, configured: Set[str]) -> bool:
        return self.left.evaluate(configured) and self.right.evaluate(configured)

    def identifiers(self) -> frozenset[str]:
        return self.left.identifiers() | self.right.identifiers()

    def missing(self, configured: Set[str]) -> frozenset[str]:
        result: frozenset[str] = frozenset()
        for side in (self.left, self.right):
            if not side.evaluate(configured):
                result |= side.missing(configured)
        return result

    def __str__(self) -> str:
        return f"{_wrap(self.left, And)} && {_wrap(self.right, And)}"


@dataclass(frozen=True)
class Or(Node):
    left: Node
    right: Node

    def evaluate(self, configured: Set[str]) -> bool:
        return self.left.evaluate(configured) or self.right.evaluate(configured)

    def identifiers(self) -> frozenset[str]:
        return self.left.identifiers() | self.right.identifiers()

    def missing(self, configured: Set[str]) -> frozenset[str]:
        if self.evaluate(configured):
            return frozenset()
        return self.left.missing(configured) | self.right.missing(configured)

    def __str__(self) -> str:
        return f"{self.left} || {self.right}"


_BINDING = {Or: 1, And: 2, Not: 3, Ident: 4, Always: 4}


def _wrap(node: Node, parent: type) -> str:
    """Render ``node`` with parentheses when it binds looser than ``parent``."""
    text = str(node)
    if _BINDING[type(node)] < _BINDING[parent]:
        return f"({text})"
    return text


def _tokenize(expression: str) -> list[tuple[str, str, int]]:
    """Split an expression into (kind, value, position) tokens."""
    tokens = []
    pos = 0
    end = len(expression.rstrip())
    while pos < end:
        match = _TOKEN_RE.match(expression, pos)
        if not match:
            offset = pos + len(expression[pos:]) - len(expression[pos:].lstrip())
            raise _SyntaxError(f"unexpected character {expression[offset]!r} at position {offset}")
        kind = "ident" if match.group("ident") else "op"
        tokens.append((kind, match.group(kind), match.start(kind)))
        pos = match.end()
    return tokens


class _SyntaxError(Exception):
    pass


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, tokens: list[tuple[str, str, int]]):
        self.tokens = tokens
        self.index = 0

    def _peek(self) -> tuple[str, str, int] | None:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _accept(self, op: str) -> bool:
        token = self._peek()
        if token and token[0] == "op" and token[1] == op:
            self.index += 1
            return True
        return False

    def parse(self) -> Node:
        node = self._or()
        token = self._peek()
        if token is not None:
            raise _SyntaxError(f"unexpected {token[1]!r} at position {token[2]}")
        return node

    def _or(self) -> Node:
        node = self._and()
        while self._accept("||"):
            node = Or(node, self._and())
        return node

    def _and(self) -> Node:
        node = self._unary()
        while self._accept("&&"):
            node = And(node, self._unary())
        return node

    def _unary(self) -> Node:
        if self._accept("!"):
            return Not(self._unary())
        return self._primary()

    def _primary(self) -> Node:
        token = self._peek()
        if token is None:
            raise _SyntaxError("unexpected end of expression")
        kind, value, position = token
        if kind == "ident":
            self.index += 1
            return Ident(value)
        if value == "(":
            self.index += 1
            node = self._or()
            if not self._accept(")"):
                raise _SyntaxError(f"unbalanced parenthesis opened at position {position}")
            return node
        raise _SyntaxError(f"unexpected {value!r} at position {position}")


@dataclass(frozen=True)
class IntegrationRequirement:
    """Parsed required-integrations expression."""

    expression: str
    root: Node

    @property
    def integrations(self) -> frozenset[str]:
        """Every integration name the expression references."""
        return self.root.identifiers()

    def evaluate(self, configured: Set[str]) -> bool:
        return self.root.evaluate(configured)

    def missing(self, configured: Set[str]) -> list[str]:
        """Sorted integration names that would help satisfy the requirement."""
        if self.root.evaluate(configured):
            return []
        return sorted(self.root.missing(configured))

    def validate(self, known: Iterable[str], component: str = "") -> None:
        """Ensure only recognised integration names are referenced.

        Raises:
            UnknownIntegrationError: naming the first unknown integration.
        """
        unknown = sorted(self.integrations - frozenset(known))
        if unknown:
            raise UnknownIntegrationError(integration=unknown[0], component=component)


def parse(expression: str, component: str = "") -> IntegrationRequirement:
    """Parse a required-integrations expression.

    Args:
        expression: Raw expression text.
        component: Component the expression belongs to, for error context.

    Raises:
        InvalidExpressionError: If the expression is malformed.
    """
    if not isinstance(expression, str):
        raise InvalidExpressionError(
            component=component, expression=str(expression), reason="not a string"
        )
    if not expression.strip():
        return IntegrationRequirement(expression, Always())
    try:
        tokens = _tokenize(expression)
        root = _Parser(tokens).parse()
    except _SyntaxError as e:
        raise InvalidExpressionError(
            component=component, expression=expression, reason=str(e)
        ) from None
    return IntegrationRequirement(expression, root)


def evaluate(requirement: IntegrationRequirement, configured: Set[str]) -> bool:
    """Evaluate a parsed requirement against the configured integrations."""
    return requirement.evaluate(configured)
