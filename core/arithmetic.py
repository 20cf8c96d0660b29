# =============================================================================
# core/arithmetic.py  -  Restricted Arithmetic Evaluator
# =============================================================================
#
# Backs the "calculate" tool.  Input is never handed to eval(); it is
# tokenized and parsed by a small recursive-descent parser that knows only:
#
#   expression := term (("+" | "-") term)*
#   term       := factor (("*" | "/") factor)*
#   factor     := ("+" | "-") factor | NUMBER | "(" expression ")"
#
# Any other character, token sequence or a division by zero raises
# ValidationError.
# =============================================================================

import math
import re
from typing import Union

from core.errors import ValidationError

Number = Union[int, float]

_TOKEN = re.compile(r"\s*(?:(\d+\.\d*|\.\d+|\d+)|(\S))")
_MAX_LENGTH = 500
_MAX_DEPTH = 50


def _tokenize(expression: str) -> list[str]:
    tokens = []
    for match in _TOKEN.finditer(expression):
        number, symbol = match.groups()
        if number is not None:
            tokens.append(number)
        elif symbol is not None:
            if symbol not in "+-*/()":
                raise ValidationError(f"Unsupported character {symbol!r} in expression")
            tokens.append(symbol)
    return tokens


class _Parser:
    def __init__(self, tokens: list[str]):
        self.tokens = tokens
        self.pos = 0
        self.depth = 0

    def peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self) -> str:
        token = self.peek()
        if token is None:
            raise ValidationError("Unexpected end of expression")
        self.pos += 1
        return token

    def expression(self) -> Number:
        value = self.term()
        while self.peek() in ("+", "-"):
            if self.take() == "+":
                value += self.term()
            else:
                value -= self.term()
        return value

    def term(self) -> Number:
        value = self.factor()
        while self.peek() in ("*", "/"):
            op = self.take()
            rhs = self.factor()
            if op == "*":
                value *= rhs
            elif rhs == 0:
                raise ValidationError("Division by zero")
            else:
                value /= rhs
        return value

    def factor(self) -> Number:
        self.depth += 1
        if self.depth > _MAX_DEPTH:
            raise ValidationError("Expression is nested too deeply")
        try:
            return self._factor()
        finally:
            self.depth -= 1

    def _factor(self) -> Number:
        token = self.take()
        if token == "+":
            return self.factor()
        if token == "-":
            return -self.factor()
        if token == "(":
            value = self.expression()
            if self.take() != ")":
                raise ValidationError("Expected ')'")
            return value
        if token in "*/)":
            raise ValidationError(f"Unexpected {token!r} in expression")
        return float(token) if "." in token else int(token)


def evaluate(expression: str) -> Number:
    """Evaluate an arithmetic expression made of numbers and + - * /.

    Whole-number results of a division are returned as ``int``.
    """
    if not isinstance(expression, str) or not expression.strip():
        raise ValidationError("Expression must be a non-empty string")
    if len(expression) > _MAX_LENGTH:
        raise ValidationError(f"Expression longer than {_MAX_LENGTH} characters")

    parser = _Parser(_tokenize(expression))
    try:
        value = parser.expression()
    except OverflowError:
        raise ValidationError("Result out of range") from None
    if parser.peek() is not None:
        raise ValidationError(f"Unexpected {parser.peek()!r} in expression")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError("Result out of range")

    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
