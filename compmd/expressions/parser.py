"""
Парсер выражений интерполяций с рекурсивным спуском.

Грамматика:
expression → term (("and" | "or") expression)?
term       → "not" term | "(" expression ")" | funcall | accessor | scalar
funcall    → NAME "(" (expression ("," expression)*)? ")"
accessor   → NAME ("." NAME)*
scalar     → JSON-литерал (строка | число | true | false | null)

and / or имеют одинаковый приоритет и правую ассоциативность:
"a and b or c" разбирается как "a and (b or c)".
"""

from __future__ import annotations

import json

from ..cursor import Cursor
from ..errors import ErrorKind, ExpressionParseError
from .lexer import ExpressionLexer, Token
from .model import (
    Accessor,
    And,
    Expression,
    Funcall,
    Not,
    Or,
    Scalar,
    SourceLocation,
)

_KEYWORD_SCALARS = {"true": True, "false": False, "null": None}


class ExpressionParser:
    """
    Парсер выражений, работающий на общем курсоре документа.

    Используется парсером документа для каждой интерполяции {...}
    (в тексте и в значениях атрибутов).
    """

    def __init__(self, cursor: Cursor):
        self.cursor = cursor
        self.lexer = ExpressionLexer(cursor)

    def parse_interpolation(self) -> Expression:
        """
        Парсит содержимое интерполяции; курсор стоит сразу после '{'.

        Потребляет закрывающую '}'.

        Raises:
            ExpressionParseError: При синтаксической ошибке
        """
        if self._check_symbol("}"):
            raise self._error(ErrorKind.INVALID_EXPRESSION, "Empty interpolation", self.lexer.peek())

        expression = self._parse_expression()

        if not self._match_symbol("}"):
            raise self._error(
                ErrorKind.INVALID_EXPRESSION,
                "Expected '}' to close interpolation",
                self.lexer.peek(),
            )
        return expression

    def parse_standalone(self) -> Expression:
        """Парсит выражение, занимающее весь буфер курсора."""
        if self.lexer.peek().type == "EOF":
            raise self._error(ErrorKind.INVALID_EXPRESSION, "Empty expression", self.lexer.peek())

        expression = self._parse_expression()

        current = self.lexer.peek()
        if current.type != "EOF":
            raise self._error(ErrorKind.INVALID_EXPRESSION, f"Unexpected token '{current.value}'", current)
        return expression

    def _parse_expression(self) -> Expression:
        """Парсит выражение с бинарными операторами (правая ассоциативность)."""
        lhs = self._parse_term()

        if self._match_keyword("and"):
            return And(lhs, self._parse_expression())
        if self._match_keyword("or"):
            return Or(lhs, self._parse_expression())

        return lhs

    def _parse_term(self) -> Expression:
        """Парсит терм: отрицание, группу, вызов, путь доступа или литерал."""
        token = self.lexer.peek()

        if token.type == "KEYWORD":
            if token.value == "not":
                self.lexer.advance()
                return Not(self._parse_term())
            if token.value in ("and", "or"):
                raise self._error(
                    ErrorKind.UNEXPECTED_OPERATOR,
                    f"Operator '{token.value}' has no left-hand operand",
                    token,
                )
            self.lexer.advance()
            return Scalar(_KEYWORD_SCALARS[token.value])

        if token.type in ("STRING", "NUMBER"):
            self.lexer.advance()
            return Scalar(json.loads(token.value))

        if token.type == "SYMBOL" and token.value == "(":
            self.lexer.advance()
            expression = self._parse_expression()
            if not self._match_symbol(")"):
                raise self._error(
                    ErrorKind.INVALID_EXPRESSION,
                    "Expected ')' after grouped expression",
                    self.lexer.peek(),
                )
            return expression

        if token.type == "NAME":
            self.lexer.advance()
            if self._match_symbol("("):
                return self._parse_funcall(token.value)
            return Accessor(token.value)

        if token.type == "EOF":
            raise self._error(ErrorKind.INVALID_EXPRESSION, "Unexpected end of expression", token)
        raise self._error(ErrorKind.INVALID_EXPRESSION, f"Unexpected token '{token.value}'", token)

    def _parse_funcall(self, name: str) -> Funcall:
        """Парсит список аргументов; открывающая скобка уже потреблена."""
        location = SourceLocation.of(self.cursor)
        args = []

        if self._match_symbol(")"):
            return Funcall(name, location, tuple(args))

        while True:
            token = self.lexer.peek()
            if token.type == "EOF" or (token.type == "SYMBOL" and token.value in (",", ")", "}")):
                raise self._error(
                    ErrorKind.INVALID_ARGUMENT,
                    f"Expected argument in call to '{name}'",
                    token,
                )
            args.append(self._parse_expression())

            if self._match_symbol(","):
                continue
            if self._match_symbol(")"):
                return Funcall(name, location, tuple(args))

            raise self._error(
                ErrorKind.INVALID_ARGUMENT,
                f"Expected ',' or ')' in call to '{name}'",
                self.lexer.peek(),
            )

    # Вспомогательные методы для работы с токенами

    def _check_symbol(self, symbol: str) -> bool:
        token = self.lexer.peek()
        return token.type == "SYMBOL" and token.value == symbol

    def _match_symbol(self, symbol: str) -> bool:
        """Проверяет и потребляет символ."""
        if self._check_symbol(symbol):
            self.lexer.advance()
            return True
        return False

    def _match_keyword(self, keyword: str) -> bool:
        """Проверяет и потребляет ключевое слово."""
        token = self.lexer.peek()
        if token.type == "KEYWORD" and token.value == keyword:
            self.lexer.advance()
            return True
        return False

    def _error(self, kind: ErrorKind, message: str, token: Token) -> ExpressionParseError:
        """Позиционирует курсор на токен и создаёт ошибку."""
        self.cursor.seek(token.start)
        return ExpressionParseError.at(kind, message, self.cursor)


def parse_expression(text: str) -> Expression:
    """
    Удобная функция для разбора выражения из строки (без фигурных скобок).

    Args:
        text: Текст выражения, например 'user.name or "guest"'

    Returns:
        Корневой узел выражения

    Raises:
        ExpressionParseError: При синтаксической ошибке
    """
    return ExpressionParser(Cursor(text)).parse_standalone()


__all__ = ["ExpressionParser", "parse_expression"]
