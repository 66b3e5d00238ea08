"""
Лексер для выражений интерполяций.

Работает поверх общего курсора документа: выражение не извлекается
в отдельную строку, поэтому позиции токенов совпадают с позициями
в исходном шаблоне. Распознаёт:
- Символы: ( ) , }
- Строковые и числовые литералы в синтаксисе JSON
- Имена (в том числе пути через точку: user.name, items.0.title)
- Ключевые слова: and, or, not, true, false, null
- Пробелы (игнорируются)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple

from ..cursor import Cursor
from ..errors import ErrorKind, ExpressionParseError


@dataclass(frozen=True)
class Token:
    """
    Токен выражения.

    Attributes:
        type: Тип токена (KEYWORD, NAME, STRING, NUMBER, SYMBOL, EOF)
        value: Исходный текст токена
        start: Абсолютная позиция начала в буфере курсора
        end: Абсолютная позиция конца в буфере курсора
    """
    type: str
    value: str
    start: int
    end: int

    def __repr__(self):
        return f"Token({self.type}, '{self.value}', pos={self.start})"


class ExpressionLexer:
    """
    Лексер, выдающий токены выражения по требованию.

    peek() смотрит на следующий токен, не сдвигая курсор;
    advance() потребляет его. Токен EOF выдаётся в конце буфера.
    """

    _WHITESPACE = re.compile(r"\s+")

    # Спецификация токенов: (regex_pattern, token_type); порядок важен
    TOKEN_SPECS: List[Tuple[str, str]] = [
        (r"[(),}]", "SYMBOL"),
        (r'"(?:[^"\\\x00-\x1f]|\\["\\/bfnrt]|\\u[0-9a-fA-F]{4})*"', "STRING"),
        (r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?(?![\w.])", "NUMBER"),
        (r"[A-Za-z_$][\w$]*(?:\.[\w$]+)*", "NAME"),
    ]

    KEYWORDS = {"and", "or", "not", "true", "false", "null"}

    def __init__(self, cursor: Cursor):
        self.cursor = cursor
        self._compiled: List[Tuple[Pattern[str], str]] = [
            (re.compile(pattern), token_type) for pattern, token_type in self.TOKEN_SPECS
        ]
        self._lookahead: Optional[Token] = None
        self._lookahead_at = -1

    def peek(self) -> Token:
        """Возвращает следующий токен без продвижения курсора."""
        saved = self.cursor.index
        if self._lookahead is None or self._lookahead_at != saved:
            self._lookahead = self._scan()
            self._lookahead_at = saved
            self.cursor.seek(saved)
        return self._lookahead

    def advance(self) -> Token:
        """Потребляет следующий токен и возвращает его."""
        token = self.peek()
        self.cursor.seek(token.end)
        return token

    def skip_whitespace(self) -> None:
        self.cursor.capture(self._WHITESPACE)

    def _scan(self) -> Token:
        self.skip_whitespace()
        start = self.cursor.index
        if self.cursor.eof:
            return Token("EOF", "", start, start)

        for pattern, token_type in self._compiled:
            match = self.cursor.capture(pattern)
            if match:
                value = match.group(0)
                if token_type == "NAME" and value in self.KEYWORDS:
                    token_type = "KEYWORD"
                return Token(token_type, value, start, match.end())

        raise ExpressionParseError.at(
            ErrorKind.INVALID_EXPRESSION,
            f"Unexpected character '{self.cursor.peek()}' in expression",
            self.cursor,
        )


__all__ = ["Token", "ExpressionLexer"]
