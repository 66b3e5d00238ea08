"""
Модели данных для языка выражений интерполяций.

Содержит классы для представления выражений внутри {...}:
доступ к данным контекста, скалярные литералы, вызовы функций
и логические операторы and / or / not.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple, Union

from ..errors import HasPosition


class OpType(Enum):
    """Типы узлов выражения."""
    SCALAR = "scalar"
    ACCESSOR = "accessor"
    FUNCALL = "funcall"
    AND = "and"
    OR = "or"
    NOT = "not"


@dataclass(frozen=True)
class SourceLocation:
    """Позиция в исходном тексте шаблона (1-индексированная)."""
    line_number: int
    column_number: int

    @classmethod
    def of(cls, position: HasPosition) -> "SourceLocation":
        """Снимок позиции курсора."""
        return cls(position.line_number, position.column_number)

    def __str__(self) -> str:
        return f"{self.line_number}:{self.column_number}"


@dataclass(frozen=True)
class Expression(ABC):
    """Базовый абстрактный класс для всех выражений."""

    @abstractmethod
    def get_type(self) -> OpType:
        """Возвращает тип выражения."""
        pass

    def __str__(self) -> str:
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        pass


@dataclass(frozen=True)
class Scalar(Expression):
    """
    Скалярный литерал в JSON-синтаксисе: "text", 1.5, true, false, null.
    """
    value: Any

    def get_type(self) -> OpType:
        return OpType.SCALAR

    def _to_string(self) -> str:
        return json.dumps(self.value)


@dataclass(frozen=True)
class Accessor(Expression):
    """
    Путь доступа к данным контекста: user.name

    Вычисление тотально: отсутствующие данные дают None.
    """
    path: str

    def get_type(self) -> OpType:
        return OpType.ACCESSOR

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(self.path.split("."))

    def _to_string(self) -> str:
        return self.path


@dataclass(frozen=True)
class Funcall(Expression):
    """
    Вызов функции из таблицы функций: format.date(post.created, "short")

    location - позиция сразу после открывающей скобки; используется
    в сообщении об ошибке, если функция не найдена при вычислении.
    """
    name: str
    location: SourceLocation
    args: Tuple[Expression, ...] = ()

    def get_type(self) -> OpType:
        return OpType.FUNCALL

    def _to_string(self) -> str:
        return f"{self.name}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True)
class And(Expression):
    """Логическое И с коротким вычислением: lhs and rhs"""
    lhs: Expression
    rhs: Expression

    def get_type(self) -> OpType:
        return OpType.AND

    def _to_string(self) -> str:
        return f"({self.lhs} and {self.rhs})"


@dataclass(frozen=True)
class Or(Expression):
    """Логическое ИЛИ с коротким вычислением: lhs or rhs"""
    lhs: Expression
    rhs: Expression

    def get_type(self) -> OpType:
        return OpType.OR

    def _to_string(self) -> str:
        return f"({self.lhs} or {self.rhs})"


@dataclass(frozen=True)
class Not(Expression):
    """Отрицание: not operand"""
    operand: Expression

    def get_type(self) -> OpType:
        return OpType.NOT

    def _to_string(self) -> str:
        return f"not {self.operand}"


# Объединенный тип для всех выражений
AnyExpression = Union[Scalar, Accessor, Funcall, And, Or, Not]

__all__ = [
    "OpType",
    "SourceLocation",
    "Expression",
    "Scalar",
    "Accessor",
    "Funcall",
    "And",
    "Or",
    "Not",
    "AnyExpression",
]
