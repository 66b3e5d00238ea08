"""
Вычислитель выражений интерполяций.

Проходит по дереву выражения и вычисляет его значение относительно
контекста рендеринга и таблицы функций.

Правила истинности - стандартные для Python: ложны None, False, 0, 0.0,
пустая строка и пустые контейнеры; всё остальное истинно.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Iterable, Optional, cast

from ..errors import ErrorKind, EvaluationError
from .model import (
    Accessor,
    And,
    Expression,
    Funcall,
    Not,
    OpType,
    Or,
    Scalar,
)


def _index(value: Any, key: str) -> Any:
    """Один шаг доступа: ключ словаря, индекс последовательности или атрибут."""
    if isinstance(value, Mapping):
        return value.get(key)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        try:
            return value[int(key)]
        except (ValueError, IndexError):
            return None
    if key.startswith("__"):
        return None
    return getattr(value, key, None)


def resolve_path(root: Any, segments: Iterable[str]) -> Any:
    """
    Последовательно индексирует значение по сегментам пути.

    Отсутствующее промежуточное значение даёт None, а не ошибку.
    """
    value = root
    for key in segments:
        if value is None:
            return None
        value = _index(value, key)
    return value


class ExpressionEvaluator:
    """
    Вычислитель выражений.

    Принимает контекст и таблицу функций, вычисляет узлы выражений.
    Функции вызываются как func(context, *args).
    """

    def __init__(self, context: Any = None, functions: Optional[Mapping[str, Any]] = None):
        self.context = context
        self.functions = functions or {}

    def evaluate(self, expression: Expression) -> Any:
        """
        Вычисляет значение выражения.

        Raises:
            EvaluationError: Если вызываемая функция не определена
        """
        op = expression.get_type()

        if op == OpType.SCALAR:
            return cast(Scalar, expression).value
        elif op == OpType.ACCESSOR:
            return resolve_path(self.context, cast(Accessor, expression).segments)
        elif op == OpType.FUNCALL:
            return self._evaluate_funcall(cast(Funcall, expression))
        elif op == OpType.AND:
            node = cast(And, expression)
            return self.evaluate(node.lhs) and self.evaluate(node.rhs)
        elif op == OpType.OR:
            node_or = cast(Or, expression)
            return self.evaluate(node_or.lhs) or self.evaluate(node_or.rhs)
        elif op == OpType.NOT:
            return not self.evaluate(cast(Not, expression).operand)
        else:
            raise TypeError(f"Unexpected expression during evaluation: {expression!r}")

    def _evaluate_funcall(self, expression: Funcall) -> Any:
        func = resolve_path(self.functions, expression.name.split("."))
        if not callable(func):
            raise EvaluationError.at(
                ErrorKind.VALUE_UNDEFINED,
                f"Function not defined ({expression.name})",
                expression.location,
            )
        args = [self.evaluate(arg) for arg in expression.args]
        return func(self.context, *args)


def evaluate(expression: Expression, context: Any = None, functions: Optional[Mapping[str, Any]] = None) -> Any:
    """
    Удобная функция для вычисления выражения.

    Args:
        expression: Корневой узел выражения
        context: Данные, относительно которых вычисляются пути доступа
        functions: Таблица функций (допускаются вложенные словари: format.date)

    Returns:
        Значение выражения
    """
    return ExpressionEvaluator(context, functions).evaluate(expression)


__all__ = ["ExpressionEvaluator", "evaluate", "resolve_path"]
