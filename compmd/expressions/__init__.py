"""
Язык выражений для интерполяций {...}.

Пути доступа к контексту, скалярные литералы, вызовы функций
и логические операторы and / or / not.
"""

from .model import (
    OpType,
    SourceLocation,
    Expression,
    Scalar,
    Accessor,
    Funcall,
    And,
    Or,
    Not,
)
from .parser import ExpressionParser, parse_expression
from .evaluator import ExpressionEvaluator, evaluate, resolve_path

__all__ = [
    # Модель
    "OpType",
    "SourceLocation",
    "Expression",
    "Scalar",
    "Accessor",
    "Funcall",
    "And",
    "Or",
    "Not",

    # Разбор и вычисление
    "ExpressionParser",
    "parse_expression",
    "ExpressionEvaluator",
    "evaluate",
    "resolve_path",
]
