"""
Error taxonomy for compmd.

All expected errors that should be displayed to the template author
as clean messages (without stack traces) inherit from CompmdUserError.

Programming errors and bugs should NOT inherit from CompmdUserError:
they will propagate with full tracebacks. Exceptions raised by
components and template functions are propagated unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol


class ErrorKind(Enum):
    """Kinds of template errors."""

    # Structural parse errors
    NO_CLOSING_TAG = "NoClosingTag"
    MISSING_END_BRACKET = "MissingEndBracket"
    UNEXPECTED_CLOSING_TAG = "UnexpectedClosingTag"
    BAD_INDENTATION = "BadIndentation"
    UNEXPECTED_CHARACTER = "UnexpectedCharacter"
    INVALID_ATTRIBUTE = "InvalidAttribute"
    PLACEHOLDER_COLLISION = "PlaceholderCollision"
    MAX_DEPTH_EXCEEDED = "MaxDepthExceeded"

    # Expression parse errors
    INVALID_EXPRESSION = "InvalidExpression"
    UNEXPECTED_OPERATOR = "UnexpectedOperator"
    INVALID_ARGUMENT = "InvalidArgument"

    # Evaluation errors
    VALUE_UNDEFINED = "ValueUndefined"

    # Render errors
    COMPONENT_NOT_FOUND = "ComponentNotFound"
    INVALID_NODE = "InvalidNode"


class HasPosition(Protocol):
    """Anything that can report a 1-indexed source position."""

    @property
    def line_number(self) -> int: ...

    @property
    def column_number(self) -> int: ...


class CompmdUserError(Exception):
    """
    Base class for all user-facing errors in compmd.

    These errors indicate problems that the template author can fix:
    malformed markup, bad expressions, unknown components, invalid config.
    """
    pass


class ConfigError(CompmdUserError):
    """Invalid compmd configuration (YAML config file or options)."""
    pass


class TemplateError(CompmdUserError):
    """
    Error located in a template.

    Carries the kind of the error and the 1-indexed position at which
    it was detected. Position is None when it is unknown (render errors
    on hand-built trees).
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        line_number: Optional[int] = None,
        column_number: Optional[int] = None,
    ):
        self.kind = kind
        self.message = message
        self.line_number = line_number
        self.column_number = column_number
        if line_number is not None:
            super().__init__(f"{message} at {line_number}:{column_number}")
        else:
            super().__init__(message)

    @classmethod
    def at(cls, kind: ErrorKind, message: str, position: Optional[HasPosition]) -> "TemplateError":
        """Builds an error positioned at a cursor or a source location."""
        if position is None:
            return cls(kind, message)
        return cls(kind, message, position.line_number, position.column_number)


class StructuralParseError(TemplateError):
    """Malformed tag/text structure."""
    pass


class ExpressionParseError(TemplateError):
    """Malformed {...} expression."""
    pass


class EvaluationError(TemplateError):
    """Failure while evaluating an expression."""
    pass


class RenderError(TemplateError):
    """Failure while walking the parsed tree."""
    pass


__all__ = [
    "ErrorKind",
    "CompmdUserError",
    "ConfigError",
    "TemplateError",
    "StructuralParseError",
    "ExpressionParseError",
    "EvaluationError",
    "RenderError",
]
