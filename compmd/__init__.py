"""
compmd - Markdown с компонентами.

Шаблон смешивает Markdown-текст, теги компонентов с атрибутами
и интерполяции {expression}. Текст отдаётся Markdown-движку,
теги - компонентам.

Пример:
    >>> from compmd import to_html
    >>> to_html("Hello *{name}*", context={"name": "world"})
    '<p>Hello <em>world</em></p>'
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .components import html_component
from .config import ParserOptions, RenderConfig, load_config, load_context
from .cursor import Cursor
from .document import DocumentAST, Interpolation, Node, Tag, Text, parse_document
from .document.textrun import MarkdownEngine
from .engines import identity_engine, markdown_it_engine, python_markdown_engine
from .errors import (
    CompmdUserError,
    ConfigError,
    ErrorKind,
    EvaluationError,
    ExpressionParseError,
    RenderError,
    StructuralParseError,
    TemplateError,
)
from .expressions import evaluate, parse_expression
from .render import CHILDREN_KEY, NAME_KEY, ComponentLike, ComponentRegistry, Renderer


def parse(text: str, markdown_engine: Optional[MarkdownEngine] = None, **options: Any) -> DocumentAST:
    """
    Парсит шаблон в AST.

    Args:
        text: Исходный текст шаблона
        markdown_engine: Markdown-движок (по умолчанию markdown-it, commonmark)
        **options: Прочие поля ParserOptions (interpolation_point,
                   indented_markdown, max_depth)

    Returns:
        Кортеж узлов верхнего уровня
    """
    engine = markdown_engine or markdown_it_engine()
    return parse_document(text, ParserOptions(markdown_engine=engine, **options))


def to_html(input: str,
            components: Optional[Mapping[str, ComponentLike]] = None,
            markdown_engine: Optional[MarkdownEngine] = None,
            context: Any = None,
            default_component: Optional[ComponentLike] = None,
            functions: Optional[Mapping[str, Any]] = None,
            indented_markdown: bool = False) -> str:
    """
    Парсит и рендерит шаблон за один шаг.

    Args:
        input: Текст шаблона
        components: Компоненты по именам тегов (регистр не важен)
        markdown_engine: Markdown-движок (по умолчанию markdown-it)
        context: Исходный контекст для интерполяций
        default_component: Компонент для тегов без регистрации
        functions: Таблица функций для вызовов в интерполяциях
        indented_markdown: Снимать общий отступ с текстовых блоков

    Returns:
        Отрисованный HTML
    """
    ast = parse(input, markdown_engine, indented_markdown=indented_markdown)
    renderer = Renderer(components, default_component, functions)
    return renderer.render_to_string(ast, context)


__all__ = [
    # Фасад
    "parse",
    "to_html",

    # Парсинг и AST
    "Cursor",
    "ParserOptions",
    "parse_document",
    "parse_expression",
    "evaluate",
    "Node",
    "Text",
    "Tag",
    "Interpolation",
    "DocumentAST",

    # Рендеринг
    "Renderer",
    "ComponentRegistry",
    "NAME_KEY",
    "CHILDREN_KEY",
    "html_component",
    "markdown_it_engine",
    "python_markdown_engine",
    "identity_engine",

    # Конфигурация
    "RenderConfig",
    "load_config",
    "load_context",

    # Ошибки
    "CompmdUserError",
    "ConfigError",
    "ErrorKind",
    "TemplateError",
    "StructuralParseError",
    "ExpressionParseError",
    "EvaluationError",
    "RenderError",
]
