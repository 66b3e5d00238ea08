"""
Документная модель и парсер шаблонов.

Шаблон - Markdown-текст с тегами компонентов <Name attr=...> и
интерполяциями {expression}.
"""

from .nodes import (
    Node,
    Text,
    Tag,
    Interpolation,
    AttrValue,
    DocumentAST,
    merge_blocks,
    collect_text_content,
    format_ast_tree,
)
from .textrun import MarkdownEngine, Segment, TextRun
from .parser import DocumentParser, parse_document

__all__ = [
    # Узлы
    "Node",
    "Text",
    "Tag",
    "Interpolation",
    "AttrValue",
    "DocumentAST",

    # Утилиты
    "merge_blocks",
    "collect_text_content",
    "format_ast_tree",

    # Разбор
    "MarkdownEngine",
    "Segment",
    "TextRun",
    "DocumentParser",
    "parse_document",
]
