"""
AST-узлы документа.

Документ - упорядоченная последовательность узлов двух видов:
теги компонентов (Tag) и текстовые блоки (Text), в которых
Markdown-разметка уже отрисована, а интерполяции ещё не вычислены.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple, Union

from ..expressions.model import Expression, SourceLocation


@dataclass(frozen=True)
class Interpolation:
    """
    Интерполяция {expression} в тексте или в значении атрибута.

    Вычисляется при рендеринге относительно текущего контекста.
    """
    expression: Expression
    location: SourceLocation

    def __str__(self) -> str:
        return f"{{{self.expression}}}"


# Значение атрибута: строка, число, булево значение или интерполяция
AttrValue = Union[str, float, bool, Interpolation]


@dataclass(frozen=True)
class Node:
    """Базовый класс для всех узлов документа."""
    pass


@dataclass(frozen=True)
class Text(Node):
    """
    Текстовый блок.

    blocks - чередование строк (готовый вывод Markdown-движка)
    и интерполяций. Соседние строки всегда слиты в одну.
    """
    blocks: Tuple[Union[str, Interpolation], ...]

    @property
    def interpolations(self) -> Tuple[Interpolation, ...]:
        return tuple(b for b in self.blocks if isinstance(b, Interpolation))


@dataclass(frozen=True)
class Tag(Node):
    """
    Тег компонента <Name attr=...>children</Name> или <Name/>.

    name - имя в нижнем регистре (для поиска компонента),
    raw_name - имя в исходном регистре (для диагностики и компонентов).
    """
    name: str
    raw_name: str
    attrs: Dict[str, AttrValue] = field(default_factory=dict)
    children: Tuple[Node, ...] = ()
    self_closing: bool = False
    location: SourceLocation = SourceLocation(1, 1)


# Тип для коллекции узлов документа
DocumentAST = Tuple[Node, ...]


def merge_blocks(blocks: Sequence[Union[str, Interpolation]]) -> Tuple[Union[str, Interpolation], ...]:
    """Сливает соседние строковые блоки и отбрасывает пустые строки."""
    merged: list = []
    for block in blocks:
        if isinstance(block, str):
            if not block:
                continue
            if merged and isinstance(merged[-1], str):
                merged[-1] += block
                continue
        merged.append(block)
    return tuple(merged)


def collect_text_content(ast: Sequence[Node]) -> str:
    """
    Собирает литеральный текст из AST (для тестирования и отладки).

    Интерполяции пропускаются.
    """
    parts = []

    def collect_from_node(node: Node) -> None:
        if isinstance(node, Text):
            parts.extend(b for b in node.blocks if isinstance(b, str))
        elif isinstance(node, Tag):
            for child in node.children:
                collect_from_node(child)

    for node in ast:
        collect_from_node(node)

    return "".join(parts)


def format_ast_tree(ast: Sequence[Node], indent: int = 0) -> str:
    """Форматирует AST как дерево для отладки."""
    lines = []
    prefix = "  " * indent

    for node in ast:
        if isinstance(node, Text):
            previews = []
            for block in node.blocks:
                if isinstance(block, Interpolation):
                    previews.append(str(block))
                else:
                    previews.append(repr(block[:40] + "..." if len(block) > 40 else block))
            lines.append(f"{prefix}Text({', '.join(previews)})")
        elif isinstance(node, Tag):
            attrs = " ".join(f"{k}={v!s}" if not isinstance(v, str) else f'{k}="{v}"'
                             for k, v in node.attrs.items())
            suffix = "/" if node.self_closing else ""
            lines.append(f"{prefix}Tag<{node.raw_name}{' ' + attrs if attrs else ''}{suffix}> @{node.location}")
            if node.children:
                lines.append(format_ast_tree(node.children, indent + 1))
        else:
            lines.append(f"{prefix}{type(node).__name__}")

    return "\n".join(lines)


__all__ = [
    "Node",
    "Text",
    "Tag",
    "Interpolation",
    "AttrValue",
    "DocumentAST",
    "merge_blocks",
    "collect_text_content",
    "format_ast_tree",
]
