"""
Рендеринг документа: обход AST, компоненты, передача контекста.
"""

from .protocols import NAME_KEY, CHILDREN_KEY, Component, ComponentLike, Emit, Sink, Writable
from .registry import ComponentRegistry
from .renderer import Renderer, format_value, render

__all__ = [
    "NAME_KEY",
    "CHILDREN_KEY",
    "Component",
    "ComponentLike",
    "Emit",
    "Sink",
    "Writable",
    "ComponentRegistry",
    "Renderer",
    "format_value",
    "render",
]
