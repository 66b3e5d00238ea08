"""
Рендерер документа.

Обходит AST в глубину и пишет вывод в приёмник строго в порядке
документа. Интерполяции вычисляются относительно текущего контекста,
теги передаются компонентам.

Контекст передаётся явным параметром: компонент может заменить его
для поддерева, отрисованного через emit(nodes, new_context), и эта
замена не видна соседним поддеревьям.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Union

from ..document.nodes import Interpolation, Node, Tag, Text
from ..errors import ErrorKind, RenderError
from ..expressions.evaluator import ExpressionEvaluator
from .protocols import CHILDREN_KEY, NAME_KEY, ComponentLike, Sink
from .registry import ComponentRegistry

logger = logging.getLogger(__name__)

# Маркер "контекст не передан": None - допустимое значение контекста
_INHERIT = object()

Writer = Callable[[str], Any]


def format_value(value: Any) -> str:
    """
    Форматирует значение для вывода.

    None -> "", булевы -> "true"/"false", целые float без ".0",
    остальное через str().
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_writer(sink: Sink) -> Writer:
    write = getattr(sink, "write", None)
    if callable(write):
        return write
    if callable(sink):
        return sink
    raise TypeError(f"Sink must be callable or have a write() method, got {type(sink).__name__}")


class Renderer:
    """
    Рендерер AST документа.

    Args:
        components: Отображение имя -> компонент или готовый ComponentRegistry
        default_component: Компонент для тегов без регистрации
        functions: Таблица функций для вызовов в интерполяциях
    """

    def __init__(self,
                 components: Union[ComponentRegistry, Mapping[str, ComponentLike], None] = None,
                 default_component: Optional[ComponentLike] = None,
                 functions: Optional[Mapping[str, Any]] = None):
        if isinstance(components, ComponentRegistry):
            # Чужой реестр не меняем: свой слот по умолчанию у каждого рендерера
            if default_component is not None:
                components = components.with_default(default_component)
            self.registry = components
        else:
            self.registry = ComponentRegistry(components, default_component)
        self.functions = functions or {}

    def write(self, node: Any, context: Any, sink: Sink) -> None:
        """
        Отрисовывает узел, последовательность узлов или None в приёмник.

        Raises:
            RenderError: Неизвестный компонент или некорректный узел
            EvaluationError: Ошибка вычисления интерполяции
        """
        self._write(node, context, _as_writer(sink))

    def render_to_string(self, nodes: Any, context: Any = None) -> str:
        """Отрисовывает узлы и возвращает результат строкой."""
        parts: List[str] = []
        self._write(nodes, context, parts.append)
        return "".join(parts)

    def _write(self, node: Any, context: Any, out: Writer) -> None:
        if node is None:
            return
        if isinstance(node, Text):
            self._write_text(node, context, out)
        elif isinstance(node, Tag):
            self._write_tag(node, context, out)
        elif isinstance(node, (list, tuple)):
            for child in node:
                self._write(child, context, out)
        else:
            raise RenderError.at(
                ErrorKind.INVALID_NODE,
                f"Cannot render value of type {type(node).__name__} as a node",
                None,
            )

    def _write_text(self, node: Text, context: Any, out: Writer) -> None:
        evaluator: Optional[ExpressionEvaluator] = None
        for block in node.blocks:
            if isinstance(block, Interpolation):
                if evaluator is None:
                    evaluator = ExpressionEvaluator(context, self.functions)
                out(format_value(evaluator.evaluate(block.expression)))
            else:
                out(block)

    def _write_tag(self, node: Tag, context: Any, out: Writer) -> None:
        component = self.registry.lookup(node.name)
        if component is None:
            raise RenderError.at(
                ErrorKind.COMPONENT_NOT_FOUND,
                f"Component not found for tag <{node.raw_name}>",
                node.location,
            )

        props = self._props(node, context)

        def emit(value: Any, new_context: Any = _INHERIT) -> None:
            target = context if new_context is _INHERIT else new_context
            if isinstance(value, (Node, list, tuple)):
                self._write(value, target, out)
            else:
                out(format_value(value))

        logger.debug(f"Dispatching <{node.raw_name}> at {node.location}")
        render = getattr(component, "render", None)
        if callable(render):
            render(props, emit)
        else:
            component(props, emit)

    def _props(self, node: Tag, context: Any) -> Dict[str, Any]:
        """Вычисляет атрибуты тега и добавляет зарезервированные ключи."""
        evaluator = ExpressionEvaluator(context, self.functions)
        props: Dict[str, Any] = {
            name: evaluator.evaluate(value.expression) if isinstance(value, Interpolation) else value
            for name, value in node.attrs.items()
        }
        props[NAME_KEY] = node.raw_name
        props[CHILDREN_KEY] = node.children
        return props


def render(nodes: Any, context: Any = None,
           components: Optional[Mapping[str, ComponentLike]] = None,
           default_component: Optional[ComponentLike] = None,
           functions: Optional[Mapping[str, Any]] = None) -> str:
    """
    Удобная функция для рендеринга AST в строку.

    Args:
        nodes: Узел или последовательность узлов
        context: Исходный контекст
        components: Компоненты по именам тегов
        default_component: Компонент по умолчанию
        functions: Таблица функций

    Returns:
        Отрисованный текст
    """
    return Renderer(components, default_component, functions).render_to_string(nodes, context)


__all__ = ["Renderer", "format_value", "render"]
