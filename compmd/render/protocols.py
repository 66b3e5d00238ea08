"""
Протоколы рендеринга.

Определяют контракт компонента и функции вывода, которую рендерер
передаёт компоненту.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Protocol, Union, runtime_checkable

# Зарезервированные ключи свойств компонента
NAME_KEY = "__name"
CHILDREN_KEY = "__children"


@runtime_checkable
class Writable(Protocol):
    """Файлоподобный приёмник вывода."""

    def write(self, text: str) -> Any:
        ...


# Приёмник вывода: вызываемый объект или объект с методом write()
Sink = Union[Callable[[str], Any], Writable]


class Emit(Protocol):
    """
    Функция вывода, передаваемая компоненту.

    emit(value) - записать значение или отрисовать узлы в текущем контексте;
    emit(nodes, new_context) - отрисовать узлы с заменой контекста только
    для этого поддерева.
    """

    def __call__(self, value: Any, new_context: Any = ...) -> None:
        ...


@runtime_checkable
class Component(Protocol):
    """
    Компонент: превращает свойства тега и его детей в вывод.

    props содержит вычисленные атрибуты, а также NAME_KEY (имя тега
    в исходном регистре) и CHILDREN_KEY (невычисленные дочерние узлы).
    """

    def render(self, props: Dict[str, Any], emit: Emit) -> None:
        ...


# Простые функции (props, emit) -> None также допустимы
ComponentLike = Union[Component, Callable[[Dict[str, Any], Emit], None]]


__all__ = [
    "NAME_KEY",
    "CHILDREN_KEY",
    "Sink",
    "Writable",
    "Emit",
    "Component",
    "ComponentLike",
]
