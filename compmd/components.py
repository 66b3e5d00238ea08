"""
Встроенные компоненты.
"""

from __future__ import annotations

import html
from typing import Any, Dict, List

from .render.protocols import CHILDREN_KEY, NAME_KEY, Emit
from .render.renderer import format_value


def _format_attrs(props: Dict[str, Any]) -> str:
    parts: List[str] = []
    for name, value in props.items():
        if name in (NAME_KEY, CHILDREN_KEY) or value is None or value is False:
            continue
        if value is True:
            parts.append(name)
        else:
            parts.append(f'{name}="{html.escape(format_value(value), quote=True)}"')
    return "".join(" " + p for p in parts)


def html_component(props: Dict[str, Any], emit: Emit) -> None:
    """
    Компонент по умолчанию, выводящий тег обратно как HTML.

    Значения атрибутов экранируются; атрибут со значением True
    выводится одним именем, False и None опускаются. Тег без детей
    выводится самозакрывающимся: <name/>.
    """
    name = props[NAME_KEY]
    children = props.get(CHILDREN_KEY) or ()
    attrs = _format_attrs(props)

    if not children:
        emit(f"<{name}{attrs}/>")
        return

    emit(f"<{name}{attrs}>")
    emit(children)
    emit(f"</{name}>")


__all__ = ["html_component"]
