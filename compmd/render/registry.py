"""
Реестр компонентов.

Имена компонентов регистронезависимы: хранятся в нижнем регистре,
как и имена тегов в AST. Один слот отведён под компонент
по умолчанию, который обрабатывает все незарегистрированные теги.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Mapping, Optional

from ..errors import ConfigError
from .protocols import ComponentLike

logger = logging.getLogger(__name__)


class ComponentRegistry:
    """Отображение имя тега -> компонент плюс компонент по умолчанию."""

    def __init__(self, components: Optional[Mapping[str, ComponentLike]] = None,
                 default: Optional[ComponentLike] = None):
        self._components: Dict[str, ComponentLike] = {}
        self._default: Optional[ComponentLike] = None

        for name, component in (components or {}).items():
            self.register(name, component)
        if default is not None:
            self.set_default(default)

    def register(self, name: str, component: ComponentLike) -> None:
        """
        Регистрирует компонент под именем тега.

        Args:
            name: Имя тега (регистр не важен)
            component: Объект с render(props, emit) или функция (props, emit)

        Raises:
            ConfigError: Если компонент нельзя вызвать
        """
        _check_component(name, component)
        key = name.lower()
        if key in self._components:
            logger.warning(f"Component '{name}' overwrites existing registration")
        self._components[key] = component
        logger.debug(f"Registered component: {key}")

    def set_default(self, component: Optional[ComponentLike]) -> None:
        """Устанавливает (или сбрасывает) компонент по умолчанию."""
        if component is not None:
            _check_component("<default>", component)
        self._default = component

    @property
    def default(self) -> Optional[ComponentLike]:
        return self._default

    def with_default(self, component: Optional[ComponentLike]) -> "ComponentRegistry":
        """
        Копия реестра с другим компонентом по умолчанию.

        Регистрации копируются, исходный реестр не меняется.
        """
        clone = ComponentRegistry()
        clone._components = dict(self._components)
        clone.set_default(component)
        return clone

    def lookup(self, name: str) -> Optional[ComponentLike]:
        """Ищет компонент по имени, затем возвращает компонент по умолчанию."""
        return self._components.get(name.lower(), self._default)

    def names(self) -> List[str]:
        return sorted(self._components)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._components

    def __iter__(self) -> Iterator[str]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)


def _check_component(name: str, component: object) -> None:
    if not callable(getattr(component, "render", None)) and not callable(component):
        raise ConfigError(f"Component '{name}' must be callable or define render(props, emit)")


__all__ = ["ComponentRegistry"]
