from __future__ import annotations

import importlib
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError

DEFAULT_CFG_FILE = "compmd.yaml"
DEFAULT_MAX_DEPTH = 200

# --------------------------------------------------------------------------- #
# ДЕФОЛТЫ КОНФИГА РЕНДЕРИНГА
# --------------------------------------------------------------------------- #
_DEFAULT_CFG: Dict[str, Any] = {
    "indented_markdown": False,
    "interpolation_point": None,
    "max_depth": DEFAULT_MAX_DEPTH,
    "markdown": {"preset": "commonmark", "options": {}},
    "components": {},
    "default_component": None,
    "functions": {},
}

_MARKDOWN_KEYS = {"engine", "preset", "options", "extensions", "extension_configs"}

# --------------------------------------------------------------------------- #
# YAML loader
# --------------------------------------------------------------------------- #
_yaml = YAML(typ="safe")


def _generate_interpolation_point() -> str:
    """Буквенно-цифровой маркер: Markdown-движки не меняют такие слова."""
    return f"cmdinterp{uuid.uuid4().hex}"


# --------------------------------------------------------------------------- #
# ОПЦИИ ПАРСЕРА
# --------------------------------------------------------------------------- #
@dataclass
class ParserOptions:
    """
    Настройки парсера документа.

    markdown_engine    - (text, render) -> None, обязателен;
    interpolation_point - маркер, заменяющий интерполяции при передаче
                          текста Markdown-движку (по умолчанию генерируется);
    indented_markdown  - снимать общий отступ с текстовых блоков;
    max_depth          - максимальная вложенность тегов.
    """
    markdown_engine: Callable[[str, Callable[[str], None]], None]
    interpolation_point: Optional[str] = None
    indented_markdown: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if not callable(self.markdown_engine):
            raise ConfigError("markdown_engine must be a callable (text, render) -> None")
        if self.interpolation_point is None:
            self.interpolation_point = _generate_interpolation_point()
        elif not isinstance(self.interpolation_point, str) or not self.interpolation_point.strip():
            raise ConfigError("interpolation_point must be a non-empty string")
        if not isinstance(self.max_depth, int) or self.max_depth < 1:
            raise ConfigError(f"max_depth must be a positive integer, got {self.max_depth!r}")


# --------------------------------------------------------------------------- #
# КОНФИГ РЕНДЕРИНГА (YAML)
# --------------------------------------------------------------------------- #
@dataclass
class RenderConfig:
    """Полная конфигурация: опции парсера плюс компоненты и функции."""
    parser: ParserOptions
    components: Dict[str, Any] = field(default_factory=dict)
    default_component: Optional[Any] = None
    functions: Dict[str, Any] = field(default_factory=dict)


def resolve_reference(ref: str) -> Any:
    """
    Импортирует объект по ссылке вида 'package.module:attr'.

    Raises:
        ConfigError: Если ссылка некорректна или объект не найден
    """
    if not isinstance(ref, str) or ":" not in ref:
        raise ConfigError(f"Invalid reference {ref!r}. Expected 'module:attr'")
    module_name, _, attr_path = ref.partition(":")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import module '{module_name}': {e}") from e
    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            raise ConfigError(f"Module '{module_name}' has no attribute '{attr_path}'") from None
    return obj


def _resolve_mapping(raw: Any, key: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ConfigError(f"'{key}' must be a mapping of name -> 'module:attr'")
    return {str(name): resolve_reference(ref) for name, ref in raw.items()}


def _load_yaml(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as f:
            return _yaml.load(f)
    except YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e


def _build_engine(raw: Any) -> Callable[[str, Callable[[str], None]], None]:
    """
    Создаёт Markdown-движок по секции 'markdown'.

    engine: markdown-it (preset, options) или python-markdown
    (extensions, extension_configs).
    """
    if not isinstance(raw, dict):
        raise ConfigError("'markdown' must be a mapping")
    unknown = set(raw) - _MARKDOWN_KEYS
    if unknown:
        raise ConfigError(f"Unknown markdown keys: {', '.join(sorted(unknown))}")

    from .engines import markdown_it_engine, python_markdown_engine

    name = raw.get("engine", "markdown-it")
    if name == "markdown-it":
        return markdown_it_engine(raw.get("preset", "commonmark"), raw.get("options") or {})
    if name == "python-markdown":
        try:
            return python_markdown_engine(raw.get("extensions") or [], raw.get("extension_configs") or {})
        except (ImportError, AttributeError) as e:
            raise ConfigError(f"Cannot load Python-Markdown extensions: {e}") from e
    raise ConfigError(f"Unknown markdown engine {name!r}. Expected 'markdown-it' or 'python-markdown'")


def build_config(raw: Dict[str, Any]) -> RenderConfig:
    """
    Строит RenderConfig из словаря (например, загруженного из YAML).

    Неизвестные ключи считаются ошибкой.
    """
    unknown = set(raw) - set(_DEFAULT_CFG)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    cfg = _DEFAULT_CFG.copy()
    cfg.update(raw)                      # пользовательские ключи перекрывают

    parser = ParserOptions(
        markdown_engine=_build_engine(cfg["markdown"] or {}),
        interpolation_point=cfg["interpolation_point"],
        indented_markdown=bool(cfg["indented_markdown"]),
        max_depth=cfg["max_depth"],
    )

    default_component = cfg["default_component"]
    if default_component == "html":
        from .components import html_component
        default_component = html_component
    elif default_component is not None:
        default_component = resolve_reference(default_component)

    return RenderConfig(
        parser=parser,
        components=_resolve_mapping(cfg["components"] or {}, "components"),
        default_component=default_component,
        functions=_resolve_mapping(cfg["functions"] or {}, "functions"),
    )


# --------------------------------------------------------------------------- #
# PUBLIC API
# --------------------------------------------------------------------------- #
def load_config(path: Path) -> RenderConfig:
    """
    Загрузить compmd.yaml.

    • Если файла нет - вернуть конфиг по умолчанию.
    • Ссылки на компоненты и функции импортируются сразу.
    """
    if not path.exists():
        return build_config({})

    raw = _load_yaml(path) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config {path} must be a mapping")
    return build_config(raw)


def load_context(path: Path) -> Any:
    """Загрузить данные контекста из YAML (JSON - подмножество YAML)."""
    if not path.exists():
        raise ConfigError(f"Context file not found: {path}")
    return _load_yaml(path)


__all__ = [
    "DEFAULT_CFG_FILE",
    "ParserOptions",
    "RenderConfig",
    "build_config",
    "load_config",
    "load_context",
    "resolve_reference",
]
