"""
Адаптеры Markdown-движков.

Движок - функция (markdown_text, render) -> None, которая синхронно
вызывает render с готовым HTML.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import markdown
from markdown_it import MarkdownIt

from .document.textrun import MarkdownEngine

logger = logging.getLogger(__name__)


def markdown_it_engine(preset: str = "commonmark", options: Optional[Dict[str, Any]] = None) -> MarkdownEngine:
    """
    Создаёт движок на основе markdown-it-py.

    Args:
        preset: Имя пресета markdown-it ("commonmark", "default", "zero", "gfm-like")
        options: Переопределения опций пресета (например, {"html": True})

    Returns:
        Функция-движок; завершающий перевод строки в выводе отбрасывается
    """
    md = MarkdownIt(preset, options or None)
    logger.debug(f"Created markdown-it engine: preset={preset}, options={options or {}}")

    def markdown_renderer(text: str, render: Callable[[str], None]) -> None:
        html = md.render(text)
        if html.endswith("\n"):
            html = html[:-1]
        render(html)

    return markdown_renderer


def python_markdown_engine(extensions: Optional[List[Any]] = None,
                           extension_configs: Optional[Dict[str, Dict[str, Any]]] = None) -> MarkdownEngine:
    """
    Создаёт движок на основе Python-Markdown.

    Args:
        extensions: Расширения Python-Markdown (имена или экземпляры Extension)
        extension_configs: Настройки расширений по имени

    Returns:
        Функция-движок; состояние конвертера сбрасывается перед каждым вызовом
    """
    md = markdown.Markdown(extensions=extensions or [], extension_configs=extension_configs or {})
    logger.debug(f"Created Python-Markdown engine: extensions={extensions or []}")

    def markdown_renderer(text: str, render: Callable[[str], None]) -> None:
        render(md.reset().convert(text))

    return markdown_renderer


def identity_engine(text: str, render: Callable[[str], None]) -> None:
    """Движок без преобразования: текст передаётся как есть."""
    render(text)


__all__ = ["markdown_it_engine", "python_markdown_engine", "identity_engine"]
