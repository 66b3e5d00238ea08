"""
Текстовые прогоны документа.

Текстовый прогон - последовательность литеральных фрагментов
и интерполяций между тегами. Здесь выполняется нормализация отступов
и делегирование Markdown-движку через точки интерполяции.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from ..cursor import Cursor
from ..errors import ErrorKind, StructuralParseError
from .nodes import Interpolation, merge_blocks

logger = logging.getLogger(__name__)

# Markdown-движок: (markdown_text, render) -> None, render вызывается синхронно
MarkdownEngine = Callable[[str, Callable[[str], None]], None]


@dataclass(frozen=True)
class Segment:
    """
    Фрагмент текстового прогона.

    Литеральный фрагмент (text) посимвольно соответствует исходнику
    начиная с позиции start; экранированный символ ({{ -> {) занимает
    один символ текста и два символа исходника. Для интерполяции
    text равен None.
    """
    start: int
    text: Optional[str] = None
    interpolation: Optional[Interpolation] = None

    @property
    def is_literal(self) -> bool:
        return self.interpolation is None


class TextRun:
    """Собранный парсером текстовый прогон."""

    def __init__(self, segments: List[Segment], start: int):
        self.segments = segments
        self.start = start

    def is_blank(self) -> bool:
        """Истинно, если прогон состоит только из пробельных символов."""
        return all(seg.is_literal and not seg.text.strip() for seg in self.segments)

    def dedent(self, cursor: Cursor, at_line_start: bool) -> "TextRun":
        """
        Нормализует отступы прогона.

        Отступ первой непустой строки, начинающейся с начала строки,
        становится базовым и снимается со всех последующих строк.
        Строка с меньшим отступом - ошибка BadIndentation; курсор
        перед ошибкой ставится на первый непробельный символ строки.

        Args:
            cursor: Курсор документа (для позиционирования ошибки)
            at_line_start: Начинается ли прогон с начала строки
        """
        base: Optional[int] = None
        pending = ""
        result: List[Segment] = []

        def check(indent: int, offset: int) -> int:
            nonlocal base
            if base is None:
                base = indent
            elif indent < base:
                cursor.seek(offset)
                raise StructuralParseError.at(
                    ErrorKind.BAD_INDENTATION,
                    f"Expected indentation of at least {base} characters, found {indent}",
                    cursor,
                )
            return base

        for seg in self.segments:
            if not seg.is_literal:
                if at_line_start:
                    width = check(len(pending), seg.start)
                    if pending[width:]:
                        result.append(Segment(seg.start, pending[width:]))
                    pending = ""
                    at_line_start = False
                result.append(seg)
                continue

            out = []
            for i, ch in enumerate(seg.text):
                if at_line_start:
                    if ch in " \t":
                        pending += ch
                        continue
                    if ch in "\r\n":
                        # Пустая строка: пробелы отбрасываются
                        out.append(ch)
                        pending = ""
                        continue
                    width = check(len(pending), seg.start + i)
                    out.append(pending[width:])
                    pending = ""
                    at_line_start = False
                out.append(ch)
                if ch in "\r\n":
                    at_line_start = True
            result.append(Segment(seg.start, "".join(out)))

        return TextRun(result, self.start)

    def markdown_source(self, placeholder: str) -> str:
        """Склеивает литералы, заменяя каждую интерполяцию точкой интерполяции."""
        return "".join(seg.text if seg.is_literal else placeholder for seg in self.segments)

    def render(self, engine: MarkdownEngine, placeholder: str, cursor: Cursor) -> List[Union[str, Interpolation]]:
        """
        Отдаёт прогон Markdown-движку и вставляет интерполяции обратно.

        Движок вызывается один раз на весь прогон, поэтому блочные
        конструкции (списки, заголовки) корректно переживают границы
        интерполяций.

        Raises:
            StructuralParseError: Если вывод движка не делится на
                ожидаемое число частей по точке интерполяции
        """
        interpolations = [seg.interpolation for seg in self.segments if not seg.is_literal]
        source = self.markdown_source(placeholder)

        rendered: List[str] = []
        engine(source, rendered.append)
        html = "".join(rendered)

        parts = html.split(placeholder)
        if len(parts) != len(interpolations) + 1:
            cursor.seek(self.start)
            raise StructuralParseError.at(
                ErrorKind.PLACEHOLDER_COLLISION,
                f"Markdown output contains {len(parts) - 1} interpolation points, "
                f"expected {len(interpolations)}",
                cursor,
            )

        logger.debug(f"Rendered text run at {self.start}: {len(source)} -> {len(html)} chars, "
                     f"{len(interpolations)} interpolations")

        blocks: List[Union[str, Interpolation]] = [parts[0]]
        for interpolation, part in zip(interpolations, parts[1:]):
            blocks.append(interpolation)
            blocks.append(part)
        return list(merge_blocks(blocks))


__all__ = ["MarkdownEngine", "Segment", "TextRun"]
