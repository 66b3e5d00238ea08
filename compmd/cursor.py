"""
Курсор по входному тексту.

Хранит буфер и текущую позицию, предоставляет просмотр вперёд,
захват по регулярным выражениям с привязкой к позиции, абсолютное
перемещение и подсчёт строки/колонки. О грамматике ничего не знает.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from typing import List, Optional, Pattern, Tuple, Union

_LINE_BREAK = re.compile(r"\r\n|\r|\n")

PatternLike = Union[str, Pattern[str]]


def _compile(pattern: PatternLike) -> Pattern[str]:
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


class Cursor:
    """
    Позиционный курсор по строке.

    Инвариант: 0 <= index <= len(buffer). Все операции сопоставления
    привязаны к позиции index + offset (аналог re.match с pos).
    """

    def __init__(self, text: str, index: int = 0):
        self._buffer = text
        self._index = 0
        # Смещения начал строк: буфер неизменен, считаем один раз
        self._line_starts: List[int] = [0] + [m.end() for m in _LINE_BREAK.finditer(text)]
        self.seek(index)

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def index(self) -> int:
        """Текущая позиция от начала буфера."""
        return self._index

    @property
    def eof(self) -> bool:
        """Достигнут ли конец буфера."""
        return self._index >= len(self._buffer)

    def peek(self, length: int = 1, offset: int = 0) -> str:
        """
        Возвращает подстроку [index+offset, index+offset+length) без сдвига.

        Никогда не выбрасывает исключений, обрезается по границам буфера.
        """
        start = max(0, self._index + offset)
        end = max(start, self._index + offset + length)
        return self._buffer[start:end]

    def test(self, pattern: PatternLike, offset: int = 0) -> bool:
        """
        Проверяет, совпадает ли шаблон в позиции index + offset.

        Returns:
            False в конце буфера (и за его пределами), иначе результат сопоставления
        """
        pos = self._index + offset
        if pos < 0 or pos >= len(self._buffer):
            return False
        return _compile(pattern).match(self._buffer, pos) is not None

    def capture(self, pattern: PatternLike, offset: int = 0) -> Optional[re.Match]:
        """
        Захватывает совпадение в позиции index + offset.

        При успехе курсор переходит на конец совпадения и возвращается
        объект match (с группами). При неудаче состояние не меняется
        и возвращается None; в конце буфера всегда None.
        """
        pos = self._index + offset
        if pos < 0 or pos >= len(self._buffer):
            return None
        match = _compile(pattern).match(self._buffer, pos)
        if match:
            self._index = match.end()
        return match

    def seek(self, index: int = 0) -> None:
        """Абсолютное перемещение; без аргумента сбрасывает курсор в начало."""
        self._index = min(max(0, index), len(self._buffer))

    def next(self, n: int = 1) -> Optional[str]:
        """Потребляет и возвращает n символов, либо None в конце буфера."""
        if self.eof:
            return None
        result = self._buffer[self._index:self._index + n]
        self._index = min(self._index + n, len(self._buffer))
        return result

    @property
    def line_number(self) -> int:
        """Номер текущей строки (с 1)."""
        return self.position_of(self._index)[0]

    @property
    def column_number(self) -> int:
        """Номер текущей колонки (с 1): длина последней неполной строки плюс один."""
        return self.position_of(self._index)[1]

    def position_of(self, index: int) -> Tuple[int, int]:
        """
        Строка и колонка (с 1) произвольной позиции буфера без сдвига курсора.

        Поиск двоичный по заранее построенным началам строк.
        """
        index = min(max(0, index), len(self._buffer))
        line = bisect_right(self._line_starts, index)
        # Позиция между \r и \n: \r уже завершил строку
        if index > 0 and self._buffer[index - 1] == "\r" and self._buffer.startswith("\n", index):
            return line + 1, 1
        return line, index - self._line_starts[line - 1] + 1

    def line_index(self, line_number: int) -> int:
        """
        Возвращает смещение первого символа строки с указанным номером.

        Raises:
            IndexError: Если номер строки вне диапазона [1, total_lines]
        """
        starts = self._line_starts
        if line_number < 1 or line_number > len(starts):
            raise IndexError(
                f"Line number {line_number} out of range [1, {len(starts)}]"
            )
        return starts[line_number - 1]

    def __repr__(self) -> str:
        return f"Cursor(index={self._index}, line={self.line_number}, column={self.column_number})"


__all__ = ["Cursor", "PatternLike"]
