"""
Парсер документа с рекурсивным спуском.

Грамматика:
content(close) → (tag | text)* closingTag(close)?
tag            → "<" TAGNAME attrs ("/>" | ">" content(TAGNAME) "</" TAGNAME ">")
text           → (interpolation? literal)+
attrs          → (NAME ("=" (STRING | NUMBER | "{" expr "}" | "true" | "false"))?)*

Литералы захватываются до неэкранированных '<', '{' или '}';
последовательности {{ }} << >> означают одиночный символ.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from ..config import ParserOptions
from ..cursor import Cursor
from ..errors import ErrorKind, StructuralParseError
from ..expressions.model import SourceLocation
from ..expressions.parser import ExpressionParser
from .nodes import AttrValue, DocumentAST, Interpolation, Node, Tag, Text
from .textrun import Segment, TextRun

logger = logging.getLogger(__name__)

_TAG_OPEN = re.compile(r"<(/?)(\w[\w-]*)")
_TAG_START = re.compile(r"</?\w")
_END_BRACKET = re.compile(r"\s*(/?)>")
_ESCAPE = re.compile(r"\{\{|\}\}|<<|>>")
_LITERAL = re.compile(r"(?:[^<{}>]|>(?!>))+")

_ATTR_NAME = re.compile(r"\s*([^\s=<>\"'/{}]+)")
_ATTR_EQUALS = re.compile(r"\s*=\s*")
_ATTR_STRING = re.compile(r"\"([^\"]*)\"|'([^']*)'")
_ATTR_NUMBER = re.compile(r"[-+]?\d*\.?\d+(?=[\s/>]|$)")
_ATTR_BOOL = re.compile(r"(true|false)(?=[\s/>]|$)")


class DocumentParser:
    """
    Парсер документа: теги компонентов, текст, интерполяции.

    Для каждой интерполяции и каждого атрибута-выражения использует
    ExpressionParser на том же курсоре. Каждый вызов parse() создаёт
    собственный курсор.
    """

    def __init__(self, options: ParserOptions):
        self.options = options
        self.cursor = Cursor("")

    def parse(self, text: str) -> DocumentAST:
        """
        Парсит текст шаблона в AST.

        Args:
            text: Исходный текст с Markdown, тегами и интерполяциями

        Returns:
            Кортеж узлов верхнего уровня

        Raises:
            TemplateError: При синтаксической ошибке
        """
        self.cursor = Cursor(text)
        self._check_placeholder(text)
        logger.debug(f"Parsing document of length {len(text)}")

        nodes = self._content()

        logger.debug(f"Parsed {len(nodes)} top-level nodes")
        return nodes

    def _check_placeholder(self, text: str) -> None:
        """Точка интерполяции не должна встречаться во входном тексте."""
        found = text.find(self.options.interpolation_point)
        if found >= 0:
            self.cursor.seek(found)
            raise self._error(
                ErrorKind.PLACEHOLDER_COLLISION,
                "Input contains the interpolation point token; configure a different interpolation_point",
            )

    def _content(self, close_tag: Optional[str] = None,
                 depth: int = 0, opened_at: Optional[SourceLocation] = None) -> DocumentAST:
        """Парсит последовательность узлов до закрывающего тега close_tag."""
        close_re = re.compile(rf"</{re.escape(close_tag)}\s*>", re.IGNORECASE) if close_tag else None
        elements: List[Node] = []

        while not self.cursor.eof:
            if close_re is not None and self.cursor.capture(close_re):
                return tuple(elements)

            start = self.cursor.index
            node = self._tag(depth)
            if node is None:
                node = self._text()

            if node is not None:
                elements.append(node)
            elif self.cursor.index == start:
                raise self._dead_end()

        if close_tag:
            raise self._error(
                ErrorKind.NO_CLOSING_TAG,
                f"Expecting closing tag </{close_tag}> for tag opened at {opened_at}",
            )

        return tuple(elements)

    def _tag(self, depth: int) -> Optional[Tag]:
        """Парсит тег; возвращает None, если в позиции курсора нет тега."""
        start = self.cursor.index
        match = self.cursor.capture(_TAG_OPEN)
        if not match:
            return None
        location = SourceLocation(*self.cursor.position_of(start))

        raw_name = match.group(2)
        if match.group(1):
            self.cursor.seek(start)
            raise self._error(ErrorKind.UNEXPECTED_CLOSING_TAG, f"Unexpected closing tag </{raw_name}>")

        if depth >= self.options.max_depth:
            self.cursor.seek(start)
            raise self._error(
                ErrorKind.MAX_DEPTH_EXCEEDED,
                f"Tag <{raw_name}> exceeds maximum nesting depth {self.options.max_depth}",
            )

        attrs = self._attributes(raw_name)

        end_bracket = self.cursor.capture(_END_BRACKET)
        if not end_bracket:
            raise self._error(
                ErrorKind.MISSING_END_BRACKET,
                f"Missing end bracket while parsing tag <{raw_name}",
            )

        self_closing = end_bracket.group(1) == "/"
        children = () if self_closing else self._content(raw_name, depth + 1, location)

        return Tag(
            name=raw_name.lower(),
            raw_name=raw_name,
            attrs=attrs,
            children=children,
            self_closing=self_closing,
            location=location,
        )

    def _attributes(self, tag_name: str) -> Dict[str, AttrValue]:
        """Парсит атрибуты тега до закрывающей скобки."""
        attrs: Dict[str, AttrValue] = {}

        while True:
            name_match = self.cursor.capture(_ATTR_NAME)
            if not name_match:
                return attrs
            name = name_match.group(1)

            if not self.cursor.capture(_ATTR_EQUALS):
                attrs[name] = True
                continue

            attrs[name] = self._attribute_value(tag_name, name)

    def _attribute_value(self, tag_name: str, name: str) -> AttrValue:
        string = self.cursor.capture(_ATTR_STRING)
        if string:
            return string.group(1) if string.group(1) is not None else string.group(2)

        number = self.cursor.capture(_ATTR_NUMBER)
        if number:
            return float(number.group(0))

        if self.cursor.peek() == "{":
            return self._interpolation()

        boolean = self.cursor.capture(_ATTR_BOOL)
        if boolean:
            return boolean.group(1) == "true"

        raise self._error(
            ErrorKind.INVALID_ATTRIBUTE,
            f"Invalid value for attribute '{name}' of tag <{tag_name}>",
        )

    def _interpolation(self) -> Interpolation:
        """Парсит {expression}; курсор стоит на '{'."""
        location = SourceLocation.of(self.cursor)
        self.cursor.next()
        expression = ExpressionParser(self.cursor).parse_interpolation()
        return Interpolation(expression, location)

    def _text(self) -> Optional[Text]:
        """
        Парсит текстовый прогон.

        Returns:
            Узел Text, либо None если прогон пуст или состоит из пробелов
        """
        run_start = self.cursor.index
        segments: List[Segment] = []

        while not self.cursor.eof:
            escape = self.cursor.capture(_ESCAPE)
            if escape:
                segments.append(Segment(escape.start(), escape.group(0)[0]))
                continue

            literal = self.cursor.capture(_LITERAL)
            if literal:
                segments.append(Segment(literal.start(), literal.group(0)))
                continue

            if self.cursor.peek() == "{":
                start = self.cursor.index
                segments.append(Segment(start, interpolation=self._interpolation()))
                continue

            # '<' или '}': конец прогона
            break

        run = TextRun(segments, run_start)
        if not segments or run.is_blank():
            return None

        if self.options.indented_markdown:
            at_line_start = run_start == 0 or self.cursor.buffer[run_start - 1] in "\r\n"
            run = run.dedent(self.cursor, at_line_start)

        end = self.cursor.index
        blocks = run.render(self.options.markdown_engine, self.options.interpolation_point, self.cursor)
        self.cursor.seek(end)
        return Text(tuple(blocks))

    def _dead_end(self) -> StructuralParseError:
        """Ни тег, ни текст не могут начаться в текущей позиции."""
        char = self.cursor.peek()
        if char == "<" and not self.cursor.test(_TAG_START):
            return self._error(ErrorKind.UNEXPECTED_CHARACTER, "Unexpected '<' (use '<<' for a literal '<')")
        if char == "}":
            return self._error(ErrorKind.UNEXPECTED_CHARACTER, "Unmatched '}' (use '}}' for a literal '}')")
        return self._error(ErrorKind.UNEXPECTED_CHARACTER, f"Unexpected character '{char}'")

    def _error(self, kind: ErrorKind, message: str) -> StructuralParseError:
        return StructuralParseError.at(kind, message, self.cursor)


def parse_document(text: str, options: ParserOptions) -> DocumentAST:
    """
    Удобная функция для парсинга документа.

    Args:
        text: Исходный текст шаблона
        options: Настройки парсера (Markdown-движок и т.д.)

    Returns:
        AST документа
    """
    return DocumentParser(options).parse(text)


__all__ = ["DocumentParser", "parse_document"]
