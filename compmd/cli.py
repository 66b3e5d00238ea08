from __future__ import annotations

import argparse
import logging
import os
import sys
from importlib import metadata
from pathlib import Path
from typing import Optional

from .components import html_component
from .config import DEFAULT_CFG_FILE, RenderConfig, load_config, load_context
from .document import format_ast_tree, parse_document
from .errors import CompmdUserError
from .render import Renderer


def _installed_version() -> str:
    try:
        return metadata.version("compmd")
    except metadata.PackageNotFoundError:
        # запуск из исходников без установки
        return "dev"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="compmd",
        description="Markdown with components: render templates to HTML",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {_installed_version()}")
    p.add_argument("--verbose", action="store_true", help="отладочный вывод в stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Общие аргументы для render/parse
    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("template", help="путь к шаблону или - для чтения из stdin")
        sp.add_argument(
            "--config",
            metavar="FILE",
            help=f"YAML-конфиг (по умолчанию ./{DEFAULT_CFG_FILE}, если существует)",
        )
        sp.add_argument(
            "--indented",
            action="store_true",
            help="снимать общий отступ с текстовых блоков",
        )

    sp_render = sub.add_parser("render", help="Отрисовать шаблон в HTML")
    add_common(sp_render)
    sp_render.add_argument("--context", metavar="FILE", help="YAML/JSON с данными контекста")
    sp_render.add_argument(
        "--html-default",
        action="store_true",
        help="выводить незарегистрированные теги как HTML",
    )
    sp_render.add_argument("-o", "--output", metavar="OUT", help="файл результата (по умолчанию stdout)")

    sp_parse = sub.add_parser("parse", help="Вывести AST шаблона в виде дерева")
    add_common(sp_parse)

    return p


def _setup_logging(verbose: bool) -> None:
    if not (verbose or os.environ.get("COMPMD_DEBUG")):
        return
    logger = logging.getLogger("compmd")
    logger.setLevel(logging.DEBUG)
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(h)


def _read_template(arg: str) -> str:
    if arg == "-":
        return sys.stdin.read()
    path = Path(arg)
    if not path.is_file():
        raise CompmdUserError(f"Template not found: {path}")
    return path.read_text(encoding="utf-8")


def _load_cfg(ns: argparse.Namespace) -> RenderConfig:
    if ns.config:
        path = Path(ns.config)
        if not path.is_file():
            raise CompmdUserError(f"Config not found: {path}")
    else:
        path = Path.cwd() / DEFAULT_CFG_FILE
    cfg = load_config(path)
    if ns.indented:
        cfg.parser.indented_markdown = True
    return cfg


def _render(ns: argparse.Namespace) -> int:
    cfg = _load_cfg(ns)
    ast = parse_document(_read_template(ns.template), cfg.parser)
    context = load_context(Path(ns.context)) if ns.context else None

    default_component = html_component if ns.html_default else cfg.default_component
    renderer = Renderer(cfg.components, default_component, cfg.functions)

    if ns.output:
        with Path(ns.output).open("w", encoding="utf-8") as f:
            renderer.write(ast, context, f)
    else:
        renderer.write(ast, context, sys.stdout)
        sys.stdout.write("\n")
    return 0


def _parse(ns: argparse.Namespace) -> int:
    cfg = _load_cfg(ns)
    ast = parse_document(_read_template(ns.template), cfg.parser)
    sys.stdout.write(format_ast_tree(ast) + "\n")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(ns.verbose)

    try:
        if ns.cmd == "render":
            return _render(ns)
        if ns.cmd == "parse":
            return _parse(ns)
    except CompmdUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
