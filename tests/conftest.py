import os
import subprocess
import sys
from pathlib import Path

import pytest

from compmd.config import ParserOptions
from compmd.document import parse_document
from compmd.engines import identity_engine

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def parse_plain():
    """Парсер с identity-движком: текстовые блоки остаются без изменений."""
    def _parse(text: str, **options):
        return parse_document(text, ParserOptions(markdown_engine=identity_engine, **options))
    return _parse


@pytest.fixture
def write_file(tmp_path: Path):
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path
    return _write


def run_cli(cwd: Path, *args: str, stdin: str = None) -> subprocess.CompletedProcess:
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(ROOT), env.get("PYTHONPATH")]))
    return subprocess.run(
        [sys.executable, "-m", "compmd.cli", *args],
        cwd=cwd, env=env, input=stdin, capture_output=True, text=True, encoding="utf-8"
    )


@pytest.fixture
def cli():
    return run_cli
