"""
Tests for the compmd command line.
"""

import textwrap


def test_render_to_stdout(tmp_path, write_file, cli):
    write_file("page.md", "# Hi {user.name}\n")
    write_file("ctx.yaml", "user:\n  name: Ann\n")

    cp = cli(tmp_path, "render", "page.md", "--context", "ctx.yaml")

    assert cp.returncode == 0, cp.stderr
    assert cp.stdout == "<h1>Hi Ann</h1>\n"


def test_render_from_stdin_to_file(tmp_path, cli):
    cp = cli(tmp_path, "render", "-", "-o", "out.html", stdin="*x*")

    assert cp.returncode == 0, cp.stderr
    assert (tmp_path / "out.html").read_text(encoding="utf-8") == "<p><em>x</em></p>"


def test_render_html_default_and_indented(tmp_path, write_file, cli):
    write_file("page.md", '<aside class="note">\n    **hi**\n</aside>')

    cp = cli(tmp_path, "render", "page.md", "--html-default", "--indented")

    assert cp.returncode == 0, cp.stderr
    assert cp.stdout == '<aside class="note"><p><strong>hi</strong></p></aside>\n'


def test_render_with_config(tmp_path, write_file, cli):
    write_file("helpers.py", textwrap.dedent("""
        def shout(ctx, text):
            return text.upper()


        def card(props, emit):
            emit('<div class="card">')
            emit(props["__children"], {"raw": props["title"]})
            emit("</div>")
    """))
    write_file("compmd.yaml", textwrap.dedent("""
        components:
          Card: helpers:card
        functions:
          shout: helpers:shout
    """))
    write_file("page.md", '<Card title={raw}>{shout(raw)}</Card>')
    write_file("ctx.json", '{"raw": "hello"}')

    cp = cli(tmp_path, "render", "page.md", "--context", "ctx.json")

    assert cp.returncode == 0, cp.stderr
    assert cp.stdout == '<div class="card"><p>HELLO</p></div>\n'


def test_parse_prints_tree(tmp_path, write_file, cli):
    write_file("page.md", "<Box a=1/>")

    cp = cli(tmp_path, "parse", "page.md")

    assert cp.returncode == 0, cp.stderr
    assert cp.stdout == "Tag<Box a=1.0/> @1:1\n"


def test_template_error_exit_code(tmp_path, write_file, cli):
    write_file("page.md", "line\n<outer><inner></outer>")

    cp = cli(tmp_path, "render", "page.md")

    assert cp.returncode == 2
    assert cp.stdout == ""
    assert cp.stderr.strip() == "Unexpected closing tag </outer> at 2:15"


def test_unknown_component_exit_code(tmp_path, write_file, cli):
    write_file("page.md", "<Nope/>")

    cp = cli(tmp_path, "render", "page.md")

    assert cp.returncode == 2
    assert "Component not found for tag <Nope> at 1:1" in cp.stderr


def test_missing_template(tmp_path, cli):
    cp = cli(tmp_path, "render", "missing.md")

    assert cp.returncode == 2
    assert "Template not found" in cp.stderr


def test_bad_config(tmp_path, write_file, cli):
    write_file("custom.yaml", "unknown_key: 1\n")
    write_file("page.md", "x")

    cp = cli(tmp_path, "render", "page.md", "--config", "custom.yaml")

    assert cp.returncode == 2
    assert "Unknown config keys: unknown_key" in cp.stderr


def test_verbose_logging(tmp_path, write_file, cli):
    write_file("page.md", "<Box/>")

    cp = cli(tmp_path, "--verbose", "render", "page.md", "--html-default")

    assert cp.returncode == 0, cp.stderr
    assert "[DEBUG] Dispatching <Box> at 1:1" in cp.stderr


def test_version(tmp_path, cli):
    cp = cli(tmp_path, "--version")

    assert cp.returncode == 0
    assert cp.stdout.startswith("compmd ")
