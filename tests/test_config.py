"""
Tests for parser options and YAML configuration loading.
"""

import textwrap

import pytest

from compmd.components import html_component
from compmd.config import ParserOptions, build_config, load_config, load_context, resolve_reference
from compmd.engines import identity_engine
from compmd.errors import ConfigError


class TestParserOptions:

    def test_defaults(self):
        options = ParserOptions(markdown_engine=identity_engine)

        assert options.interpolation_point.startswith("cmdinterp")
        assert options.interpolation_point.isalnum()
        assert options.indented_markdown is False
        assert options.max_depth == 200

    def test_generated_points_differ(self):
        a = ParserOptions(markdown_engine=identity_engine)
        b = ParserOptions(markdown_engine=identity_engine)

        assert a.interpolation_point != b.interpolation_point

    def test_engine_is_required_callable(self):
        with pytest.raises(ConfigError, match="markdown_engine must be a callable"):
            ParserOptions(markdown_engine="markdown")

    def test_invalid_interpolation_point(self):
        with pytest.raises(ConfigError, match="interpolation_point"):
            ParserOptions(markdown_engine=identity_engine, interpolation_point="  ")

    def test_invalid_max_depth(self):
        with pytest.raises(ConfigError, match="max_depth"):
            ParserOptions(markdown_engine=identity_engine, max_depth=0)


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        cfg = load_config(tmp_path / "compmd.yaml")

        assert cfg.components == {}
        assert cfg.functions == {}
        assert cfg.default_component is None
        assert cfg.parser.indented_markdown is False

    def test_full_config(self, write_file):
        path = write_file("compmd.yaml", textwrap.dedent("""
            indented_markdown: true
            interpolation_point: HOLE
            max_depth: 10
            markdown:
              preset: commonmark
              options:
                html: false
            components:
              Box: compmd.components:html_component
            default_component: html
            functions:
              quote: html:escape
        """))

        cfg = load_config(path)

        assert cfg.parser.indented_markdown is True
        assert cfg.parser.interpolation_point == "HOLE"
        assert cfg.parser.max_depth == 10
        assert cfg.components == {"Box": html_component}
        assert cfg.default_component is html_component

        import html
        assert cfg.functions == {"quote": html.escape}

        out = []
        cfg.parser.markdown_engine("<b>x</b>", out.append)
        assert out == ["<p>&lt;b&gt;x&lt;/b&gt;</p>"]

    def test_unknown_keys(self):
        with pytest.raises(ConfigError, match="Unknown config keys: colour"):
            build_config({"colour": "red"})

    def test_python_markdown_engine(self):
        cfg = build_config({"markdown": {"engine": "python-markdown", "extensions": ["tables"]}})

        out = []
        cfg.parser.markdown_engine("*x*", out.append)
        assert out == ["<p><em>x</em></p>"]

    def test_unknown_markdown_engine(self):
        with pytest.raises(ConfigError, match="Unknown markdown engine 'showdown'"):
            build_config({"markdown": {"engine": "showdown"}})

    def test_unknown_markdown_keys(self):
        with pytest.raises(ConfigError, match="Unknown markdown keys: flavour"):
            build_config({"markdown": {"flavour": "gfm"}})

    def test_invalid_yaml(self, write_file):
        path = write_file("compmd.yaml", "components: [unclosed\n")

        with pytest.raises(ConfigError, match="Failed to parse"):
            load_config(path)

    def test_top_level_must_be_mapping(self, write_file):
        path = write_file("compmd.yaml", "- a\n- b\n")

        with pytest.raises(ConfigError, match="must be a mapping"):
            load_config(path)


class TestReferences:

    def test_resolve_nested_attribute(self):
        assert resolve_reference("compmd.engines:identity_engine") is identity_engine
        assert resolve_reference("os:path.join") is __import__("os").path.join

    def test_malformed_reference(self):
        with pytest.raises(ConfigError, match="Expected 'module:attr'"):
            resolve_reference("compmd.engines.identity_engine")

    def test_missing_module(self):
        with pytest.raises(ConfigError, match="Cannot import module"):
            resolve_reference("no_such_module_xyz:thing")

    def test_missing_attribute(self):
        with pytest.raises(ConfigError, match="has no attribute"):
            resolve_reference("compmd.engines:nothing_here")


class TestLoadContext:

    def test_yaml_and_json(self, write_file):
        assert load_context(write_file("ctx.yaml", "user:\n  name: Ann\n")) == {"user": {"name": "Ann"}}
        assert load_context(write_file("ctx.json", '{"items": [1, 2]}')) == {"items": [1, 2]}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Context file not found"):
            load_context(tmp_path / "nope.yaml")
