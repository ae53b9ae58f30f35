"""Tests for the Jinja2 template renderer."""

import pytest

from envtemplator.config import GeneratorConfig, build_config
from envtemplator.errors import InclusionCycleError, RenderError, TemplateFunctionError
from envtemplator.templates import TemplateRenderer, render_template

ENVIRON = {"FOO": "bar", "EMPTY": "", "PORTS": "80,443"}


@pytest.fixture
def renderer():
    return TemplateRenderer(GeneratorConfig(), environ=ENVIRON)


class TestEnvironmentAccess:
    """Test the Env snapshot as seen by templates."""

    def test_dotted_access(self, renderer):
        assert renderer.render_string("value={{ Env.FOO }}") == "value=bar"

    def test_item_access(self, renderer):
        assert renderer.render_string("{{ Env['FOO'] }}") == "bar"

    def test_missing_variable_renders_empty(self, renderer):
        assert renderer.render_string("[{{ Env.NOPE }}]") == "[]"

    def test_strict_undefined(self):
        strict = TemplateRenderer(GeneratorConfig(strict_undefined=True), environ=ENVIRON)
        with pytest.raises(RenderError):
            strict.render_string("{{ Env.NOPE }}")

    def test_envall(self, renderer):
        assert renderer.render_string("{{ envall()['FOO'] }}") == "bar"
        assert renderer.render_string("{{ envall() | length }}") == str(len(ENVIRON))

    def test_snapshot_not_shared_with_caller(self):
        environ = {"FOO": "bar"}
        renderer = TemplateRenderer(environ=environ)
        environ["FOO"] = "changed"
        assert renderer.render_string("{{ Env.FOO }}") == "bar"

    def test_template_cannot_change_snapshot(self, renderer):
        renderer.render_string("{% set _ = Env.update({'FOO': 'hacked'}) %}")
        assert renderer.render_string("{{ Env.FOO }}") == "bar"

    def test_trailing_newline_kept(self, renderer):
        assert renderer.render_string("{{ Env.FOO }}\n") == "bar\n"


class TestFunctionsInTemplates:
    """Test the function library wired into Jinja2."""

    def test_function_call_syntax(self):
        items = "[{'n': 'a', 'r': 'x'}, {'n': 'b', 'r': 'y'}, {'n': 'c', 'r': 'x'}]"
        source = (
            "{% set items = " + items + " %}"
            "{{ where(items, 'r', 'x') | map(attribute='n') | join(',') }}"
        )
        assert render_template(source, environ={}) == "a,c"

    def test_filter_syntax(self):
        source = (
            "{% set items = [{'z': 'a'}, {'z': 'b'}, {'z': 'a'}] %}"
            "{{ items | groupByKeys('z') | join(',') }}"
        )
        assert render_template(source, environ={}) == "a,b"

    def test_group_by_loop(self):
        source = (
            "{% set items = [{'z': 'a'}, {'z': 'b'}, {'z': 'a'}] %}"
            "{% for key, group in groupBy(items, 'z').items() %}"
            "{{ key }}={{ group | length }};"
            "{% endfor %}"
        )
        assert render_template(source, environ={}) == "a=2;b=1;"

    def test_builtin_replace_filter_untouched(self):
        assert render_template("{{ 'aaa' | replace('a', 'b') }}", environ={}) == "bbb"
        assert render_template("{{ replace('aaa', 'a', 'b', 1) }}", environ={}) == "baa"

    def test_split_env_value(self, renderer):
        source = "{% for p in split(Env.PORTS, ',') %}listen {{ p }};\n{% endfor %}"
        assert renderer.render_string(source) == "listen 80;\nlisten 443;\n"

    def test_yaml_round_trip_in_template(self, renderer):
        source = "{% set cfg = fromYaml('a: 1') %}{{ cfg.a }}"
        assert renderer.render_string(source) == "1"

    def test_required_failure_fails_render(self, renderer):
        with pytest.raises(RenderError) as exc_info:
            renderer.render_string("{{ required('missing X', Env.EMPTY) }}", name="app.tmpl")
        assert "missing X" in str(exc_info.value)
        assert exc_info.value.template == "app.tmpl"
        assert isinstance(exc_info.value.__cause__, TemplateFunctionError)

    def test_required_passes(self, renderer):
        assert renderer.render_string("{{ required('missing X', Env.FOO) }}") == "bar"

    def test_required_with_undefined(self, renderer):
        with pytest.raises(RenderError, match="missing NOPE"):
            renderer.render_string("{{ required('missing NOPE', Env.NOPE) }}")

    def test_mapped_generator_input(self):
        source = (
            "{% set s = [{'n': 'b'}, {'n': 'a'}] %}"
            "{{ s | map(attribute='n') | sortStringsAsc | join(',') }}"
        )
        assert render_template(source, environ={}) == "a,b"

    def test_env_keys_input(self, renderer):
        source = "{{ Env.keys() | sortStringsAsc | join(',') }}"
        assert renderer.render_string(source) == "EMPTY,FOO,PORTS"

    def test_where_on_selected_entries(self):
        source = (
            "{% set s = [{'n': 'a', 'r': 'x'}, {'n': 'b'}, 3] %}"
            "{{ where(s | select('mapping'), 'r', 'x')"
            " | map(attribute='n') | join(',') }}"
        )
        assert render_template(source, environ={}) == "a"

    def test_wrong_shape_fails_render(self, renderer):
        with pytest.raises(RenderError, match="kind string"):
            renderer.render_string("{{ where(Env.FOO, 'a', 1) }}")


class TestDelimiters:
    """Test delimiter configuration."""

    def test_custom_delimiters(self):
        config = build_config(delim_left="[[", delim_right="]]")
        renderer = TemplateRenderer(config, environ=ENVIRON)
        assert renderer.render_string("[[ Env.FOO ]] {{ kept }}") == "bar {{ kept }}"

    def test_default_delimiters(self):
        config = build_config(delim_left="", delim_right="")
        assert config.left_delimiter == "{{"
        assert config.right_delimiter == "}}"


class TestErrors:
    """Test error reporting."""

    def test_syntax_error_tagged_with_name(self, renderer):
        with pytest.raises(RenderError) as exc_info:
            renderer.render_string("line one\n{{ foo( }}", name="broken.tmpl")
        assert exc_info.value.template == "broken.tmpl"
        assert exc_info.value.lineno == 2
        assert "broken.tmpl" in str(exc_info.value)

    def test_execution_error_wrapped(self, renderer):
        with pytest.raises(RenderError, match="ZeroDivisionError"):
            renderer.render_string("{{ 1 / 0 }}")


class TestInclude:
    """Test sub-template inclusion."""

    def test_include_file_with_data(self, write_template, tmp_path):
        write_template("part.tmpl", "x={{ x }} foo={{ Env.FOO }}")
        main = write_template("main.tmpl", "[{{ include('part.tmpl', {'x': 1}) }}]")
        renderer = TemplateRenderer(environ=ENVIRON)
        assert renderer.render_file(main) == "[x=1 foo=bar]"

    def test_include_non_mapping_data(self, write_template):
        write_template("item.tmpl", "{{ data | join('+') }}")
        main = write_template("main.tmpl", "{{ include('item.tmpl', [1, 2]) }}")
        assert TemplateRenderer(environ={}).render_file(main) == "1+2"

    def test_terminating_self_inclusion(self, write_template):
        write_template(
            "countdown.tmpl",
            "{% if n > 0 %}{{ n }}{{ include('countdown.tmpl', {'n': n - 1}) }}{% endif %}",
        )
        main = write_template("main.tmpl", "{{ include('countdown.tmpl', {'n': 3}) }}")
        assert TemplateRenderer(environ={}).render_file(main) == "321"

    def test_endless_self_inclusion_fails(self, write_template):
        loop = write_template("loop.tmpl", "{{ include('loop.tmpl') }}")
        renderer = TemplateRenderer(build_config(max_include_depth=3), environ={})
        with pytest.raises(RenderError, match="inclusion cycle") as exc_info:
            renderer.render_file(loop)
        cause = exc_info.value.__cause__
        assert isinstance(cause, InclusionCycleError)
        assert cause.chain == ["loop.tmpl"] * 5

    def test_eval_alias(self, write_template):
        write_template("part.tmpl", "part")
        main = write_template("main.tmpl", "{{ eval('part.tmpl') }}")
        assert TemplateRenderer(environ={}).render_file(main) == "part"

    def test_missing_include(self, write_template):
        main = write_template("main.tmpl", "{{ include('nope.tmpl') }}")
        with pytest.raises(RenderError, match="nope.tmpl"):
            TemplateRenderer(environ={}).render_file(main)

    def test_include_at_maximum_depth(self, write_template):
        loop = write_template("loop.tmpl", "{{ include('loop.tmpl') }}")
        renderer = TemplateRenderer(build_config(max_include_depth=64), environ={})
        with pytest.raises(RenderError, match="inclusion cycle") as exc_info:
            renderer.render_file(loop)
        cause = exc_info.value.__cause__
        assert isinstance(cause, InclusionCycleError)
        assert len(cause.chain) == 66


class TestIncludeMacro:
    """Test inclusion of sub-templates defined in the same template."""

    def test_macro_by_name(self, renderer):
        source = "{% macro item(x) %}<{{ x }}>{% endmacro %}{{ include('item', 'v') }}"
        assert renderer.render_string(source, name="main.tmpl") == "<v>"

    def test_macro_without_arguments(self, renderer):
        source = "{% macro banner() %}== {{ Env.FOO }} =={% endmacro %}{{ include('banner') }}"
        assert renderer.render_string(source) == "== bar =="

    def test_eval_and_filter_forms(self, renderer):
        source = (
            "{% macro item(x) %}<{{ x }}>{% endmacro %}"
            "{{ eval('item', 1) }}{{ 'item' | include(2) }}"
        )
        assert renderer.render_string(source) == "<1><2>"

    def test_terminating_recursive_macro(self, renderer):
        source = (
            "{% macro countdown(n) %}"
            "{% if n > 0 %}{{ n }}{{ include('countdown', n - 1) }}{% endif %}"
            "{% endmacro %}"
            "{{ include('countdown', 3) }}"
        )
        assert renderer.render_string(source) == "321"

    def test_endless_recursive_macro_fails(self, renderer):
        source = "{% macro spin() %}{{ include('spin') }}{% endmacro %}{{ include('spin') }}"
        with pytest.raises(RenderError, match="inclusion cycle") as exc_info:
            renderer.render_string(source, name="main.tmpl")
        cause = exc_info.value.__cause__
        assert isinstance(cause, InclusionCycleError)
        assert cause.chain == ["main.tmpl"] + ["spin"] * 33

    def test_macro_in_included_file(self, write_template):
        write_template(
            "part.tmpl", "{% macro row(r) %}[{{ r }}]{% endmacro %}{{ include('row', data) }}"
        )
        main = write_template("main.tmpl", "{{ include('part.tmpl', 'x') }}")
        assert TemplateRenderer(environ={}).render_file(main) == "[x]"

    def test_unknown_name_is_not_found(self, renderer):
        source = "{% set item = 'not a macro' %}{{ include('item') }}"
        with pytest.raises(RenderError, match="template 'item' not found"):
            renderer.render_string(source)
