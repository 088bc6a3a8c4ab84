"""Rendering tests: directives, interpolation, scope handling and errors."""

import pytest

from hashtpl import DictLoader, Engine
from hashtpl.errors import EvaluationError, IterationError, RenderError


@pytest.fixture
def engine():
    return Engine(DictLoader({}))


def test_conditional(engine):
    source = "#if enabled\nFeature is enabled\n#end"
    assert engine.render_string(source, {"enabled": True}) == "Feature is enabled\n"
    assert engine.render_string(source, {"enabled": False}) == ""
    assert engine.render_string(source, {}) == ""


def test_conditional_else(engine):
    source = "#if user.admin\nadmin\n#else\nguest\n#end\n"
    assert engine.render_string(source, {"user": {"admin": True}}) == "admin\n"
    assert engine.render_string(source, {"user": {}}) == "guest\n"
    assert engine.render_string(source, {}) == "guest\n"


def test_interpolation(engine):
    assert engine.render_string("Hello ${name}!", {"name": "World"}) == "Hello World!\n"
    assert engine.render_string("Hello #(name)!", {"name": "World"}) == "Hello World!\n"


def test_loop(engine):
    source = "#for item in items\n- ${item}\n#end"
    assert engine.render_string(source, {"items": ["apple", "banana"]}) == "- apple\n- banana\n"


@pytest.mark.parametrize(
    "context, expected",
    [
        ({}, "Name: Anonymous\n"),
        ({"name": ""}, "Name: Anonymous\n"),
        ({"name": "Ada"}, "Name: Ada\n"),
        ({"name": 0}, "Name: 0\n"),
        ({"name": False}, "Name: false\n"),
    ],
)
def test_coalesce(engine, context, expected):
    assert engine.render_string("Name: ${name ?? 'Anonymous'}", context) == expected


def test_out_of_range_index_renders_empty(engine):
    assert engine.render_string("[${arr[10]}]", {"arr": [1, 2, 3]}) == "[]\n"


def test_division_by_zero_fails(engine):
    with pytest.raises(EvaluationError) as exc_info:
        engine.render_string("a\n${10 / 0}", {})
    assert exc_info.value.line == 2
    assert exc_info.value.expression == "10 / 0"


def test_missing_nested_member_renders_empty(engine):
    source = "#for item in items\n[${item.nonexistent.field}]\n#end"
    assert engine.render_string(source, {"items": [{"a": 1}]}) == "[]\n"


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        (True, "true"),
        (3, "3"),
        (25.0, "25"),
        (2.5, "2.5"),
        (["a", 1], '["a",1]'),
        ({"k": "v"}, '{"k":"v"}'),
    ],
)
def test_value_rendering(engine, value, expected):
    assert engine.render_string("${v}", {"v": value}) == f"{expected}\n"


def test_empty_source(engine):
    assert engine.render_string("", {}) == "\n"


def test_line_endings(engine):
    assert engine.render_string("a\r\nb\r\n", {}) == "a\nb\n"
    assert engine.render_string("a\n\n", {}) == "a\n\n"


def test_rendering_is_deterministic(engine):
    template = engine.parse_string("#for k, v in m\n${k}=${v}\n#end")
    context = {"m": {"b": 2, "a": 1}}
    first = template.render(context)
    assert first == "b=2\na=1\n"
    assert all(template.render(context) == first for _ in range(5))


def test_empty_iterables(engine):
    source = "before\n#for x in xs\n${x}\n#end\nafter"
    for empty in ([], {}, ""):
        assert engine.render_string(source, {"xs": empty}) == "before\nafter\n"


def test_string_iterates_characters(engine):
    assert engine.render_string("#for c in word\n${c}\n#end", {"word": "ab"}) == "a\nb\n"


def test_mapping_single_name_binds_keys(engine):
    source = "#for key in env\n${key}\n#end"
    assert engine.render_string(source, {"env": {"A": 1, "B": 2}}) == "A\nB\n"


def test_two_name_loops(engine):
    assert engine.render_string(
        "#for i, x in items\n${i}=${x}\n#end", {"items": ["a", "b"]}
    ) == "0=a\n1=b\n"
    assert engine.render_string(
        "#for i, c in word\n${i}${c}\n#end", {"word": "hi"}
    ) == "0h\n1i\n"
    assert engine.render_string(
        "#for k, v in labels\n${k}: ${v}\n#end", {"labels": {"app": "web", "tier": 1}}
    ) == "app: web\ntier: 1\n"


def test_nested_blocks(engine):
    source = (
        "#for svc in services\n"
        "#if svc.ports\n"
        "${svc.name}:\n"
        "#for port in svc.ports\n"
        "#if port > 1000\n"
        "  - ${port}\n"
        "#end\n"
        "#end\n"
        "#else\n"
        "${svc.name}: none\n"
        "#end\n"
        "#end\n"
    )
    context = {
        "services": [
            {"name": "web", "ports": [80, 8080]},
            {"name": "worker", "ports": []},
        ]
    }
    assert engine.render_string(source, context) == "web:\n  - 8080\nworker: none\n"


def test_loop_variable_is_restored(engine):
    context = {"item": "outer", "items": ["a", "b"]}
    source = "#for item in items\n${item}\n#end\n${item}"
    assert engine.render_string(source, context) == "a\nb\nouter\n"
    assert context == {"item": "outer", "items": ["a", "b"]}


def test_loop_variable_is_removed_after_loop(engine):
    source = "#for item in items\n${item}\n#end\n${item ?? 'gone'}"
    assert engine.render_string(source, {"items": [1]}) == "1\ngone\n"


def test_nested_loops_with_same_name(engine):
    source = "#for x in outer\n#for x in inner\n${x}\n#end\n${x}\n#end"
    context = {"outer": ["A", "B"], "inner": [1, 2]}
    assert engine.render_string(source, context) == "1\n2\nA\n1\n2\nB\n"


def test_two_name_loop_restores_both_names(engine):
    context = {"k": "K", "items": {"a": 1}}
    source = "#for k, v in items\n${k}${v}\n#end\n${k}${v ?? '-'}"
    assert engine.render_string(source, context) == "a1\nK-\n"


def test_context_untouched_when_loop_body_fails(engine):
    context = {"x": "keep", "xs": [1, 0]}
    with pytest.raises(EvaluationError):
        engine.render_string("#for x in xs\n${10 / x}\n#end", context)
    assert context == {"x": "keep", "xs": [1, 0]}


@pytest.mark.parametrize(
    "value, type_name",
    [
        (5, "int"),
        (2.5, "float"),
        (True, "bool"),
        (None, "null"),
        (object(), "object"),
    ],
)
def test_iteration_error(engine, value, type_name):
    with pytest.raises(IterationError) as exc_info:
        engine.render_string("line\n#for x in value\n${x}\n#end", {"value": value})
    assert exc_info.value.type_name == type_name
    assert exc_info.value.line == 2
    assert isinstance(exc_info.value, RenderError)


def test_directive_inside_yaml_comment_is_text(engine):
    source = "name: ${name}  # #if this is text\n# #for neither is this"
    assert engine.render_string(source, {"name": "x"}) == (
        "name: x  # #if this is text\n# #for neither is this\n"
    )


def test_stray_end_is_text(engine):
    assert engine.render_string("a\n#end\nb", {}) == "a\n#end\nb\n"


def test_indented_directives(engine):
    source = "items:\n  #for x in xs\n  - ${x}\n  #end"
    assert engine.render_string(source, {"xs": [1, 2]}) == "items:\n  - 1\n  - 2\n"


def test_template_reuse_across_contexts(engine):
    template = engine.parse_string("${greeting ?? 'hi'}, ${name}")
    assert template.render({"name": "a"}) == "hi, a\n"
    assert template.render({"name": "b", "greeting": "yo"}) == "yo, b\n"
    assert template.render() == "hi, \n"
    assert template.engine is engine


@pytest.mark.parametrize("name", ["namespace", "range", "dict", "lipsum", "cycler", "joiner"])
def test_undefined_names_render_empty(engine, name):
    assert engine.render_string(f"[${{{name}}}]", {}) == "[]\n"
    assert engine.render_string(f"${{{name} ?? 'default'}}", {}) == "default\n"


def test_lazy_filters_in_loops_and_interpolation(engine):
    context = {"xs": [1, 2, 3]}
    assert engine.render_string("#for x in xs|reverse\n${x}\n#end", context) == "3\n2\n1\n"
    assert engine.render_string("${xs|select('odd')}", context) == "[1,3]\n"
    assert engine.render_string("#for x in xs|map('string')\n${x ~ '!'}\n#end", context) == (
        "1!\n2!\n3!\n"
    )


def test_any_sequence_is_iterable(engine):
    assert engine.render_string("#for i, x in steps\n${i}:${x}\n#end", {"steps": range(2, 4)}) == (
        "0:2\n1:3\n"
    )
    assert engine.render_string("${steps}", {"steps": range(3)}) == "[0,1,2]\n"


def test_keyword_argument_with_default(engine):
    source = "${xs|join(d=sep ?? ',')}"
    assert engine.render_string(source, {"xs": ["a", "b"]}) == "a,b\n"
    assert engine.render_string(source, {"xs": ["a", "b"], "sep": "-"}) == "a-b\n"


@pytest.mark.parametrize(
    "source, context, expected",
    [
        ("${name.upper()}", {"name": "web"}, "WEB"),
        ("${user.name.upper()}", {"user": {"name": "ada"}}, "ADA"),
        ("${'yes' if filename.endswith('.go') else 'no'}", {"filename": "main.go"}, "yes"),
        ("${'yes' if 'api' in host else 'no'}", {"host": "api.example.com"}, "yes"),
        ("${path.split('/')|join(',')}", {"path": "a/b/c"}, "a,b,c"),
        ("${items|join(', ')}", {"items": ["x", "y"]}, "x, y"),
        ("${'-' * 3}", {}, "---"),
        ("${port|string ~ '/tcp'}", {"port": 80}, "80/tcp"),
        ("${name|lower|replace('_', '-')}", {"name": "My_App"}, "my-app"),
    ],
)
def test_string_helpers(engine, source, context, expected):
    assert engine.render_string(source, context) == f"{expected}\n"


def test_conditional_with_string_method(engine):
    source = "#for f in files\n#if f.endswith('.go')\n${f}\n#end\n#end"
    assert engine.render_string(source, {"files": ["a.go", "b.py", "c.go"]}) == "a.go\nc.go\n"
