import pathlib

import pytest

from jelly.config import MAX_INCLUDE_DEPTH_CEILING
from jelly.errors import ContentTooLarge, MissingLocaleKey, RecursionLimitExceeded
from jelly.locales import LocaleTable
from jelly.partials import PartialLoader
from jelly.renderer import Renderer


def _make_renderer(base: pathlib.Path, partials: dict[str, str], **kwargs) -> Renderer:
    partials_dir = base / "src" / "partials"
    partials_dir.mkdir(parents=True, exist_ok=True)
    for name, text in partials.items():
        (partials_dir / f"{name}.html").write_text(text, encoding="utf-8")
    return Renderer(PartialLoader(partials_dir), **kwargs)


def test_text_without_directives_is_unchanged(tmp_path):
    renderer = _make_renderer(tmp_path, {})
    text = "<html>\n  <p>100% plain, <!-- a comment --></p>\n</html>\n"
    assert renderer.render(text) == text
    assert renderer.render(text, LocaleTable("en", {"x": "V"})) == text
    assert renderer.render("") == ""


def test_locale_variable_substitution(tmp_path):
    renderer = _make_renderer(tmp_path, {})
    assert renderer.render("%locale.x%", LocaleTable("en", {"x": "V"})) == "V"
    assert renderer.render("%locale.x%", LocaleTable("en", {})) == ""
    assert renderer.render("%locale.x%", None) == ""
    assert renderer.render("%locale.x%") == ""


def test_locale_lookup_is_case_sensitive(tmp_path):
    renderer = _make_renderer(tmp_path, {})
    table = LocaleTable("en", {"Title": "Hello"})
    assert renderer.render("[%locale.title%][%locale.Title%]", table) == "[][Hello]"


def test_locale_variable_amid_literal_percent_signs(tmp_path):
    renderer = _make_renderer(tmp_path, {})
    table = LocaleTable("fr", {"deal": "soldes"})
    assert renderer.render("50% off: %locale.deal%!", table) == "50% off: soldes!"


def test_include_expands_partial(tmp_path):
    renderer = _make_renderer(tmp_path, {"header": "<header>Top</header>"})
    page = "<body><!-- %include.header% --><main/></body>"
    assert renderer.render(page) == "<body><header>Top</header><main/></body>"


def test_locale_propagates_into_nested_partials(tmp_path):
    renderer = _make_renderer(
        tmp_path,
        {"p": "%locale.x%", "outer": "[<!-- %include.p% -->]"},
    )
    table = LocaleTable("fr", {"x": "V"})
    assert renderer.render("<!-- %include.p% -->", table) == "V"
    assert renderer.render("<!-- %include.outer% -->", table) == "[V]"
    assert renderer.render("<!-- %include.outer% -->") == "[]"


def test_missing_partial_is_dropped_silently(tmp_path):
    renderer = _make_renderer(tmp_path, {})
    assert renderer.render("a<!-- %include.nope% -->b") == "ab"


def test_partial_name_cannot_escape_partial_dir(tmp_path):
    renderer = _make_renderer(tmp_path, {})
    (tmp_path / "src" / "secret.html").write_text("leaked", encoding="utf-8")
    assert renderer.render("<!-- %include.../secret% -->") == ""


def test_same_partial_can_be_included_repeatedly(tmp_path):
    renderer = _make_renderer(tmp_path, {"dot": ".", "row": "<!-- %include.dot% --><!-- %include.dot% -->"})
    assert renderer.render("<!-- %include.row% -->|<!-- %include.row% -->") == "..|.."


def test_include_cycle_raises_recursion_limit(tmp_path):
    renderer = _make_renderer(
        tmp_path,
        {"p1": "one <!-- %include.p2% -->", "p2": "two <!-- %include.p1% -->"},
    )
    with pytest.raises(RecursionLimitExceeded) as excinfo:
        renderer.render("<!-- %include.p1% -->")
    assert excinfo.value.chain == ("p1", "p2", "p1")


def test_self_include_raises_recursion_limit(tmp_path):
    renderer = _make_renderer(tmp_path, {"loop": "<!-- %include.loop% -->"})
    with pytest.raises(RecursionLimitExceeded):
        renderer.render("<!-- %include.loop% -->", LocaleTable("en", {}))


def test_include_depth_limit(tmp_path):
    partials = {f"a{i}": f"{i}<!-- %include.a{i + 1}% -->" for i in range(5)}
    renderer = _make_renderer(tmp_path, partials, max_include_depth=3)
    with pytest.raises(RecursionLimitExceeded) as excinfo:
        renderer.render("<!-- %include.a0% -->")
    assert excinfo.value.limit == 3

    deep_enough = _make_renderer(tmp_path, {}, max_include_depth=6)
    assert deep_enough.render("<!-- %include.a0% -->") == "01234"


def test_include_depth_is_capped_below_the_interpreter_stack(tmp_path):
    partials = {f"p{i}": f"<!-- %include.p{i + 1}% -->" for i in range(1200)}
    renderer = _make_renderer(tmp_path, partials, max_include_depth=5000)
    assert renderer.max_include_depth == MAX_INCLUDE_DEPTH_CEILING

    with pytest.raises(RecursionLimitExceeded) as excinfo:
        renderer.render("<!-- %include.p0% -->")
    assert excinfo.value.limit == 256
    assert len(excinfo.value.chain) == 257


def test_unterminated_include_is_literal(tmp_path):
    renderer = _make_renderer(tmp_path, {"foo": "FOO"})
    assert renderer.render("<!-- %include.foo") == "<!-- %include.foo"
    table = LocaleTable("en", {"k": "K"})
    assert renderer.render("<!-- %include.foo %locale.k%", table) == "<!-- %include.foo K"


def test_unterminated_locale_variable_is_literal(tmp_path):
    renderer = _make_renderer(tmp_path, {})
    table = LocaleTable("en", {"x": "V"})
    assert renderer.render("tail %locale.x", table) == "tail %locale.x"


def test_output_ceiling_raises_content_too_large(tmp_path):
    renderer = _make_renderer(tmp_path, {"big": "y" * 8}, max_output_bytes=10)
    assert renderer.render("x" * 10) == "x" * 10
    with pytest.raises(ContentTooLarge):
        renderer.render("x" * 11)
    with pytest.raises(ContentTooLarge):
        renderer.render("abc<!-- %include.big% -->")


def test_output_ceiling_counts_utf8_bytes(tmp_path):
    renderer = _make_renderer(tmp_path, {}, max_output_bytes=10)
    assert renderer.render("é" * 5) == "é" * 5
    with pytest.raises(ContentTooLarge):
        renderer.render("é" * 6)


def test_strict_locales_reject_unknown_keys(tmp_path):
    renderer = _make_renderer(tmp_path, {}, strict_locales=True)
    with pytest.raises(MissingLocaleKey) as excinfo:
        renderer.render("%locale.missing%", LocaleTable("de", {}))
    assert excinfo.value.locale == "de"
    # Without an active locale there is nothing to be strict about.
    assert renderer.render("%locale.missing%") == ""


def test_render_is_deterministic(tmp_path):
    renderer = _make_renderer(tmp_path, {"nav": "<nav>%locale.home%</nav>"})
    table = LocaleTable("en", {"home": "Home"})
    page = "<!-- %include.nav% --><h1>%locale.home%</h1>"
    assert renderer.render(page, table) == renderer.render(page, table) == "<nav>Home</nav><h1>Home</h1>"
