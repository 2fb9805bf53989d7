from jinja2 import Environment

from folio.tags.base import TagSyntax, protect_jinja_openers, string_literal
from folio.tags.markup import first_word, parse_flags, parse_key_values


def test_key_values_on_lines():
    info = parse_key_values(
        """
src={diagram.png}
alt={A diagram}
caption={The setup, with $x^{2}$ marked}
label={fig:setup}
"""
    )
    assert info == {
        "src": "diagram.png",
        "alt": "A diagram",
        "caption": "The setup, with $x^{2}$ marked",
        "label": "fig:setup",
    }


def test_key_values_inline():
    assert parse_key_values("src={a.png} alt={A} caption={First} label={fig:a}") == {
        "src": "a.png",
        "alt": "A",
        "caption": "First",
        "label": "fig:a",
    }


def test_key_values_ignore_malformed_pairs():
    # Keys must start a line or follow whitespace
    assert parse_key_values("xsrc{a} alt=(b)") == {}
    # Unbalanced braces never terminate the value
    assert parse_key_values("src={a") == {}
    # ...but the pairs on the following lines are still found
    assert parse_key_values("caption={a { b}\nsrc={x.png}\nlabel={fig:x}") == {
        "src": "x.png",
        "label": "fig:x",
    }
    # A repeated key keeps its last value
    assert parse_key_values("a={1} a={2}") == {"a": "2"}


def test_flags():
    assert parse_flags("display") == ["display"]
    assert parse_flags("reset title={Some title} other") == ["reset", "other"]
    assert parse_flags("") == []
    assert first_word("  eq:a trailing") == "eq:a"
    assert first_word("   ") == ""


def test_string_literal_escaping():
    assert string_literal('say "hi"') == '"say \\"hi\\""'
    assert string_literal("a\\b") == '"a\\\\b"'
    assert string_literal("a\nb") == '"a\\nb"'


def test_string_literal_round_trips_through_jinja():
    env = Environment()
    markup = 'Some "quoted" \\LaTeX é\nnext line'
    assert env.from_string("{{ " + string_literal(markup) + " }}").render() == markup


def test_protect_jinja_openers():
    assert protect_jinja_openers("a{{b{#c{%d") == 'a{{ "{{" }}b{{ "{#" }}c{%d'
    env = Environment()
    assert env.from_string(protect_jinja_openers("$a^{{2}}$ {#x}")).render() == "$a^{{2}}$ {#x}"


def test_tag_syntax_quotes_markup():
    syntax = TagSyntax(Environment(), "figref")
    assert syntax.rewrite("See {% figref fig:a %}.") == 'See {% figref "fig:a" %}.'
    # Whitespace control is kept
    assert syntax.rewrite("{%- figref fig:a -%}") == '{%- figref "fig:a" -%}'
    # Other tags with the same prefix are left alone
    assert syntax.rewrite("{% figrefs x %}") == "{% figrefs x %}"


def test_tag_syntax_skips_raw_regions():
    syntax = TagSyntax(Environment(), "footnote")
    source = "{% raw %}{% footnote x %}{% endraw %}{% footnote y %}"
    assert (
        syntax.rewrite(source)
        == '{% raw %}{% footnote x %}{% endraw %}{% footnote "y" %}'
    )


def test_tag_syntax_wraps_raw_bodies():
    syntax = TagSyntax(Environment(), "latex")
    source = "{% latex display %}\\frac{{a}}{b}{% endlatex %}"
    assert (
        syntax.rewrite(source, syntax.raw_wrap)
        == '{% latex "display" %}{% raw %}\\frac{{a}}{b}{% endraw %}{% endlatex %}'
    )


def test_protect_jinja_openers_leaves_tags_alone():
    assert protect_jinja_openers("{% footnote $a^{{2}}$ %}{{") == '{% footnote $a^{{2}}$ %}{{ "{{" }}'


def test_tag_syntax_finds_end_tags_past_raw_regions():
    syntax = TagSyntax(Environment(), "latexmm")
    source = "{% latexmm %}$a^{{2}}${% raw %}{{ x }}{% endraw %}$b^{{3}}${% endlatexmm %}"
    rewritten = syntax.rewrite(
        source, lambda body: syntax.transform_outside_raw(body, protect_jinja_openers)
    )
    assert rewritten == (
        '{% latexmm "" %}$a^{{ "{{" }}2}}${% raw %}{{ x }}{% endraw %}'
        '$b^{{ "{{" }}3}}${% endlatexmm %}'
    )
    body = rewritten.removeprefix('{% latexmm "" %}').removesuffix("{% endlatexmm %}")
    assert Environment().from_string(body).render() == "$a^{{2}}${{ x }}$b^{{3}}$"
