from bs4 import BeautifulSoup

from folio import Expander, FolioConfig, Resolver, build_page
from folio.doc.anchors import Backref

DOC = r"""<html><head></head><body>
<div class="nav-padded-area top-padded-area"></div>
<article>
<h2>Introduction</h2>
<p>See {% figref fig:a %}, {% eqref eq:a %} and <a href="https://example.com">a link</a>{% footnote A note %}.</p>
{% figure src={a.png} caption={A} label={fig:a} %}
<p>{% navitem Details %}</p>
{% latex display %}
x \label{eq:a}
{% endlatex %}
<h2>Results</h2>
<p>Missing {% figref fig:missing %} and {% eqref eq:missing %}.</p>
<div class="footnote-text-container"></div>
</article>
<div class="article-navigation-container"><ul></ul></div>
</body></html>"""


def test_expansion_is_repeatable():
    expander = Expander()
    assert expander.expand_document(DOC).html == expander.expand_document(DOC).html


def test_resolution_is_idempotent(capsys):
    resolver = Resolver()
    once = resolver.resolve(Expander().expand_document(DOC).html)
    twice = resolver.resolve(once.html)
    assert twice.html == once.html
    assert twice.unresolved == once.unresolved
    assert twice.nav_items == once.nav_items


def test_unresolved_references_are_flagged(capsys):
    page = build_page(DOC)
    assert page.unresolved == [
        Backref("figure", "fig:missing"),
        Backref("equation", "eq:missing"),
    ]
    soup = BeautifulSoup(page.html, "html.parser")
    flagged = soup.select(".unresolved-ref")
    assert [a["data-ref"] for a in flagged] == ["fig:missing", "eq:missing"]
    assert [a.get_text() for a in flagged] == ["??", "??"]
    out = capsys.readouterr().out
    assert "Warning: unresolved reference" in out
    assert "fig:missing" in out


def test_unresolved_marker_is_configurable(capsys):
    page = build_page(
        "<article>{% figref fig:nothing %}</article>",
        FolioConfig(unresolved_marker="[undefined]"),
    )
    soup = BeautifulSoup(page.html, "html.parser")
    assert soup.select_one("span.figref a").get_text() == "[undefined]"


def test_external_links_open_in_a_new_tab():
    soup = BeautifulSoup(build_page(DOC).html, "html.parser")
    external = soup.select_one('a[href="https://example.com"]')
    assert external["target"] == "_blank"
    assert external["rel"] == ["noopener", "noreferrer"]
    for internal in soup.select("article a.internal"):
        assert not internal.has_attr("target")


def test_links_outside_the_article_are_left_alone():
    soup = BeautifulSoup(
        Resolver().resolve('<nav><a href="https://example.com">x</a></nav><article></article>').html,
        "html.parser",
    )
    assert not soup.select_one("a").has_attr("target")


def test_expanded_document_lists_anchors_and_backrefs():
    expanded = Expander().expand_document(DOC)
    assert [(a.kind, a.number, a.label) for a in expanded.anchors] == [
        ("footnote", 1, None),
        ("figure", 1, "fig:a"),
        ("equation", None, "eq:a"),
    ]
    assert expanded.backrefs == [
        Backref("figure", "fig:a"),
        Backref("equation", "eq:a"),
        Backref("figure", "fig:missing"),
        Backref("equation", "eq:missing"),
    ]
