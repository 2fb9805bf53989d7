from bs4 import BeautifulSoup

from folio import Expander, FolioConfig, Resolver, build_page


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def test_figure_and_reference():
    page = build_page(
        "<article>{% figure src={a.png} alt={A} caption={First} label={fig:a} %}\n"
        "<p>As shown in {% figref fig:a %}.</p></article>"
    )
    soup = soup_of(page.html)

    img = soup.select_one("img")
    assert img["src"] == "/assets/images/a.png"
    assert img["alt"] == "A"
    assert img["id"] == "fig:a"
    assert "figure-1" in img["class"]
    assert soup.select_one(".figure-number").get_text() == "Figure 1"
    assert "First" in soup.select_one(".figure-caption").get_text()

    ref = soup.select_one("span.figref a")
    assert ref.get_text() == "1"
    assert ref["href"] == "#fig:a"
    assert soup.select_one("span.figref").get_text() == "Figure 1"
    assert page.unresolved == []


def test_figure_block_form():
    expanded = Expander().expand_document(
        """{% figure %}
src={b.png}
alt={B}
caption={A caption with $x^{2}$ and <i>markup</i>}
width={50%}
captionwidth={80%}
label={fig:b}
{% endfigure %}"""
    )
    soup = soup_of(expanded.html)
    img = soup.select_one("img")
    assert img["width"] == "50%"
    assert soup.select_one(".figure-caption")["style"] == "width: 80%;"
    # Captions are authoring markup and aren't escaped
    assert soup.select_one(".figure-caption i").get_text() == "markup"
    assert "$x^{2}$" in soup.select_one(".figure-caption").get_text()


def test_figure_references_resolve_to_their_own_numbers():
    # References come before their targets and in the opposite order
    page = build_page(
        "<article><p>{% figref fig:c %} {% figref fig:b %} {% figref fig:a %}</p>"
        "{% figure src={a.png} label={fig:a} %}"
        "{% figure src={b.png} label={fig:b} %}"
        "{% figure src={c.png} label={fig:c} %}</article>"
    )
    soup = soup_of(page.html)
    assert [a.get_text() for a in soup.select("span.figref a")] == ["3", "2", "1"]
    assert [
        img["data-number"] for img in soup.select("img.figure-image")
    ] == ["1", "2", "3"]


def test_figure_without_src_is_empty_and_unnumbered(capsys):
    expanded = Expander().expand_document(
        "{% figure alt={no source} label={fig:x} %}|{% figure src={b.png} %}"
    )
    before, after = expanded.html.split("|")
    assert before == ""
    assert "figure-1" in after
    assert [a.number for a in expanded.anchors] == [1]
    assert "Warning" in capsys.readouterr().out


def test_figure_without_key_values_is_empty():
    expanded = Expander().expand_document("[{% figure %}just text{% endfigure %}]")
    assert expanded.html == "[]"
    assert expanded.anchors == []


def test_figure_survives_an_unbalanced_caption(capsys):
    expanded = Expander().expand_document(
        "{% figure %}\ncaption={Set {x\nsrc={a.png}\nlabel={fig:a}\n{% endfigure %}"
    )
    assert [a.label for a in expanded.anchors] == ["fig:a"]
    assert soup_of(expanded.html).select_one("img")["src"] == "/assets/images/a.png"
    assert "unbalanced braces" in capsys.readouterr().out


def test_absolute_figure_sources_are_kept():
    expanded = Expander(FolioConfig(image_prefix="/img/")).expand_document(
        "{% figure src={https://example.com/a.png} %}"
        "{% figure src={/static/b.png} %}"
        "{% figure src={c.png} %}"
    )
    srcs = [img["src"] for img in soup_of(expanded.html).select("img")]
    assert srcs == ["https://example.com/a.png", "/static/b.png", "/img/c.png"]


def test_figure_attributes_are_escaped():
    expanded = Expander().expand_document('{% figure src={a.png} alt={"quoted" <alt>} %}')
    assert 'alt="&#34;quoted&#34; &lt;alt&gt;"' in expanded.html


def test_figure_number_falls_back_to_class_token():
    # Pages expanded by something other than folio may only carry the class token, in any position
    html = (
        '<article><img class="figure-2 figure-image" data-kind="figure" data-label="fig:a" src="a.png">'
        '<span class="figref">Figure <a class="internal" href="#fig:a" data-ref="fig:a">??</a></span></article>'
    )
    resolved = Resolver().resolve(html)
    assert soup_of(resolved.html).select_one("span.figref a").get_text() == "2"
