from typing import Dict, List, NamedTuple, Optional, Tuple

from markupsafe import Markup, escape
from typing_extensions import override

from folio.doc import DocState
from folio.render.html import render_markup, trusted
from folio.tags.base import FolioTag
from folio.tags.markup import parse_flags, parse_key_values


class PublicationLink(NamedTuple):
    prefix: str
    kind: str
    href: str
    text: Markup


# (prefix, URL format, link text) for each link key, in the order they're displayed
LINK_KINDS: Dict[str, Tuple[str, str, Markup]] = {
    "arxiv": ("PDF", "https://arxiv.org/abs/{}", Markup("arXiv.org")),
    "researchgate": (
        "PDF",
        "https://www.researchgate.net/publication/{}",
        Markup('<i class="fab fa-researchgate"></i>'),
    ),
    "openreview": (
        "PDF",
        "https://openreview.net/forum?id={}",
        Markup('OpenReview<span class="openreview-net">.net</span>'),
    ),
    "github": (
        "Code",
        "https://github.com/{}",
        Markup('<i class="fab fa-github-square"></i>'),
    ),
}


def publication_links(info: Dict[str, str]) -> List[PublicationLink]:
    links = []
    for kind, (prefix, url_format, text) in LINK_KINDS.items():
        value = info.get(kind)
        if value:
            links.append(PublicationLink(prefix, kind, url_format.format(value), text))
    return links


def highlight_author(authors: str, author: Optional[str]) -> Markup:
    if not author:
        return trusted(authors)
    # Author lists are trusted markup, so the name may be written raw or HTML-escaped
    for name in dict.fromkeys([author, str(escape(author))]):
        authors = authors.replace(name, f"<b>{name}</b>")
    return trusted(authors)


class PublicationTag(FolioTag):
    """A bibliography entry.

    ```
    {% publication [reset] %}
    authors={...}
    title={...}
    venue={...}
    year={...}
    arxiv={...}
    {% endpublication %}
    ```

    `bibkey={key}` pulls any fields that aren't given explicitly from the configured BibTeX files.
    The `reset` flag restarts the bibliography numbering from 1, for pages with several lists.
    """

    tags = {"publication"}
    block_optional = True

    @override
    def render(self, state: DocState, markup: str, body: Optional[str]) -> str:
        info = parse_key_values(markup if body is None else body)
        if not info:
            return ""

        bibkey = info.pop("bibkey", None)
        if bibkey is not None:
            if state.bib_db is None:
                raise ValueError(
                    f"Publication uses bibkey={{{bibkey}}} but no bib_files are configured"
                )
            info = {**state.bib_db.publication_fields(bibkey), **info}

        if not info.get("title"):
            print(
                f"Warning: publication without title={{...}} ignored, it won't be numbered: {sorted(info)}"
            )
            return ""

        if "reset" in parse_flags(markup):
            state.counters.reset("bibliography")
        anchor = state.anchors.register_new_anchor(
            "bibliography", info.get("label") or None
        )
        assert anchor.number is not None

        return render_markup(
            "publication.html",
            anchor=anchor,
            number_text=state.formats["bibliography"].resolve(anchor.number),
            authors=highlight_author(
                info.get("authors", ""), state.config.highlight_author
            ),
            title=trusted(info["title"]),
            venue=trusted(info.get("venue", "")),
            year=trusted(info.get("year", "")),
            links=publication_links(info),
            award=trusted(info["award"]) if info.get("award") else None,
        )
