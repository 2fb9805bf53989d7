from typing import Optional
from urllib.parse import urlsplit

from jinja2.parser import Parser
from typing_extensions import override

from folio.doc import DocState
from folio.render.html import render_markup, trusted
from folio.tags.base import FolioTag
from folio.tags.markup import first_word, parse_key_values


def image_url(image_prefix: str, src: str) -> str:
    """Relative image paths live under the site's image directory, absolute paths and URLs are kept as-is."""
    if src.startswith("/") or urlsplit(src).scheme:
        return src
    return image_prefix + src


class FigureTag(FolioTag):
    """`{% figure %} src={a.png} alt={...} caption={...} width={...} captionwidth={...} label={fig:a} {% endfigure %}`

    The key-value pairs may also be written directly in the tag, with no end tag."""

    tags = {"figure"}
    block_optional = True

    @override
    def render(self, state: DocState, markup: str, body: Optional[str]) -> str:
        info = parse_key_values(markup if body is None else body)
        if not info:
            return ""
        src = info.get("src")
        if not src:
            print(
                f"Warning: figure without src={{...}} ignored, it won't be numbered: {sorted(info)}"
            )
            return ""

        anchor = state.anchors.register_new_anchor("figure", info.get("label") or None)
        assert anchor.number is not None
        return render_markup(
            "figure.html",
            anchor=anchor,
            src=image_url(state.config.image_prefix, src),
            alt=info.get("alt", ""),
            width=info.get("width"),
            captionwidth=info.get("captionwidth"),
            number_text=state.formats["figure"].resolve(anchor.number),
            caption=trusted(info.get("caption", "")),
        )


class FigureReferenceTag(FolioTag):
    """`{% figref fig:a %}` - a placeholder the resolver fills in with the number of the figure labelled `fig:a`."""

    tags = {"figref"}

    @override
    def check_markup(self, parser: Parser, markup: str, lineno: int) -> None:
        if not first_word(markup):
            parser.fail('No label provided in the "figref" tag', lineno)

    @override
    def render(self, state: DocState, markup: str, body: Optional[str]) -> str:
        backref = state.anchors.register_backref("figure", first_word(markup))
        return render_markup(
            "figref.html",
            name=state.formats["figure"].name,
            backref=backref,
            marker=state.config.unresolved_marker,
        )
