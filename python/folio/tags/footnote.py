from typing import Optional

from typing_extensions import override

from folio.doc import DocState
from folio.render.html import render_markup, trusted
from folio.tags.base import FolioTag


class FootnoteTag(FolioTag):
    """`{% footnote Some text %}`

    Emits the numbered mark and, right after it, the footnote body.
    The resolver later moves every body into the page's footnote container."""

    tags = {"footnote"}

    @override
    def render(self, state: DocState, markup: str, body: Optional[str]) -> str:
        anchor = state.anchors.register_new_anchor("footnote", None)
        assert anchor.number is not None
        return render_markup(
            "footnote.html",
            anchor=anchor,
            number_text=state.formats["footnote"].resolve(anchor.number),
            content=trusted(markup),
        )
