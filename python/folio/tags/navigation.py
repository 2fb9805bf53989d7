from typing import Optional

from typing_extensions import override

from folio.doc import DocState
from folio.render.html import render_markup, trusted
from folio.tags.base import FolioTag


class NavigationItemTag(FolioTag):
    """`{% navitem Text %}` flags a sub-item for the navigation sidebar, listed under the preceding heading."""

    tags = {"navitem"}

    @override
    def render(self, state: DocState, markup: str, body: Optional[str]) -> str:
        return render_markup("navitem.html", text=trusted(markup))
