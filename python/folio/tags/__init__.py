from typing import List, Type

from folio.tags.base import STATE_VAR, FolioTag, doc_state
from folio.tags.equation import EquationReferenceTag, LatexMathModeTag, LatexTag
from folio.tags.figure import FigureReferenceTag, FigureTag
from folio.tags.footnote import FootnoteTag
from folio.tags.navigation import NavigationItemTag
from folio.tags.publication import PublicationTag
from folio.tags.youtube import YouTubeTag

# Preprocessing runs in this order. `latex` must come first, so the other tags leave the raw LaTeX it protects alone.
STD_TAG_EXTENSIONS: List[Type[FolioTag]] = [
    LatexTag,
    LatexMathModeTag,
    EquationReferenceTag,
    FigureTag,
    FigureReferenceTag,
    FootnoteTag,
    PublicationTag,
    NavigationItemTag,
    YouTubeTag,
]

__all__ = [
    "STATE_VAR",
    "STD_TAG_EXTENSIONS",
    "FolioTag",
    "doc_state",
    "LatexTag",
    "LatexMathModeTag",
    "EquationReferenceTag",
    "FigureTag",
    "FigureReferenceTag",
    "FootnoteTag",
    "PublicationTag",
    "NavigationItemTag",
    "YouTubeTag",
]
