"""The Expand stage: rendering a document through Jinja2 with folio's tags.

Every expansion gets a fresh DocState (counters, anchors) in its render context,
which `{% include %}`d files share with the including document.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Type

from jinja2 import Environment, Template
from jinja2.ext import Extension

from folio.build_system import BuildSystem, BuildSystemLoader, ProjectRelativePath
from folio.cite.bibtex import BibtexPublicationDB
from folio.config import FolioConfig
from folio.doc import DocState
from folio.doc.anchors import Anchor, Backref
from folio.tags import STATE_VAR, STD_TAG_EXTENSIONS


@dataclass
class ExpandedDocument:
    html: str
    anchors: List[Anchor]
    """Every numbered entity in document order."""
    backrefs: List[Backref]
    """Every reference in document order. None of them have been checked yet."""


class Expander:
    config: FolioConfig
    build_sys: Optional[BuildSystem]
    env: Environment
    bib_db: Optional[BibtexPublicationDB]

    def __init__(
        self,
        config: Optional[FolioConfig] = None,
        build_sys: Optional[BuildSystem] = None,
        extra_extensions: Sequence[Type[Extension]] = (),
    ) -> None:
        self.config = config if config is not None else FolioConfig()
        self.build_sys = build_sys
        self.env = Environment(
            loader=BuildSystemLoader(build_sys) if build_sys is not None else None,
            extensions=[*STD_TAG_EXTENSIONS, *extra_extensions],
            # Documents are HTML/Markdown written by the author, there's nothing to escape
            autoescape=False,
            keep_trailing_newline=True,
        )
        self.bib_db = None
        if self.config.bib_files:
            if build_sys is None:
                raise ValueError(
                    f"Can't load bib_files {self.config.bib_files} without a build system to read them from"
                )
            self.bib_db = BibtexPublicationDB(build_sys, self.config.bib_files)

    def new_doc_state(self) -> DocState:
        return DocState(self.config, bib_db=self.bib_db)

    def expand_document(self, source: str, **context: Any) -> ExpandedDocument:
        """Expand a document given as a string. `context` is passed to Jinja2 as extra template variables."""
        return self._expand(self.env.from_string(source), context)

    def expand_file(
        self, path: ProjectRelativePath, **context: Any
    ) -> ExpandedDocument:
        """Expand a document read through the build system."""
        if self.build_sys is None:
            raise ValueError(f"Can't expand file '{path}' without a build system")
        return self._expand(self.env.get_template(path), context)

    def _expand(self, template: Template, context: Dict[str, Any]) -> ExpandedDocument:
        state = self.new_doc_state()
        html = template.render({**context, STATE_VAR: state})
        return ExpandedDocument(
            html=html,
            anchors=state.anchors.anchors(),
            backrefs=state.anchors.backrefs(),
        )
