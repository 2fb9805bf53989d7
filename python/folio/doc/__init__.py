from dataclasses import dataclass, field
from typing import Dict, Optional

from folio.cite.bibtex import BibtexPublicationDB
from folio.config import FolioConfig
from folio.doc.anchors import AnchorRegistry
from folio.render.counters import CounterState
from folio.render.manual_numbering import SimpleCounterFormat, counter_formats


@dataclass
class DocState:
    """Everything that changes while a single document is expanded.

    Created by the Expander for each document and threaded through the Jinja2 render context,
    so includes share it and separate documents never do."""

    config: FolioConfig
    counters: CounterState = field(default_factory=CounterState)
    bib_db: Optional[BibtexPublicationDB] = None
    anchors: AnchorRegistry = field(init=False)
    formats: Dict[str, SimpleCounterFormat] = field(init=False)

    def __post_init__(self) -> None:
        self.anchors = AnchorRegistry(self.counters)
        self.formats = counter_formats(self.config.counter_styles)
