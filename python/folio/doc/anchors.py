"""
Labels and refs.

A document contains numbered things - figures, equations, footnotes, bibliography entries - and references back to some of them.
The thing being referred to is an Anchor, the reference is a Backref.

Numbering happens in two places:
- figures, footnotes and bibliography entries are counted while the document is expanded, in document order, so their Anchors know their number.
- equations are counted by the resolver as it scans the rendered page, so their Anchors only carry a label.
Either way "number N" means "the N-th anchor of this kind from the top of the document".

Backrefs are never checked while expanding. Their target may come later in the document, or from an include,
so they are emitted as placeholders and filled in (or flagged as unresolved) by the resolver.
"""

import dataclasses
import re
from typing import Dict, List, Optional, Tuple

import soupsieve

from folio.render.counters import CounterState


@dataclasses.dataclass(frozen=True)
class Anchor:
    """A numbered entity in the document which can be referred to using a Backref.

    `number` is None for kinds which are numbered at resolve time (equations)."""

    kind: str
    number: Optional[int]
    label: Optional[str]

    def token(self) -> str:
        """The `<kind>-<number>` class token the resolver can find this anchor by."""
        if self.number is None:
            raise ValueError(f"Anchor {self} doesn't have a number yet")
        return f"{self.kind}-{self.number}"

    def canonical(self) -> str:
        return f"{self.kind}:{self.label if self.label is not None else self.number}"

    def __str__(self) -> str:
        return self.canonical()


@dataclasses.dataclass(frozen=True)
class Backref:
    """A reference to the Anchor of some kind with a given label."""

    kind: str
    label: str

    def __str__(self) -> str:
        return f"-> {self.kind}:{self.label}"


_TOKEN_RE = re.compile(r"^(?P<kind>[a-z]+)-(?P<number>\d+)$")


def parse_token(token: str) -> Optional[Tuple[str, int]]:
    """Inverse of Anchor.token(). Returns None if `token` isn't a `<kind>-<number>` token."""
    m = _TOKEN_RE.match(token)
    if not m:
        return None
    return m.group("kind"), int(m.group("number"))


def label_selector(element_selector: str, attribute: str, label: str) -> str:
    """Build a CSS selector matching `element_selector` elements whose `attribute` equals `label`.

    Labels are free text and regularly include characters with meaning in CSS (e.g. the colon in 'fig:a'),
    so the label is escaped as a CSS identifier. Emitters write labels into plain attributes and the resolver
    only ever looks labels up through this function or through attribute equality."""
    return f"{element_selector}[{attribute}={soupsieve.escape(label)}]"


class AnchorRegistry:
    """Keeps track of all the anchors and backrefs created while expanding a single document.

    Counted kinds take their number from the document's CounterState when they are registered.
    Each (kind, label) pair may only be registered once.
    """

    counters: CounterState
    _anchors: List[Anchor]
    _labelled: Dict[Tuple[str, str], Anchor]
    _backrefs: List[Backref]

    # Labels are used as element ids, so they can't contain whitespace
    _VALID_LABEL_REGEX = re.compile(r"^\S+$")

    def __init__(self, counters: CounterState) -> None:
        self.counters = counters
        self._anchors = []
        self._labelled = {}
        self._backrefs = []

    def register_new_anchor(self, kind: str, label: Optional[str]) -> Anchor:
        if label is not None:
            if not self._VALID_LABEL_REGEX.match(label):
                raise ValueError(f"Label '{label}' for a {kind} must be non-empty and contain no whitespace")
            if (kind, label) in self._labelled:
                raise ValueError(
                    f"Tried to register anchor kind={kind}, label={label} when it already existed"
                )

        if kind in self.counters.counted_kinds():
            number: Optional[int] = self.counters.next(kind)
        else:
            number = None

        a = Anchor(kind=kind, number=number, label=label)
        self._anchors.append(a)
        if label is not None:
            self._labelled[(kind, label)] = a
        return a

    def register_backref(self, kind: str, label: str) -> Backref:
        b = Backref(kind, label)
        self._backrefs.append(b)
        return b

    def anchors(self, kind: Optional[str] = None) -> List[Anchor]:
        return [a for a in self._anchors if kind is None or a.kind == kind]

    def backrefs(self) -> List[Backref]:
        return list(self._backrefs)
