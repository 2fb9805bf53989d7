"""The Resolve stage: fixing up an expanded page once all of its markup exists.

The expanded HTML is parsed with BeautifulSoup and passed through, in order:
1. marking external links to open in a new tab,
2. moving footnote bodies into the footnote container,
3. filling in figure references from the numbers the figures were given during expansion,
4. numbering labelled equations in scan order and filling in equation references,
5. building the navigation sidebar,
6. inserting the KaTeX options used by the page script.

Every pass leaves already-resolved markup as it is, so resolving a resolved page changes nothing.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from folio.config import FolioConfig
from folio.doc.anchors import Backref, label_selector, parse_token
from folio.render.manual_numbering import SimpleCounterFormat, counter_formats
from folio.sidebar import NavItem, collect_nav_items, render_nav, set_style

KATEX_OPTIONS_ID = "folio-katex-options"
UNRESOLVED_CLASS = "unresolved-ref"


@dataclass
class ResolvedDocument:
    html: str
    unresolved: List[Backref] = field(default_factory=list)
    """References whose label didn't match anything, in document order."""
    nav_items: List[NavItem] = field(default_factory=list)


def add_class(tag: Tag, cls: str) -> None:
    classes = list(tag.get("class", []))
    if cls not in classes:
        classes.append(cls)
        tag["class"] = classes


def anchor_number(target: Tag, kind: str) -> Optional[int]:
    """The number an expanded anchor was given, from `data-number` or else its `<kind>-<n>` class token."""
    data_number = target.get("data-number")
    if data_number is not None and str(data_number).isdigit():
        return int(str(data_number))
    for cls in target.get("class", []):
        parsed = parse_token(cls)
        if parsed is not None and parsed[0] == kind:
            return parsed[1]
    return None


class Resolver:
    config: FolioConfig
    formats: Dict[str, SimpleCounterFormat]

    def __init__(self, config: Optional[FolioConfig] = None) -> None:
        self.config = config if config is not None else FolioConfig()
        self.formats = counter_formats(self.config.counter_styles)

    def resolve(self, html: str) -> ResolvedDocument:
        soup = BeautifulSoup(html, "html.parser")
        unresolved: List[Backref] = []

        self.mark_external_links(soup)
        self.relocate_footnotes(soup)
        unresolved.extend(self.resolve_anchor_refs(soup))
        unresolved.extend(self.resolve_equations(soup))

        nav_items = collect_nav_items(soup, self.config)
        if not render_nav(soup, nav_items, self.config):
            nav_items = []

        if soup.select_one(".display-equation, .inline-equation") is not None:
            self.insert_katex_options(soup)

        for backref in unresolved:
            print(f"Warning: unresolved reference {backref}")
        return ResolvedDocument(html=str(soup), unresolved=unresolved, nav_items=nav_items)

    def _article(self, soup: BeautifulSoup) -> Optional[Tag]:
        return soup.select_one(self.config.article_selector)

    def _mark_unresolved(self, ref: Tag) -> None:
        target = ref.find("b") or ref
        target.string = self.config.unresolved_marker
        add_class(ref, UNRESOLVED_CLASS)

    def mark_external_links(self, soup: BeautifulSoup) -> None:
        article = self._article(soup)
        if article is None:
            return
        for a in article.find_all("a"):
            if "internal" not in a.get("class", []):
                a["target"] = "_blank"
                a["rel"] = "noopener noreferrer"

    def relocate_footnotes(self, soup: BeautifulSoup) -> None:
        bodies = soup.select("span.footnote-text-all[data-number]")
        if not bodies:
            return
        container = soup.select_one(self.config.footnote_container_selector)
        if container is None:
            container = soup.new_tag("div")
            container["class"] = "footnote-text-container"
            parent = self._article(soup) or soup.body or soup
            parent.append(container)

        for body in sorted(bodies, key=lambda b: int(str(b["data-number"]))):
            container.append(body.extract())
            set_style(body, display="block")

    def resolve_anchor_refs(self, soup: BeautifulSoup) -> List[Backref]:
        """Fill in `figref`s with the numbers their targets were given during expansion."""
        unresolved = []
        for ref in soup.select("span.figref a[data-ref]"):
            label = str(ref["data-ref"])
            kind = str(ref.get("data-kind", "figure"))
            target = soup.select_one(
                label_selector(f'[data-kind="{kind}"]', "data-label", label)
            )
            number = anchor_number(target, kind) if target is not None else None
            if number is None:
                self._mark_unresolved(ref)
                unresolved.append(Backref(kind, label))
            else:
                ref.string = self.formats[kind].number(number)
        return unresolved

    def resolve_equations(self, soup: BeautifulSoup) -> List[Backref]:
        """Number the labelled display equations in scan order, then fill in every `eqref`."""
        fmt = self.formats["equation"]
        numbers: Dict[str, int] = {}
        for i, marker in enumerate(soup.select(".eqlabel"), start=1):
            marker["data-number"] = str(i)
            add_class(marker, f"equation-{i}")
            number_span = marker.select_one(".equation-number")
            if number_span is None:
                number_span = soup.new_tag("span")
                number_span["class"] = "equation-number"
                marker.append(number_span)
            number_span.string = fmt.resolve(i, with_name=False)
            label = marker.get("data-label")
            if label is not None:
                numbers.setdefault(str(label), i)

        unresolved = []
        for ref in soup.select("a.eqreflink[data-ref]"):
            label = str(ref["data-ref"])
            if label in numbers:
                target = ref.find("b") or ref
                target.string = fmt.number(numbers[label])
            else:
                self._mark_unresolved(ref)
                unresolved.append(Backref("equation", label))
        return unresolved

    def insert_katex_options(self, soup: BeautifulSoup) -> None:
        existing = soup.find("script", id=KATEX_OPTIONS_ID)
        if isinstance(existing, Tag):
            existing.decompose()

        options = {
            "globalGroup": True,
            "throwOnError": False,
            "strict": False,
            "macros": self.config.katex_macros,
        }
        script = soup.new_tag("script", type="application/json", id=KATEX_OPTIONS_ID)
        script.string = json.dumps(options, sort_keys=True).replace("</", "<\\/")
        if soup.head is not None:
            soup.head.append(script)
        else:
            soup.insert(0, script)
