"""The navigation sidebar.

The sidebar lists every top-level heading of the article, and under each heading the `{% navitem %}` sub-items
that come before the next heading. The list itself is built once at resolve time.
Keeping the sidebar pinned and highlighting the current section has to happen in the browser on every scroll,
which `assets/blogpost.js` does with the same arithmetic as `pinned_sidebar_top()` and `current_nav_index()`.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from folio.config import FolioConfig


@dataclass
class NavItem:
    text: str
    anchor_id: str
    level: int
    """0 for a heading, 1 for a sub-item."""


def nav_id(text: str) -> str:
    return re.sub(r"\W", "_", text)


def parse_style(style: str) -> Dict[str, str]:
    props = {}
    for decl in style.split(";"):
        if ":" in decl:
            key, value = decl.split(":", maxsplit=1)
            props[key.strip()] = value.strip()
    return props


def set_style(tag: Tag, **props: str) -> None:
    """Set CSS properties in the inline style of `tag`, keeping the others. Underscores in names become dashes."""
    style = parse_style(str(tag.get("style", "")))
    style.update({k.replace("_", "-"): v for k, v in props.items()})
    tag["style"] = " ".join(f"{k}: {v};" for k, v in style.items())


def _nav_item(tag: Tag, level: int) -> NavItem:
    text = tag.get_text().strip()
    if not tag.get("id"):
        tag["id"] = nav_id(text)
    return NavItem(text=text, anchor_id=str(tag["id"]), level=level)


def collect_nav_items(soup: BeautifulSoup, config: FolioConfig) -> List[NavItem]:
    """Collect the headings and flagged sub-items, in document order, giving them ids where they don't have one."""
    headings = soup.select(config.heading_selector)
    heading_ids = {id(h) for h in headings}

    items = []
    for heading in headings:
        items.append(_nav_item(heading, 0))
        for sibling in heading.find_next_siblings():
            if id(sibling) in heading_ids:
                break
            subitems = sibling.select(".article-subnav-item")
            if "article-subnav-item" in sibling.get("class", []):
                subitems.insert(0, sibling)
            for subitem in subitems:
                items.append(_nav_item(subitem, 1))
                # The sub-item is only there to be scrolled to, so its paragraph shouldn't take up space
                if subitem.parent is not None and subitem is not sibling:
                    set_style(subitem.parent, margin="0", padding="0", position="absolute")
    return items


def render_nav(soup: BeautifulSoup, items: List[NavItem], config: FolioConfig) -> bool:
    """Fill the navigation list with `items` and move it into the navigation area.

    Returns False if the page has no navigation container."""
    container = soup.select_one(config.nav_container_selector)
    if container is None:
        return False

    nav_list = container.find("ul")
    if not isinstance(nav_list, Tag):
        nav_list = soup.new_tag("ul")
        container.append(nav_list)
    nav_list.clear()
    for item in items:
        li = soup.new_tag("li")
        if item.level > 0:
            li["class"] = "subnavitem"
        a = soup.new_tag("a", href=f"#{item.anchor_id}")
        a["class"] = "internal"
        a.string = item.text
        li.append(a)
        nav_list.append(li)

    area = soup.select_one(config.nav_area_selector)
    if area is not None:
        area.append(container.extract())
    return True


def pinned_sidebar_top(
    initial_top: float,
    scroll_top: float,
    sidebar_top: float,
    sidebar_height: float,
    content_bottom: float,
) -> float:
    """The CSS `top` of a sidebar that follows the scroll position but never extends past the end of the content.

    `initial_top` is the sidebar's CSS `top` and `sidebar_top` its page offset, both taken at page load.
    """
    new_top = initial_top + scroll_top
    sidebar_bottom = sidebar_top + scroll_top + sidebar_height
    overshoot = content_bottom - sidebar_bottom
    if overshoot < 0:
        new_top += overshoot
    return new_top


def current_nav_index(
    section_tops: Sequence[float], viewport_height: float
) -> Optional[int]:
    """Which nav item to highlight, given the viewport-relative tops of their targets in document order.

    The last target above the middle of the viewport wins. None if every target is below it."""
    midpoint = viewport_height / 2
    for i in reversed(range(len(section_tops))):
        if section_tops[i] < midpoint:
            return i
    return None
