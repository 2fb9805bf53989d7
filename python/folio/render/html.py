"""Markup construction for tag output.

All HTML produced by the tags comes from the autoescaped templates in folio/templates/.
Attribute values (paths, labels, ids) are escaped by the templates. Captions, footnote text and other
authoring content is already markup written by the page author and is passed through as `Markup`.
"""

from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

MARKUP_ENV = Environment(
    loader=PackageLoader("folio", "templates"),
    autoescape=select_autoescape(default=True),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_markup(template_name: str, **context: Any) -> Markup:
    """Render one of the folio/templates/ fragments.

    Trailing whitespace is dropped so fragments can be placed inline."""
    template = MARKUP_ENV.get_template(template_name)
    return Markup(template.render(**context).strip())


def trusted(content: str) -> Markup:
    """Mark authoring content (captions, footnote text...) as markup that must not be escaped."""
    return Markup(content)
