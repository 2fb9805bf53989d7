"""Configuration for expanding and resolving documents.

Every field has a default that reproduces the stock blog layout, so `FolioConfig()` is always usable.
The CLI and the `{# folio-cli config-arg=key:value #}` input lines produce string key/value pairs,
which `FolioConfig.from_kwargs()` converts to the field types.
"""

import dataclasses
import json
import typing
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_KATEX_MACROS: Dict[str, str] = {
    "\\T": "^{\\scriptscriptstyle{\\mathsf{T}}}",
    "\\grad": "\\nabla",
}


@dataclass
class FolioConfig:
    image_prefix: str = "/assets/images/"
    """Prepended to relative figure `src=` values."""

    highlight_author: Optional[str] = None
    """If set, this author name is made bold in every publication's author list."""

    youtube_width: int = 720
    youtube_height: int = 405

    unresolved_marker: str = "??"
    """The text of a reference placeholder. References to labels that don't exist keep it."""

    bib_files: List[str] = field(default_factory=list)
    """Project-relative BibTeX files that `publication` blocks can pull fields from with `bibkey={...}`."""

    counter_styles: Dict[str, str] = field(default_factory=dict)
    """Per-kind numbering style overrides, e.g. {"footnote": "roman"}."""

    katex_macros: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_KATEX_MACROS)
    )

    article_selector: str = "article"
    heading_selector: str = "article h2"
    footnote_container_selector: str = ".footnote-text-container"
    nav_container_selector: str = ".article-navigation-container"
    nav_area_selector: str = ".nav-padded-area.top-padded-area"

    @classmethod
    def from_kwargs(cls, kwargs: Dict[str, str]) -> "FolioConfig":
        """Build a config from string key/value pairs, converting each value to the type of its field.

        Lists are comma-separated, dicts are JSON objects, bools accept true/false/yes/no/1/0."""
        hints = typing.get_type_hints(cls)
        known = {f.name for f in dataclasses.fields(cls)}
        converted: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if key not in known:
                raise ValueError(
                    f"Unknown config key '{key}', expected one of {sorted(known)}"
                )
            converted[key] = _convert(key, value, hints[key])
        return cls(**converted)


def _convert(key: str, value: str, hint: Any) -> Any:
    origin = typing.get_origin(hint)
    args = typing.get_args(hint)
    if origin is typing.Union and type(None) in args:
        if value.lower() in ("", "none"):
            return None
        (hint,) = [a for a in args if a is not type(None)]
        origin = typing.get_origin(hint)

    if hint is str:
        return value
    if hint is bool:
        if value.lower() in ("true", "yes", "1"):
            return True
        if value.lower() in ("false", "no", "0"):
            return False
        raise ValueError(f"Config key '{key}' expects a bool, got '{value}'")
    if hint is int:
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Config key '{key}' expects an integer, got '{value}'")
    if origin is list:
        return [v.strip() for v in value.split(",") if v.strip()]
    if origin is dict:
        try:
            d = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Config key '{key}' expects a JSON object: {e}")
        if not isinstance(d, dict):
            raise ValueError(f"Config key '{key}' expects a JSON object, got '{value}'")
        return {str(k): str(v) for k, v in d.items()}
    raise TypeError(f"Don't know how to convert config key '{key}' of type {hint}")
