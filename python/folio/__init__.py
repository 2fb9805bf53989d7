from typing import Any, Optional

from folio.build_system import BuildSystem
from folio.config import FolioConfig
from folio.expand import ExpandedDocument, Expander
from folio.resolve import ResolvedDocument, Resolver

__version__ = "0.1.0"


def build_page(
    source: str,
    config: Optional[FolioConfig] = None,
    build_sys: Optional[BuildSystem] = None,
    **context: Any,
) -> ResolvedDocument:
    """Expand then resolve a single document."""
    expanded = Expander(config, build_sys).expand_document(source, **context)
    return Resolver(config).resolve(expanded.html)


__all__ = [
    "BuildSystem",
    "ExpandedDocument",
    "Expander",
    "FolioConfig",
    "ResolvedDocument",
    "Resolver",
    "build_page",
]
