import re
from typing import Dict, List, Optional, Set, Tuple

import bibtexparser  # type: ignore[import-untyped]

from folio.build_system import BuildSystem, JobInputFile, ProjectRelativePath

# bibtexparser is a pure Python parser, which can be slow.
# If building a lot of pages in one run, it would be a waste to parse the same bib over and over.
# Thus cache the results, keyed on the file and checked against its contents.
BIBTEX_CACHE: Dict[str, Tuple[str, bibtexparser.bibdatabase.BibDatabase]] = {}


def _make_parser() -> bibtexparser.bparser.BibTexParser:
    # A BibTexParser accumulates entries across parses, so each parse gets its own
    return bibtexparser.bparser.BibTexParser(
        ignore_nonstandard_types=False,
        interpolate_strings=False,
        common_strings=False,
        add_missing_from_crossref=False,
    )


def get_cached_db(
    rel_path: ProjectRelativePath, file: JobInputFile
) -> bibtexparser.bibdatabase.BibDatabase:
    with file.open_read_text() as f:
        file_contents = f.read()

    cache_key = str(file.external_path) if file.external_path is not None else rel_path
    cached = BIBTEX_CACHE.get(cache_key)
    if cached is not None and (cached[0] == file_contents):
        return cached[1]

    db = bibtexparser.loads(file_contents, _make_parser())

    if not db.entries:
        raise RuntimeError(f"Citation file '{rel_path}' has no BibTeX entries")

    BIBTEX_CACHE[cache_key] = (file_contents, db)
    return db


# BibTeX field -> publication key. Fields named like publication keys (title, year, github...) map to themselves.
BIBTEX_FIELD_MAP: Dict[str, str] = {
    "author": "authors",
    "journal": "venue",
    "booktitle": "venue",
    "eprint": "arxiv",
}
PUBLICATION_KEYS: Set[str] = {
    "authors",
    "title",
    "venue",
    "year",
    "arxiv",
    "github",
    "researchgate",
    "openreview",
    "award",
}

_BRACES = re.compile(r"[{}]")


def format_bibtex_authors(authors: str) -> str:
    """'Malyuta, Danylo and Yu, Yue' -> 'Danylo Malyuta, Yue Yu'"""
    names = []
    for name in re.split(r"\s+and\s+", authors.strip()):
        if "," in name:
            last, first = name.split(",", maxsplit=1)
            name = f"{first.strip()} {last.strip()}"
        names.append(" ".join(name.split()))
    return ", ".join(names)


class BibtexPublicationDB:
    """Publication metadata loaded from one or more BibTeX files, looked up by citekey."""

    known_citekeys: Set[str]
    dbs: List[bibtexparser.bibdatabase.BibDatabase]

    def __init__(self, file_sys: BuildSystem, paths: List[ProjectRelativePath]) -> None:
        self.known_citekeys = set()
        self.dbs = []
        for path in paths:
            file = file_sys.resolve_input_file(path)
            db = get_cached_db(path, file)

            multiply_defined = self.known_citekeys.intersection(
                db.entries_dict.keys()
            )
            if multiply_defined:
                raise RuntimeError(
                    f"Multiple-definition of citation IDs {multiply_defined}"
                )

            self.known_citekeys.update(db.entries_dict.keys())
            self.dbs.append(db)

    def _entry(self, id: str) -> Optional[Dict[str, str]]:
        for db in self.dbs:
            entry = db.entries_dict.get(id)
            if entry is not None:
                return entry
        return None

    def publication_fields(self, id: str) -> Dict[str, str]:
        """The publication keys (authors, title, venue...) that can be filled in from the entry `id`.

        Raises ValueError if `id` isn't in the database."""
        entry = self._entry(id)
        if entry is None:
            raise ValueError(f"Citation ID {id} not present in database")

        fields: Dict[str, str] = {}
        for bib_field, value in entry.items():
            key = BIBTEX_FIELD_MAP.get(bib_field, bib_field)
            if key not in PUBLICATION_KEYS or key in fields:
                continue
            value = " ".join(_BRACES.sub("", value).split())
            if key == "authors":
                value = format_bibtex_authors(value)
            fields[key] = value
        return fields
