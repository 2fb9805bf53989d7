"""LaTeX equations, rendered client-side by KaTeX.

`{% latex [display] %}...{% endlatex %}` is a single equation, and its body is never touched by Jinja2.
`{% latexmm %}...{% endlatexmm %}` is running text where `$...$` is inline math and `\\eqref{label}` refers to an equation.
`{% eqref label %}` refers to an equation from anywhere.

Display equations can carry `\\label{eq:x}`. The label is pulled out of the LaTeX and replaced by an `eqlabel` marker,
which the resolver numbers in scan order and uses to fill in references.
"""

import re
from typing import List, Optional, Tuple

from jinja2.parser import Parser
from markupsafe import Markup
from typing_extensions import override

from folio.doc import DocState
from folio.doc.anchors import Anchor
from folio.render.html import render_markup
from folio.tags.base import FolioTag
from folio.tags.markup import first_word, parse_flags

# \label{eq:x}, and the {n} of the older two-argument form \label{eq:x}{n}
_LABEL_RE = re.compile(r"\\label\{([^{}]*)\}(?:\{[^{}]*\})?")
_MATH_OR_EQREF_RE = re.compile(r"\$(.+?)\$|\\eqref\{(.+?)\}", re.DOTALL)


def extract_labels(latex: str) -> Tuple[str, List[str]]:
    """Remove every \\label{} from `latex`, returning the cleaned source and the labels in order."""
    labels = [m.group(1).strip() for m in _LABEL_RE.finditer(latex)]
    return _LABEL_RE.sub("", latex), labels


def render_equation(state: DocState, latex: str, display: bool) -> Markup:
    latex, labels = extract_labels(latex)
    anchors: List[Anchor] = []
    if display:
        anchors = [state.anchors.register_new_anchor("equation", label) for label in labels]
    elif labels:
        print(f"Warning: inline equations can't be labelled, ignoring labels {labels}")

    return render_markup(
        "equation.html",
        mode="display" if display else "inline",
        open_delim="\\[" if display else "\\(",
        close_delim="\\]" if display else "\\)",
        latex=latex.strip(),
        anchors=anchors,
    )


def render_eqref(state: DocState, label: str) -> Markup:
    backref = state.anchors.register_backref("equation", label)
    return render_markup(
        "eqref.html", backref=backref, marker=state.config.unresolved_marker
    )


class LatexTag(FolioTag):
    tags = {"latex"}
    block = True
    raw_body = True

    @override
    def render(self, state: DocState, markup: str, body: Optional[str]) -> str:
        assert body is not None
        return render_equation(state, body, display="display" in parse_flags(markup))


class LatexMathModeTag(FolioTag):
    tags = {"latexmm"}
    block = True
    literal_braces = True

    @override
    def render(self, state: DocState, markup: str, body: Optional[str]) -> str:
        assert body is not None

        def replace(m: re.Match[str]) -> str:
            if m.group(1) is not None:
                return render_equation(state, m.group(1), display=False)
            return render_eqref(state, m.group(2).strip())

        return _MATH_OR_EQREF_RE.sub(replace, body)


class EquationReferenceTag(FolioTag):
    tags = {"eqref"}

    @override
    def check_markup(self, parser: Parser, markup: str, lineno: int) -> None:
        if not first_word(markup):
            parser.fail('No label provided in the "eqref" tag', lineno)

    @override
    def render(self, state: DocState, markup: str, body: Optional[str]) -> str:
        return render_eqref(state, first_word(markup))
