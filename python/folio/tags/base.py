import abc
import re
from typing import Any, Callable, ClassVar, List, Optional, Tuple

from jinja2 import Environment, nodes
from jinja2.ext import Extension
from jinja2.parser import Parser
from jinja2.runtime import Context
from markupsafe import Markup

from folio.doc import DocState
from folio.tags.markup import parse_key_values

STATE_VAR = "folio_state"
"""The render-context variable holding the DocState of the document being expanded."""


def doc_state(context: Context) -> DocState:
    state = context.get(STATE_VAR)
    if not isinstance(state, DocState):
        raise RuntimeError(
            f"folio tags can only be rendered through folio.Expander, which provides the document state as '{STATE_VAR}'"
        )
    return state


def string_literal(markup: str) -> str:
    """Quote free-text markup as a Jinja2 string literal.

    Jinja2 decodes string literals with Python's unicode-escape codec, so backslashes, quotes and newlines are escaped."""
    escaped = markup.replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\r", "\\r").replace("\n", "\\n")
    return f'"{escaped}"'


_PROTECT_RE = re.compile(r"\{%.*?%\}|\{[{#]", re.DOTALL)

Span = Tuple[int, int]


def protect_jinja_openers(text: str) -> str:
    """Make `{{` and `{#` in `text` render literally. `{% ... %}` tags are left alone so nested tags still work."""
    return _PROTECT_RE.sub(
        lambda m: m.group(0) if m.group(0).startswith("{%") else '{{ "' + m.group(0) + '" }}',
        text,
    )


class TagSyntax:
    """Finds the Liquid-style occurrences of one tag in a template source and rewrites them into valid Jinja2.

    `{% figref fig:a %}` isn't valid Jinja2, because `fig:a` isn't an expression.
    Every occurrence is rewritten to carry its markup as a single string literal: `{% figref "fig:a" %}`.
    Whitespace-control markers are kept, and `{% raw %}` regions are left untouched.
    """

    tag_name: str
    open_re: re.Pattern[str]
    end_re: re.Pattern[str]
    raw_re: re.Pattern[str]
    block_start: str
    block_end: str

    def __init__(self, environment: Environment, tag_name: str) -> None:
        self.tag_name = tag_name
        self.block_start = environment.block_start_string
        self.block_end = environment.block_end_string
        s = re.escape(self.block_start)
        e = re.escape(self.block_end)
        name = re.escape(tag_name)
        self.open_re = re.compile(
            rf"{s}(?P<lstrip>[-+]?)\s*{name}(?!\w)(?P<markup>.*?)(?P<rstrip>[-+]?){e}",
            re.DOTALL,
        )
        self.end_re = re.compile(rf"{s}[-+]?\s*end{name}\s*[-+]?{e}")
        self.raw_re = re.compile(
            rf"{s}[-+]?\s*raw\s*[-+]?{e}.*?{s}[-+]?\s*endraw\s*[-+]?{e}", re.DOTALL
        )

    def raw_wrap(self, body: str) -> str:
        return f"{self.block_start} raw {self.block_end}{body}{self.block_start} endraw {self.block_end}"

    def raw_spans(self, source: str) -> List[Span]:
        return [m.span() for m in self.raw_re.finditer(source)]

    @staticmethod
    def _search_outside(
        pattern: re.Pattern[str], source: str, pos: int, spans: List[Span]
    ) -> Optional[re.Match[str]]:
        """The first match of `pattern` at or after `pos` that doesn't start inside one of `spans`."""
        while True:
            m = pattern.search(source, pos)
            if m is None:
                return None
            inside = [end for start, end in spans if start <= m.start() < end]
            if not inside:
                return m
            pos = inside[0]

    def transform_outside_raw(self, body: str, transform: Callable[[str], str]) -> str:
        out: List[str] = []
        pos = 0
        for start, end in self.raw_spans(body):
            out.append(transform(body[pos:start]))
            out.append(body[start:end])
            pos = end
        out.append(transform(body[pos:]))
        return "".join(out)

    def rewrite(
        self, source: str, body_transform: Optional[Callable[[str], str]] = None
    ) -> str:
        spans = self.raw_spans(source)
        out: List[str] = []
        pos = 0
        while True:
            m = self._search_outside(self.open_re, source, pos, spans)
            if m is None:
                break
            out.append(source[pos : m.start()])
            out.append(
                f"{self.block_start}{m.group('lstrip')} {self.tag_name} "
                f"{string_literal(m.group('markup').strip())} {m.group('rstrip')}{self.block_end}"
            )
            pos = m.end()
            if body_transform is not None:
                end = self._search_outside(self.end_re, source, pos, spans)
                if end is None:
                    # Jinja2 reports the missing end tag with a proper line number
                    continue
                out.append(body_transform(source[pos : end.start()]))
                out.append(end.group(0))
                pos = end.end()
        out.append(source[pos:])
        return "".join(out)


class FolioTag(Extension, abc.ABC):
    """The base class for folio's Liquid-style tags.

    Subclasses set `tags` to a single tag name and implement `render()`, which receives the document state,
    the tag's markup (the free text after the tag name) and the rendered block body (None for plain tags).

    - `block = True` makes the tag require an `{% end<name> %}` tag.
    - `block_optional = True` makes it a block only when its markup has no `key={value}` pairs,
      so `{% figure src={a.png} %}` stands alone but `{% figure %}...{% endfigure %}` has a body.
    - `raw_body = True` stops Jinja2 interpreting the body at all.
    - `literal_braces = True` makes `{{` and `{#` in the body literal text while nested tags keep working.
    """

    block: ClassVar[bool] = False
    block_optional: ClassVar[bool] = False
    raw_body: ClassVar[bool] = False
    literal_braces: ClassVar[bool] = False

    @property
    def tag_name(self) -> str:
        (name,) = self.tags
        return name

    def preprocess(
        self, source: str, name: Optional[str], filename: Optional[str] = None
    ) -> str:
        syntax = TagSyntax(self.environment, self.tag_name)
        if self.raw_body:
            return syntax.rewrite(source, syntax.raw_wrap)
        if self.literal_braces:
            return syntax.rewrite(
                source,
                lambda body: syntax.transform_outside_raw(body, protect_jinja_openers),
            )
        return syntax.rewrite(source)

    def has_body(self, markup: str) -> bool:
        if self.block_optional:
            return not parse_key_values(markup)
        return self.block

    def check_markup(self, parser: Parser, markup: str, lineno: int) -> None:
        """Called while the template is parsed. Call `parser.fail()` to reject malformed markup."""
        return None

    def parse(self, parser: Parser) -> nodes.Node:
        token = next(parser.stream)
        lineno = token.lineno
        markup_node = parser.parse_expression()
        if not (isinstance(markup_node, nodes.Const) and isinstance(markup_node.value, str)):
            parser.fail(f"Malformed '{self.tag_name}' tag", lineno)
        markup: str = markup_node.value
        self.check_markup(parser, markup, lineno)

        args: List[nodes.Expr] = [nodes.ContextReference(), nodes.Const(markup)]
        if self.has_body(markup):
            body = parser.parse_statements(
                (f"name:end{self.tag_name}",), drop_needle=True
            )
            return nodes.CallBlock(
                self.call_method("_render_block", args), [], [], body
            ).set_lineno(lineno)
        return nodes.Output(
            [self.call_method("_render_tag", args)]
        ).set_lineno(lineno)

    def _render_tag(self, context: Context, markup: str) -> Markup:
        return Markup(self.render(doc_state(context), markup, None))

    def _render_block(self, context: Context, markup: str, caller: Any) -> Markup:
        return Markup(self.render(doc_state(context), markup, str(caller())))

    @abc.abstractmethod
    def render(self, state: DocState, markup: str, body: Optional[str]) -> str: ...
