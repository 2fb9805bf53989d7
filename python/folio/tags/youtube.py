import re
from typing import Optional, Tuple

from jinja2.parser import Parser
from typing_extensions import override

from folio.doc import DocState
from folio.render.html import render_markup
from folio.tags.base import FolioTag

# id, then optionally width and height
_YOUTUBE_SYNTAX = re.compile(r"^\s*(\S+)(?:\s+(\d+)\s+(\d+)\s*)?")


def parse_youtube_markup(markup: str) -> Optional[Tuple[str, Optional[int], Optional[int]]]:
    m = _YOUTUBE_SYNTAX.match(markup)
    if m is None:
        return None
    if m.group(2) is None:
        return m.group(1), None, None
    return m.group(1), int(m.group(2)), int(m.group(3))


class YouTubeTag(FolioTag):
    """`{% youtube <id> [<width> <height>] %}` embeds a YouTube video."""

    tags = {"youtube"}

    @override
    def check_markup(self, parser: Parser, markup: str, lineno: int) -> None:
        if parse_youtube_markup(markup) is None:
            parser.fail('No YouTube ID provided in the "youtube" tag', lineno)

    @override
    def render(self, state: DocState, markup: str, body: Optional[str]) -> str:
        parsed = parse_youtube_markup(markup)
        assert parsed is not None
        video_id, width, height = parsed
        return render_markup(
            "youtube.html",
            video_id=video_id,
            width=width if width is not None else state.config.youtube_width,
            height=height if height is not None else state.config.youtube_height,
        )
