"""Parsing of the free-text markup that tags carry.

Tag markup is a mix of bare flags and `key={value}` pairs:

    {% figure %}
    src={diagram.png}
    caption={The setup, with $x^{2}$ marked}
    label={fig:setup}
    {% endfigure %}

    {% publication reset %}...

A key-value pair starts at the beginning of a line or after whitespace, the key is lowercase letters,
and the value runs to the *matching* close brace so LaTeX inside values keeps its braces.
"""

import re
from typing import Dict, List, Tuple

_KEY_START = re.compile(r"(?:^|(?<=\s))([a-z]+)=\{", re.MULTILINE)


def _find_pairs(text: str) -> List[Tuple[int, int, str, str]]:
    """Returns (start, end, key, value) for every well-formed pair. Pairs with unbalanced braces are skipped."""
    pairs = []
    pos = 0
    while True:
        m = _KEY_START.search(text, pos)
        if m is None:
            return pairs
        depth = 1
        i = m.end()
        while i < len(text) and depth > 0:
            if text[i] == "{":
                depth += 1
            elif text[i] == "}":
                depth -= 1
            i += 1
        if depth != 0:
            # Unterminated value, a new pair can still start on the next line
            print(f"Warning: unbalanced braces in '{m.group(1)}={{...', skipping to the next line")
            next_line = text.find("\n", m.end())
            if next_line == -1:
                return pairs
            pos = next_line + 1
            continue
        pairs.append((m.start(), i, m.group(1), text[m.end() : i - 1]))
        pos = i


def parse_key_values(text: str) -> Dict[str, str]:
    """Extract the `key={value}` pairs of `text`. A repeated key keeps its last value."""
    info: Dict[str, str] = {}
    for _, _, key, value in _find_pairs(text):
        info[key] = value
    return info


def parse_flags(text: str) -> List[str]:
    """The whitespace-separated words of `text` that aren't part of a key-value pair."""
    stripped = []
    pos = 0
    for start, end, _, _ in _find_pairs(text):
        stripped.append(text[pos:start])
        pos = end
    stripped.append(text[pos:])
    return " ".join(stripped).split()


def first_word(text: str) -> str:
    """The first whitespace-separated word, or '' if there isn't one."""
    words = text.split(maxsplit=1)
    return words[0] if words else ""
