import string
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Protocol, Sequence


class ManualNumbering(Protocol):
    def __getitem__(self, num: int) -> str: ...


class BasicManualNumbering(ManualNumbering):
    lookup: Sequence[str]

    def __init__(self, lookup: Sequence[str]) -> None:
        self.lookup = lookup

    def __getitem__(self, num: int) -> str:
        if num < 0:
            raise RuntimeError(f"Can't represent number {num} - too small")
        if num >= len(self.lookup):
            raise RuntimeError(f"Can't represent number {num} - too large")
        return self.lookup[num]


ROMAN_NUMBER_LOWER = [
    (1000, "m"),
    (900, "cm"),
    (500, "d"),
    (400, "cd"),
    (100, "c"),
    (90, "xc"),
    (50, "l"),
    (40, "xl"),
    (10, "x"),
    (9, "ix"),
    (5, "v"),
    (4, "iv"),
    (1, "i"),
]


class RomanManualNumbering(ManualNumbering):
    upper: bool

    def __init__(self, upper: bool) -> None:
        self.upper = upper

    def __getitem__(self, num: int) -> str:
        if num < 0:
            raise RuntimeError(f"Can't represent {num} with roman numerals")
        if num == 0:
            return "0"

        s = ""
        for divisor, roman in ROMAN_NUMBER_LOWER:
            s += roman * (num // divisor)
            num = num % divisor
        if self.upper:
            s = s.upper()

        return s


class ArabicManualNumbering(ManualNumbering):
    def __getitem__(self, num: int) -> str:
        return str(num)


ARABIC_NUMBERING = ArabicManualNumbering()
LOWER_ROMAN_NUMBERING = RomanManualNumbering(upper=False)
UPPER_ROMAN_NUMBERING = RomanManualNumbering(upper=True)
LOWER_ALPH_NUMBERING = BasicManualNumbering("0" + string.ascii_lowercase)
UPPER_ALPH_NUMBERING = BasicManualNumbering("0" + string.ascii_uppercase)


class CounterStyle(Enum):
    """
    Possible numbering styles for a counter, as named in the configuration.
    """

    Arabic = "arabic"
    AlphLower = "alph"
    AlphUpper = "Alph"
    RomanLower = "roman"
    RomanUpper = "Roman"

    def __getitem__(self, num: int) -> str:
        return COUNTER_STYLE_TO_MANUAL[self][num]


COUNTER_STYLE_TO_MANUAL: Dict[CounterStyle, ManualNumbering] = {
    CounterStyle.Arabic: ARABIC_NUMBERING,
    CounterStyle.AlphLower: LOWER_ALPH_NUMBERING,
    CounterStyle.AlphUpper: UPPER_ALPH_NUMBERING,
    CounterStyle.RomanLower: LOWER_ROMAN_NUMBERING,
    CounterStyle.RomanUpper: UPPER_ROMAN_NUMBERING,
}


@dataclass(frozen=True)
class SimpleCounterFormat:
    """
    How the number of a single anchor kind is displayed.
    """

    name: str
    """The name that prefixes the number in captions e.g. 'Figure' to produce 'Figure 1'. Empty for kinds shown as a bare number."""

    style: CounterStyle = CounterStyle.Arabic
    """The style of the numerical counter."""

    prefix: str = ""
    """Placed directly before the number e.g. '[' for bibliography entries."""

    postfix: str = ""
    """Placed directly after the number e.g. ')' for equations."""

    def number(self, num: int) -> str:
        """Only the styled number, as written into references."""
        return self.style[num]

    def resolve(self, num: int, with_name: bool = True) -> str:
        if with_name and self.name:
            c = self.name + " "
        else:
            c = ""
        return c + self.prefix + self.style[num] + self.postfix


DEFAULT_COUNTER_FORMATS: Mapping[str, SimpleCounterFormat] = {
    "figure": SimpleCounterFormat(name="Figure"),
    "footnote": SimpleCounterFormat(name=""),
    "bibliography": SimpleCounterFormat(name="", prefix="[", postfix="]"),
    "equation": SimpleCounterFormat(name="", prefix="(", postfix=")"),
}


def counter_formats(styles: Mapping[str, str]) -> Dict[str, SimpleCounterFormat]:
    """Apply per-kind style overrides, e.g. {'footnote': 'roman'}, to the default counter formats."""
    formats = dict(DEFAULT_COUNTER_FORMATS)
    for kind, style in styles.items():
        if kind not in formats:
            raise ValueError(f"Can't set the numbering style of unknown kind '{kind}'")
        try:
            counter_style = CounterStyle(style)
        except ValueError:
            raise ValueError(
                f"Unknown numbering style '{style}' for kind '{kind}', expected one of {[s.value for s in CounterStyle]}"
            )
        base = formats[kind]
        formats[kind] = SimpleCounterFormat(
            name=base.name,
            style=counter_style,
            prefix=base.prefix,
            postfix=base.postfix,
        )
    return formats
