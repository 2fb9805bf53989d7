from dataclasses import dataclass
from typing import Dict, Iterable, Sequence

COUNTED_KINDS: Sequence[str] = ("figure", "footnote", "bibliography")
"""The anchor kinds numbered while a document is expanded.

Equations are deliberately absent - they are numbered by the resolver, in DOM scan order."""


@dataclass
class DocCounter:
    anchor_kind: str

    value: int = 0

    def increment(self) -> int:
        self.value += 1
        return self.value

    def reset(self) -> None:
        self.value = 0


class CounterState:
    """The named counters for a single document.

    A fresh CounterState is created for every document expansion and handed by reference to everything that numbers anchors.
    `next()` hands out 1, 2, 3... for each kind, and `reset()` makes the following `next()` hand out 1 again.
    """

    counters: Dict[str, DocCounter]

    def __init__(self, kinds: Iterable[str] = COUNTED_KINDS) -> None:
        self.counters = {}
        for kind in kinds:
            if kind in self.counters:
                raise RuntimeError(f"Counter {kind} declared twice")
            self.counters[kind] = DocCounter(kind)

    def _counter(self, kind: str) -> DocCounter:
        if kind not in self.counters:
            raise ValueError(f"Unknown counter kind '{kind}'")
        return self.counters[kind]

    def counted_kinds(self) -> Iterable[str]:
        return self.counters.keys()

    def next(self, kind: str) -> int:
        return self._counter(kind).increment()

    def reset(self, kind: str) -> None:
        self._counter(kind).reset()

    def peek(self, kind: str) -> int:
        """The last value handed out for `kind`, or 0 if there hasn't been one since the last reset."""
        return self._counter(kind).value
