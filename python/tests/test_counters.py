import pytest

from folio.render.counters import CounterState
from folio.render.manual_numbering import (
    LOWER_ALPH_NUMBERING,
    UPPER_ROMAN_NUMBERING,
    counter_formats,
)


def test_counters_start_at_one_and_increment():
    counters = CounterState()
    assert [counters.next("figure") for _ in range(3)] == [1, 2, 3]
    # Kinds are independent
    assert counters.next("footnote") == 1
    assert counters.peek("figure") == 3


def test_counter_reset_restarts_from_one():
    counters = CounterState()
    counters.next("bibliography")
    counters.next("bibliography")
    counters.reset("bibliography")
    assert counters.peek("bibliography") == 0
    assert counters.next("bibliography") == 1
    assert counters.next("bibliography") == 2


def test_equations_arent_counted_during_expansion():
    counters = CounterState()
    assert "equation" not in counters.counted_kinds()
    with pytest.raises(ValueError):
        counters.next("equation")


def test_separate_counter_states_dont_share_values():
    a = CounterState()
    b = CounterState()
    a.next("figure")
    a.next("figure")
    assert b.next("figure") == 1


def test_counter_declared_twice():
    with pytest.raises(RuntimeError):
        CounterState(["figure", "figure"])


def test_manual_numbering():
    assert UPPER_ROMAN_NUMBERING[1994] == "MCMXCIV"
    assert LOWER_ALPH_NUMBERING[26] == "z"
    with pytest.raises(RuntimeError):
        LOWER_ALPH_NUMBERING[27]


def test_default_counter_formats():
    formats = counter_formats({})
    assert formats["figure"].resolve(2) == "Figure 2"
    assert formats["figure"].number(2) == "2"
    assert formats["bibliography"].resolve(3) == "[3]"
    assert formats["equation"].resolve(4) == "(4)"
    assert formats["footnote"].resolve(5) == "5"


def test_counter_style_overrides():
    formats = counter_formats({"footnote": "roman", "figure": "Alph"})
    assert formats["footnote"].resolve(4) == "iv"
    assert formats["figure"].resolve(3) == "Figure C"

    with pytest.raises(ValueError):
        counter_formats({"footnote": "hieroglyphs"})
    with pytest.raises(ValueError):
        counter_formats({"table": "roman"})
