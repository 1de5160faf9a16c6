from __future__ import annotations

from pairing_core.counters import PairCounters


def test_starts_at_zero() -> None:
    assert set(PairCounters().to_dict().values()) == {0}


def test_summary_lines() -> None:
    counters = PairCounters(left_paired=3, right_paired=3, left_single=1, right_single=12)
    assert counters.summary_lines() == [
        "Left paired: 3              Right paired: 3",
        "Left single: 1              Right single: 12",
    ]


def test_summary_lines_with_duplicates() -> None:
    counters = PairCounters(left_duplicates=2, right_duplicates=5)
    lines = counters.summary_lines(include_duplicates=True)
    assert lines[-1] == "Left duplicates: 2          Right duplicates: 5"
    assert len(lines) == 3
