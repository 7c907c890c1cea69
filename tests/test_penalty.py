import pytest

from corpus import Corpus
from fingermap import KEY_CENTER_COLUMN, KEY_FINGERS, KEY_HANDS, KEY_ROWS
from layout import INIT_LAYOUT, QWERTY_LAYOUT, KeyPress
import penalty
from penalty import (
    EmptyCorpusError, KeyPenaltyResult, calculate_penalty, format_penalty
)

def key(pos: int) -> KeyPress:
    return KeyPress("x", pos, KEY_FINGERS[pos], KEY_HANDS[pos],
        KEY_ROWS[pos], KEY_CENTER_COLUMN[pos])

def test_catalog_order():
    assert [p.name for p in penalty.init()] == [
        "base", "same finger", "long jump hand", "long jump",
        "long jump consecutive", "pinky/ring twist", "roll reversal",
        "same hand", "alternating hand", "roll out", "roll in",
        "long jump sandwich", "twist"]
    assert [p.keys_compared for p in penalty.init()] == [
        1, 2, 2, 2, 2, 2, 3, 4, 4, 2, 2, 3, 3]

def test_get_penalty():
    assert penalty.get_penalty("twist").fn is penalty.twist
    with pytest.raises(KeyError):
        penalty.get_penalty("nope")

def test_base():
    assert penalty.base(key(10), None, None, None) == 4.0
    assert penalty.base(key(0), None, None, None) == 3.0
    assert penalty.base(key(13), None, None, None) == 0.0
    assert penalty.base(key(32), None, None, None) == 0.0

@pytest.mark.parametrize("curr, old1, expected", [
    (14, 3, 5.0),   # left index, home after top
    (15, 3, 10.0),  # into the center column
    (4, 15, 15.0),  # center column to center column
    (3, 3, 0.0),    # same key
    (5, 4, 0.0),    # index fingers of different hands
    (13, 14, 0.0),
])
def test_same_finger(curr, old1, expected):
    assert penalty.same_finger(key(curr), key(old1), None, None) == expected

def test_rules_need_previous_keys():
    for p in penalty.init():
        if p.keys_compared > 1:
            assert p.fn(key(22), None, None, None) == 0.0

def test_long_jump_hand():
    assert penalty.long_jump_hand(key(22), key(1), None, None) == 1.0
    assert penalty.long_jump_hand(key(11), key(1), None, None) == 0.0
    assert penalty.long_jump_hand(key(28), key(1), None, None) == 0.0

def test_long_jump():
    assert penalty.long_jump(key(22), key(0), None, None) == 10.0
    assert penalty.long_jump(key(0), key(22), None, None) == 10.0
    assert penalty.long_jump(key(22), key(1), None, None) == 0.0
    assert penalty.long_jump(key(11), key(0), None, None) == 0.0

@pytest.mark.parametrize("curr, old1, expected", [
    (22, 1, 5.0),   # pinky bottom after ring top
    (0, 23, 5.0),   # pinky top after ring bottom
    (24, 1, 5.0),   # middle bottom after ring top
    (25, 2, 5.0),   # index bottom after middle top
    (25, 1, 5.0),   # index bottom after ring top
    (3, 24, 0.0),   # index top after middle bottom
    (25, 0, 0.0),
    (12, 1, 0.0),
])
def test_long_jump_consecutive(curr, old1, expected):
    assert penalty.long_jump_consecutive(
        key(curr), key(old1), None, None) == expected

@pytest.mark.parametrize("curr, old1, expected", [
    (12, 0, 10.0),  # ring home after pinky top
    (23, 0, 10.0),  # ring bottom after pinky top
    (0, 12, 10.0),  # pinky top after ring home
    (0, 23, 10.0),
    (9, 19, 10.0),  # right hand
    (1, 11, 0.0),   # ring top after pinky home
    (12, 9, 0.0),   # different hands
])
def test_pinky_ring_twist(curr, old1, expected):
    assert penalty.pinky_ring_twist(
        key(curr), key(old1), None, None) == expected

def test_roll_reversal():
    # ring, pinky, middle and middle, pinky, ring
    assert penalty.roll_reversal(key(13), key(11), key(12), None) == 20.0
    assert penalty.roll_reversal(key(12), key(11), key(13), None) == 20.0
    assert penalty.roll_reversal(key(13), key(12), key(11), None) == 0.0
    assert penalty.roll_reversal(key(13), key(11), key(19), None) == 0.0

def test_same_hand():
    assert penalty.same_hand(key(13), key(12), key(11), key(14)) == 0.5
    assert penalty.same_hand(key(13), key(12), key(11), None) == 0.0
    assert penalty.same_hand(key(13), key(12), key(11), key(18)) == 0.0

def test_alternating_hand():
    assert penalty.alternating_hand(key(13), key(18), key(12), key(19)) == 0.5
    assert penalty.alternating_hand(key(13), key(18), key(19), key(12)) == 0.0

def test_rolls():
    assert penalty.roll_out(key(12), key(13), None, None) == 0.125
    assert penalty.roll_out(key(13), key(12), None, None) == 0.0
    assert penalty.roll_out(key(14), key(32), None, None) == 0.0
    assert penalty.roll_out(key(8), key(13), None, None) == 0.0
    assert penalty.roll_in(key(13), key(12), None, None) == -0.125
    assert penalty.roll_in(key(32), key(14), None, None) == 0.0
    assert penalty.roll_in(key(12), key(13), None, None) == 0.0

def test_long_jump_sandwich():
    assert penalty.long_jump_sandwich(key(22), key(18), key(0), None) == 3.0
    assert penalty.long_jump_sandwich(key(22), key(0), key(18), None) == 0.0
    assert penalty.long_jump_sandwich(key(22), key(18), None, None) == 0.0

def test_twist():
    # index top, middle home, ring bottom
    assert penalty.twist(key(23), key(13), key(3), None) == 10.0
    # and back the other way
    assert penalty.twist(key(3), key(13), key(23), None) == 10.0
    # index bottom: the roll changes direction
    assert penalty.twist(key(25), key(13), key(3), None) == 0.0
    # rows not crossed in order
    assert penalty.twist(key(12), key(13), key(3), None) == 0.0
    assert penalty.twist(key(30), key(13), key(3), None) == 0.0

def test_hand_computed_total():
    result = calculate_penalty(Corpus("qa"), INIT_LAYOUT, detailed=True)
    # "q": base 3.0; "qa": base 0.5 and same finger 5.0
    assert result.total == 8.5
    assert result.scaled == 4.25
    by_name = {r.name: r for r in result.results}
    assert by_name["base"].total == 3.5
    assert dict(by_name["base"].high_keys) == {"q": 3.0, "a": 0.5}
    assert dict(by_name["same finger"].high_keys) == {"qa": 5.0}
    assert by_name["twist"].total == 0.0
    assert not by_name["twist"].high_keys

def test_unmapped_current_key_is_skipped():
    # "=" is on INIT but not on QWERTY
    assert calculate_penalty(Corpus("a="), QWERTY_LAYOUT).total == 0.5

def test_unmapped_previous_key_is_absent():
    assert calculate_penalty(Corpus("=a"), QWERTY_LAYOUT).total == 0.5

def test_scores_are_deterministic():
    corpus_ = Corpus("the quick brown fox")
    first = calculate_penalty(corpus_, INIT_LAYOUT, detailed=True)
    second = calculate_penalty(corpus_, INIT_LAYOUT, detailed=True)
    assert (first.total, first.scaled) == (second.total, second.scaled)
    assert ([r.total for r in first.results]
        == [r.total for r in second.results])

def test_detailed_matches_summary(sample_corpus):
    summary = calculate_penalty(sample_corpus, QWERTY_LAYOUT)
    detailed = calculate_penalty(sample_corpus, QWERTY_LAYOUT, detailed=True)
    assert summary.results == ()
    assert summary.total == detailed.total
    assert detailed.scaled == detailed.total / sample_corpus.length
    assert sum(r.total for r in detailed.results) == pytest.approx(
        detailed.total)
    assert len(detailed.results) == len(penalty.all_penalties)

def test_penalty_subset(sample_corpus):
    only_base = calculate_penalty(
        sample_corpus, INIT_LAYOUT, [penalty.get_penalty("base")], True)
    full = calculate_penalty(sample_corpus, INIT_LAYOUT, detailed=True)
    assert len(only_base.results) == 1
    assert only_base.total == pytest.approx(full.results[0].total)

def test_empty_corpus():
    with pytest.raises(EmptyCorpusError):
        calculate_penalty(Corpus(""), INIT_LAYOUT)
    assert issubclass(EmptyCorpusError, ValueError)

def test_top_keys():
    result = KeyPenaltyResult("x")
    result.high_keys.update({"a": 1.0, "b": -3.0, "c": 2.0})
    assert result.top_keys(2) == [("b", -3.0), ("c", 2.0)]
    assert result.top_keys(0) == []

def test_format_penalty():
    result = calculate_penalty(Corpus("qa"), INIT_LAYOUT, detailed=True)
    lines = format_penalty(INIT_LAYOUT, result, 1).split("\n")
    assert lines[0] == INIT_LAYOUT.layer_str().split("\n")[0]
    assert lines[4] == "total: 8.5; scaled: 4.25"
    assert lines[5] == "base: 3.5  / q: 3.0;"
    assert lines[6] == "same finger: 5.0  / qa: 5.0;"
    assert len(lines) == 4 + 1 + len(penalty.all_penalties)
