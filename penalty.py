# Ergonomic penalty model. Each rule looks at the current keypress and up to
# three keypresses before it (most recent first) and returns a weight; the
# weights are summed over every quartad of the corpus, times its count.

from __future__ import annotations

from collections import defaultdict
from typing import Callable, NamedTuple, Optional, Sequence, TYPE_CHECKING

from fingermap import Finger, Row, is_top_bottom_jump
from layout import KeyPress, Layout

if TYPE_CHECKING:
    from corpus import Corpus

OptKey = Optional[KeyPress]

class EmptyCorpusError(ValueError):
    """A penalty cannot be scaled by the length of an empty corpus."""

class KeyPenalty(NamedTuple):
    name: str
    keys_compared: int
    fn: Callable[[KeyPress, OptKey, OptKey, OptKey], float]

class KeyPenaltyResult:

    def __init__(self, name: str) -> None:
        self.name = name
        self.total = 0.0
        self.high_keys = defaultdict(float) # type: dict[str, float]

    def top_keys(self, n: int = 5) -> list[tuple[str, float]]:
        """The n substrings contributing the most, by absolute weight."""
        return sorted(self.high_keys.items(), key=lambda kv: abs(kv[1]),
            reverse=True)[:n]

    def __str__(self) -> str:
        return f"{self.name}: {self.total}"

class Penalty(NamedTuple):
    total: float
    scaled: float
    results: tuple[KeyPenaltyResult, ...]

BASE_PENALTY = (
    3.0, 1.0, 1.0, 1.0, 3.0,    3.0, 1.0, 1.0, 1.0, 3.0, 4.0,
    0.5, 0.5, 0.0, 0.0, 1.0,    1.0, 0.0, 0.0, 0.5, 0.5, 1.0,
    3.0, 2.5, 2.0, 2.0, 3.0,    3.0, 2.0, 2.0, 2.5, 3.0,
    0.0)

def is_roll_out(curr: Finger, prev: Finger) -> bool:
    return prev != Finger.THUMB and curr > prev

def is_roll_in(curr: Finger, prev: Finger) -> bool:
    return curr != Finger.THUMB and curr < prev

def base(curr: KeyPress, old1: OptKey, old2: OptKey, old3: OptKey):
    return BASE_PENALTY[curr.pos]

def same_finger(curr: KeyPress, old1: OptKey, old2: OptKey, old3: OptKey):
    if old1 is None:
        return 0.0
    if (curr.hand != old1.hand or curr.finger != old1.finger
            or curr.pos == old1.pos):
        return 0.0
    # reaching into the center column makes it worse
    return 5.0 + 5.0*curr.center + 5.0*old1.center

def long_jump_hand(curr: KeyPress, old1: OptKey, old2: OptKey, old3: OptKey):
    if old1 is None or curr.hand != old1.hand:
        return 0.0
    return 1.0 if is_top_bottom_jump(curr.row, old1.row) else 0.0

def long_jump(curr: KeyPress, old1: OptKey, old2: OptKey, old3: OptKey):
    if old1 is None:
        return 0.0
    if curr.hand != old1.hand or curr.finger != old1.finger:
        return 0.0
    return 10.0 if is_top_bottom_jump(curr.row, old1.row) else 0.0

def long_jump_consecutive(curr: KeyPress, old1: OptKey, old2: OptKey,
                          old3: OptKey):
    if old1 is None or curr.hand != old1.hand:
        return 0.0
    if not is_top_bottom_jump(curr.row, old1.row):
        return 0.0
    fingers = {curr.finger, old1.finger}
    if fingers in ({Finger.RING, Finger.PINKY}, {Finger.MIDDLE, Finger.RING}):
        return 5.0
    if (curr.finger == Finger.INDEX
            and old1.finger in (Finger.MIDDLE, Finger.RING)
            and old1.row == Row.TOP and curr.row == Row.BOTTOM):
        return 5.0
    return 0.0

def pinky_ring_twist(curr: KeyPress, old1: OptKey, old2: OptKey,
                     old3: OptKey):
    """The pinky reaching above the ring finger, e.g. QA/AQ, PL/LP on
    Qwerty.
    """
    if old1 is None or curr.hand != old1.hand:
        return 0.0
    if curr.finger == Finger.RING and old1.finger == Finger.PINKY:
        if old1.row == Row.TOP and curr.row in (Row.HOME, Row.BOTTOM):
            return 10.0
    elif curr.finger == Finger.PINKY and old1.finger == Finger.RING:
        if curr.row == Row.TOP and old1.row in (Row.HOME, Row.BOTTOM):
            return 10.0
    return 0.0

def roll_reversal(curr: KeyPress, old1: OptKey, old2: OptKey, old3: OptKey):
    if old1 is None or old2 is None:
        return 0.0
    if not curr.hand == old1.hand == old2.hand:
        return 0.0
    fingers = (curr.finger, old1.finger, old2.finger)
    if fingers in ((Finger.MIDDLE, Finger.PINKY, Finger.RING),
                   (Finger.RING, Finger.PINKY, Finger.MIDDLE)):
        return 20.0
    return 0.0

def same_hand(curr: KeyPress, old1: OptKey, old2: OptKey, old3: OptKey):
    if old1 is None or old2 is None or old3 is None:
        return 0.0
    if curr.hand == old1.hand == old2.hand == old3.hand:
        return 0.5
    return 0.0

def alternating_hand(curr: KeyPress, old1: OptKey, old2: OptKey,
                     old3: OptKey):
    if old1 is None or old2 is None or old3 is None:
        return 0.0
    if (curr.hand != old1.hand and old1.hand != old2.hand
            and old2.hand != old3.hand):
        return 0.5
    return 0.0

def roll_out(curr: KeyPress, old1: OptKey, old2: OptKey, old3: OptKey):
    if old1 is None or curr.hand != old1.hand:
        return 0.0
    return 0.125 if is_roll_out(curr.finger, old1.finger) else 0.0

def roll_in(curr: KeyPress, old1: OptKey, old2: OptKey, old3: OptKey):
    if old1 is None or curr.hand != old1.hand:
        return 0.0
    return -0.125 if is_roll_in(curr.finger, old1.finger) else 0.0

def long_jump_sandwich(curr: KeyPress, old1: OptKey, old2: OptKey,
                       old3: OptKey):
    """Same as long jump, but with one keypress in between."""
    if old2 is None:
        return 0.0
    if curr.hand != old2.hand or curr.finger != old2.finger:
        return 0.0
    return 3.0 if is_top_bottom_jump(curr.row, old2.row) else 0.0

def twist(curr: KeyPress, old1: OptKey, old2: OptKey, old3: OptKey):
    """Rolling across all three rows in one direction, e.g. "tgb"-shaped
    diagonals typed with a roll.
    """
    if old1 is None or old2 is None:
        return 0.0
    if not curr.hand == old1.hand == old2.hand:
        return 0.0
    rows = (old2.row, old1.row, curr.row)
    if rows not in ((Row.TOP, Row.HOME, Row.BOTTOM),
                    (Row.BOTTOM, Row.HOME, Row.TOP)):
        return 0.0
    if ((is_roll_out(curr.finger, old1.finger)
                and is_roll_out(old1.finger, old2.finger))
            or (is_roll_in(curr.finger, old1.finger)
                and is_roll_in(old1.finger, old2.finger))):
        return 10.0
    return 0.0

# Order matters: it is the order of the per-rule report
all_penalties = (
    KeyPenalty("base", 1, base),
    KeyPenalty("same finger", 2, same_finger),
    KeyPenalty("long jump hand", 2, long_jump_hand),
    KeyPenalty("long jump", 2, long_jump),
    KeyPenalty("long jump consecutive", 2, long_jump_consecutive),
    KeyPenalty("pinky/ring twist", 2, pinky_ring_twist),
    KeyPenalty("roll reversal", 3, roll_reversal),
    KeyPenalty("same hand", 4, same_hand),
    KeyPenalty("alternating hand", 4, alternating_hand),
    KeyPenalty("roll out", 2, roll_out),
    KeyPenalty("roll in", 2, roll_in),
    KeyPenalty("long jump sandwich", 3, long_jump_sandwich),
    KeyPenalty("twist", 3, twist),
)

def init() -> tuple[KeyPenalty, ...]:
    return all_penalties

def get_penalty(name: str) -> KeyPenalty:
    for penalty in all_penalties:
        if penalty.name == name:
            return penalty
    raise KeyError(name)

def calculate_penalty(corpus_: Corpus, layout_: Layout,
                      penalties: Sequence[KeyPenalty] = all_penalties,
                      detailed: bool = False) -> Penalty:
    """Scores layout_ against the quartads of corpus_. Lower is better.

    With detailed, also returns the total of each penalty and the corpus
    substrings that contributed to it. Raises EmptyCorpusError if the
    corpus has no characters.
    """
    if corpus_.length <= 0:
        raise EmptyCorpusError("cannot score against an empty corpus")
    results = tuple(KeyPenaltyResult(p.name) for p in penalties)
    total = 0.0
    pos_map = layout_.get_position_map()

    for quartad, count in corpus_.quartads.items():
        curr = pos_map.get(quartad[-1])
        if curr is None:
            continue
        olds = [pos_map.get(kc) for kc in reversed(quartad[:-1])]
        olds.extend((None,) * (3 - len(olds)))
        old1, old2, old3 = olds

        for j, penalty in enumerate(penalties):
            p = penalty.fn(curr, old1, old2, old3) * count
            if not p:
                continue
            total += p
            if detailed:
                results[j].total += p
                results[j].high_keys[quartad[-penalty.keys_compared:]] += p

    return Penalty(total, total / corpus_.length,
        results if detailed else ())

def format_penalty(layout_: Layout, penalty: Penalty,
                   high_keys: int = 5) -> str:
    lines = [layout_.layer_str(),
        f"total: {penalty.total}; scaled: {penalty.scaled}"]
    for result in penalty.results:
        keys = " ".join(f"{k}: {v};" for k, v in result.top_keys(high_keys))
        lines.append(f"{result}  / {keys}")
    return "\n".join(lines)
