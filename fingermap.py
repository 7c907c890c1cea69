# Static description of the physical keys: which finger, hand and row each
# of the 33 positions belongs to. Positions are laid out as
#
#    LEFT HAND   |    RIGHT HAND
#  0  1  2  3  4 |  5  6  7  8  9 10
# 11 12 13 14 15 | 16 17 18 19 20 21
# 22 23 24 25 26 | 27 28 29 30 31
#
#             32 (thumb key)

import enum

NUM_KEYS = 33
THUMB_KEY = 32

class Finger(enum.IntEnum):
    """Ordered from the thumb outward, so a larger value is further out."""
    THUMB = 0
    INDEX = 1
    MIDDLE = 2
    RING = 3
    PINKY = 4

class Hand(enum.IntEnum):
    LEFT = 0
    RIGHT = 1

class Row(enum.IntEnum):
    TOP = 0
    HOME = 1
    BOTTOM = 2
    THUMB = 3

_P, _R, _M, _I, _T = (Finger.PINKY, Finger.RING, Finger.MIDDLE,
    Finger.INDEX, Finger.THUMB)
_L, _H = Hand.LEFT, Hand.RIGHT

KEY_FINGERS = (
    _P, _R, _M, _I, _I,    _I, _I, _M, _R, _P, _P,
    _P, _R, _M, _I, _I,    _I, _I, _M, _R, _P, _P,
    _P, _R, _M, _I, _I,    _I, _I, _M, _R, _P,
    _T)
KEY_HANDS = (
    _L, _L, _L, _L, _L,    _H, _H, _H, _H, _H, _H,
    _L, _L, _L, _L, _L,    _H, _H, _H, _H, _H, _H,
    _L, _L, _L, _L, _L,    _H, _H, _H, _H, _H,
    _L)
KEY_ROWS = (Row.TOP,)*11 + (Row.HOME,)*11 + (Row.BOTTOM,)*10 + (Row.THUMB,)
# innermost column of each hand
KEY_CENTER_COLUMN = tuple(pos in (4, 5, 15, 16, 26, 27)
    for pos in range(NUM_KEYS))

# Anchors: the outer top-right key and the thumb key never move
PINNED_POSITIONS = (10, THUMB_KEY)
SWAPPABLE_POSITIONS = tuple(
    pos for pos in range(NUM_KEYS) if pos not in PINNED_POSITIONS)

def is_top_bottom_jump(row1: Row, row2: Row) -> bool:
    return {row1, row2} == {Row.TOP, Row.BOTTOM}
