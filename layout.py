import math
import os
import random
from typing import Dict, Iterator, NamedTuple, Optional, Sequence, Tuple

from fingermap import (
    Finger, Hand, Row, KEY_CENTER_COLUMN, KEY_FINGERS, KEY_HANDS, KEY_ROWS,
    NUM_KEYS, SWAPPABLE_POSITIONS
)

UNUSED = "\0"

# Offset of each position's base character in a layout descriptor. The
# shifted character sits SHIFT_OFFSET further along.
FILE_IDXS = (
    0,  1,  2,  3,  4,     6,  7,  8,  9,  10, 11,
    13, 14, 15, 16, 17,    19, 20, 21, 22, 23, 24,
    26, 27, 28, 29, 30,    32, 33, 34, 35, 36, 37)
SHIFT_OFFSET = 39

class KeyPress(NamedTuple):
    kc: str
    pos: int
    finger: Finger
    hand: Hand
    row: Row
    center: bool

PositionMap = Dict[str, KeyPress]

class Layout:

    loaded = {} # type: Dict[str, Layout]

    def __init__(self, name: str, lower: Sequence[str],
                 upper: Sequence[str]) -> None:
        """lower and upper are the unshifted and shifted characters of each
        of the 33 positions. Raises ValueError if either has another length.
        """
        if len(lower) != NUM_KEYS or len(upper) != NUM_KEYS:
            raise ValueError(
                f"layout {name!r} needs {NUM_KEYS} keys per layer, got "
                f"{len(lower)} and {len(upper)}")
        self.name = name
        self.lower = list(lower)
        self.upper = list(upper)

    @classmethod
    def from_string(cls, name: str, s: str) -> "Layout":
        """Builds a layout from a descriptor: three rows of base characters
        followed by three rows of shifted characters, 13 columns per row
        including the newline. Characters past the end of s are UNUSED.
        """
        lower = []
        upper = []
        for file_i in FILE_IDXS:
            lower.append(s[file_i] if file_i < len(s) else UNUSED)
            shifted_i = file_i + SHIFT_OFFSET
            upper.append(s[shifted_i] if shifted_i < len(s) else UNUSED)
        return cls(name, lower, upper)

    def copy(self, name: Optional[str] = None) -> "Layout":
        return Layout(self.name if name is None else name,
            self.lower, self.upper)

    def swap(self, i: int, j: int):
        """Swaps positions i and j on both layers, so shift pairs always
        stay on the same physical key.
        """
        for pos in (i, j):
            if not 0 <= pos < NUM_KEYS:
                raise IndexError(f"key position {pos} out of range")
        if i == j:
            return
        self.lower[i], self.lower[j] = self.lower[j], self.lower[i]
        self.upper[i], self.upper[j] = self.upper[j], self.upper[i]

    def shuffle(self, times: int, rng: Optional[random.Random] = None):
        if rng is None:
            rng = random
        for _ in range(times):
            self.swap(*rng.sample(SWAPPABLE_POSITIONS, k=2))

    def get_position_map(self) -> PositionMap:
        """Maps each ASCII character on the layout to its KeyPress.
        The shifted layer is scanned last, so it wins if a character
        appears on both layers.
        """
        map_ = {} # type: PositionMap
        for layer in (self.lower, self.upper):
            for pos, kc in enumerate(layer):
                if ord(kc) < 128:
                    map_[kc] = KeyPress(kc, pos, KEY_FINGERS[pos],
                        KEY_HANDS[pos], KEY_ROWS[pos], KEY_CENTER_COLUMN[pos])
        return map_

    def layer_str(self, shifted: bool = False) -> str:
        k = [display_name(kc) for kc in (self.upper if shifted else self.lower)]
        return (
            f"{' '.join(k[0:5])} | {' '.join(k[5:11])}\n"
            f"{' '.join(k[11:16])} | {' '.join(k[16:22])}\n"
            f"{' '.join(k[22:27])} | {' '.join(k[27:32])}\n"
            f"        {k[32]}")

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        rows = []
        for layer in (self.lower, self.upper):
            rows.append("".join(layer[0:5]) + " " + "".join(layer[5:11]))
            rows.append("".join(layer[11:16]) + " " + "".join(layer[16:22]))
            rows.append("".join(layer[22:27]) + " " + "".join(layer[27:33]))
        return "\n".join(rows) + "\n"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Layout):
            return NotImplemented
        return self.lower == other.lower and self.upper == other.upper

def display_name(kc: str) -> str:
    return " " if kc == UNUSED else kc

def permutations(layout_: Layout, depth: int) -> Iterator[Layout]:
    """Yields every layout reachable from layout_ by swapping depth
    disjoint pairs of swappable positions, each combination once. Depth 0
    yields a single copy of layout_.
    """
    if depth < 0:
        raise ValueError(f"permutation depth must be >= 0, got {depth}")
    for pairs in _disjoint_pairs(SWAPPABLE_POSITIONS, depth):
        lay = layout_.copy()
        for i, j in pairs:
            lay.swap(i, j)
        yield lay

def _disjoint_pairs(positions: Tuple[int, ...], n: int):
    # The first pair always holds the smallest chosen position, which makes
    # every set of pairs come out exactly once.
    if n == 0:
        yield ()
        return
    for a_index, a in enumerate(positions):
        rest = positions[a_index+1:]
        for b in rest:
            remaining = tuple(pos for pos in rest if pos != b)
            for others in _disjoint_pairs(remaining, n - 1):
                yield ((a, b),) + others

def count_permutations(depth: int,
                       num_swappable: int = len(SWAPPABLE_POSITIONS)) -> int:
    """How many layouts permutations() yields for the given depth."""
    if depth < 0:
        raise ValueError(f"permutation depth must be >= 0, got {depth}")
    chosen = 2 * depth
    if chosen > num_swappable:
        return 0
    return (math.comb(num_swappable, chosen) * math.factorial(chosen)
        // (2**depth * math.factorial(depth)))

# Looked up case-insensitively, unlike layout files
builtin_layouts = {} # type: Dict[str, Layout]

def _builtin(name: str, lower: str, upper: str) -> Layout:
    lay = Layout(name, lower, upper)
    builtin_layouts[name.lower()] = lay
    return lay

INIT_LAYOUT = _builtin("INITIAL",
    "qupg/" "zlwy'=" "arnsd" "fhtio-" "jkvc;" "xmb,." "e",
    "QUPG?" "ZLWY\"+" "ARNSD" "FHTIO_" "JKVC:" "XMB<>" "E")
QWERTY_LAYOUT = _builtin("QWERTY",
    "qwert" "yuiop-" "asdfg" "hjkl;'" "zxcvb" "nm,./" "\0",
    "QWERT" "YUIOP_" "ASDFG" "HJKL:\"" "ZXCVB" "NM<>?" "\0")
DVORAK_LAYOUT = _builtin("DVORAK",
    "',.py" "fgcrl/" "aoeui" "dhtns-" ";qjkx" "bmwvz" "\0",
    "\",.PY" "FGCRL?" "AOEUI" "DHTNS_" ":QJKX" "BMWVZ" "\0")
COLEMAK_LAYOUT = _builtin("COLEMAK",
    "qwfpg" "jluy;-" "arstd" "hneio'" "zxcvb" "km,./" "\0",
    "QWFPG" "JLUY:_" "ARSTD" "HNEIO\"" "ZXCVB" "KM<>?" "\0")
QGMLWY_LAYOUT = _builtin("QGMLWY",
    "qgmlw" "yfub;-" "dstnr" "iaeoh'" "zxcvj" "kp,./" "\0",
    "QGMLW" "YFUB:_" "DSTNR" "IAEOH\"" "ZXCVJ" "KP<>?" "\0")
WORKMAN_LAYOUT = _builtin("WORKMAN",
    "qdrwb" "jfup;-" "ashtg" "yneoi'" "zxmcv" "kl,./" "\0",
    "QDRWB" "JFUP:_" "ASHTG" "YNEOI\"" "ZXMCV" "KL<>?" "\0")
MALTRON_LAYOUT = _builtin("MALTRON",
    "qpycb" "vmuzl=" "anisf" "dthor'" ",.jg/" ";wk-x" "e",
    "QPYCB" "VMUZL+" "ANISF" "DTHOR\"" "<>JG?" ":WK_X" "E")
MTGAP_LAYOUT = _builtin("MTGAP",
    "ypou-" "bdlckj" "inea," "mhtsrv" "(\"'._" ")fwgx" "z",
    "YPOU:" "BDLCKJ" "INEA;" "MHTSRV" "&?*=<" ">FWGX" "Z")
CAPEWELL_LAYOUT = _builtin("CAPEWELL",
    ".ywdf" "jpluq/" "aersg" "btnio-" "xzcv;" "kwh,'" "\0",
    ">YWDF" "JPLUQ?" "AERSG" "BTNIO_" "XZCV:" "KWH<\"" "\0")
ARENSITO_LAYOUT = _builtin("ARENSITO",
    "ql,p\0" "\0fudk\0" "arenb" "gsito\0" "zw.hj" "vcymx" "\0",
    "QL<P\0" "\0FUDK\0" "ARENB" "GSITO\0" "ZW>HJ" "VCYMX" "\0")

# In the order they are reported by run-ref
REFERENCE_LAYOUTS = (QWERTY_LAYOUT, DVORAK_LAYOUT, COLEMAK_LAYOUT,
    QGMLWY_LAYOUT, WORKMAN_LAYOUT, MALTRON_LAYOUT, MTGAP_LAYOUT,
    CAPEWELL_LAYOUT, ARENSITO_LAYOUT, INIT_LAYOUT)

def get_layout(name: str) -> Layout:
    """Returns a built-in layout by name, or loads a layout descriptor from
    the path name or layouts/<name>. Raises FileNotFoundError if none is
    found. Files are cached under name exactly as given.
    """
    if name.lower() in builtin_layouts:
        return builtin_layouts[name.lower()]
    if name not in Layout.loaded:
        path = name if os.path.isfile(name) else "layouts/" + name
        with open(path) as file:
            Layout.loaded[name] = Layout.from_string(
                os.path.basename(name), file.read())
    return Layout.loaded[name]
