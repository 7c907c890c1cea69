# Turns a corpus into quartad counts: every trailing window of up to four
# typable characters, counted. This is done once per corpus, after which a
# layout can be scored in time proportional to the number of distinct
# quartads rather than the length of the corpus.
# Members of Corpus:
    # name: str
    # length: int - number of characters in the raw text
    # quartads: Counter[str] - quartad text to occurrence count

from collections import Counter
from typing import Dict, Optional

import layout

QUARTAD_LENGTH = 4

def prepare_quartad_list(text: str, pos_map: layout.PositionMap) -> Counter:
    """pos_map only decides which characters are typable. An untypable
    character ends the current window; the next window starts right
    after it.
    """
    text = text.replace("\n", " ")
    quartads = Counter()
    start = 0
    for i, char in enumerate(text):
        if char not in pos_map:
            start = i + 1
            continue
        end = i + 1
        if end - start > QUARTAD_LENGTH:
            start = end - QUARTAD_LENGTH
        quartads[text[start:end]] += 1
    return quartads

class Corpus:

    def __init__(self, text: str, name: str = "",
                 reference: Optional[layout.Layout] = None) -> None:
        """reference is the layout whose keys decide where quartads are
        split. It defaults to the initial layout and should be the same
        for every corpus whose scores are compared.
        """
        if reference is None:
            reference = layout.INIT_LAYOUT
        self.name = name
        self.length = len(text)
        self.quartads = prepare_quartad_list(
            text, reference.get_position_map())

    @classmethod
    def from_file(cls, path: str,
                  reference: Optional[layout.Layout] = None) -> "Corpus":
        with open(path, encoding="utf-8", errors="ignore") as file:
            return cls(file.read(), path, reference)

    def __str__(self) -> str:
        return (f"{self.name} ({self.length} characters, "
            f"{len(self.quartads)} distinct quartads)")

loaded = {} # type: Dict[str, Corpus]

def get_corpus(path: str) -> Corpus:
    if path not in loaded:
        loaded[path] = Corpus.from_file(path)
    return loaded[path]
