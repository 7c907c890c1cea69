import bisect
import logging
import multiprocessing
import random
from typing import Callable, Iterator, NamedTuple, Optional, Sequence

import annealing
from corpus import Corpus
import layout
from penalty import KeyPenalty, Penalty, all_penalties, calculate_penalty

logger = logging.getLogger(__name__)

class BestLayoutsEntry(NamedTuple):
    layout: layout.Layout
    penalty: Penalty

class BestLayouts:
    """The best layouts seen so far, sorted by ascending scaled penalty and
    never holding more than capacity entries. Entries are copies, so the
    caller may keep mutating the layouts it inserts. Among equal scores,
    the entry inserted first ranks first and is the last to be evicted.
    """

    def __init__(self, capacity: int = 1) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.entries = [] # type: list[BestLayoutsEntry]

    def insert(self, layout_: layout.Layout, penalty: Penalty) -> bool:
        """Returns whether the layout made it into the list."""
        if (len(self.entries) >= self.capacity
                and penalty.scaled >= self.entries[-1].penalty.scaled):
            return False
        i = bisect.bisect_right(self.entries, penalty.scaled,
            key=lambda entry: entry.penalty.scaled)
        self.entries.insert(i, BestLayoutsEntry(layout_.copy(), penalty))
        while len(self.entries) > self.capacity:
            self.entries.pop()
        return True

    def best(self) -> Optional[BestLayoutsEntry]:
        return self.entries[0] if self.entries else None

    def scores(self) -> list[float]:
        return [entry.penalty.scaled for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[BestLayoutsEntry]:
        return iter(self.entries)

    def __getitem__(self, i: int) -> BestLayoutsEntry:
        return self.entries[i]

class AnnealStep(NamedTuple):
    i: int
    temperature: float
    delta: float
    accepted: bool
    layout: layout.Layout
    penalty: Penalty
    score: float # scaled penalty of the accepted layout after this step

def anneal(corpus_: Corpus, layout_: layout.Layout,
           penalties: Sequence[KeyPenalty] = all_penalties,
           max_swaps: int = 3, rng: Optional[random.Random] = None):
    """Runs one generation of the annealing schedule starting from layout_,
    which is not modified. Yields an AnnealStep for every iteration,
    accepted or not. Each iteration makes between 1 and max_swaps random
    swaps to the last accepted layout.
    """
    if max_swaps < 1:
        raise ValueError(f"max_swaps must be at least 1, got {max_swaps}")
    if rng is None:
        rng = random
    accepted_layout = layout_.copy()
    accepted_score = calculate_penalty(
        corpus_, accepted_layout, penalties).scaled

    for i in annealing.simulation_range():
        candidate = accepted_layout.copy()
        candidate.shuffle(rng.randint(1, max_swaps), rng)
        penalty_ = calculate_penalty(corpus_, candidate, penalties)
        delta = penalty_.scaled - accepted_score
        accepted = annealing.accept_transition(delta, i, rng)
        if accepted:
            accepted_layout = candidate
            accepted_score = penalty_.scaled
        yield AnnealStep(i, annealing.temperature(i), delta, accepted,
            candidate, penalty_, accepted_score)

def simulate(corpus_: Corpus, layout_: layout.Layout,
             penalties: Sequence[KeyPenalty] = all_penalties,
             top: int = 1, max_swaps: int = 3,
             rng: Optional[random.Random] = None,
             on_step: Optional[Callable[[AnnealStep], None]] = None
             ) -> BestLayouts:
    """One generation of annealing. Every accepted layout is offered to
    the returned BestLayouts.
    """
    best = BestLayouts(top)
    for step in anneal(corpus_, layout_, penalties, max_swaps, rng):
        if step.accepted:
            logger.debug(f"Iteration {step.i} accepted with penalty "
                f"{step.penalty.scaled}")
            best.insert(step.layout, step.penalty)
        else:
            logger.debug(f"Iteration {step.i} not accepted")
        if on_step is not None:
            on_step(step)
    return best

# Set in each worker process by the pool initializer, so the corpus is only
# sent once per process
_worker_args = {}

def _init_worker(corpus_: Corpus, penalties: Sequence[KeyPenalty]):
    _worker_args["corpus"] = corpus_
    _worker_args["penalties"] = penalties

def _score_worker(layout_: layout.Layout):
    return layout_, calculate_penalty(
        _worker_args["corpus"], layout_, _worker_args["penalties"])

def evaluate_permutations(corpus_: Corpus, layout_: layout.Layout,
                          penalties: Sequence[KeyPenalty] = all_penalties,
                          depth: int = 1, top: int = 1,
                          processes: int = 1) -> BestLayouts:
    """Scores every layout within depth swaps of layout_. With more than
    one process, scoring is spread over a pool while the results are
    still collected here one at a time.
    """
    best = BestLayouts(top)
    candidates = layout.permutations(layout_, depth)
    if processes > 1:
        with multiprocessing.Pool(
                processes, _init_worker, (corpus_, penalties)) as pool:
            scored = pool.imap(_score_worker, candidates, 200)
            for i, (lay, penalty_) in enumerate(scored):
                logger.debug(f"Permutation {i}: {penalty_.scaled}")
                best.insert(lay, penalty_)
    else:
        for i, lay in enumerate(candidates):
            penalty_ = calculate_penalty(corpus_, lay, penalties)
            logger.debug(f"Permutation {i}: {penalty_.scaled}")
            best.insert(lay, penalty_)
    return best

def refine(corpus_: Corpus, layout_: layout.Layout,
           penalties: Sequence[KeyPenalty] = all_penalties,
           depth: int = 1, top: int = 1, processes: int = 1):
    """Yields (newlayout, penalty, neighbors) after each step. Each step
    moves to the best layout within depth swaps, as long as it is strictly
    better; stops at a local optimum.
    """
    current = layout_.copy()
    current_score = calculate_penalty(corpus_, current, penalties).scaled
    while True:
        neighbors = evaluate_permutations(
            corpus_, current, penalties, depth, top, processes)
        best = neighbors.best()
        if best is None or best.penalty.scaled >= current_score:
            return # no swaps are good
        current = best.layout.copy()
        current_score = best.penalty.scaled
        yield current, best.penalty, neighbors
