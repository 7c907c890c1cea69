import random

import pytest

import analysis
from analysis import BestLayouts
from corpus import Corpus
from layout import INIT_LAYOUT, QWERTY_LAYOUT, DVORAK_LAYOUT, permutations
from penalty import Penalty, calculate_penalty

def score(x: float) -> Penalty:
    return Penalty(x, x, ())

@pytest.fixture
def fox():
    return Corpus("the quick brown fox")

def test_best_layouts_capacity_and_order():
    best = BestLayouts(3)
    for x in (5.0, 1.0, 4.0, 2.0, 3.0):
        best.insert(INIT_LAYOUT, score(x))
        assert len(best) <= 3
        assert best.scores() == sorted(best.scores())
    assert best.scores() == [1.0, 2.0, 3.0]
    assert best.best().penalty.scaled == 1.0

def test_best_layouts_rejects_when_full():
    best = BestLayouts(1)
    assert best.insert(INIT_LAYOUT, score(2.0))
    assert not best.insert(QWERTY_LAYOUT, score(3.0))
    assert best.insert(QWERTY_LAYOUT, score(1.0))
    assert best[0].layout == QWERTY_LAYOUT

def test_best_layouts_ties_keep_first():
    best = BestLayouts(1)
    best.insert(INIT_LAYOUT, score(1.0))
    assert not best.insert(QWERTY_LAYOUT, score(1.0))
    assert best[0].layout == INIT_LAYOUT

    best = BestLayouts(2)
    for lay in (INIT_LAYOUT, QWERTY_LAYOUT, DVORAK_LAYOUT):
        best.insert(lay, score(1.0))
    assert [entry.layout for entry in best] == [INIT_LAYOUT, QWERTY_LAYOUT]

def test_best_layouts_store_copies():
    lay = INIT_LAYOUT.copy()
    best = BestLayouts(2)
    best.insert(lay, score(1.0))
    lay.swap(0, 1)
    assert best[0].layout == INIT_LAYOUT
    assert best[0].layout is not lay

def test_best_layouts_empty():
    best = BestLayouts()
    assert best.best() is None
    assert len(best) == 0
    with pytest.raises(ValueError):
        BestLayouts(0)

def run_anneal(corpus_, seed):
    return [(step.i, step.delta, step.accepted, repr(step.layout))
        for step in analysis.anneal(
            corpus_, INIT_LAYOUT, max_swaps=3, rng=random.Random(seed))]

def test_anneal_is_reproducible(sample_corpus, short_schedule):
    first = run_anneal(sample_corpus, 42)
    assert first == run_anneal(sample_corpus, 42)
    assert first != run_anneal(sample_corpus, 43)

def test_anneal_steps(sample_corpus, short_schedule):
    base = INIT_LAYOUT.copy()
    steps = list(analysis.anneal(
        sample_corpus, base, max_swaps=2, rng=random.Random(1)))
    assert [step.i for step in steps] == list(range(1, short_schedule + 1))
    assert base == INIT_LAYOUT
    accepted_score = calculate_penalty(sample_corpus, base).scaled
    for step in steps:
        assert step.delta == pytest.approx(
            step.penalty.scaled - accepted_score)
        if step.delta < 0:
            assert step.accepted
        if step.accepted:
            accepted_score = step.penalty.scaled
        assert step.score == accepted_score
        assert step.layout.lower[10] == INIT_LAYOUT.lower[10]
        assert step.layout.lower[32] == INIT_LAYOUT.lower[32]

def test_anneal_defaults_to_random_module(sample_corpus, short_schedule):
    random.seed(9)
    first = [step.score
        for step in analysis.anneal(sample_corpus, INIT_LAYOUT)]
    random.seed(9)
    second = [step.score for step in analysis.anneal(
        sample_corpus, INIT_LAYOUT, rng=None)]
    assert len(first) == short_schedule
    assert first == second

def test_anneal_needs_a_swap(sample_corpus):
    with pytest.raises(ValueError):
        next(analysis.anneal(sample_corpus, INIT_LAYOUT, max_swaps=0))

def test_simulate(sample_corpus, short_schedule):
    steps = []
    best = analysis.simulate(sample_corpus, INIT_LAYOUT, top=3,
        rng=random.Random(5), on_step=steps.append)
    assert len(steps) == short_schedule
    accepted = [step.penalty.scaled for step in steps if step.accepted]
    assert accepted
    assert 1 <= len(best) <= 3
    assert best.scores() == sorted(best.scores())
    assert best.best().penalty.scaled == min(accepted)
    for entry in best:
        assert calculate_penalty(sample_corpus, entry.layout).scaled \
            == entry.penalty.scaled

def test_evaluate_permutations(fox):
    best = analysis.evaluate_permutations(fox, INIT_LAYOUT, depth=1, top=5)
    expected = sorted(calculate_penalty(fox, lay).scaled
        for lay in permutations(INIT_LAYOUT, 1))
    assert best.scores() == expected[:5]

def test_evaluate_permutations_in_parallel(fox):
    serial = analysis.evaluate_permutations(fox, INIT_LAYOUT, top=5)
    parallel = analysis.evaluate_permutations(
        fox, INIT_LAYOUT, top=5, processes=2)
    assert parallel.scores() == serial.scores()
    assert ([entry.layout for entry in parallel]
        == [entry.layout for entry in serial])

def test_refine_improves_until_local_optimum(fox):
    previous = calculate_penalty(fox, INIT_LAYOUT).scaled
    final = INIT_LAYOUT
    steps = 0
    for final, result, neighbors in analysis.refine(fox, INIT_LAYOUT):
        steps += 1
        assert result.scaled < previous
        assert result.scaled == neighbors.best().penalty.scaled
        assert calculate_penalty(fox, final).scaled == result.scaled
        previous = result.scaled
    assert steps > 0
    nearby = analysis.evaluate_permutations(fox, final)
    assert nearby.best().penalty.scaled >= previous

def test_refine_depth_zero_stops(fox):
    assert list(analysis.refine(fox, INIT_LAYOUT, depth=0)) == []
