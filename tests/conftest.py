import pytest

import annealing
from corpus import Corpus

SAMPLE_TEXT = (
    "The quick brown fox jumps over the lazy dog.\n"
    "Pack my box with five dozen liquor jugs; then sphinx of black quartz, "
    "judge my vow.\n"
)

@pytest.fixture
def sample_corpus():
    return Corpus(SAMPLE_TEXT, "sample")

@pytest.fixture
def corpus_file(tmp_path):
    path = tmp_path / "corpus.txt"
    path.write_text(SAMPLE_TEXT, encoding="utf-8")
    return str(path)

@pytest.fixture
def short_schedule(monkeypatch):
    """Shrinks a generation to 200 iterations."""
    monkeypatch.setattr(annealing, "N", 200)
    return 200
