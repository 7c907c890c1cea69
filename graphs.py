# Annealing progress chart. Uses matplotlib without a display, so it can be
# written straight to an image file.

from typing import Sequence

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

def plot_anneal(iterations: Sequence[int], temperatures: Sequence[float],
                scores: Sequence[float], path: str, title: str = ""):
    """scores holds the scaled penalty of the accepted layout after each
    iteration. Also draws the best score so far, and the temperature on a
    second axis.
    """
    iterations = np.asarray(iterations)
    scores = np.asarray(scores, dtype=float)
    best = np.minimum.accumulate(scores)

    fig, ax = plt.subplots()
    ax.plot(iterations, scores, label="accepted", linewidth=0.8)
    ax.plot(iterations, best, label="best")
    ax.set_xlabel("iteration")
    ax.set_ylabel("scaled penalty")
    ax.legend(loc="upper right")

    temp_ax = ax.twinx()
    temp_ax.plot(iterations, temperatures, color="gray", linestyle="--")
    temp_ax.set_ylabel("temperature")

    if title:
        ax.set_title(title)
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
