# Simulated annealing schedule, after Carpalx:
# http://mkweb.bcgsc.ca/carpalx/?simulated_annealing
# Nothing here knows about keyboards.

import math
import random
from typing import Optional

# Carpalx values, with T0 scaled down to suit the size of scaled penalties
T0 = 1.5
K = 10.0
P0 = 1.0
N = 10000

def temperature(i: int) -> float:
    """T(i) = T0 exp(-ik/N)"""
    return T0 * math.exp(-i * K / N)

def cutoff_p(de: float, i: int) -> float:
    """p(dE, i) = p0 exp(-dE/T(i))"""
    return P0 * math.exp(-de / temperature(i))

def accept_transition(de: float, i: int,
                      rng: Optional[random.Random] = None) -> bool:
    """Improvements are always accepted. Otherwise accept if r < p(dE, i)
    where r ~ Uniform(0, 1).
    """
    if de < 0.0:
        return True
    if rng is None:
        rng = random
    return rng.random() < cutoff_p(de, i)

def simulation_range() -> range:
    return range(1, N + 1)
