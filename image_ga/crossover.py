"""
Averaging crossover.

Parents are taken pairwise from adjacent rows of a rank-sorted population.
Each pair produces one child, the elementwise mean of both parents, and the
children block is stacked twice to restore the population size. Diversity
between the two copies comes from mutation alone.
"""

import numpy as np

from .exceptions import OddPopulationSizeError


def split_pairs(population: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Split a population into its even-indexed and odd-indexed rows.

    Args:
        population: Array of shape (P, G) with P even

    Returns:
        Tuple of (even_rows, odd_rows), each of shape (P/2, G)

    Raises:
        OddPopulationSizeError: If P is odd
    """
    if population.shape[0] % 2 != 0:
        raise OddPopulationSizeError(
            f"Crossover requires an even number of rows, got: {population.shape[0]}"
        )
    return population[0::2], population[1::2]


def crossover(population: np.ndarray) -> np.ndarray:
    """
    Produce the next population by averaging paired parents.

    Row i of the first half is the mean of input rows 2i and 2i+1; the
    second half repeats the first.

    Args:
        population: Array of shape (P, G) with P even

    Returns:
        New array of shape (P, G)
    """
    first, second = split_pairs(population)
    children = (first + second) / 2.0
    return np.concatenate([children, children], axis=0)
