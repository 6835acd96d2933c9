"""
Population store and fitness evaluation.

A population is a (P, G) float array: one row per individual, one column
per gene (flattened pixel intensity). Fitness is the mean squared error
against the target vector, so lower is better.
"""

import numpy as np

from .exceptions import ShapeMismatchError


def initialize(
    population_size: int,
    gene_count: int,
    rng: np.random.Generator
) -> np.ndarray:
    """
    Draw a fresh population with genes uniform in [0, 1).

    Args:
        population_size: Number of individuals P
        gene_count: Number of genes G per individual
        rng: Random number generator

    Returns:
        Array of shape (P, G)
    """
    if population_size < 0 or gene_count < 0:
        raise ValueError(
            f"population_size and gene_count must be non-negative, "
            f"got: ({population_size}, {gene_count})"
        )
    return rng.random((population_size, gene_count))


def check_gene_axis(population: np.ndarray, target: np.ndarray) -> None:
    """
    Verify that a population and target agree on the gene count.

    Raises:
        ShapeMismatchError: If population is not 2D, target is not 1D, or
            their gene lengths differ
    """
    if population.ndim != 2:
        raise ShapeMismatchError(f"Population must be 2D (P, G), got shape {population.shape}")
    if target.ndim != 1:
        raise ShapeMismatchError(f"Target must be 1D (G,), got shape {target.shape}")
    if population.shape[1] != target.shape[0]:
        raise ShapeMismatchError(
            f"Target length {target.shape[0]} does not match population gene axis "
            f"{population.shape[1]}"
        )


def evaluate(population: np.ndarray, target: np.ndarray) -> np.ndarray:
    """
    Mean squared error of every individual against the target.

    The target is broadcast across all rows; neither input is modified.
    An empty population (P = 0) yields an empty vector.

    Args:
        population: Array of shape (P, G)
        target: Array of shape (G,)

    Returns:
        Non-negative fitness vector of shape (P,)
    """
    population = np.asarray(population)
    target = np.asarray(target)
    check_gene_axis(population, target)

    if population.shape[0] == 0:
        return np.zeros(0, dtype=np.result_type(population, target, float))

    return np.mean((population - target) ** 2, axis=1)
