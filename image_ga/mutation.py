"""
Gene-wise mutation.

Every gene independently receives uniform noise in [-N, N] with
probability M; the result is clipped back into [0, 1]. Mask and noise are
drawn fresh on every call from the injected generator.
"""

import numpy as np

DEFAULT_MUTATION_RATE = 0.4
DEFAULT_MUTATION_MAGNITUDE = 0.15


def mutation_mask(
    shape: tuple[int, ...],
    mutation_rate: float,
    rng: np.random.Generator
) -> np.ndarray:
    """Boolean mask selecting the genes that receive noise."""
    return rng.random(shape) < mutation_rate


def mutate(
    population: np.ndarray,
    rng: np.random.Generator,
    mutation_rate: float = DEFAULT_MUTATION_RATE,
    mutation_magnitude: float = DEFAULT_MUTATION_MAGNITUDE
) -> np.ndarray:
    """
    Apply Bernoulli-gated additive noise to a population.

    With mutation_rate=0 or mutation_magnitude=0 the output equals the
    input for any population already inside [0, 1].

    Args:
        population: Array of shape (P, G)
        rng: Random number generator
        mutation_rate: Per-gene probability of mutation M, in [0, 1]
        mutation_magnitude: Noise half-width N, non-negative

    Returns:
        New array of shape (P, G) with every value in [0, 1]
    """
    mask = mutation_mask(population.shape, mutation_rate, rng)
    noise = rng.uniform(-mutation_magnitude, mutation_magnitude, size=population.shape)
    mutated = np.where(mask, population + noise, population)
    return np.clip(mutated, 0.0, 1.0)

