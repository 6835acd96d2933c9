"""
Rank-based selection.

Selection sorts the population by ascending error. After sorting,
adjacent rows (0, 1), (2, 3), ... are the crossover pairs, so ranking and
pairing happen in a single reorder.
"""

from typing import Optional, Tuple

import numpy as np

from .population import evaluate


def rank_indices(population: np.ndarray, target: np.ndarray) -> np.ndarray:
    """
    Row permutation that sorts the population by ascending fitness.

    Uses a stable sort: rows with equal fitness keep their original order,
    so the result is reproducible for a given population.

    Args:
        population: Array of shape (P, G)
        target: Array of shape (G,)

    Returns:
        Integer index array of shape (P,)
    """
    fitness = evaluate(population, target)
    return np.argsort(fitness, kind="stable")


def select(population: np.ndarray, target: np.ndarray) -> np.ndarray:
    """
    Reorder population rows from best (lowest error) to worst.

    No individual is dropped or duplicated; output shape equals input shape.
    """
    order = rank_indices(population, target)
    return np.take(population, order, axis=0)


def top_k(
    population: np.ndarray,
    target: np.ndarray,
    k: int,
    image_shape: Optional[Tuple[int, ...]] = None
) -> np.ndarray:
    """
    The k best individuals, optionally reshaped back to images.

    Args:
        population: Array of shape (P, G)
        target: Array of shape (G,)
        k: Number of individuals to return (clamped to P)
        image_shape: Optional (channels, height, width) with product G

    Returns:
        Array of shape (k, G), or (k, *image_shape) when image_shape is given

    Raises:
        ValueError: If k is negative or image_shape does not match G
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got: {k}")

    order = rank_indices(population, target)[:k]
    best = np.take(population, order, axis=0)

    if image_shape is None:
        return best

    image_shape = tuple(int(dim) for dim in image_shape)
    if int(np.prod(image_shape)) != population.shape[1]:
        raise ValueError(
            f"image_shape {image_shape} does not match gene count {population.shape[1]}"
        )
    return best.reshape((best.shape[0],) + image_shape)
