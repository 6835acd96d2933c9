"""
Operator bundle used by the evolution driver.

The driver never calls the array functions directly; it goes through a
GeneticOperators instance. Each operator is a stateless transformation over
arrays, so an alternative array backend can be substituted by building a
bundle from different functions without touching the driver.
"""

from dataclasses import dataclass
from typing import Callable

import numpy as np

from .population import initialize, evaluate
from .selection import select
from .crossover import crossover
from .mutation import mutate


InitializeFn = Callable[[int, int, np.random.Generator], np.ndarray]
EvaluateFn = Callable[[np.ndarray, np.ndarray], np.ndarray]
SelectFn = Callable[[np.ndarray, np.ndarray], np.ndarray]
CrossoverFn = Callable[[np.ndarray], np.ndarray]
MutateFn = Callable[[np.ndarray, np.random.Generator, float, float], np.ndarray]


@dataclass(frozen=True)
class GeneticOperators:
    """
    The five array operators of one generation.

    Attributes:
        initialize: (population_size, gene_count, rng) -> population
        evaluate: (population, target) -> fitness vector
        select: (population, target) -> rank-sorted population
        crossover: (population) -> next population
        mutate: (population, rng, mutation_rate, mutation_magnitude) -> population
        name: Backend label, recorded in run metadata
    """
    initialize: InitializeFn
    evaluate: EvaluateFn
    select: SelectFn
    crossover: CrossoverFn
    mutate: MutateFn
    name: str = "custom"


def numpy_operators() -> GeneticOperators:
    """Default operator bundle backed by numpy."""
    return GeneticOperators(
        initialize=initialize,
        evaluate=evaluate,
        select=select,
        crossover=crossover,
        mutate=mutate,
        name="numpy",
    )
