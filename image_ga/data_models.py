"""
Data models for the image reconstruction GA.

Core data structures: the immutable run configuration, per-generation
progress reports, and the result of a complete run.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Any

import numpy as np

from .exceptions import InvalidRangeError, OddPopulationSizeError
from .selection import top_k


@dataclass(frozen=True)
class GAConfig:
    """
    Immutable configuration for one evolution run.

    Attributes:
        population_size: Number of individuals (rows); must be positive and even
        generations: Number of generation steps to run (0 is allowed)
        mutation_rate: Probability that any single gene receives noise, in [0, 1]
        mutation_magnitude: Half-width N of the uniform noise interval [-N, N]
        random_seed: Seed for the run's random generator (None = fresh entropy)
    """
    population_size: int = 1000
    generations: int = 2500
    mutation_rate: float = 0.4
    mutation_magnitude: float = 0.15
    random_seed: Optional[int] = None

    def __post_init__(self):
        """Validate configuration on construction."""
        self.validate()

    def validate(self) -> None:
        """
        Check parameter ranges.

        Raises:
            OddPopulationSizeError: If population_size is not a positive even integer
            InvalidRangeError: If generations is negative, mutation_rate lies
                outside [0, 1], mutation_magnitude is negative or not finite,
                or random_seed is not None or a non-negative integer
        """
        if not isinstance(self.population_size, (int, np.integer)) or self.population_size <= 0:
            raise OddPopulationSizeError(
                f"population_size must be a positive even integer, got: {self.population_size}"
            )
        if self.population_size % 2 != 0:
            raise OddPopulationSizeError(
                f"population_size must be even for pairwise crossover, got: {self.population_size}"
            )

        if not isinstance(self.generations, (int, np.integer)) or self.generations < 0:
            raise InvalidRangeError(
                f"generations must be a non-negative integer, got: {self.generations}"
            )

        if not np.isfinite(self.mutation_rate) or not 0.0 <= self.mutation_rate <= 1.0:
            raise InvalidRangeError(
                f"mutation_rate must lie in [0, 1], got: {self.mutation_rate}"
            )

        if not np.isfinite(self.mutation_magnitude) or self.mutation_magnitude < 0.0:
            raise InvalidRangeError(
                f"mutation_magnitude must be finite and non-negative, got: {self.mutation_magnitude}"
            )

        if self.random_seed is not None and (
            isinstance(self.random_seed, bool)
            or not isinstance(self.random_seed, (int, np.integer))
            or self.random_seed < 0
        ):
            raise InvalidRangeError(
                f"random_seed must be None or a non-negative integer, got: {self.random_seed!r}"
            )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GAConfig":
        """
        Create configuration from a dictionary (e.g., a YAML section).

        Unknown keys are ignored; missing keys fall back to defaults.

        Args:
            data: Dictionary with configuration values

        Returns:
            Validated GAConfig instance
        """
        known = {name for name in cls.__dataclass_fields__}
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass(frozen=True)
class GenerationReport:
    """
    Progress notification emitted once per generation.

    Attributes:
        generation: Generation index, starting at 1
        best_fitness: Minimum mean squared error in the new population
    """
    generation: int
    best_fitness: float


@dataclass
class RunResult:
    """
    Outcome of a complete evolution run.

    The best-ever individual is tracked separately from the final population
    because the generation step has no elitism: the final population's best
    can be worse than an individual seen earlier.

    Attributes:
        population: Final population, shape (P, G)
        target: Target vector, shape (G,)
        best_individual: Lowest-error individual seen during the run, shape (G,)
        best_fitness: Fitness of best_individual
        best_generation: Generation in which best_individual appeared (0 = initial)
        history: One GenerationReport per completed generation
        generations_completed: Number of generation steps actually run
        stopped_early: True if an external stop signal ended the run
        seed: Seed the run's generator was created from, if known
        metadata: Additional information (timings, source dataset, etc.)
    """
    population: np.ndarray
    target: np.ndarray
    best_individual: np.ndarray
    best_fitness: float
    best_generation: int
    history: list[GenerationReport] = field(default_factory=list)
    generations_completed: int = 0
    stopped_early: bool = False
    seed: Optional[int] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def final_best_fitness(self) -> Optional[float]:
        """Best fitness of the last completed generation, or None if none ran."""
        if not self.history:
            return None
        return self.history[-1].best_fitness

    def fitness_curve(self) -> np.ndarray:
        """Per-generation best fitness as an array of shape (generations_completed,)."""
        return np.array([report.best_fitness for report in self.history], dtype=float)

    def top_k(self, k: int, image_shape: Optional[tuple[int, ...]] = None) -> np.ndarray:
        """
        Get the k best individuals of the final population.

        Args:
            k: Number of individuals to return
            image_shape: Optional (channels, height, width) to reshape each row to

        Returns:
            Array of shape (k, G) or (k, *image_shape)
        """
        return top_k(self.population, self.target, k, image_shape)
