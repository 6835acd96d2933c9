"""
Evolution driver.

Runs select -> crossover -> mutate for a fixed number of generations and
reports the best fitness of every new population to a progress sink.
"""

import threading
import time
from enum import Enum
from typing import Optional

import numpy as np

from .data_models import GAConfig, GenerationReport, RunResult
from .exceptions import ShapeMismatchError
from .operators import GeneticOperators, numpy_operators
from .population import check_gene_axis
from .progress import ProgressSink


class DriverState(Enum):
    """Lifecycle of an EvolutionDriver."""
    INITIALIZING = "initializing"
    RUNNING = "running"
    REPORTING = "reporting"
    TERMINATED = "terminated"


class EvolutionDriver:
    """
    Evolves a population toward a fixed target image.

    There is no elitism: the population is fully replaced every generation,
    so the best fitness may regress. Each report carries the current
    generation's best; the best-ever individual is tracked separately and
    returned in the RunResult.

    Args:
        target: Target vector of shape (G,), values in [0, 1]
        config: Immutable run configuration
        progress_sink: Optional callable receiving one GenerationReport per generation
        operators: Operator bundle (defaults to numpy operators)
        rng: Random generator; created from config.random_seed when omitted
        stop_event: Optional event checked between generations to stop early
    """

    def __init__(
        self,
        target: np.ndarray,
        config: GAConfig,
        progress_sink: Optional[ProgressSink] = None,
        operators: Optional[GeneticOperators] = None,
        rng: Optional[np.random.Generator] = None,
        stop_event: Optional[threading.Event] = None
    ):
        target = np.array(target, dtype=float)
        if target.ndim != 1 or target.size == 0:
            raise ShapeMismatchError(f"Target must be a non-empty 1D vector, got shape {target.shape}")

        self.target = target
        self.target.setflags(write=False)
        self.config = config
        self.progress_sink = progress_sink
        self.operators = operators or numpy_operators()
        self.rng = rng if rng is not None else np.random.default_rng(config.random_seed)
        self.stop_event = stop_event or threading.Event()
        self.state = DriverState.INITIALIZING

    @property
    def gene_count(self) -> int:
        return self.target.shape[0]

    def stop(self) -> None:
        """Request the run to stop before the next generation starts."""
        self.stop_event.set()

    def initialize(self, initial_population: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Produce the generation-0 population.

        Args:
            initial_population: Optional (P, G) array to start from instead of
                a random draw; P must equal config.population_size

        Returns:
            Population of shape (P, G)

        Raises:
            ShapeMismatchError: If the supplied population has the wrong shape
        """
        self.state = DriverState.INITIALIZING

        if initial_population is None:
            return self.operators.initialize(
                self.config.population_size, self.gene_count, self.rng
            )

        population = np.array(initial_population, dtype=float)
        check_gene_axis(population, self.target)
        if population.shape[0] != self.config.population_size:
            raise ShapeMismatchError(
                f"Initial population has {population.shape[0]} rows, "
                f"expected population_size={self.config.population_size}"
            )
        return population

    def step(self, population: np.ndarray) -> np.ndarray:
        """Apply one generation: select, crossover, mutate."""
        ranked = self.operators.select(population, self.target)
        children = self.operators.crossover(ranked)
        return self.operators.mutate(
            children,
            self.rng,
            self.config.mutation_rate,
            self.config.mutation_magnitude,
        )

    def _emit(self, report: GenerationReport) -> None:
        if self.progress_sink is None:
            return
        self.state = DriverState.REPORTING
        self.progress_sink(report)

    def run(self, initial_population: Optional[np.ndarray] = None) -> RunResult:
        """
        Run the configured number of generations.

        With generations=0 the initial population is returned unchanged.

        Args:
            initial_population: Optional starting population (see initialize)

        Returns:
            RunResult with the final population, best-ever individual and history
        """
        started = time.perf_counter()
        population = self.initialize(initial_population)

        fitness = self.operators.evaluate(population, self.target)
        best_idx = int(np.argmin(fitness))
        best_individual = population[best_idx].copy()
        best_fitness = float(fitness[best_idx])
        best_generation = 0

        history = []
        completed = 0
        stopped_early = False

        for generation in range(1, self.config.generations + 1):
            if self.stop_event.is_set():
                stopped_early = True
                break

            self.state = DriverState.RUNNING
            population = self.step(population)

            fitness = self.operators.evaluate(population, self.target)
            gen_best_idx = int(np.argmin(fitness))
            report = GenerationReport(generation=generation, best_fitness=float(fitness[gen_best_idx]))
            history.append(report)
            completed = generation

            if report.best_fitness < best_fitness:
                best_fitness = report.best_fitness
                best_individual = population[gen_best_idx].copy()
                best_generation = generation

            self._emit(report)

        self.state = DriverState.TERMINATED

        return RunResult(
            population=population,
            target=self.target,
            best_individual=best_individual,
            best_fitness=best_fitness,
            best_generation=best_generation,
            history=history,
            generations_completed=completed,
            stopped_early=stopped_early,
            seed=self.config.random_seed,
            metadata={
                'backend': self.operators.name,
                'elapsed_seconds': time.perf_counter() - started,
            },
        )


def evolve(
    target: np.ndarray,
    config: GAConfig,
    progress_sink: Optional[ProgressSink] = None,
    initial_population: Optional[np.ndarray] = None,
    rng: Optional[np.random.Generator] = None
) -> RunResult:
    """Convenience wrapper: build a driver and run it once."""
    driver = EvolutionDriver(target, config, progress_sink=progress_sink, rng=rng)
    return driver.run(initial_population)
