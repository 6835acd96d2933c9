"""
Image Reconstruction GA

A vectorized genetic algorithm that evolves a batch of candidate images
toward a target image by minimizing pixel-wise mean squared error. Every
operator works on the whole population as array operations.

Modules:
- data_models: Core data structures (GAConfig, GenerationReport, RunResult)
- population: Population initialization and fitness evaluation
- selection: Rank-based selection and top-k extraction
- crossover: Pairwise averaging crossover
- mutation: Bernoulli-gated additive noise mutation
- operators: Operator bundle consumed by the evolution driver
- evolution: Evolution driver (generation loop, reporting, stop signal)
- progress: Progress sinks (console, buffered, background thread)
- dataset: Flat image buffer to normalized target vector
- io_utils: Run directory, result archive and fitness history I/O
- config_loader: YAML run configuration loading and validation
- cli: Command-line interface
"""

__version__ = "0.1.0"
__author__ = "Image GA Team"

from .data_models import GAConfig, GenerationReport, RunResult
from .exceptions import (
    ImageGAError,
    ConfigurationError,
    OddPopulationSizeError,
    InvalidRangeError,
    ShapeMismatchError,
    DatasetError,
)
from .population import initialize, evaluate
from .selection import select, top_k
from .crossover import crossover
from .mutation import mutate
from .operators import GeneticOperators, numpy_operators
from .evolution import EvolutionDriver, DriverState, evolve
from .dataset import ImageDataset, extract_target, load_dataset

__all__ = [
    "GAConfig",
    "GenerationReport",
    "RunResult",
    "ImageGAError",
    "ConfigurationError",
    "OddPopulationSizeError",
    "InvalidRangeError",
    "ShapeMismatchError",
    "DatasetError",
    "initialize",
    "evaluate",
    "select",
    "top_k",
    "crossover",
    "mutate",
    "GeneticOperators",
    "numpy_operators",
    "EvolutionDriver",
    "DriverState",
    "evolve",
    "ImageDataset",
    "extract_target",
    "load_dataset",
]
