"""
I/O utilities for run outputs.

Handles the run directory layout, result archives, fitness history CSV
and the resolved-configuration sidecar.
"""

import csv
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import numpy as np
import yaml

from .data_models import RunResult, GenerationReport
from .selection import top_k


RESULT_FILENAME = "result.npz"
HISTORY_FILENAME = "fitness_history.csv"
CONFIG_FILENAME = "run_config.yaml"


def create_run_folder(root: Union[str, Path], overwrite: bool = False) -> Path:
    """
    Create the output directory for a run.

    Args:
        root: Directory to create
        overwrite: If True, reuse an existing directory

    Returns:
        Path to the run directory

    Raises:
        FileExistsError: If the directory exists and overwrite=False
    """
    root = Path(root)

    if root.exists() and not overwrite:
        raise FileExistsError(
            f"Output directory already exists: {root}\n"
            f"Set 'output.overwrite: true' in config to overwrite"
        )

    root.mkdir(parents=True, exist_ok=overwrite)
    return root


def save_fitness_history(
    history: list[GenerationReport],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save per-generation best fitness to CSV.

    CSV format:
        generation,best_fitness,best_ever_fitness
        1,0.083112,0.083112
        2,0.084020,0.083112
        ...

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Fitness history already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    best_ever = float("inf")
    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['generation', 'best_fitness', 'best_ever_fitness'])

        for report in history:
            best_ever = min(best_ever, report.best_fitness)
            writer.writerow([report.generation, repr(report.best_fitness), repr(best_ever)])

    return output_path


def load_fitness_history(csv_path: Union[str, Path]) -> list[GenerationReport]:
    """
    Load a fitness history CSV written by save_fitness_history.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the CSV format is invalid
    """
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    history = []
    with open(csv_path, 'r') as f:
        reader = csv.DictReader(f)

        if not reader.fieldnames or not {'generation', 'best_fitness'}.issubset(reader.fieldnames):
            raise ValueError(
                f"Invalid CSV format in {csv_path}. Expected columns: generation,best_fitness"
            )

        for row in reader:
            history.append(
                GenerationReport(
                    generation=int(row['generation']),
                    best_fitness=float(row['best_fitness'])
                )
            )

    return history


def save_result(
    result: RunResult,
    output_path: Union[str, Path],
    image_shape: Optional[tuple[int, ...]] = None,
    k: int = 3,
    overwrite: bool = False
) -> Path:
    """
    Save a run result as a compressed numpy archive.

    The archive holds the final population, target, best-ever individual,
    and the top-k individuals of the final population (reshaped to images
    when image_shape is given).

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Result file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    arrays = {
        'population': result.population,
        'target': result.target,
        'best_individual': result.best_individual,
        'best_fitness': np.array(result.best_fitness),
        'best_generation': np.array(result.best_generation),
        'fitness_curve': result.fitness_curve(),
        'generations_completed': np.array(result.generations_completed),
        'stopped_early': np.array(result.stopped_early),
        'top_k': top_k(result.population, result.target, k, image_shape),
    }
    if image_shape is not None:
        arrays['image_shape'] = np.array(image_shape, dtype=np.int64)

    with open(output_path, 'wb') as f:
        np.savez_compressed(f, **arrays)

    return output_path


def load_result(npz_path: Union[str, Path]) -> dict[str, np.ndarray]:
    """
    Load a result archive written by save_result.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    npz_path = Path(npz_path)

    if not npz_path.exists():
        raise FileNotFoundError(f"Result file not found: {npz_path}")

    with np.load(npz_path, allow_pickle=False) as archive:
        return {name: archive[name] for name in archive.files}


def save_metadata(
    metadata: dict,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save metadata to YAML sidecar file.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Metadata file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    metadata = dict(metadata)
    metadata.setdefault('saved_at', datetime.now().isoformat())

    with open(output_path, 'w') as f:
        yaml.safe_dump(metadata, f, default_flow_style=False, sort_keys=False)

    return output_path


def run_summary(result: RunResult) -> dict:
    """
    Plain-type summary of a run for the YAML sidecar.

    Numpy scalars in result.metadata are converted to Python values.
    """
    metadata = {
        key: value.item() if isinstance(value, np.generic) else value
        for key, value in result.metadata.items()
    }
    return {
        'generations_completed': int(result.generations_completed),
        'stopped_early': bool(result.stopped_early),
        'best_fitness': float(result.best_fitness),
        'best_generation': int(result.best_generation),
        'final_best_fitness': result.final_best_fitness,
        'seed': result.seed,
        'metadata': metadata,
    }


def save_run(
    result: RunResult,
    output_root: Union[str, Path],
    run_config: dict,
    image_shape: Optional[tuple[int, ...]] = None,
    k: int = 3,
    overwrite: bool = False
) -> dict[str, Path]:
    """
    Write all outputs of a run into one directory.

    The config sidecar holds run_config plus a 'run' section with the
    run summary (completion, early stop, best fitness, metadata).

    Returns:
        Dictionary mapping output kind ("result", "history", "config") to path
    """
    output_root = create_run_folder(output_root, overwrite=overwrite)

    sidecar = dict(run_config)
    sidecar['run'] = run_summary(result)

    return {
        'result': save_result(result, output_root / RESULT_FILENAME,
                              image_shape=image_shape, k=k, overwrite=overwrite),
        'history': save_fitness_history(result.history, output_root / HISTORY_FILENAME,
                                        overwrite=overwrite),
        'config': save_metadata(sidecar, output_root / CONFIG_FILENAME, overwrite=overwrite),
    }
