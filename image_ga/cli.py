"""
CLI module for the image reconstruction GA.

Handles run configuration loading, dataset extraction, the evolution run
itself and writing the run directory.
"""

import argparse
import copy
import signal
import sys
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .config_loader import (
    build_ga_config,
    load_run_config,
    merge_with_defaults,
    print_config_summary,
    resolve_seed,
    validate_run_config,
)
from .data_models import RunResult
from .dataset import extract_target, load_dataset
from .evolution import EvolutionDriver
from .io_utils import save_run
from .progress import ConsoleProgressSink, ThreadedProgressSink


def apply_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Apply command-line overrides to a loaded run configuration."""
    config = copy.deepcopy(config)
    ga = config.setdefault('ga', {})
    output = config.setdefault('output', {})

    if args.generations is not None:
        ga['generations'] = args.generations
    if args.population_size is not None:
        ga['population_size'] = args.population_size
    if args.seed is not None:
        config['random_seed'] = args.seed
    if args.output is not None:
        output['root'] = args.output
    if args.overwrite:
        output['overwrite'] = True

    return config


def run(config: Dict[str, Any], stop_event: Optional[threading.Event] = None) -> RunResult:
    """
    Execute one run from a validated configuration dictionary.

    Args:
        config: Run configuration (already merged with defaults)
        stop_event: Optional event that ends the run between generations

    Returns:
        RunResult of the evolution
    """
    validate_run_config(config)

    seed = resolve_seed(config.get('random_seed'))
    ga_config = build_ga_config(config, seed=seed)
    print(f"Random seed: {seed}")

    dataset_path = config['dataset']['path']
    index = config['dataset'].get('index', 0)
    print(f"Loading dataset from: {dataset_path}")
    dataset = load_dataset(dataset_path)
    target = extract_target(dataset, index)
    print(f"Dataset: {dataset.count} images of shape {dataset.image_shape}")
    print(f"Target: image {index}, {target.shape[0]} genes")

    output = config['output']
    output_root = Path(output['root'])
    overwrite = output.get('overwrite', False)
    if output_root.exists() and not overwrite:
        raise FileExistsError(
            f"Output directory already exists: {output_root}\n"
            f"Set 'output.overwrite: true' in config to overwrite"
        )

    console = ConsoleProgressSink(
        report_every=config.get('report_every', 100),
        total=ga_config.generations,
    )

    print()
    print(f"Evolving {ga_config.population_size} individuals "
          f"for {ga_config.generations} generations...")

    with ThreadedProgressSink(console) as sink:
        driver = EvolutionDriver(target, ga_config, progress_sink=sink, stop_event=stop_event)
        result = _run_interruptible(driver)

    result.metadata['dataset'] = str(dataset_path)
    result.metadata['image_index'] = index

    resolved = copy.deepcopy(config)
    resolved['random_seed'] = seed
    paths = save_run(
        result,
        output_root,
        resolved,
        image_shape=dataset.image_shape,
        k=output.get('top_k', 3),
        overwrite=overwrite,
    )

    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Generations completed: {result.generations_completed}/{ga_config.generations}"
          + (" (stopped early)" if result.stopped_early else ""))
    if result.final_best_fitness is not None:
        print(f"Final best fitness: {result.final_best_fitness:.6f}")
    print(f"Best-ever fitness: {result.best_fitness:.6f} "
          f"(generation {result.best_generation})")
    print(f"Elapsed: {result.metadata['elapsed_seconds']:.1f}s")
    print(f"Output directory: {output_root}")
    for kind, path in paths.items():
        print(f"  {kind}: {path.name}")

    return result


def _run_interruptible(driver: EvolutionDriver) -> RunResult:
    """Run the driver, turning Ctrl-C into a stop between generations."""
    if threading.current_thread() is not threading.main_thread():
        return driver.run()

    def _handle_sigint(signum, frame):
        print("\nInterrupt received, stopping after the current generation...")
        driver.stop()

    previous = signal.signal(signal.SIGINT, _handle_sigint)
    try:
        return driver.run()
    finally:
        signal.signal(signal.SIGINT, previous)


def run_from_config(config_path: str, args: Optional[argparse.Namespace] = None) -> RunResult:
    """
    Load run configuration and execute the run.

    This is the main entry point called by ga_cli.py.

    Raises:
        FileNotFoundError: If config or dataset file doesn't exist
        ConfigurationError: If config is invalid
    """
    print("=" * 70)
    print("IMAGE RECONSTRUCTION GA")
    print("=" * 70)
    print(f"Loading configuration from: {config_path}")
    config = merge_with_defaults(load_run_config(config_path))
    if args is not None:
        config = apply_overrides(config, args)

    print("Validating configuration...")
    validate_run_config(config)
    print_config_summary(config)

    result = run(config)

    print("\nRun completed successfully!")
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Evolve a population of images toward a target image",
    )
    parser.add_argument('config_file', help='Run configuration YAML file')
    parser.add_argument('--generations', '-g', type=int, help='Override ga.generations')
    parser.add_argument('--population-size', '-p', type=int, help='Override ga.population_size')
    parser.add_argument('--seed', '-s', type=int, help='Override random_seed')
    parser.add_argument('--output', '-o', help='Override output.root')
    parser.add_argument('--overwrite', action='store_true', help='Allow reusing output.root')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        run_from_config(args.config_file, args)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
