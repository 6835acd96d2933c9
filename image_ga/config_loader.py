"""
Configuration Loading

Loads YAML run configuration files, validates their structure, and builds
the immutable GAConfig used by the evolution driver.
"""

import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .data_models import GAConfig
from .exceptions import ConfigurationError


def default_config_path() -> Path:
    """Return the packaged default configuration path."""
    return Path(__file__).parent / "ga_config.yaml"


def load_run_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigurationError: If the file is empty or not valid YAML
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigurationError("Configuration file is empty")
    if not isinstance(config, dict):
        raise ConfigurationError("Configuration file must contain a mapping")

    return config


def merge_with_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Overlay a run configuration on the packaged defaults.

    Nested sections are merged one level deep; scalar keys are replaced.
    """
    merged = load_run_config(default_config_path())
    for key, value in config.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration structure and return list of issues.

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    for section in ['dataset', 'ga', 'output']:
        if section not in config:
            issues.append(f"Missing required section: '{section}'")
        elif not isinstance(config[section], dict):
            issues.append(f"'{section}' must be a dictionary")

    dataset = config.get('dataset')
    if isinstance(dataset, dict):
        if 'path' not in dataset:
            issues.append("Missing required field: 'dataset.path'")
        index = dataset.get('index', 0)
        if not isinstance(index, int) or index < 0:
            issues.append(f"'dataset.index' must be a non-negative integer, got: {index}")

    output = config.get('output')
    if isinstance(output, dict):
        if 'root' not in output:
            issues.append("Missing required field: 'output.root'")
        k = output.get('top_k', 3)
        if not isinstance(k, int) or k < 0:
            issues.append(f"'output.top_k' must be a non-negative integer, got: {k}")

    report_every = config.get('report_every', 100)
    if not isinstance(report_every, int) or report_every <= 0:
        issues.append(f"'report_every' must be a positive integer, got: {report_every}")

    return issues


def validate_run_config(config: Dict[str, Any]) -> None:
    """
    Validate run configuration, raising on the first problem found.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    issues = validate_config(config)
    if issues:
        raise ConfigurationError(issues[0])

    build_ga_config(config)


def resolve_seed(seed: Optional[Union[int, str]]) -> int:
    """
    Turn a configured seed into a concrete integer.

    None or "random" draws a fresh seed from the clock so the run can still
    be reproduced from the saved configuration.
    """
    if seed is None or seed == "random":
        return int(time.time() * 1000000) % 2147483647
    if isinstance(seed, str) and seed.isdigit():
        return int(seed)
    if isinstance(seed, int) and not isinstance(seed, bool):
        return seed
    raise ConfigurationError(f"Invalid random_seed: {seed!r}")


def build_ga_config(config: Dict[str, Any], seed: Optional[int] = None) -> GAConfig:
    """
    Create the immutable GAConfig from a run configuration.

    Args:
        config: Run configuration dictionary
        seed: Concrete seed overriding config['random_seed']

    Returns:
        Validated GAConfig

    Raises:
        ConfigurationError: If any GA parameter is invalid
    """
    ga_section = dict(config.get('ga', {}))
    if seed is not None:
        ga_section['random_seed'] = seed
    elif 'random_seed' in config and isinstance(config['random_seed'], int):
        ga_section['random_seed'] = config['random_seed']

    try:
        return GAConfig.from_dict(ga_section)
    except TypeError as e:
        raise ConfigurationError(f"Invalid 'ga' section: {e}")


def print_config_summary(config: Dict[str, Any]) -> None:
    """Print a summary of the configuration."""
    print("=" * 70)
    print("CONFIGURATION SUMMARY")
    print("=" * 70)

    dataset = config.get('dataset', {})
    print(f"Dataset: {dataset.get('path', 'N/A')} (image {dataset.get('index', 0)})")

    ga = config.get('ga', {})
    print(f"Population size: {ga.get('population_size', 'N/A')}")
    print(f"Generations: {ga.get('generations', 'N/A')}")
    print(f"Mutation rate: {ga.get('mutation_rate', 'N/A')}")
    print(f"Mutation magnitude: {ga.get('mutation_magnitude', 'N/A')}")
    print(f"Random seed: {config.get('random_seed', 'random')}")

    output = config.get('output', {})
    print(f"Output directory: {output.get('root', 'N/A')}")
    print("=" * 70)
