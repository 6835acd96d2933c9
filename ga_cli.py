#!/usr/bin/env python3
"""
Image Reconstruction GA CLI - Minimal entry point.

All run parameters are specified in a YAML file; a few can be overridden
on the command line.

Usage:
    python3 ga_cli.py run_config.yaml
    python3 ga_cli.py run_config.yaml --generations 500 --seed 7
    python3 ga_cli.py --help

Examples:
    # Reconstruct the first digit of an MNIST-style dataset
    python3 ga_cli.py examples/mnist_digit_run.yaml

Defaults for every field live in image_ga/ga_config.yaml.
"""

import sys
from pathlib import Path

# Add project root to path if needed
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


if __name__ == '__main__':
    from image_ga.cli import main
    sys.exit(main())
