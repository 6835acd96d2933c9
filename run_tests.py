#!/usr/bin/env python3
"""
Test runner for the image reconstruction GA
"""

import unittest
import sys
from pathlib import Path

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))


def run_all_tests():
    """Run all test modules"""
    loader = unittest.TestLoader()
    suite = loader.discover(
        start_dir=str(Path(__file__).parent / "tests"),
        top_level_dir=str(Path(__file__).parent)
    )

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == "__main__":
    print("Running Image Reconstruction GA Tests")
    print("=" * 60)

    success = run_all_tests()

    print("\n" + "=" * 60)
    print(f"Overall: {'PASSED' if success else 'FAILED'}")

    sys.exit(0 if success else 1)
