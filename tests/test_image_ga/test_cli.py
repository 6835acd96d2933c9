"""
Integration tests for the command-line run.
"""

import io
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

import numpy as np
import yaml

from image_ga.cli import apply_overrides, build_parser, main, run
from image_ga.config_loader import merge_with_defaults
from image_ga.io_utils import load_fitness_history, load_result


class TestCLI(unittest.TestCase):
    """Test YAML-driven runs end to end."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)

        images = np.random.default_rng(0).integers(0, 256, size=(3, 1, 4, 4), dtype=np.uint8)
        self.dataset_path = self.temp_path / "digits.npz"
        np.savez(self.dataset_path, images=images)

        self.output_root = self.temp_path / "run"
        self.config_path = self.temp_path / "run.yaml"
        with open(self.config_path, 'w') as f:
            yaml.safe_dump({
                'dataset': {'path': str(self.dataset_path), 'index': 1},
                'ga': {'population_size': 10, 'generations': 8},
                'random_seed': 21,
                'report_every': 4,
                'output': {'root': str(self.output_root), 'top_k': 2},
            }, f)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def _main(self, argv):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            code = main(argv)
        return code, buffer.getvalue()

    def test_main_writes_run_directory(self):
        code, output = self._main([str(self.config_path)])

        self.assertEqual(code, 0)
        self.assertIn("Run completed successfully", output)
        self.assertIn("generation 8/8", output)

        archive = load_result(self.output_root / "result.npz")
        self.assertEqual(archive['population'].shape, (10, 16))
        self.assertEqual(archive['top_k'].shape, (2, 1, 4, 4))

        history = load_fitness_history(self.output_root / "fitness_history.csv")
        self.assertEqual(len(history), 8)

        with open(self.output_root / "run_config.yaml") as f:
            saved = yaml.safe_load(f)
        self.assertEqual(saved['random_seed'], 21)
        self.assertEqual(saved['run']['generations_completed'], 8)
        self.assertFalse(saved['run']['stopped_early'])
        self.assertEqual(saved['run']['metadata']['image_index'], 1)
        self.assertEqual(saved['run']['metadata']['backend'], 'numpy')

    def test_main_is_reproducible(self):
        self._main([str(self.config_path)])
        first = load_result(self.output_root / "result.npz")['population']

        code, _ = self._main([str(self.config_path), '--overwrite'])
        second = load_result(self.output_root / "result.npz")['population']

        self.assertEqual(code, 0)
        np.testing.assert_array_equal(first, second)

    def test_main_refuses_existing_output(self):
        self.output_root.mkdir()

        code, output = self._main([str(self.config_path)])

        self.assertEqual(code, 1)
        self.assertIn("already exists", output)

    def test_main_reports_configuration_errors(self):
        code, output = self._main([str(self.config_path), '--population-size', '7'])

        self.assertEqual(code, 1)
        self.assertIn("Error:", output)

    def test_main_missing_config(self):
        code, output = self._main([str(self.temp_path / "missing.yaml")])

        self.assertEqual(code, 1)
        self.assertIn("not found", output)

    def test_overrides(self):
        args = build_parser().parse_args([
            'run.yaml', '-g', '3', '-p', '4', '-s', '9', '-o', 'elsewhere', '--overwrite'
        ])
        config = apply_overrides(merge_with_defaults({}), args)

        self.assertEqual(config['ga']['generations'], 3)
        self.assertEqual(config['ga']['population_size'], 4)
        self.assertEqual(config['random_seed'], 9)
        self.assertEqual(config['output']['root'], 'elsewhere')
        self.assertTrue(config['output']['overwrite'])

    def test_run_zero_generations(self):
        config = merge_with_defaults({
            'dataset': {'path': str(self.dataset_path)},
            'ga': {'population_size': 4, 'generations': 0},
            'random_seed': 1,
            'output': {'root': str(self.output_root)},
        })

        with redirect_stdout(io.StringIO()):
            result = run(config)

        self.assertEqual(result.generations_completed, 0)
        self.assertEqual(result.metadata['image_index'], 0)


def run_tests():
    """Run all tests in this module."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestCLI))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == '__main__':
    import sys
    success = run_tests()
    sys.exit(0 if success else 1)
