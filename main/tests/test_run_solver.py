"""
Tests for the generation loop and the command line entry point.
"""

import os
import tempfile
import threading
import unittest
from unittest import mock

import numpy as np

import run_solver
from nqueens_core import config
from nqueens_core import device as device_module
from nqueens_core.budget import GenerationBudget
from nqueens_core.device import HostDevice
from nqueens_core.errors import ConfigurationError
from nqueens_core.evaluator import evaluate_positions


class TestGenerationLoop(unittest.TestCase):

    def test_single_generation_budget(self):
        result = run_solver.process_nqueens_job(
            30, 4, GenerationBudget.finite(1), np.random.default_rng(0), HostDevice()
        )
        self.assertEqual(result.generations, 1)
        self.assertEqual(result.termination, run_solver.TerminationReason.BUDGET_EXHAUSTED)
        self.assertFalse(result.solution_found)
        self.assertEqual(len(result.fitness_history), 1)
        self.assertEqual(result.target_fitness, 435)

    def test_solves_four_queens(self):
        result = run_solver.process_nqueens_job(
            4, 100, GenerationBudget.finite(500), np.random.default_rng(0), HostDevice()
        )
        self.assertEqual(result.termination, run_solver.TerminationReason.CONVERGED)
        self.assertTrue(result.solution_found)
        self.assertEqual(result.best.fitness, 6)
        self.assertEqual(evaluate_positions(result.best.positions)[0], 6)
        self.assertEqual(result.fitness_history[-1], 6)

    def test_best_individual_is_valid(self):
        result = run_solver.process_nqueens_job(
            10, 50, GenerationBudget.finite(5), np.random.default_rng(3), HostDevice(),
            crossover_policy="uniform",
        )
        self.assertEqual(result.best.board_size, 10)
        self.assertTrue(all(0 <= column < 10 for column in result.best.positions))
        self.assertEqual(evaluate_positions(result.best.positions)[0], result.best.fitness)
        self.assertLessEqual(result.generations, 5)

    def test_stop_event_ends_after_current_generation(self):
        stop_event = threading.Event()
        stop_event.set()
        result = run_solver.process_nqueens_job(
            30, 10, GenerationBudget.unbounded(), np.random.default_rng(1), HostDevice(),
            stop_event=stop_event,
        )
        self.assertEqual(result.generations, 1)
        self.assertEqual(result.termination, run_solver.TerminationReason.STOPPED)

    def test_reports_every_generation(self):
        with self.assertLogs("run_solver", level="INFO") as logs:
            run_solver.process_nqueens_job(
                20, 10, GenerationBudget.finite(3), np.random.default_rng(2), HostDevice()
            )
        generation_lines = [line for line in logs.output if "Generation:" in line]
        self.assertEqual(len(generation_lines), 3)
        self.assertIn("Generation: 0 best fitness:", generation_lines[0])
        self.assertIn("target: 190", generation_lines[0])

    def test_invalid_configuration_rejected_before_allocation(self):
        device = mock.Mock(spec=HostDevice)
        with self.assertRaises(ConfigurationError):
            run_solver.process_nqueens_job(
                8, 1, GenerationBudget.finite(1), np.random.default_rng(0), device
            )
        device.allocate.assert_not_called()


class TestCommandLine(unittest.TestCase):

    def test_successful_run(self):
        with self.assertLogs("run_solver", level="INFO") as logs:
            code = run_solver.main(["-s", "4", "-p", "50", "-m", "300", "--seed", "1", "--device", "cpu"])
        self.assertEqual(code, 0)
        self.assertTrue(any("Ideal combination found!" in line for line in logs.output))

    def test_budget_exhaustion_is_success(self):
        with self.assertLogs("run_solver", level="INFO") as logs:
            code = run_solver.main(["-s", "40", "-p", "4", "-m", "1", "--seed", "1", "--device", "cpu"])
        self.assertEqual(code, 0)
        self.assertTrue(any("Could not find ideal combination" in line for line in logs.output))

    def test_configuration_errors(self):
        self.assertEqual(run_solver.main(["-s", "1", "--device", "cpu"]), 2)
        self.assertEqual(run_solver.main(["-p", "1", "--device", "cpu"]), 2)
        self.assertEqual(run_solver.main(["-m", "0", "--device", "cpu"]), 2)

    def test_missing_gpu_is_fatal(self):
        with mock.patch.object(device_module, "cupy_installed", return_value=False):
            code = run_solver.main(["-s", "4", "-p", "10", "-m", "1", "--device", "gpu"])
        self.assertEqual(code, 1)

    def test_saves_results(self):
        with tempfile.TemporaryDirectory() as output_dir:
            code = run_solver.main([
                "-s", "6", "-p", "40", "-m", "3", "--seed", "5", "--device", "cpu",
                "--output-dir", output_dir,
            ])
            self.assertEqual(code, 0)
            solution_path = os.path.join(output_dir, "nqueens_6_solution.txt")
            self.assertTrue(os.path.exists(solution_path))
            self.assertTrue(os.path.exists(os.path.join(output_dir, "nqueens_6_history.txt")))
            self.assertTrue(os.path.exists(os.path.join(output_dir, "nqueens_6.png")))
            columns = np.loadtxt(solution_path, dtype=int)
            self.assertEqual(columns.shape, (6,))


class TestRunOptimizationProcess(unittest.TestCase):

    def test_returns_result(self):
        result = run_solver.run_optimization_process(
            board_size=5, population_size=30, max_generations=2, seed=9, device_name="cpu"
        )
        self.assertEqual(result.device_name, "cpu")
        self.assertLessEqual(result.generations, 2)
        self.assertEqual(result.target_fitness, 10)

    def test_seeded_runs_are_reproducible(self):
        first = run_solver.run_optimization_process(
            board_size=12, population_size=40, max_generations=4, seed=123, device_name="cpu"
        )
        second = run_solver.run_optimization_process(
            board_size=12, population_size=40, max_generations=4, seed=123, device_name="cpu"
        )
        self.assertEqual(first.best, second.best)
        self.assertEqual(first.fitness_history, second.fitness_history)

    def test_calls_do_not_leak_settings(self):
        saved = (config.BOARD_SIZE, config.MAX_GENERATIONS, config.RANDOM_SEED,
                 config.SAVE_RESULTS, config.OUTPUT_DIR)
        with tempfile.TemporaryDirectory() as output_dir:
            run_solver.run_optimization_process(
                board_size=30, population_size=4, max_generations=1, seed=0,
                device_name="cpu", output_dir=output_dir,
            )
        self.assertEqual(
            (config.BOARD_SIZE, config.MAX_GENERATIONS, config.RANDOM_SEED,
             config.SAVE_RESULTS, config.OUTPUT_DIR),
            saved,
        )

        # An explicit None asks for an unbounded run and a fresh seed.
        stop_event = threading.Event()
        stop_event.set()
        with self.assertLogs("run_solver", level="INFO") as logs:
            result = run_solver.run_optimization_process(
                board_size=30, population_size=4, max_generations=None, seed=None,
                device_name="cpu", stop_event=stop_event,
            )
        self.assertTrue(any("Max Generations   : unbounded" in line for line in logs.output))
        self.assertTrue(any("Random Seed       : None" in line for line in logs.output))
        self.assertEqual(result.termination, run_solver.TerminationReason.STOPPED)

    def test_output_dir_applies_to_one_call(self):
        with tempfile.TemporaryDirectory() as output_dir:
            run_solver.run_optimization_process(
                board_size=6, population_size=10, max_generations=1, seed=2,
                device_name="cpu", output_dir=output_dir,
            )
            self.assertTrue(os.path.exists(os.path.join(output_dir, "nqueens_6_solution.txt")))
            with mock.patch.object(run_solver, "save_result") as save_result:
                run_solver.run_optimization_process(
                    board_size=6, population_size=10, max_generations=1, seed=2, device_name="cpu",
                )
            save_result.assert_not_called()


if __name__ == "__main__":
    unittest.main()
