import argparse
import os
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

# Import the genetic algorithm modules from the 'nqueens_core' package
from nqueens_core import config
from nqueens_core import ga_operators as operators
from nqueens_core import problem_definition_base as problem
from nqueens_core import file_saver
from nqueens_core import plot_utils
from nqueens_core.budget import GenerationBudget
from nqueens_core.device import select_device
from nqueens_core.errors import ConfigurationError, DeviceError
from nqueens_core.evaluator import evaluate_population
from nqueens_core.individual import Individual
from nqueens_core.population import PopulationStore
from utils.logger import get_logger, set_log_level, configure_root_logger

# Initialize logger for this module
logger = get_logger(__name__)


# ===================================================================
#
#           Main Execution Script for the N-Queens Genetic Solver
#
# This script orchestrates a run by:
# 1. Validating the configuration before any device memory is used.
# 2. Creating the random initial population on the host.
# 3. Looping: evaluate on the device, rank on the host, check for an
#    ideal board, reproduce.
# 4. Reporting (and optionally saving) the best board found.
#
# ===================================================================

class TerminationReason(Enum):
    CONVERGED = "converged"
    BUDGET_EXHAUSTED = "budget_exhausted"
    STOPPED = "stopped"


@dataclass
class SolverResult:
    """Outcome of one run of the generation loop."""
    best: Individual
    target_fitness: int
    generations: int
    termination: TerminationReason
    fitness_history: List[int] = field(default_factory=list)
    device_name: str = ""
    elapsed_seconds: float = 0.0

    @property
    def solution_found(self) -> bool:
        return self.best.fitness >= self.target_fitness


def process_nqueens_job(board_size, population_size, budget, rng, device,
                        mutation_rate=None, crossover_policy=None, stop_event=None):
    """
    Runs the complete genetic algorithm for one board size.

    Every generation goes through Evaluate -> Rank -> (Done | Reproduce).
    Evaluation is the only step touching device memory and returns only after
    the fitness has been copied back, so ranking always sees this
    generation's scores. Reproduction for the next generation starts only
    after ranking, since selection reads the ranked order.

    Args:
        board_size (int): Number of rows/columns on the board.
        population_size (int): Number of individuals per generation.
        budget (GenerationBudget): Maximum number of generations.
        rng (np.random.Generator): The run's random source.
        device: Evaluation device (see nqueens_core.device.select_device).
        mutation_rate (float, optional): Defaults to config.MUTATION_RATE.
        crossover_policy (str, optional): Defaults to config.CROSSOVER_POLICY.
        stop_event (threading.Event, optional): If set, the run ends after the
            current generation.

    Returns:
        SolverResult: The best board found and how the run ended.
    """
    if mutation_rate is None:
        mutation_rate = config.MUTATION_RATE
    if crossover_policy is None:
        crossover_policy = config.CROSSOVER_POLICY
    problem.validate_configuration(board_size, population_size, budget, mutation_rate, crossover_policy)

    start_time = time.time()
    target_fitness = problem.calculate_target_fitness(board_size)

    # --- Initial Population Creation (on the host) ---
    logger.info(f"Creating initial population of {population_size} boards of size {board_size}")
    population = problem.create_random_population(population_size, board_size, rng)
    store = PopulationStore(device, population)

    # --- Main Evolution Loop ---
    fitness_history = []
    generation = 0
    while True:
        evaluate_population(store)
        population = operators.rank_population(store.host)
        best_fitness = int(population.fitness[0])
        fitness_history.append(best_fitness)
        logger.info(f"Generation: {generation} best fitness: {best_fitness} target: {target_fitness}")
        generation += 1

        if operators.is_converged(population, board_size):
            termination = TerminationReason.CONVERGED
            break
        if not budget.allows(generation):
            termination = TerminationReason.BUDGET_EXHAUSTED
            break
        if stop_event is not None and stop_event.is_set():
            logger.warning(f"Optimization stopped by user after generation {generation - 1}")
            termination = TerminationReason.STOPPED
            break

        store.replace(operators.reproduce(
            population, population_size, board_size, rng,
            mutation_rate=mutation_rate, crossover_policy=crossover_policy,
        ))

    return SolverResult(
        best=population.individual(0),
        target_fitness=target_fitness,
        generations=generation,
        termination=termination,
        fitness_history=fitness_history,
        device_name=device.name,
        elapsed_seconds=time.time() - start_time,
    )


def report_result(result):
    """Logs the final verdict and the best board, one column per row."""
    if result.solution_found:
        logger.info("Ideal combination found!")
    else:
        logger.info("Could not find ideal combination")
    logger.info(" ".join(str(column) for column in result.best.positions))
    logger.info(
        f"Finished after {result.generations} generations ({result.termination.value}) "
        f"in {result.elapsed_seconds:.2f} seconds on the {result.device_name}"
    )


def save_result(result, output_directory):
    """Writes the best board, the fitness history and a plot into output_directory."""
    if not os.path.exists(output_directory):
        os.makedirs(output_directory)
        logger.info(f"Output directory '{output_directory}' created.")

    board_size = result.best.board_size
    output_filename_base = f"nqueens_{board_size}"
    file_saver.save_solution_to_text_file(
        os.path.join(output_directory, f"{output_filename_base}_solution.txt"), result.best.positions
    )
    file_saver.save_fitness_history(
        os.path.join(output_directory, f"{output_filename_base}_history.txt"),
        result.fitness_history, result.target_fitness,
    )
    plot_utils.plot_final_solution(
        result.best.positions, result.fitness_history, result.target_fitness,
        output_filename_base, output_directory,
    )


# Default for arguments where None is itself a meaningful value.
USE_CONFIG = object()


def run_optimization_process(
        board_size: int = None,
        population_size: int = None,
        max_generations: Optional[int] = USE_CONFIG,
        seed: Optional[int] = USE_CONFIG,
        device_name: str = None,
        crossover_policy: str = None,
        mutation_rate: float = None,
        output_dir: Optional[str] = None,
        stop_event=None
        ) -> SolverResult:
    """
    Resolves the run parameters and runs one optimization.

    This function serves as the main entry point for running the solver with
    a specific set of parameters, allowing for programmatic execution without
    manually editing configuration files. Omitted arguments take their value
    from nqueens_core.config; the config module itself is never modified, so
    one call never changes the defaults seen by the next.

    Args:
        board_size: Number of rows/columns on the board.
        population_size: Number of individuals per generation.
        max_generations: Generation budget; None runs until a solution is found.
            Omitted, config.MAX_GENERATIONS applies.
        seed: Seed for the random generator; None draws fresh entropy.
            Omitted, config.RANDOM_SEED applies.
        device_name: "auto", "gpu" or "cpu".
        crossover_policy: "midpoint" or "uniform".
        mutation_rate: Per-child mutation probability.
        output_dir: If given, the result files of this run are saved there.
            Otherwise config.SAVE_RESULTS and config.OUTPUT_DIR apply.
        stop_event: Optional threading.Event to stop after the current generation.

    Returns:
        SolverResult: The best board found and how the run ended.

    Raises:
        ConfigurationError: If a parameter is invalid (raised before any device work).
        DeviceError: If the evaluation device fails.
    """
    # --- 1. Resolve the effective parameters for this run ---
    if board_size is None:
        board_size = config.BOARD_SIZE
    if population_size is None:
        population_size = config.POPULATION_SIZE
    if max_generations is USE_CONFIG:
        max_generations = config.MAX_GENERATIONS
    if seed is USE_CONFIG:
        seed = config.RANDOM_SEED
    if device_name is None:
        device_name = config.DEVICE
    if crossover_policy is None:
        crossover_policy = config.CROSSOVER_POLICY
    if mutation_rate is None:
        mutation_rate = config.MUTATION_RATE
    if output_dir is None and config.SAVE_RESULTS:
        output_dir = config.OUTPUT_DIR

    # --- 2. Validate before touching any device ---
    budget = GenerationBudget.from_max_generations(max_generations)
    problem.validate_configuration(
        board_size, population_size, budget, mutation_rate, crossover_policy,
    )

    logger.info("Welcome to the N-Queens Solver")
    logger.info("--- Running Optimization with the following parameters ---")
    logger.info(f"  - Board Size        : {board_size}")
    logger.info(f"  - Population Size   : {population_size}")
    logger.info(f"  - Max Generations   : {budget}")
    logger.info(f"  - Mutation Rate     : {mutation_rate}")
    logger.info(f"  - Crossover Policy  : {crossover_policy}")
    logger.info(f"  - Device            : {device_name}")
    logger.info(f"  - Random Seed       : {seed}")

    # --- 3. Execute the Main Process ---
    device = select_device(device_name)
    rng = np.random.default_rng(seed)
    result = process_nqueens_job(
        board_size, population_size, budget, rng, device,
        mutation_rate=mutation_rate,
        crossover_policy=crossover_policy,
        stop_event=stop_event,
    )
    report_result(result)

    if output_dir is not None:
        save_result(result, output_dir)

    return result


def build_argument_parser():
    parser = argparse.ArgumentParser(
        description="N-Queens Problem Solver (genetic algorithm with GPU fitness evaluation)"
    )
    parser.add_argument("-s", "--size", type=int, default=config.BOARD_SIZE,
                        help=f"Size of the board, defaults to {config.BOARD_SIZE}")
    parser.add_argument("-p", "--population", type=int, default=config.POPULATION_SIZE,
                        help=f"Number of individuals in each generation, defaults to {config.POPULATION_SIZE}")
    parser.add_argument("-m", "--max", type=int, default=config.MAX_GENERATIONS, dest="max_generations",
                        help="Maximum generations to run for, defaults to infinite")
    parser.add_argument("--seed", type=int, default=config.RANDOM_SEED,
                        help="Seed for the random generator")
    parser.add_argument("--device", choices=config.DEVICES, default=config.DEVICE,
                        help=f"Where to evaluate fitness, defaults to {config.DEVICE}")
    parser.add_argument("--crossover", choices=config.CROSSOVER_POLICIES, default=config.CROSSOVER_POLICY,
                        help=f"Crossover policy, defaults to {config.CROSSOVER_POLICY}")
    parser.add_argument("--mutation-rate", type=float, default=config.MUTATION_RATE,
                        help=f"Probability that a child is mutated, defaults to {config.MUTATION_RATE}")
    parser.add_argument("--output-dir", default=None,
                        help="Save the best board, fitness history and a plot to this directory")
    parser.add_argument("--log-level", default=config.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help=f"Console verbosity, defaults to {config.LOG_LEVEL}")
    return parser


def main(argv=None):
    """
    Command line entry point.

    Returns:
        int: 0 when the run finished (solved or not), 2 for configuration
             errors and 1 for device failures.
    """
    args = build_argument_parser().parse_args(argv)
    set_log_level(args.log_level)

    try:
        run_optimization_process(
            board_size=args.size,
            population_size=args.population,
            max_generations=args.max_generations,
            seed=args.seed,
            device_name=args.device,
            crossover_policy=args.crossover,
            mutation_rate=args.mutation_rate,
            output_dir=args.output_dir,
        )
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except DeviceError as e:
        logger.critical(f"Aborting: {e}")
        return 1
    return 0


def run():
    """Console script entry point."""
    configure_root_logger(config.LOG_LEVEL)
    sys.exit(main())


if __name__ == "__main__":
    run()
