import numpy as np
from typing import Sequence

from utils.logger import get_logger

logger = get_logger(__name__)


def save_solution_to_text_file(file_path: str, positions: Sequence[int]) -> bool:
    """
    Saves the best board of a run to a text file.

    Why (Purpose and Necessity):
    The console output scrolls away after long runs. Writing the final
    column sequence to disk keeps a machine-readable record of the result
    that can be re-scored or plotted later.

    What (Implementation Details):
    Writes one integer per line, line r holding the column of the queen in
    row r, using numpy.savetxt. Failures are logged rather than raised so a
    full disk never hides the result already reported on the console.

    Args:
        file_path (str): The full path, including the filename and extension,
                         where the results file will be saved.
        positions (Sequence[int]): The queen column of every row.

    Returns:
        bool: True if the file was written.
    """
    try:
        logger.info(f"Saving solution to text file: {file_path}")
        np.savetxt(file_path, np.asarray(positions, dtype=np.int64), fmt='%d')
        logger.info(f"Successfully saved solution to {file_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to save solution to {file_path}: {e}")
        return False


def save_fitness_history(file_path: str, history: Sequence[int], target_fitness: int) -> bool:
    """
    Saves the best fitness of every generation as a two-column table.

    Args:
        file_path (str): Destination path.
        history (Sequence[int]): Best fitness per generation, in order.
        target_fitness (int): Fitness of an ideal board, written as a header comment.

    Returns:
        bool: True if the file was written.
    """
    rows = np.column_stack((np.arange(len(history)), np.asarray(history, dtype=np.int64)))
    try:
        np.savetxt(file_path, rows, delimiter='\t', fmt='%d',
                   header=f"generation\tbest_fitness (target {target_fitness})")
        logger.info(f"Successfully saved fitness history to {file_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to save fitness history to {file_path}: {e}")
        return False
