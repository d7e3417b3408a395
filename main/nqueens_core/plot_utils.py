import os

import matplotlib
# Results are only ever written to files.
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from utils.logger import get_logger

logger = get_logger(__name__)


def _draw_board(ax, positions):
    board_size = len(positions)
    # Alternating light/dark squares
    squares = (np.add.outer(np.arange(board_size), np.arange(board_size)) % 2).astype(float)
    ax.imshow(squares, cmap='binary', vmin=-0.5, vmax=2.5, interpolation='nearest')

    font_size = max(4, 240 // board_size)
    for row, column in enumerate(positions):
        ax.text(column, row, 'Q', fontsize=font_size, ha='center', va='center',
                color='darkred', weight='bold')

    ax.set_xticks([])
    ax.set_yticks([])


def plot_final_solution(positions, fitness_history, target_fitness, output_filename_base, output_directory):
    """
    Saves a figure with the final board and the best fitness per generation.

    Args:
        positions (Sequence[int]): Queen column of every row of the best board.
        fitness_history (Sequence[int]): Best fitness of each generation.
        target_fitness (int): Fitness of an ideal board.
        output_filename_base (str): File name without extension.
        output_directory (str): Directory to save the image in; created if missing.

    Returns:
        str: Path of the saved image.
    """
    os.makedirs(output_directory, exist_ok=True)
    board_size = len(positions)
    best_fitness = fitness_history[-1] if len(fitness_history) else 0

    fig, (ax_board, ax_history) = plt.subplots(1, 2, figsize=(14, 6))

    _draw_board(ax_board, positions)
    status = "solved" if best_fitness >= target_fitness else "best found"
    ax_board.set_title(f'{board_size}-Queens ({status}, fitness {best_fitness}/{target_fitness})')

    generations = np.arange(len(fitness_history))
    ax_history.plot(generations, fitness_history, 'b-', linewidth=2, label='Best fitness')
    ax_history.axhline(target_fitness, color='r', linestyle='--', label='Target fitness')
    ax_history.set_title('Best Fitness per Generation')
    ax_history.set_xlabel('Generation')
    ax_history.set_ylabel('Non-attacking pairs')
    ax_history.grid(True, ls="--", alpha=0.5)
    ax_history.legend()

    fig.tight_layout()
    output_path = os.path.join(output_directory, f"{output_filename_base}.png")
    fig.savefig(output_path)
    plt.close(fig)
    logger.info(f"Saved result plot to {output_path}")
    return output_path
