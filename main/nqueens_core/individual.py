from dataclasses import dataclass, field
from typing import List


@dataclass
class Individual:
    """
    One candidate board: the column of the queen in every row plus its score.

    ``positions[r]`` is the column of the queen placed in row ``r``, so there is
    always exactly one queen per row. ``fitness`` is the number of queen pairs
    that do not attack each other (0 until the board has been evaluated).
    """
    fitness: int = 0
    positions: List[int] = field(default_factory=list)

    @property
    def board_size(self) -> int:
        return len(self.positions)
