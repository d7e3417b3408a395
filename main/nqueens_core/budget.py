from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError


@dataclass(frozen=True)
class GenerationBudget:
    """
    How many generations the evolution may run.

    A budget is either finite (``GenerationBudget.finite(n)``) or unbounded
    (``GenerationBudget.unbounded()``); an unbounded run only ends when an
    ideal board is found or an external stop is requested.

    Attributes:
        limit (int or None): Maximum number of generations, None when unbounded.
    """
    limit: Optional[int] = None

    def __post_init__(self):
        if self.limit is None:
            return
        if isinstance(self.limit, bool) or not isinstance(self.limit, int):
            raise ConfigurationError(f"Generation budget must be an integer, got {self.limit!r}")
        if self.limit < 1:
            raise ConfigurationError(f"Generation budget must be at least 1, got {self.limit}")

    @classmethod
    def finite(cls, limit: int) -> "GenerationBudget":
        return cls(limit)

    @classmethod
    def unbounded(cls) -> "GenerationBudget":
        return cls(None)

    @classmethod
    def from_max_generations(cls, max_generations: Optional[int]) -> "GenerationBudget":
        """Builds a budget from the config/CLI value, where None means unbounded."""
        if max_generations is None:
            return cls.unbounded()
        return cls.finite(max_generations)

    @property
    def is_bounded(self) -> bool:
        return self.limit is not None

    def allows(self, generations_completed: int) -> bool:
        """True if another generation may start after ``generations_completed``."""
        return self.limit is None or generations_completed < self.limit

    def __str__(self):
        return "unbounded" if self.limit is None else str(self.limit)
