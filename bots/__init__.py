"""Decision sources for Misfits."""

from .baseline_lowest import LowestPlacementSource
from .generative import GenerativeSource
from .random_bot import RandomSource

__all__ = ["LowestPlacementSource", "GenerativeSource", "RandomSource"]
