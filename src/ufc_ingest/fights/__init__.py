"""Fight matchup reconstruction."""

from .models import FightMatchup
from .reconstructor import FightReconstructor, reconstruct

__all__ = [
    "FightMatchup",
    "FightReconstructor",
    "reconstruct",
]
