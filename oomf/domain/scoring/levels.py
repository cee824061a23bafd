"""Level thresholds shared by profiles and hints."""
from dataclasses import dataclass


@dataclass(frozen=True)
class Level:
    level: int
    name: str
    emoji: str
    min_points: int


LEVELS: tuple[Level, ...] = (
    Level(1, "Newcomer", "🌱", 0),
    Level(2, "Rising", "⭐", 25),
    Level(3, "On Fire", "🔥", 75),
    Level(4, "Oomf Lord", "👑", 150),
    Level(5, "Legendary", "💫", 300),
)


def level_for_score(score: int) -> Level:
    """Highest level whose threshold the score reaches (negative scores map to the first)."""
    current = LEVELS[0]
    for level in LEVELS:
        if score >= level.min_points:
            current = level
    return current
