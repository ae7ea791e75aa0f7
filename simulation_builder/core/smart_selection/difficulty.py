"""
Difficulty mix resolution and per-subject difficulty targets.

A difficulty mix is either a preset name (BALANCED, EASY_FOCUS, ...) or an
explicit set of Easy/Medium/Hard ratios. Presets come from
``settings.SELECTION_DIFFICULTY_PRESETS``.

Targets are reconciled so that they always sum to the subject allocation:
a rounding deficit goes to MEDIUM, a rounding excess is trimmed from HARD
first and then from MEDIUM. This keeps a generated simulation from ending up
harder than requested.
"""

import logging
import math
from typing import Dict, Mapping, Optional, Union

from simulation_builder.core.config import settings
from simulation_builder.models.models import DifficultyLevel
from simulation_builder.schemas.selection import DifficultyRatios

logger = logging.getLogger(__name__)

# Query and reporting order for difficulty buckets.
DIFFICULTY_LEVELS = (
    DifficultyLevel.EASY,
    DifficultyLevel.MEDIUM,
    DifficultyLevel.HARD,
)

# Used when a preset name is not recognized.
EQUAL_THIRDS = DifficultyRatios(easy=1 / 3, medium=1 / 3, hard=1 / 3)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's ``round`` uses banker's rounding (``round(2.5) == 2``); the
    allocation rules expect 2.5 to become 3.
    """
    return int(math.floor(value + 0.5))


def resolve_difficulty_ratios(
    mix: Union[DifficultyRatios, str, None],
    presets: Optional[Mapping[str, Mapping[str, float]]] = None,
) -> DifficultyRatios:
    """
    Resolve a difficulty mix into explicit Easy/Medium/Hard ratios.

    Explicit ratios are returned as given, without renormalization. Preset
    names are matched case-insensitively. An unrecognized preset falls back
    to an equal-thirds mix and logs a warning; it never raises.

    Args:
        mix: Preset name, explicit ratios, or None for the configured default.
        presets: Preset table (defaults to settings.SELECTION_DIFFICULTY_PRESETS).

    Returns:
        DifficultyRatios for the mix.
    """
    if isinstance(mix, DifficultyRatios):
        return mix

    if presets is None:
        presets = settings.SELECTION_DIFFICULTY_PRESETS

    name = mix if mix is not None else settings.SELECTION_DEFAULT_DIFFICULTY_MIX
    lookup = {key.upper(): value for key, value in presets.items()}
    ratios = lookup.get(str(name).strip().upper())

    if ratios is None:
        logger.warning(
            f"Unknown difficulty mix {name!r}; falling back to equal thirds "
            f"(known presets: {sorted(lookup)})"
        )
        return EQUAL_THIRDS

    return DifficultyRatios(
        easy=ratios["easy"], medium=ratios["medium"], hard=ratios["hard"]
    )


def calculate_difficulty_targets(
    target_count: int, ratios: DifficultyRatios
) -> Dict[DifficultyLevel, int]:
    """
    Split a subject allocation into Easy/Medium/Hard targets.

    Each ratio is rounded independently, then the three values are
    reconciled to sum exactly to ``target_count``.

    Args:
        target_count: Questions allocated to the subject (>= 0).
        ratios: Resolved difficulty ratios.

    Returns:
        Dict mapping each DifficultyLevel to its integer target.

    Example:
        >>> ratios = DifficultyRatios(easy=0.5, medium=0.3, hard=0.2)
        >>> calculate_difficulty_targets(3, ratios)
        {<DifficultyLevel.EASY: 'EASY'>: 2, <DifficultyLevel.MEDIUM: 'MEDIUM'>: 1, <DifficultyLevel.HARD: 'HARD'>: 0}
    """
    if target_count <= 0:
        return {level: 0 for level in DIFFICULTY_LEVELS}

    targets = {
        level: round_half_up(target_count * ratios.for_level(level))
        for level in DIFFICULTY_LEVELS
    }

    diff_total = sum(targets.values())
    if diff_total < target_count:
        targets[DifficultyLevel.MEDIUM] += target_count - diff_total
    elif diff_total > target_count:
        excess = diff_total - target_count
        from_hard = min(excess, targets[DifficultyLevel.HARD])
        targets[DifficultyLevel.HARD] -= from_hard
        excess -= from_hard

        from_medium = min(excess, targets[DifficultyLevel.MEDIUM])
        targets[DifficultyLevel.MEDIUM] -= from_medium
        excess -= from_medium

        # Only reachable when explicit ratios sum to more than 1
        targets[DifficultyLevel.EASY] -= excess

    return targets
