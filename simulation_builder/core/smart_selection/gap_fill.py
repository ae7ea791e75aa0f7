"""
Gap filling for subjects whose difficulty buckets came up short.

The residual need is split again with the difficulty ratios and each
difficulty is queried for its share, excluding everything already selected.
Whatever an exhausted difficulty could not supply is then requested from the
difficulties that still returned full batches (MEDIUM first). This is the
only recovery pass; a remaining deficit is left for the report.
"""

import logging
from typing import List, Set

from simulation_builder.core.smart_selection.context import SelectionContext
from simulation_builder.core.smart_selection.difficulty import (
    DIFFICULTY_LEVELS,
    calculate_difficulty_targets,
)
from simulation_builder.core.smart_selection.repository import Candidate
from simulation_builder.models.models import DifficultyLevel

logger = logging.getLogger(__name__)

# Order in which non-exhausted difficulties absorb an unmet share
REDISTRIBUTION_ORDER = (
    DifficultyLevel.MEDIUM,
    DifficultyLevel.EASY,
    DifficultyLevel.HARD,
)


def _fetch(
    context: SelectionContext,
    subject_id: int,
    difficulty: DifficultyLevel,
    count: int,
) -> List[Candidate]:
    batch = context.repository.find_candidates(
        subject_id=subject_id,
        difficulty=difficulty,
        exclude_ids=context.excluded_ids(),
        tag_filter_ids=context.tag_filter_ids or None,
        ordering=context.gap_fill_ordering(),
        limit=count,
    )
    context.record(batch)
    return batch


def fill_subject_gap(
    context: SelectionContext, subject_id: int, remaining_needed: int
) -> List[Candidate]:
    """
    Draw up to ``remaining_needed`` more questions for a subject.

    No topic interleaving and no shuffling: once the pool is scarce the
    query order (least used, or newest) decides.

    Args:
        context: Run context; picks are recorded in it.
        subject_id: Subject that fell short.
        remaining_needed: Planned count minus what the buckets supplied.

    Returns:
        Additional candidates, possibly fewer than requested.
    """
    if remaining_needed <= 0:
        return []

    targets = calculate_difficulty_targets(remaining_needed, context.difficulty_ratios)
    filled: List[Candidate] = []
    exhausted: Set[DifficultyLevel] = set()

    for difficulty in DIFFICULTY_LEVELS:
        count = targets[difficulty]
        if count <= 0:
            continue
        batch = _fetch(context, subject_id, difficulty, count)
        filled.extend(batch)
        if len(batch) < count:
            exhausted.add(difficulty)

    unmet = remaining_needed - len(filled)
    for difficulty in REDISTRIBUTION_ORDER:
        if unmet <= 0:
            break
        if difficulty in exhausted:
            continue
        batch = _fetch(context, subject_id, difficulty, unmet)
        filled.extend(batch)
        unmet -= len(batch)

    logger.info(
        f"Gap fill for subject {subject_id}: {len(filled)}/{remaining_needed}",
        extra={
            "subject_id": subject_id,
            "requested": remaining_needed,
            "achieved": len(filled),
        },
    )
    if unmet > 0:
        logger.warning(
            f"Subject {subject_id} exhausted: {unmet} question(s) could not be filled",
            extra={"subject_id": subject_id, "requested": remaining_needed},
        )

    return filled
