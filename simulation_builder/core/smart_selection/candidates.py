"""
Per-bucket candidate selection.

A bucket is one (subject, difficulty) pair. Selecting from it:
1. Query eligible candidates, over-fetching so there is room to shuffle
2. Optionally interleave topics round-robin to spread the bucket
3. Shuffle with the secure shuffler and keep the first ``count``
4. Record the picks in the run context
"""

import logging
from typing import Dict, List, Optional, Sequence, TypeVar

from simulation_builder.core.smart_selection.context import SelectionContext
from simulation_builder.core.smart_selection.repository import Candidate
from simulation_builder.core.smart_selection.shuffle import secure_shuffle
from simulation_builder.models.models import DifficultyLevel

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=Candidate)


def apply_topic_coverage(candidates: Sequence[C], target_count: int) -> List[C]:
    """
    Pick candidates round-robin across topics.

    Candidates are grouped by ``topic_id`` (``None`` is its own group), in
    the order each topic is first seen. One candidate is taken from each
    group in turn until ``target_count`` is reached or every group is
    empty. When there are no more candidates than needed the input is
    returned unchanged.

    Args:
        candidates: Candidates in query order.
        target_count: Number of candidates wanted.

    Returns:
        At most ``target_count`` candidates spread across topics.
    """
    if len(candidates) <= target_count:
        return list(candidates)

    by_topic: Dict[Optional[int], List[C]] = {}
    for candidate in candidates:
        by_topic.setdefault(candidate.topic_id, []).append(candidate)

    groups = list(by_topic.values())
    positions = [0] * len(groups)
    result: List[C] = []

    while len(result) < target_count:
        progressed = False
        for idx, group in enumerate(groups):
            if len(result) >= target_count:
                break
            if positions[idx] < len(group):
                result.append(group[positions[idx]])
                positions[idx] += 1
                progressed = True
        if not progressed:
            break

    return result


def select_bucket(
    context: SelectionContext,
    subject_id: int,
    difficulty: DifficultyLevel,
    count: int,
) -> List[Candidate]:
    """
    Select up to ``count`` questions for one (subject, difficulty) bucket.

    Args:
        context: Run context (preferences and exclusion accumulator).
        subject_id: Subject to draw from.
        difficulty: Difficulty bucket.
        count: Target number of questions.

    Returns:
        Picked candidates (fewer than ``count`` when the bucket is short).
    """
    if count <= 0:
        return []

    fetched = context.repository.find_candidates(
        subject_id=subject_id,
        difficulty=difficulty,
        exclude_ids=context.excluded_ids(),
        tag_filter_ids=context.tag_filter_ids or None,
        ordering=context.bucket_ordering(),
        limit=count * context.overfetch_factor,
    )

    pool = (
        apply_topic_coverage(fetched, count)
        if context.maximize_topic_coverage
        else fetched
    )
    picked = secure_shuffle(pool)[:count]
    context.record(picked)

    if len(picked) < count:
        logger.info(
            f"Bucket short for subject {subject_id} ({difficulty.value}): "
            f"{len(picked)}/{count}",
            extra={
                "subject_id": subject_id,
                "difficulty": difficulty.value,
                "requested": count,
                "achieved": len(picked),
            },
        )

    return picked
