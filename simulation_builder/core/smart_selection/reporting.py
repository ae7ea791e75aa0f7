"""
Distribution statistics for a generated question set.

Everything here is a pure function of the final ``SelectedQuestion`` list,
so the reported numbers can always be recomputed from the questions alone.
"""

from typing import Dict, Optional, Sequence, Set

from simulation_builder.core.smart_selection.difficulty import DIFFICULTY_LEVELS
from simulation_builder.schemas.selection import (
    DistributionStats,
    SelectedQuestion,
    SubjectStats,
)

UNKNOWN_SUBJECT_KEY = "unknown"
UNKNOWN_SUBJECT_NAME = "Unknown"


def calculate_distribution_stats(
    questions: Sequence[SelectedQuestion],
) -> DistributionStats:
    """
    Aggregate per-subject, per-difficulty and topic coverage counts.

    Args:
        questions: Final selected questions.

    Returns:
        DistributionStats with every difficulty level present (0 if absent)
        and ``topics_covered`` counting distinct non-null topics.
    """
    by_subject: Dict[str, SubjectStats] = {}
    by_difficulty: Dict[str, int] = {level.value: 0 for level in DIFFICULTY_LEVELS}
    topics: Set[int] = set()

    for selected in questions:
        question = selected.question
        subject = question.subject

        key = str(subject.id) if subject is not None else UNKNOWN_SUBJECT_KEY
        if key not in by_subject:
            by_subject[key] = SubjectStats(
                subject_id=subject.id if subject is not None else None,
                name=subject.name if subject is not None else UNKNOWN_SUBJECT_NAME,
                color=subject.color if subject is not None else None,
                count=0,
            )
        by_subject[key].count += 1

        by_difficulty[question.difficulty] = by_difficulty.get(question.difficulty, 0) + 1

        if question.topic is not None:
            topics.add(question.topic.id)

    return DistributionStats(
        total=len(questions),
        by_subject=by_subject,
        by_difficulty=by_difficulty,
        topics_covered=len(topics),
    )


def build_shortfall_warning(requested_total: int, achieved_total: int) -> Optional[str]:
    """Return a warning message when fewer questions than requested were found."""
    if achieved_total >= requested_total:
        return None
    return (
        f"Only {achieved_total} questions matched the selection criteria "
        f"(requested: {requested_total})."
    )
